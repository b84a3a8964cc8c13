"""
parser.py

Turns the chat-completion answer into a MedicationDraft.

The model is asked for four "- Label: value" lines but nothing forces it
to comply, so this parser accepts whatever comes back:
- lines without a colon are ignored
- unknown labels are ignored
- labels that never appear give empty strings

Parsing is pure: no I/O, no exceptions, same input gives same draft.
"""

from typing import Dict, Optional

from medscan.schemas.scan import MedicationDraft


LIST_MARKER = "- "

# Label (exact, case-sensitive) -> MedicationDraft field
LABEL_FIELDS = {
    "Medication Name": "name",
    "Dosage": "dosage_amount",
    "Dosage Form": "dosage_form",
    "Instructions": "instructions",
}


def parse_label_lines(raw_text: Optional[str]) -> Dict[str, str]:
    """
    Collect every "label: value" pair in the text.

    What happens here:
    1. Split text into lines
    2. Skip lines that have no colon at all
    3. Split on the FIRST colon, trim both sides
    4. Drop a leading "- " list marker from the label

    An empty value ("Dosage Form: ") is kept as "". If a label repeats,
    the last one wins.
    """

    pairs: Dict[str, str] = {}

    for line in (raw_text or "").split("\n"):
        label, sep, value = line.partition(":")
        if not sep:
            continue

        label = label.strip()
        if label.startswith(LIST_MARKER):
            label = label[len(LIST_MARKER):].strip()
        if not label:
            continue

        pairs[label] = value.strip()

    return pairs


def parse_label_fields(raw_text: Optional[str]) -> MedicationDraft:
    """
    Parse interpreted label text into a MedicationDraft.

    Example:
        "- Medication Name: Amoxicillin\\n- Dosage: 500 mg"
        -> MedicationDraft(name="Amoxicillin", dosage_amount="500 mg")

    Called by:
    - LabelScanPipeline.analyze()
    - POST /scan/parse
    """

    pairs = parse_label_lines(raw_text)

    fields = {
        field: pairs.get(label, "")
        for label, field in LABEL_FIELDS.items()
    }
    return MedicationDraft(**fields)
