from medscan.schemas.scan import MedicationDraft
from medscan.services.ocr import NO_TEXT_FOUND
from medscan.services.parser import parse_label_fields, parse_label_lines


def test_well_formed_reply_fills_all_fields():
    text = """- Medication Name: Amoxicillin
- Dosage: 500 mg
- Dosage Form: Capsule
- Instructions: Take twice daily with food"""

    draft = parse_label_fields(text)

    assert draft == MedicationDraft(
        name="Amoxicillin",
        dosage_amount="500 mg",
        dosage_form="Capsule",
        instructions="Take twice daily with food",
    )


def test_labels_without_list_marker_and_extra_whitespace():
    text = "Medication Name:   Metformin  \n  Dosage :850 mg\nDosage Form:\tTablet\t"

    draft = parse_label_fields(text)

    assert draft.name == "Metformin"
    assert draft.dosage_amount == "850 mg"
    assert draft.dosage_form == "Tablet"
    assert draft.instructions == ""


def test_no_text_found_sentinel_gives_empty_draft():
    draft = parse_label_fields(NO_TEXT_FOUND)

    assert draft == MedicationDraft()
    assert draft.is_empty


def test_text_without_colons_gives_empty_draft():
    draft = parse_label_fields("AMOXICILLIN\n500 MG\nTAKE WITH FOOD")

    assert (draft.name, draft.dosage_amount, draft.dosage_form, draft.instructions) == ("", "", "", "")


def test_garbage_line_is_skipped():
    draft = parse_label_fields("Medication Name: Lisinopril\nrandom garbage no colon\nDosage: 10mg")

    assert draft.name == "Lisinopril"
    assert draft.dosage_amount == "10mg"
    assert draft.dosage_form == ""
    assert draft.instructions == ""


def test_empty_value_after_colon_is_empty_string():
    assert parse_label_lines("Dosage Form: ") == {"Dosage Form": ""}
    assert parse_label_fields("Dosage Form: ").dosage_form == ""
    assert parse_label_fields("Dosage: 5 mg").dosage_form == ""


def test_value_keeps_text_after_first_colon():
    draft = parse_label_fields("- Instructions: Take at 8:00 and 20:00")

    assert draft.instructions == "Take at 8:00 and 20:00"


def test_labels_are_case_sensitive():
    draft = parse_label_fields("medication name: Ibuprofen\nDOSAGE: 200 mg")

    assert draft.name == ""
    assert draft.dosage_amount == ""


def test_unknown_labels_are_kept_in_lookup_only():
    text = "- Medication Name: Atorvastatin\n- Manufacturer: Pfizer"

    assert parse_label_lines(text)["Manufacturer"] == "Pfizer"
    assert parse_label_fields(text).name == "Atorvastatin"


def test_last_repeated_label_wins():
    draft = parse_label_fields("Dosage: 5 mg\nDosage: 10 mg")

    assert draft.dosage_amount == "10 mg"


def test_windows_line_endings():
    draft = parse_label_fields("- Medication Name: Cetirizine\r\n- Dosage: 10 mg\r\n")

    assert draft.name == "Cetirizine"
    assert draft.dosage_amount == "10 mg"


def test_empty_and_none_input():
    assert parse_label_fields("") == MedicationDraft()
    assert parse_label_fields(None) == MedicationDraft()


def test_parsing_is_deterministic():
    text = "- Medication Name: Warfarin\n- Dosage: 5 mg\nnoise\n- Dosage Form: Tablet"

    assert parse_label_fields(text) == parse_label_fields(text)


def test_draft_serializes_with_app_field_names():
    draft = parse_label_fields("- Medication Name: Amoxicillin\n- Dosage: 500 mg")

    assert draft.model_dump(by_alias=True) == {
        "name": "Amoxicillin",
        "dosageAmount": "500 mg",
        "dosageForm": "",
        "instructions": "",
    }
