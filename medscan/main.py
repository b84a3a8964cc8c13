"""
main.py

This is the main entry point of the FastAPI application.
Here we create the FastAPI app and register all API routes.

This file does NOT contain business logic.
It only wires everything together.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

# Import API routers
from medscan.api.health import router as health_router
from medscan.api.scan import router as scan_router
from medscan.api.medications import router as medications_router
from medscan.config import ScanSettings, configure_logging, load_settings


def create_app(settings: Optional[ScanSettings] = None) -> FastAPI:
    """
    Creates and returns the FastAPI application instance.

    Parameters:
    - settings: explicit settings (tests); read from the environment if None
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="MedScan Service",
        description="Medication label scanning, medication records and reminders",
        version="1.0.0"
    )

    app.state.settings = settings

    # Register API routes
    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(scan_router, prefix="/scan", tags=["Scan"])
    app.include_router(medications_router, prefix="/users", tags=["Medications"])

    # --------------------------------------------------
    # Add Swagger Bearer Auth Support
    # --------------------------------------------------
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
            }
        }

        openapi_schema["security"] = [{"BearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


# Create the FastAPI app instance
app = create_app()
