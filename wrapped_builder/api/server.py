"""HTTP API - report generation, spreadsheet ingestion, and slide rendering.

Run with::

    uvicorn wrapped_builder.api.server:app --port 8000
"""

from __future__ import annotations

import io
import logging
from typing import Any

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from wrapped_builder import __version__
from wrapped_builder.config import Settings
from wrapped_builder.errors import ConfigurationError, GenerationError, IngestionError
from wrapped_builder.generator.client import ReportGenerator
from wrapped_builder.generator.prompt import ReportRequest
from wrapped_builder.generator.slideshow import Slideshow, load_slides
from wrapped_builder.processor.ingestion import ingest
from wrapped_builder.processor.mapper import auto_map
from wrapped_builder.schema.loader import theme_catalog
from wrapped_builder.schema.models import Customer
from wrapped_builder.schema.themes import theme_from_payload


_LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class _ThemedModel(_CamelModel):
    theme: dict[str, Any] | None = None

    @field_validator("theme")
    @classmethod
    def check_theme_colors(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        theme_from_payload(value)
        return value


class CustomerPayload(_CamelModel):
    name: str = ""
    email: str | None = None
    phone: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class GenerateReportRequest(_ThemedModel):
    customer: CustomerPayload
    business_name: str = Field(default="", alias="businessName")
    business_type: str = Field(default="", alias="businessType")
    business_context: str = Field(default="", alias="businessContext")
    business_url: str = Field(default="", alias="businessUrl")
    logo_url: str | None = Field(default=None, alias="logoUrl")
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = None


class RenderSlidesRequest(_ThemedModel):
    customer_name: str = Field(default="Customer", alias="customerName")
    business_name: str = Field(default="", alias="businessName")
    slides: list[dict[str, Any]] = Field(default_factory=list)


def _to_request(body: GenerateReportRequest) -> ReportRequest:
    period = {}
    if body.month is not None:
        period["month"] = body.month
    if body.year is not None:
        period["year"] = body.year
    return ReportRequest(
        customer=Customer(
            name=body.customer.name,
            email=body.customer.email,
            phone=body.customer.phone,
            metadata=dict(body.customer.metadata),
        ),
        business_name=body.business_name,
        business_type=body.business_type,
        business_context=body.business_context,
        business_url=body.business_url,
        theme=theme_from_payload(body.theme),
        **period,
    )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(settings: Settings | None = None,
               generator: ReportGenerator | None = None) -> FastAPI:
    """Build the API.

    Settings are read from the environment when not given; the generator is
    built from the settings on first use unless a fake is injected.
    """
    settings = settings or Settings.from_env()
    app = FastAPI(title="Wrapped Report Builder", version=__version__)
    app.state.settings = settings
    app.state.generator = generator or ReportGenerator(settings)

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        _LOGGER.error("%s: %s", exc, exc.details)
        return JSONResponse(status_code=500, content={"error": str(exc), "details": exc.details})

    @app.exception_handler(GenerationError)
    async def generation_error(request: Request, exc: GenerationError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": str(exc), "details": exc.details})

    @app.get("/api/health")
    def health() -> dict:
        return {
            "status": "ok",
            "version": __version__,
            "model": settings.model,
            "apiKeyConfigured": bool(settings.api_key),
        }

    @app.get("/api/themes")
    def themes() -> dict:
        return {"themes": [t.to_dict() for t in theme_catalog(settings.themes_file)]}

    @app.post("/api/generate-report")
    def generate_report(body: GenerateReportRequest) -> dict:
        result = app.state.generator.generate(_to_request(body))
        return result.to_dict()

    @app.post("/api/ingest")
    async def ingest_upload(file: UploadFile = File(...)) -> dict:
        if not file.filename:
            raise HTTPException(status_code=400, detail="Missing upload filename.")
        payload = await file.read()
        try:
            result = ingest(io.BytesIO(payload), filename=file.filename)
        except IngestionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {
            "columns": result.columns,
            "rows": result.rows,
            "mappings": [m.to_dict() for m in auto_map(result.columns)],
        }

    @app.post("/api/render-slides")
    def render_slides(body: RenderSlidesRequest) -> dict:
        slides = load_slides(body.slides)
        if not slides:
            raise HTTPException(status_code=400, detail="No renderable slides.")
        show = Slideshow(
            slides,
            customer_name=body.customer_name,
            business_name=body.business_name,
            theme=theme_from_payload(body.theme),
            settle_delay=settings.settle_delay,
        )
        return {
            "images": [
                {"filename": item.filename, "dataUri": item.data_uri}
                for item in show.export_all()
            ],
        }

    return app


app = create_app()
