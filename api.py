"""
Deed Ingest: FastAPI Server
==========================

HTTP adapter over the ingestion pipeline.

Endpoints:
    POST /transactions/ingest   Ingest raw register text (JSON body)
    POST /transactions/upload   Upload a UTF-8 text file for ingestion
    GET  /transactions/search   Search stored transactions
    GET  /health                Health check / readiness probe

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field

from deed_ingest import __version__
from deed_ingest.config import configure_logging, load_settings
from deed_ingest.exceptions import EmptyDocumentError
from deed_ingest.models import FilterSpec, IngestResult, StoredTransaction
from deed_ingest.pipeline import IngestPipeline
from deed_ingest.store import TransactionStore
from deed_ingest.translator import build_translator

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 1_048_576


# ─── Application Lifespan (build pipeline, tear down translator) ───

_pipeline: IngestPipeline | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build settings, translator, store and pipeline on startup."""
    global _pipeline  # noqa: PLW0603
    settings = load_settings()
    configure_logging(settings.log_level)

    translator = build_translator(settings)
    _pipeline = IngestPipeline(translator, TransactionStore(settings.db_path))
    logger.info("Pipeline ready (db=%s, translation=%s)", settings.db_path, translator.enabled)
    try:
        yield
    finally:
        translator.close()
        _pipeline = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Deed Ingest API",
    description=(
        "Turns text extracted from bilingual (Tamil + English) property "
        "registers into structured, searchable transaction records. "
        "Regex extraction, day-first date and rupee normalization, "
        "best-effort name translation."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ─── Request / Response Schemas ─────────────────────────────────────

SAMPLE_TEXT = (
    "வ.எண். 1234/2020\n"
    "வாங்குபவர்: முருகன்\n"
    "விற்பவர்: லட்சுமி\n"
    "சர்வே எண். 12/3\n"
    "தேதி 05/03/2020  ரூ.1,00,000\n"
    "மாவட்டம்: சென்னை"
)


class IngestRequest(FilterSpec):
    """Request body for /transactions/ingest: the text plus optional filters."""

    raw_text: str = Field(
        ...,
        min_length=1,
        description="Text extracted from the register document.",
        json_schema_extra={"example": SAMPLE_TEXT},
    )

    def filters(self) -> FilterSpec:
        return FilterSpec.model_validate(self.model_dump(exclude={"raw_text"}))


class TransactionOut(StoredTransaction):
    """API-facing transaction (inherits all fields from StoredTransaction)."""


class IngestResponse(BaseModel):
    """Result of one ingestion."""

    success: bool = True
    count: int
    block_count: int
    original_hash: str = Field(description="SHA-256 hash of the submitted text")
    translation_failures: int
    transactions: list[TransactionOut]


class SearchResponse(BaseModel):
    success: bool = True
    count: int
    transactions: list[TransactionOut]


class HealthResponse(BaseModel):
    status: str
    version: str
    transactions_stored: int
    translation_enabled: bool
    translation_calls: int
    translation_failures: int


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_pipeline() -> IngestPipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialised")
    return _pipeline


def _build_response(result: IngestResult) -> IngestResponse:
    return IngestResponse(
        count=result.count,
        block_count=result.block_count,
        original_hash=result.original_hash,
        translation_failures=result.translation_failures,
        transactions=[
            TransactionOut.model_validate(t, from_attributes=True) for t in result.transactions
        ],
    )


def _run_ingest(pipeline: IngestPipeline, raw_text: str, filters: FilterSpec) -> IngestResult:
    try:
        return pipeline.ingest(raw_text, filters)
    except EmptyDocumentError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _filters_from_params(
    buyerName: Optional[str] = None,  # noqa: N803
    sellerName: Optional[str] = None,  # noqa: N803
    houseNumber: Optional[str] = None,  # noqa: N803
    surveyNumber: Optional[str] = None,  # noqa: N803
    documentNumber: Optional[str] = None,  # noqa: N803
) -> FilterSpec:
    """Query-string filters, camelCase as used by the web front end."""
    return FilterSpec(
        buyer_name=buyerName,
        seller_name=sellerName,
        house_number=houseNumber,
        survey_number=surveyNumber,
        document_number=documentNumber,
    )


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/transactions/ingest",
    summary="Ingest raw register text",
    tags=["Transactions"],
    responses={
        422: {"description": "No text to process"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
def ingest_text(request: IngestRequest) -> IngestResponse:
    """Segment, extract, normalize, translate, filter and store.

    Only the records that satisfy every supplied filter are stored and returned.
    """
    pipeline = _get_pipeline()
    result = _run_ingest(pipeline, request.raw_text, request.filters())
    return _build_response(result)


@app.post(
    "/transactions/upload",
    summary="Ingest an uploaded text file",
    tags=["Transactions"],
    responses={
        413: {"description": "File too large (max 1 MB)"},
        400: {"description": "File is not valid UTF-8 text"},
        422: {"description": "File has no text to process"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
async def upload_file(
    file: UploadFile,
    buyerName: Optional[str] = Form(None),  # noqa: N803
    sellerName: Optional[str] = Form(None),  # noqa: N803
    houseNumber: Optional[str] = Form(None),  # noqa: N803
    surveyNumber: Optional[str] = Form(None),  # noqa: N803
    documentNumber: Optional[str] = Form(None),  # noqa: N803
) -> IngestResponse:
    """Upload a `.txt` file holding text already extracted from a register PDF."""
    if file.size and file.size > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large (max 1 MB)")

    content = await file.read()
    try:
        raw_text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded text")

    filters = _filters_from_params(buyerName, sellerName, houseNumber, surveyNumber, documentNumber)
    pipeline = _get_pipeline()
    result = await asyncio.to_thread(_run_ingest, pipeline, raw_text, filters)
    return _build_response(result)


@app.get(
    "/transactions/search",
    summary="Search stored transactions",
    tags=["Transactions"],
    responses={503: {"description": "Pipeline not yet initialised"}},
)
def search_transactions(filters: FilterSpec = Depends(_filters_from_params)) -> SearchResponse:
    """Names match by case-insensitive substring of the translated name;
    house, survey and document numbers match exactly. Without filters at
    most 100 transactions are returned.
    """
    pipeline = _get_pipeline()
    results = pipeline.search(filters)
    return SearchResponse(
        count=len(results),
        transactions=[TransactionOut.model_validate(t, from_attributes=True) for t in results],
    )


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Pipeline not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and translation counters."""
    pipeline = _get_pipeline()
    stats = pipeline.translator.stats.snapshot()
    return HealthResponse(
        status="healthy",
        version=__version__,
        transactions_stored=pipeline.store.count() if pipeline.store else 0,
        translation_enabled=pipeline.translator.enabled,
        translation_calls=stats["calls"],
        translation_failures=stats["failures"],
    )
