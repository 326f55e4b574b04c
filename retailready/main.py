import logging

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .errors import (
    EmptyDocumentError,
    InvalidInputError,
    InvalidRequirementError,
    SchemaError,
    UpstreamFormatError,
    UpstreamServiceError,
)
from .extractor import extract_document
from .fines import estimate_fine, fine_components
from .report import summarize
from .retailers import detect_retailer
from .schemas import (
    BatchRequest,
    DetectRequest,
    EstimateRequest,
    ExtractionResult,
    RetailerProfile,
    RiskAssessment,
    RiskStats,
    ScoreRequest,
)
from .scoring import DEFAULT_RISK_CONFIG, RiskConfig, assess, risk_tier
from .settings import get_settings

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="RetailReady Compliance API")


# ---------------------------
# Error mapping
# ---------------------------

def _error(status: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": error, "message": str(exc)})


@app.exception_handler(InvalidInputError)
async def _invalid_input(request: Request, exc: InvalidInputError):
    return _error(400, "Invalid input", exc)


@app.exception_handler(EmptyDocumentError)
async def _empty_document(request: Request, exc: EmptyDocumentError):
    return _error(400, "Invalid PDF", exc)


@app.exception_handler(UpstreamServiceError)
async def _upstream_service(request: Request, exc: UpstreamServiceError):
    logger.error("Extraction service failure (%s): %s", exc.reason, exc)
    return JSONResponse(
        status_code=502,
        content={"error": "AI Processing Failed", "reason": exc.reason, "message": str(exc)},
    )


@app.exception_handler(UpstreamFormatError)
@app.exception_handler(SchemaError)
async def _upstream_format(request: Request, exc: Exception):
    logger.error("Extraction payload rejected: %s", exc)
    return _error(502, "Parsing Error", exc)


@app.exception_handler(InvalidRequirementError)
async def _invalid_requirement(request: Request, exc: InvalidRequirementError):
    logger.error("Extraction batch rejected at index %d: %s", exc.index, exc)
    return JSONResponse(
        status_code=502,
        content={"error": "Parsing Error", "index": exc.index, "field": exc.field, "message": str(exc)},
    )


# ---------------------------
# API: extraction
# ---------------------------

@app.post("/v1/upload", response_model=ExtractionResult)
async def upload(pdf: UploadFile = File(...)):
    logger.info("Processing uploaded file: %s", pdf.filename)
    data = await pdf.read()
    return await run_in_threadpool(extract_document, data)


@app.post("/v1/detect", response_model=RetailerProfile)
def detect(body: DetectRequest):
    return detect_retailer(body.text)


# ---------------------------
# API: risk
# ---------------------------

@app.post("/v1/risk/score", response_model=RiskAssessment)
def score(body: ScoreRequest):
    return assess(body.requirement, body.units, shipment_value=body.shipment_value)


@app.post("/v1/risk/estimate")
def estimate(body: EstimateRequest):
    if body.units <= 0:
        raise InvalidInputError("units must be a positive number")
    estimated = estimate_fine(body.fine, body.units)
    return {
        "fine": body.fine,
        "units": body.units,
        "estimated_fine": estimated,
        "risk_tier": risk_tier(estimated),
        "components": [p._asdict() for p in fine_components(body.fine, body.units)],
    }


@app.post("/v1/risk/batch", response_model=RiskStats)
def batch(body: BatchRequest):
    if not body.requirements:
        raise InvalidInputError("requirements must be a non-empty array")
    return summarize(body.requirements, body.units)


@app.get("/v1/risk/config", response_model=RiskConfig)
def config():
    return DEFAULT_RISK_CONFIG
