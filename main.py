import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from io import BytesIO
from typing import Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from core.config import load_settings
from core.errors import ConfigurationError, FailureKind, StageFailure
from core.pdf_report import build_pdf_report
from core.pipeline import MAX_IDEA_LENGTH, MIN_IDEA_LENGTH, StartupAnalyzer
from core.scoring import explain_score
from models import AnalysisMetadata, AnalyzeResponse, ErrorResponse, IdeaInput, StartupAnalysis

settings = load_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

API_VERSION = "1.0"

# stage failure kind -> (HTTP status, error code, user-facing message)
STAGE_FAILURE_RESPONSES = {
    FailureKind.TIMEOUT: (504, "TIMEOUT_ERROR", "Analysis timed out. Please try again with a shorter description."),
    FailureKind.AUTH_FAILURE: (503, "API_KEY_ERROR", "Service temporarily unavailable. Please try again later."),
    FailureKind.RATE_LIMITED: (429, "RATE_LIMIT_ERROR", "Too many requests. Please wait a moment before trying again."),
    FailureKind.MALFORMED_RESPONSE: (422, "CHAIN_ERROR", "Analysis encountered an error"),
    FailureKind.UNKNOWN: (502, "PROVIDER_ERROR", "The analysis provider failed. Please try again later."),
}

app = FastAPI(title="Startup Idea Analyzer API", version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    body = ErrorResponse(error=message, code=code, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


@lru_cache(maxsize=1)
def get_analyzer() -> StartupAnalyzer:
    """Built once per process; raises ConfigurationError when the API key is missing."""
    return StartupAnalyzer.from_settings(settings)


def get_analyzer_factory() -> Callable[[], StartupAnalyzer]:
    """The analyzer is built only once the request body has passed the input checks."""
    return get_analyzer


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    if request.url.path != "/analyze":
        return _error(400, "INVALID_INPUT", "Invalid request body.", details=str(exc.errors()[:3]))
    return _error(
        400,
        "INVALID_INPUT",
        "Missing or invalid startup idea. Please provide a description of your startup concept.",
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return _error(500, "CONFIGURATION_ERROR", "Service configuration error. Please contact support.")


@app.exception_handler(StageFailure)
async def stage_failure_handler(request: Request, exc: StageFailure):
    logger.error("Startup analysis failed: %s", exc)
    status_code, code, message = STAGE_FAILURE_RESPONSES.get(exc.kind, STAGE_FAILURE_RESPONSES[FailureKind.UNKNOWN])
    if exc.kind == FailureKind.MALFORMED_RESPONSE:
        message = f"{message}: {exc}"
    return _error(status_code, code, message, stage=exc.stage.title, stage_index=exc.stage.index)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error during analysis")
    return _error(500, "UNKNOWN_ERROR", "An unexpected error occurred during analysis. Please try again later.")


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze_endpoint(
    input: IdeaInput,
    analyzer_factory: Callable[[], StartupAnalyzer] = Depends(get_analyzer_factory),
):
    idea = input.startup_idea
    if not idea or not idea.strip():
        return _error(
            400,
            "INVALID_INPUT",
            "Missing or invalid startup idea. Please provide a description of your startup concept.",
        )
    if len(idea.strip()) < MIN_IDEA_LENGTH:
        return _error(
            400,
            "INPUT_TOO_SHORT",
            "Startup idea description is too short. Please provide at least a few sentences describing your concept.",
        )
    if len(idea) > MAX_IDEA_LENGTH:
        return _error(
            400,
            "INPUT_TOO_LONG",
            f"Startup idea description is too long. Please keep it under {MAX_IDEA_LENGTH} characters.",
        )

    analyzer = analyzer_factory()
    preview = idea[:100] + ("..." if len(idea) > 100 else "")
    logger.info("Starting startup analysis for: %s", preview)
    start = time.monotonic()

    def log_progress(step: int, label: str) -> None:
        logger.info("Progress: Step %d - %s", step, label)

    analysis = analyzer.analyze(idea, on_progress=log_progress)

    processing_time = int((time.monotonic() - start) * 1000)
    logger.info("Analysis completed in %dms", processing_time)
    return AnalyzeResponse(
        analysis=analysis,
        metadata=AnalysisMetadata(
            processing_time=processing_time,
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=API_VERSION,
        ),
    )


@app.post("/export/pdf")
def export_pdf(analysis: StartupAnalysis):
    pdf_bytes = build_pdf_report(analysis)
    buffer = BytesIO(pdf_bytes)
    headers = {
        "Content-Disposition": 'attachment; filename="startup-analysis-report.pdf"'
    }
    return StreamingResponse(buffer, media_type="application/pdf", headers=headers)


@app.get("/")
def root():
    return {
        "service": "Startup Idea Analyzer API",
        "version": API_VERSION,
        "status": "healthy",
        "endpoints": {
            "analyze": {
                "method": "POST",
                "description": "Analyze a startup idea with a five-step AI evaluation",
                "parameters": {
                    "startupIdea": f"string ({MIN_IDEA_LENGTH}-{MAX_IDEA_LENGTH} characters) - Description of the startup concept",
                },
            },
            "export": {
                "method": "POST",
                "path": "/export/pdf",
                "description": "Render an analysis as a PDF report",
            },
        },
        "scoring": explain_score(),
        "features": [
            "Input validation and sanitization",
            "Multi-dimensional scoring (market, competition, feasibility, monetization, scalability)",
            "Strategic improvement recommendations",
            "Investment and funding strategy",
            "Launch plan and growth tactics",
        ],
    }
