import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables at the very beginning
load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from app.api import analysis, system  # noqa: E402
from app.config import settings  # noqa: E402
from app.core.cors import EmptyPreflightCORSMiddleware, cors_headers  # noqa: E402
from app.core.errors import ImageAnalysisError  # noqa: E402
from app.integrations import http_client  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await http_client.initialize()
    if not settings.inference_api_key:
        logger.warning("[STARTUP] INFERENCE_API_KEY is not set; /analyze-image will fail")
    logger.info(f"[STARTUP] Inference model: {settings.inference_model}")
    yield
    await http_client.close()


app = FastAPI(title="DeepTrust AI Image Detector", lifespan=lifespan)


# ---- Exception handlers ----
# Every failure is rendered as {"error": message} and carries CORS headers
# so the browser can read the body instead of reporting a network error.
@app.exception_handler(ImageAnalysisError)
async def analysis_error_handler(request: Request, exc: ImageAnalysisError):
    logger.info(f"[ERROR HANDLER] {type(exc).__name__} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(getattr(exc, "headers", None) or {})
    headers.update(cors_headers(request.headers.get("origin")))
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=headers,
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"[ERROR HANDLER] Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Internal processing error."},
        headers=cors_headers(request.headers.get("origin")),
    )


# ---- CORS ----
app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(analysis.router)
