# restobid/main.py
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from restobid import __version__
from restobid.api import assessment, projects
from restobid.api.dependencies import get_dataset
from restobid.core.errors import ExportError, NotFoundError, ValidationError
from restobid.core.logging_config import logger, setup_logging
from restobid.core.settings import get_settings


# ----------------------------------------------------
# Startup: logging + reference data (ConfigurationError aborts startup)
# ----------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.effective_log_level, settings.log_json)
    dataset = get_dataset()
    logger.info("startup", service="restobid", env=settings.app_env, reference_version=dataset.version)
    yield


app = FastAPI(title="Restobid", version=__version__, lifespan=lifespan)


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
def health() -> dict:
    return {"status": "ok"}


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()
    bound_logger = logger.bind(endpoint=str(request.url.path), method=request.method)

    bound_logger.info("request_started")
    response = await call_next(request)
    latency_ms = round((time.time() - start) * 1000, 2)

    bound_logger.bind(status_code=response.status_code, latency_ms=latency_ms).info(
        "request_finished"
    )
    return response


# ----------------------------------------------------
# Error mapping
# ----------------------------------------------------
@app.exception_handler(ValidationError)
def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": {"code": exc.code, "message": exc.message, "meta": exc.meta}},
    )


@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


@app.exception_handler(ExportError)
def export_error_handler(request: Request, exc: ExportError):
    return JSONResponse(
        status_code=502,
        content={"detail": {"code": "EXPORT_FAILED", "message": exc.message}},
    )


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(assessment.router)
app.include_router(projects.router)
