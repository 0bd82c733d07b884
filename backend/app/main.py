from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.deps import get_http_client
from app.api.routes.confidential import router as confidential_router
from app.api.routes.feeds import router as feeds_router
from app.api.routes.health import router as health_router
from app.api.routes.prediction import router as prediction_router
from app.domain.errors import RequestValidationFailed, ServiceError
from app.infrastructure.config.settings import settings
from app.infrastructure.logging import configure_logging, get_logger
from app.schemas.common import ErrorEnvelope

configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("startup_complete", environment=settings.app_env, fhe_backend=settings.fhe_backend)
    yield
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()


app = FastAPI(title="Z-AI Predictor API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
    logger.warning("service_error", service=exc.service, code=exc.code, status_code=exc.http_status())
    return JSONResponse(status_code=exc.http_status(), content=exc.to_envelope())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    error = RequestValidationFailed("api-validation", "Invalid request: " + "; ".join(problems))
    return JSONResponse(status_code=error.http_status(), content=error.to_envelope())


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc))
    envelope = ErrorEnvelope(service="server", error="Internal server error", code="SERVER_ERROR")
    return JSONResponse(status_code=500, content=envelope.model_dump())


app.include_router(health_router)
app.include_router(prediction_router)
app.include_router(feeds_router)
app.include_router(confidential_router)
