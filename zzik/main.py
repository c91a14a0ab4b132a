from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from zzik.config import get_settings
from zzik.core.dependencies import close_embedding_provider
from zzik.core.error_handlers import (
    data_source_exception_handler,
    invalid_input_exception_handler,
    validation_exception_handler,
)
from zzik.core.exceptions import DataSourceException, InvalidScoringInputException
from zzik.core.logging import configure_logging

# IMPORT ROUTERS
from zzik.routers.health import router as health_router
from zzik.routers.recommendations import router as recommendations_router
from zzik.routers.leaders import router as leaders_router
from zzik.routers.predictions import router as predictions_router

load_dotenv()

settings = get_settings()
configure_logging(settings)
logger = structlog.get_logger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Recommendations"},
    {"name": "Leader Matching"},
    {"name": "Success Prediction"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("service_starting", app=settings.APP_NAME, env=settings.APP_ENV, version=settings.APP_VERSION)
    yield
    close_embedding_provider()
    logger.info("service_stopping", app=settings.APP_NAME)


# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(InvalidScoringInputException, invalid_input_exception_handler)
app.add_exception_handler(DataSourceException, data_source_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)            # Health
app.include_router(recommendations_router, prefix=settings.API_V1_PREFIX)   # Recommendations
app.include_router(leaders_router, prefix=settings.API_V1_PREFIX)           # Leader Matching
app.include_router(predictions_router, prefix=settings.API_V1_PREFIX)       # Success Prediction


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }
