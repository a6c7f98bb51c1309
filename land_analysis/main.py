import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from land_analysis.config import get_settings
from land_analysis.api.land_analysis import router as land_analysis_router

settings = get_settings()

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.log_level.upper())),
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Land Analysis API")
    yield
    logger.info("Shutting down Land Analysis API")


app = FastAPI(
    title="Land Holding Analysis",
    description="Area, land-use and valuation analysis for land-management plan features",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/")
async def root():
    return {
        "name": "Land Holding Analysis",
        "version": "0.1.0",
        "docs": "/docs",
    }


app.include_router(land_analysis_router, prefix="/api")
