"""FastAPI entry point for the inspection scoring service."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog
from contextlib import asynccontextmanager

from api_service.config import api_config
from api_service.routers import urgency, recommendations, inspection_items, inspections
from db.session import engine


def configure_logging() -> None:
    renderer = (
        structlog.processors.JSONRenderer() if api_config.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(api_config.log_level_number),
    )


configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Inspection scoring API starting", version=api_config.service_version)
    yield
    logger.info("Inspection scoring API stopping")
    await engine.dispose()


app = FastAPI(
    title="Vehicle Inspection Scoring API",
    description="Urgency scoring and repair recommendations for vehicle inspection items",
    version=api_config.service_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Stateless scoring
app.include_router(urgency.router)
app.include_router(recommendations.router)
# Persisted items and inspections
app.include_router(inspection_items.router)
app.include_router(inspections.router)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": api_config.service_name,
        "version": api_config.service_version
    }


@app.get("/")
async def root():
    return {
        "message": "Vehicle Inspection Scoring API",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api_service.main:app",
        host=api_config.api_host,
        port=api_config.api_port,
        reload=api_config.reload
    )
