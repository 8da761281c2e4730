"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mealcart.config import get_settings
from mealcart.database import Base, async_engine
from mealcart.logging_config import configure_logging, get_logger
from mealcart.routers import shopping_lists_router

# Configure logging on module load
configure_logging()
logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    logger.info("Starting Mealcart API")

    # Create database tables if they don't exist
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")

    yield

    # Shutdown
    logger.info("Shutting down Mealcart API")
    await async_engine.dispose()


app = FastAPI(
    title="Mealcart API",
    description="Weekly shopping lists aggregated from meal plans",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(shopping_lists_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "mealcart-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Mealcart API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
