"""FastAPI application entry point for the training log progress API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trainlog.config import get_settings
from trainlog.database import create_tables
from trainlog.routers import progress, reports

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create database tables
    create_tables()
    yield


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Progress analytics for the training log - charts, PR tracking and exportable reports",
    version="1.0.0",
    lifespan=lifespan,
)

cors_origins = [
    settings.FRONTEND_URL,
    "http://localhost:19006",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
app.include_router(progress.router, prefix="/api/progress", tags=["Progress"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health", tags=["Health"])
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
