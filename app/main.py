# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the LivePrompt Audio Analysis API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 4000
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    LivePromptException,
    liveprompt_exception_handler,
    validation_exception_handler,
)
from app.routers import audio, health
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective configuration on startup and warns about missing
    integration keys (the API still serves auth and job endpoints
    without them; processing will fail and be recorded on the job).
    """
    logger.info(f"Starting LivePrompt API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    if not settings.ASSEMBLYAI_API_KEY:
        logger.warning("ASSEMBLYAI_API_KEY is not set - transcription will fail")
    if not settings.SUPABASE_JWT_SECRET:
        logger.info("SUPABASE_JWT_SECRET not set - only JWKS-signed tokens will verify")

    yield

    logger.info("Shutting down LivePrompt API")


# Create FastAPI application
app = FastAPI(
    title="LivePrompt Audio Analysis API",
    description="""
## AI-Powered Audio Analysis API

Upload a recording, get back a transcript with speaker labels, a structured
analysis and a written summary.

### How It Works

1. **Sign in** - `POST /api/auth/login`
2. **Upload audio** - `POST /api/audio/upload` (or `/api/audio/process-audio` to start right away)
3. **Start processing** - `POST /api/audio/jobs/{id}/process`
4. **Poll** - `GET /api/audio/jobs/{id}/status` until `completed` or `failed`
5. **Read the report** - `GET /api/audio/jobs/{id}` (`report_data`)

### Pipeline

| Step | Service |
|------|---------|
| **Transcribe** | AssemblyAI (diarization, chapters, entities, sentiment) |
| **Analyze** | OpenAI (comprehensive or meeting analysis, JSON) |
| **Summarize** | OpenAI (executive, detailed or bullet points) |
""",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Registration, login and token management",
        },
        {
            "name": "Audio",
            "description": "Upload recordings and manage analysis jobs",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(LivePromptException)
async def handle_liveprompt_exception(request: Request, exc: LivePromptException):
    """Handle custom LivePrompt exceptions."""
    return await liveprompt_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(auth_routes.router, prefix=settings.API_PREFIX)

# Audio upload and job endpoints
app.include_router(audio.router, prefix=settings.API_PREFIX)

# Health check endpoints
app.include_router(
    health.router,
    prefix=settings.API_PREFIX,
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "LivePrompt Audio Analysis API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health",
    }
