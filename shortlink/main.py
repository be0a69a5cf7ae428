"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- Logging
- API routes
- Middleware (logging, CORS, rate limiting)
- Startup/shutdown of the lifecycle event sink

Run with:
    uvicorn shortlink.main:app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortlink.api import endpoints
from shortlink.middleware.logging import add_logging_middleware
from shortlink.core.rate_limit import limiter
from shortlink.core.setting import settings
from shortlink.core.sink_manager import initialize_event_sink, shutdown_event_sink

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

app = FastAPI(
    title="URL Shortener Service",
    description="Binds short ids to URLs with expiration and usage limits",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI documentation
    redoc_url="/redoc",  # ReDoc documentation
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health endpoints defined before router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint for health checks."""
    return {
        "message": "URL Shortener Service",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["URL Shortener"])


@app.on_event("startup")
async def startup_event():
    """Start the lifecycle event sink."""
    await initialize_event_sink()


@app.on_event("shutdown")
async def shutdown_event():
    """Drain and stop the lifecycle event sink."""
    await shutdown_event_sink()
