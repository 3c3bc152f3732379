"""
PDF Renderer Service - FastAPI Application.

A microservice that loads a web page in a shared headless Chromium and
returns it as a PDF document.

The browser is launched once (at startup by default) and every request gets
its own browsing context, so concurrent renders never share page state.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .services.browser_manager import browser_manager
from .api.v1.routers import render as render_router
from .api.v1.routers import system as system_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("pdf_renderer.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - launch and shut down the shared browser."""
    # Startup
    logger.info(f"Starting {settings.api_title} on port {settings.port}")
    if settings.eager_launch:
        try:
            await browser_manager.ensure_ready()
        except Exception:
            logger.exception("Failed to initialize browser, aborting startup")
            raise
        logger.info("Browser instance initialized")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.api_title}")
    await browser_manager.shutdown()


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    debug=settings.debug,
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)

# Include routers
app.include_router(system_router.router, prefix="/api/v1")
app.include_router(render_router.router, prefix="/api/v1")

# Root-level routes keep the plain /render-pdf and /health contract
app.include_router(system_router.router, prefix="")
app.include_router(render_router.router, prefix="")
