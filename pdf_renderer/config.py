"""
PDF Renderer Configuration.

Environment-driven settings for the PDF rendering microservice.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # =========================================================================
    # API SETTINGS
    # =========================================================================
    api_title: str = "PDF Renderer Service"
    api_version: str = "1.0.0"
    service_name: str = Field(
        default="pdf-renderer",
        description="Service identity reported by the health endpoint",
    )
    debug: bool = Field(default=False, description="Enable verbose logging")
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=3000, description="Port to listen on")

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: List[str] = Field(
        default=["http://localhost:8000"],
        description="Allowed origins for CORS",
    )
    cors_credentials: bool = True
    cors_methods: List[str] = ["*"]
    cors_headers: List[str] = ["*"]

    # =========================================================================
    # BROWSER SETTINGS
    # =========================================================================
    browser_headless: bool = Field(
        default=True,
        description="Run the browser in headless mode",
    )
    browser_args: List[str] = Field(
        default=["--no-sandbox", "--disable-setuid-sandbox", "--disable-gpu"],
        description="Extra command line flags passed to Chromium",
    )
    eager_launch: bool = Field(
        default=True,
        description="Launch the browser at startup instead of on first request",
    )
    shutdown_grace_seconds: float = Field(
        default=10.0,
        description="How long shutdown waits for the browser to close",
    )
    context_close_timeout_ms: int = Field(
        default=5000,
        description="How long a request waits for its browsing context to close",
    )

    # =========================================================================
    # RENDERING DEFAULTS
    # =========================================================================
    viewport_width: int = Field(default=1200, description="Viewport width in pixels")
    viewport_height: int = Field(default=1600, description="Viewport height in pixels")
    navigation_timeout_ms: int = Field(default=30000, description="Page load timeout in ms")
    font_wait_timeout_ms: int = Field(
        default=10000,
        description="How long to wait for document.fonts.ready before exporting anyway",
    )
    export_timeout_ms: int = Field(default=30000, description="PDF export timeout in ms")

    # =========================================================================
    # REQUEST LIMITS
    # =========================================================================
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted JSON body size for /render-pdf",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
