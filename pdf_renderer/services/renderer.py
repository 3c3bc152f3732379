"""
PDF Renderer Service.

Drives one browsing context per request through navigation, font loading and
PDF export, and turns the outcome into a RenderResult.
"""

import asyncio
import copy
import logging
import time
from typing import Any, Dict, Optional

from ..config import settings
from ..errors import (
    EngineLaunchError,
    ExportError,
    RenderError,
    ServiceUnavailableError,
    ValidationError,
)
from ..models import PdfOptions, RenderPdfRequest, RenderResult
from .browser_manager import BrowserManager, browser_manager

logger = logging.getLogger("pdf_renderer.renderer")

DEFAULT_PDF_OPTIONS: Dict[str, Any] = {
    "print_background": True,
    "prefer_css_page_size": True,
    "scale": 1.0,
    "margin": {"top": 0, "right": 0, "bottom": 0, "left": 0},
}


def build_pdf_options(overrides: Optional[PdfOptions]) -> Dict[str, Any]:
    """
    Overlay request options onto the service defaults.

    Only options the caller actually set replace a default; margins are merged
    side by side so {"top": 10} keeps the other three sides at 0.
    """
    options = copy.deepcopy(DEFAULT_PDF_OPTIONS)
    if overrides is None:
        return options

    requested = overrides.model_dump(exclude_none=True)
    margin = requested.pop("margin", None)
    options.update(requested)
    if margin:
        options["margin"].update(margin)
    return options


async def render_pdf(
    request: RenderPdfRequest,
    manager: BrowserManager = browser_manager,
    request_id: str = "no-id",
) -> RenderResult:
    """
    Render request.url to a PDF.

    This function:
    1. Validates the URL before touching the browser
    2. Borrows a fresh browsing context from the shared browser
    3. Navigates and waits for the network to go idle
    4. Waits for web fonts so text is not printed with fallback glyphs
    5. Exports the page with the merged PDF options

    The browsing context is always closed before returning.

    Args:
        request: URL and optional PDF options
        manager: Lifecycle manager that owns the shared browser
        request_id: Correlation id used in log lines

    Returns:
        RenderResult holding either the PDF bytes or a failure record
    """
    start_time = time.time()

    try:
        pdf = await _render(request, manager, request_id)
    except RenderError as e:
        logger.warning(f"[{request_id}] RENDER_FAILED: {e.category}: {e.message}")
        return RenderResult.failed(e)
    except Exception as e:
        logger.exception(f"[{request_id}] RENDER_ERROR: unexpected failure rendering {request.url}")
        return RenderResult.failed(RenderError(f"Failed to render {request.url}: {e}", cause=str(e)))

    render_time_ms = int((time.time() - start_time) * 1000)
    logger.info(f"[{request_id}] RENDER_DONE: {request.url} -> {len(pdf)} bytes in {render_time_ms}ms")
    return RenderResult.success(pdf)


async def _render(request: RenderPdfRequest, manager: BrowserManager, request_id: str) -> bytes:
    url = (request.url or "").strip()
    if not url:
        raise ValidationError("Missing url parameter")

    pdf_options = build_pdf_options(request.pdf_options)

    try:
        async with manager.browsing_context(
            viewport_width=settings.viewport_width,
            viewport_height=settings.viewport_height,
        ) as context:
            logger.info(f"[{request_id}] RENDER_START: navigating to {url}")
            status = await context.navigate(url, timeout_ms=settings.navigation_timeout_ms)
            logger.debug(f"[{request_id}] Loaded {url} (status={status})")

            await _wait_for_fonts(context, request_id)

            try:
                pdf = await asyncio.wait_for(
                    context.export_pdf(pdf_options),
                    timeout=settings.export_timeout_ms / 1000,
                )
            except asyncio.TimeoutError:
                raise ExportError(f"PDF export timed out after {settings.export_timeout_ms}ms")

            if not pdf:
                raise ExportError("PDF export returned an empty document")
            return pdf

    except EngineLaunchError as e:
        raise ServiceUnavailableError(f"Browser is not available: {e.message}", cause=e.cause) from e


async def _wait_for_fonts(context, request_id: str) -> None:
    try:
        status = await asyncio.wait_for(
            context.wait_for_fonts(),
            timeout=settings.font_wait_timeout_ms / 1000,
        )
        logger.debug(f"[{request_id}] Fonts {status}")
    except asyncio.TimeoutError:
        logger.warning(
            f"[{request_id}] Fonts not ready within {settings.font_wait_timeout_ms}ms, exporting anyway"
        )
