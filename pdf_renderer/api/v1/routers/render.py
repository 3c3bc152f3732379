"""
Render Router - URL to PDF endpoint.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from ....config import settings
from ....errors import RenderError, ValidationError
from ....models import ErrorResponse, RenderFailure, RenderPdfRequest, validation_messages
from ....services.renderer import render_pdf
from ..body import read_json_body

logger = logging.getLogger("pdf_renderer.api.render")

router = APIRouter(tags=["render"])


def parse_render_request(payload: Dict[str, Any]) -> RenderPdfRequest:
    try:
        return RenderPdfRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(validation_messages(e.errors()))


def error_response(failure: RenderFailure) -> JSONResponse:
    return JSONResponse(
        status_code=failure.status_code,
        content=failure.to_response().model_dump(),
    )


@router.post(
    "/render-pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Rendered PDF document"},
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def render_url_to_pdf(
    request: Request,
    x_request_id: Optional[str] = Header(None, alias="X-Request-ID"),
) -> Response:
    """
    Render a URL to PDF using the shared headless browser.

    Body: {"url": "...", "pdfOptions": {...}}. Options left out keep the
    defaults (background printed, CSS page size preferred, scale 1, no margins).

    Headers:
    - X-Request-ID: Optional correlation ID for request tracing
    """
    request_id = x_request_id or "no-id"

    try:
        payload = await read_json_body(request, settings.max_body_bytes)
        render_request = parse_render_request(payload)
    except RenderError as e:
        logger.warning(f"[{request_id}] Rejected render request: {e.message}")
        return error_response(RenderFailure.from_error(e))

    result = await render_pdf(render_request, request_id=request_id)

    if not result.ok:
        return error_response(result.failure)

    return Response(content=result.pdf, media_type="application/pdf")
