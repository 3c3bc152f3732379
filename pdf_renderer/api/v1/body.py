"""
Bounded JSON body parsing.

FastAPI would buffer the whole body before validation; reading the stream
ourselves lets oversized uploads be rejected as soon as they cross the limit.
"""

import json
from typing import Any, Dict

from fastapi import Request

from ...errors import PayloadTooLargeError, ValidationError


async def read_json_body(request: Request, max_bytes: int) -> Dict[str, Any]:
    """
    Read and decode a JSON object body of at most max_bytes.

    An empty body decodes to {} so that a missing url is reported as such.

    Raises:
        PayloadTooLargeError: declared or actual size exceeds max_bytes
        ValidationError: body is not valid JSON or not a JSON object
    """
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            declared_size = int(declared)
        except ValueError:
            raise ValidationError(f"Invalid Content-Length header: {declared!r}")
        if declared_size > max_bytes:
            raise PayloadTooLargeError(f"Request body exceeds {max_bytes} bytes")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLargeError(f"Request body exceeds {max_bytes} bytes")

    if not body.strip():
        return {}

    try:
        payload = json.loads(bytes(body))
    except (ValueError, UnicodeDecodeError) as e:
        raise ValidationError(f"Malformed JSON body: {e}", cause=str(e))

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload
