"""
Render error taxonomy.

Every failure a render can hit is a RenderError subclass carrying the HTTP
status and the short category string returned to callers in the ``error``
field of the JSON body.
"""

from typing import Optional


class RenderError(Exception):
    """Base class for failures raised while rendering a PDF."""

    status_code: int = 500
    category: str = "PDF rendering failed"

    def __init__(self, message: str, cause: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(RenderError):
    """Client supplied input is missing or malformed."""

    status_code = 400
    category = "Invalid request"


class PayloadTooLargeError(ValidationError):
    """Request body exceeds the configured size limit."""

    status_code = 413
    category = "Payload too large"


class EngineLaunchError(RenderError):
    """The browser process could not be started."""

    category = "Browser launch failed"


class ServiceUnavailableError(RenderError):
    """The shared browser is not available to serve a render."""

    category = "Browser unavailable"


class NavigationError(RenderError):
    """The target URL could not be loaded."""

    category = "Navigation failed"


class NavigationTimeoutError(NavigationError):
    """The target URL did not settle within the navigation timeout."""

    category = "Navigation timeout"


class FontLoadError(RenderError):
    """The page's web fonts could not be checked for readiness."""

    category = "Font loading failed"


class ExportError(RenderError):
    """PDF generation failed after the page loaded."""

    category = "PDF export failed"
