"""
PDF Renderer Models.

Request and response models for the rendering API, plus the RenderResult
value produced by the render handler.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import RenderError

Length = Union[float, str]


class EngineState(str, Enum):
    """Lifecycle state of the shared browser."""

    ABSENT = "absent"
    STARTING = "starting"
    READY = "ready"


class PdfMargin(BaseModel):
    """Page margins. Numbers are CSS pixels; strings may carry units ("10mm")."""

    model_config = ConfigDict(extra="forbid")

    top: Optional[Length] = None
    right: Optional[Length] = None
    bottom: Optional[Length] = None
    left: Optional[Length] = None


class PdfOptions(BaseModel):
    """Export overrides. Anything left unset falls back to the service defaults."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    print_background: Optional[bool] = Field(default=None, alias="printBackground")
    prefer_css_page_size: Optional[bool] = Field(default=None, alias="preferCSSPageSize")
    scale: Optional[float] = Field(default=None, ge=0.1, le=2.0)
    margin: Optional[PdfMargin] = None
    format: Optional[str] = Field(default=None, description="Paper format, e.g. 'A4' or 'Letter'")
    landscape: Optional[bool] = None
    width: Optional[Length] = None
    height: Optional[Length] = None
    page_ranges: Optional[str] = Field(default=None, alias="pageRanges")
    display_header_footer: Optional[bool] = Field(default=None, alias="displayHeaderFooter")
    header_template: Optional[str] = Field(default=None, alias="headerTemplate")
    footer_template: Optional[str] = Field(default=None, alias="footerTemplate")


class RenderPdfRequest(BaseModel):
    """Request model for URL to PDF rendering."""

    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = Field(default=None, description="URL of the page to render")
    pdf_options: Optional[PdfOptions] = Field(
        default=None,
        alias="pdfOptions",
        description="Optional overrides for the PDF export",
    )


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    error: str = Field(..., description="Short error category")
    message: str = Field(..., description="Human readable description")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="ok", description="Service status")
    service: str = Field(..., description="Service identity")
    engine: EngineState = Field(..., description="Shared browser lifecycle state")
    active_contexts: int = Field(..., description="Browsing contexts currently open")


@dataclass
class RenderFailure:
    """Structured description of a failed render."""

    category: str
    message: str
    status_code: int
    cause: Optional[str] = None

    @classmethod
    def from_error(cls, error: RenderError) -> "RenderFailure":
        return cls(
            category=error.category,
            message=error.message,
            status_code=error.status_code,
            cause=error.cause,
        )

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.category, message=self.message)


@dataclass
class RenderResult:
    """Outcome of one render: either PDF bytes or a failure, never both."""

    pdf: Optional[bytes] = None
    failure: Optional[RenderFailure] = None

    def __post_init__(self):
        if (self.pdf is None) == (self.failure is None):
            raise ValueError("RenderResult needs exactly one of pdf or failure")

    @classmethod
    def success(cls, pdf: bytes) -> "RenderResult":
        return cls(pdf=pdf)

    @classmethod
    def failed(cls, error: RenderError) -> "RenderResult":
        return cls(failure=RenderFailure.from_error(error))

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def content_length(self) -> int:
        return len(self.pdf) if self.pdf is not None else 0


def validation_messages(errors: List[dict]) -> str:
    """Flatten pydantic error dicts into one readable line."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)
