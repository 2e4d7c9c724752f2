"""
Request/response models for the PDF service.
"""

from datetime import datetime
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .pdf_helpers import parse_css_length

CssLength = Union[int, float, str]

PAPER_FORMATS = {
    "letter", "legal", "tabloid", "ledger",
    "a0", "a1", "a2", "a3", "a4", "a5", "a6",
}


class PageMargins(BaseModel):
    """Page margins as CSS lengths (numbers are px)."""
    top: CssLength = Field(0, description="Top margin")
    right: CssLength = Field(0, description="Right margin")
    bottom: CssLength = Field(0, description="Bottom margin")
    left: CssLength = Field(0, description="Left margin")

    @field_validator("top", "right", "bottom", "left")
    @classmethod
    def validate_length(cls, v: CssLength) -> CssLength:
        parse_css_length(v)
        return v

    def to_px(self) -> Dict[str, float]:
        """Margins converted to pixels."""
        return {
            "top": parse_css_length(self.top),
            "right": parse_css_length(self.right),
            "bottom": parse_css_length(self.bottom),
            "left": parse_css_length(self.left),
        }


class RenderPDFRequest(BaseModel):
    """HTML to PDF request."""
    html: str = Field(..., description="HTML content to render")
    width: Optional[CssLength] = Field(
        None, description="Page width (CSS length, numbers are px)"
    )
    height: Optional[CssLength] = Field(
        None, description="Page height; omitted means auto-height from the rendered body"
    )
    autoHeight: bool = Field(
        True, description="Size the page to the rendered body when no height is given"
    )
    format: Optional[str] = Field(
        None, description="Paper format (e.g. 'A4', 'Letter'); overrides width/height"
    )
    landscape: bool = Field(False, description="Print in landscape orientation")
    margin: PageMargins = Field(default_factory=PageMargins, description="Page margins")
    printBackground: bool = Field(True, description="Print background colors/images")
    css: Optional[str] = Field(None, description="Additional CSS styles")
    waitUntil: Literal["load", "domcontentloaded", "networkidle"] = Field(
        "networkidle", description="Load state to wait for before printing"
    )
    filename: Optional[str] = Field(None, description="Download filename")

    @field_validator("width", "height")
    @classmethod
    def validate_dimension(cls, v: Optional[CssLength]) -> Optional[CssLength]:
        if v is None:
            return v
        if parse_css_length(v) <= 0:
            raise ValueError("page dimensions must be greater than zero")
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if v.lower() not in PAPER_FORMATS:
            raise ValueError(f"format must be one of: {', '.join(sorted(PAPER_FORMATS))}")
        return v


class MemoryUsage(BaseModel):
    """Process memory figures."""
    rss: int
    vms: int
    percent: float


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "OK"
    timestamp: datetime
    uptime: float
    memory: MemoryUsage
    active_renders: int
    max_concurrent: int
    browser_ready: Optional[bool] = None
    browser_error: Optional[str] = None
    message: str = "PDF service running"


class IndexResponse(BaseModel):
    """Service description returned from the root endpoint."""
    message: str
    version: str
    endpoints: Dict[str, str]


class PingResponse(BaseModel):
    """Lightweight liveness response."""
    message: str = "Test successful"
    timestamp: datetime
    uptime: float
