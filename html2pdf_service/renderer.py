"""
Playwright/Chromium rendering for the PDF service.

Every render launches its own browser, loads the submitted HTML, works out
the page geometry and prints the page to PDF. The browser is closed whether
or not printing succeeds.
"""

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import ServiceSettings
from .logger import RequestLogger, get_logger
from .models import RenderPDFRequest
from .pdf_helpers import format_px, inject_css, parse_css_length

PROBE_HTML = "<html><body><h1>Test</h1></body></html>"

# Body bottom edge plus its bottom margin, so the last line never spills onto a new page
_BODY_MARGIN_BOTTOM_JS = "el => parseFloat(getComputedStyle(el).marginBottom) || 0"


class RenderError(Exception):
    """Raised when Chromium fails to render or print a document."""


class RenderTimeoutError(RenderError):
    """Raised when a browser operation exceeds the configured timeout."""


@dataclass
class RenderResult:
    """PDF bytes plus the page geometry they were printed with."""

    pdf: bytes
    page_width: Optional[str] = None
    page_height: Optional[str] = None
    paper_format: Optional[str] = None


def launch_options(settings: ServiceSettings) -> Dict[str, Any]:
    """Build Chromium launch kwargs from settings."""
    options: Dict[str, Any] = {
        "headless": settings.playwright_headless,
        "args": settings.chromium_args_list,
    }
    if settings.chromium_executable_path:
        options["executable_path"] = settings.chromium_executable_path
    return options


def auto_page_height(body_bottom: float, margins_px: Dict[str, float], max_height: int) -> int:
    """
    Page height that fits the rendered body on a single page.

    Args:
        body_bottom: Bottom edge of the rendered body in px
        margins_px: Page margins in px
        max_height: Upper bound in px

    Returns:
        Integer height in px within [1, max_height]
    """
    height = math.ceil(body_bottom + margins_px["top"] + margins_px["bottom"])
    return max(1, min(height, max_height))


async def measure_body_bottom(page) -> Optional[float]:
    """
    Measure the bottom edge of the rendered <body>.

    Returns None when the page has no body or the body has no layout box
    (e.g. display: none).
    """
    body = await page.query_selector("body")
    if body is None:
        return None

    box = await body.bounding_box()
    if not box:
        return None

    margin_bottom = await body.evaluate(_BODY_MARGIN_BOTTOM_JS)
    return box["y"] + box["height"] + float(margin_bottom or 0)


async def render_pdf(
    request: RenderPDFRequest,
    settings: ServiceSettings,
    logger: Optional[RequestLogger] = None,
) -> RenderResult:
    """
    Render HTML to PDF in a fresh Chromium instance.

    Args:
        request: HTML content and page settings
        settings: Service settings (timeouts, browser binary, geometry defaults)
        logger: Request-scoped logger

    Returns:
        RenderResult with the PDF bytes and the printed page geometry

    Raises:
        RenderTimeoutError: A browser operation timed out
        RenderError: Any other browser failure
    """
    logger = logger or get_logger(__name__)

    margins_px = request.margin.to_px()
    paper_format = request.format.capitalize() if request.format else None

    page_width_px = parse_css_length(
        request.width if request.width is not None else settings.default_page_width
    )
    if paper_format:
        viewport_width = settings.viewport_width
    else:
        # Lay the page out at the printable width so the measured height matches the print
        viewport_width = max(1, math.ceil(page_width_px - margins_px["left"] - margins_px["right"]))

    html = inject_css(request.html, request.css) if request.css else request.html

    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(**launch_options(settings))
            try:
                page = await browser.new_page(
                    viewport={"width": viewport_width, "height": settings.viewport_height}
                )
                page.set_default_timeout(settings.playwright_timeout)

                await page.set_content(html, wait_until=request.waitUntil)

                pdf_options: Dict[str, Any] = {
                    "print_background": request.printBackground,
                    "landscape": request.landscape,
                    "margin": {side: format_px(px) for side, px in margins_px.items()},
                }

                page_width = page_height = None
                if paper_format:
                    pdf_options["format"] = paper_format
                else:
                    page_width = format_px(page_width_px)
                    page_height = await _resolve_page_height(
                        page, request, settings, margins_px, logger
                    )
                    pdf_options["width"] = page_width
                    pdf_options["height"] = page_height

                logger.info(
                    f"Printing PDF (format={paper_format}, width={page_width}, height={page_height})"
                )
                pdf_bytes = await page.pdf(**pdf_options)
            finally:
                await browser.close()

    except (PlaywrightTimeoutError, asyncio.TimeoutError) as e:
        raise RenderTimeoutError(
            f"Rendering timed out after {settings.playwright_timeout}ms"
        ) from e
    except Exception as e:
        raise RenderError(str(e)) from e

    logger.info(f"Rendered {len(pdf_bytes)} byte PDF")
    return RenderResult(
        pdf=pdf_bytes,
        page_width=page_width,
        page_height=page_height,
        paper_format=paper_format,
    )


async def _resolve_page_height(
    page,
    request: RenderPDFRequest,
    settings: ServiceSettings,
    margins_px: Dict[str, float],
    logger: RequestLogger,
) -> str:
    """Explicit height wins, then auto-height, then the configured fallback."""
    if request.height is not None:
        return format_px(parse_css_length(request.height))

    fallback = format_px(parse_css_length(settings.fallback_page_height))
    if not request.autoHeight:
        return fallback

    body_bottom = await measure_body_bottom(page)
    if body_bottom is None:
        logger.warning(f"Body has no layout box, using fallback height {fallback}")
        return fallback

    height = auto_page_height(body_bottom, margins_px, settings.max_page_height_px)
    logger.debug(f"Measured body bottom {body_bottom:.1f}px -> page height {height}px")
    return format_px(height)


async def validate_browser(settings: ServiceSettings) -> int:
    """
    Render a probe document to verify Chromium can launch and print.

    Returns:
        Size of the probe PDF in bytes

    Raises:
        RenderError: The probe could not be rendered or came back empty
    """
    probe = RenderPDFRequest(html=PROBE_HTML, format="Letter", waitUntil="load")
    result = await render_pdf(probe, settings, get_logger(__name__, request_id="startup-probe"))
    if not result.pdf:
        raise RenderError("Test PDF generation returned empty result")
    return len(result.pdf)
