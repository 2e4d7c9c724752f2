"""
Helper functions for PDF generation from submitted HTML.

These functions normalize CSS page dimensions, build download filenames
and prepare the HTML document handed to Playwright.
"""

import re
from typing import Union

# CSS reference pixel conversions (96px per inch)
PX_PER_UNIT = {
    "px": 1.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
    "pt": 96.0 / 72.0,
}

_LENGTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*([a-zA-Z]*)\s*$")

CssLength = Union[int, float, str]


def parse_css_length(value: CssLength) -> float:
    """
    Convert a CSS length to pixels.

    Numbers are taken as pixels. Strings may carry a px, in, cm, mm or pt
    unit, or no unit at all (pixels).

    Args:
        value: Length such as 800, "800px", "8.5in" or "210mm"

    Returns:
        Length in CSS pixels

    Raises:
        ValueError: For negative values, empty strings or unknown units

    Example:
        >>> parse_css_length("1in")
        96.0
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid CSS length: {value!r}")

    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"CSS length must not be negative: {value}")
        return float(value)

    match = _LENGTH_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid CSS length: {value!r}")

    number, unit = match.groups()
    unit = unit.lower() or "px"
    if unit not in PX_PER_UNIT:
        raise ValueError(
            f"Unsupported CSS unit '{unit}' (use one of: {', '.join(PX_PER_UNIT)})"
        )
    return float(number) * PX_PER_UNIT[unit]


def format_px(px: float) -> str:
    """
    Format a pixel value as a CSS length Chromium accepts.

    Example:
        >>> format_px(793.7007874)
        "793.7px"
    """
    text = f"{px:.2f}".rstrip("0").rstrip(".")
    return f"{text}px"


def sanitize_filename(text: str) -> str:
    """
    Sanitize text for use as a download filename.

    Keeps word characters, hyphens and dots, collapses every other run of
    characters into a single underscore and strips leading/trailing
    underscores. The result always ends in ".pdf".

    Args:
        text: Raw filename requested by the caller

    Returns:
        Filename safe for a Content-Disposition header

    Example:
        >>> sanitize_filename("Invoice #42 (final)")
        "Invoice_42_final.pdf"
    """
    stem = text or ""
    if stem.lower().endswith(".pdf"):
        stem = stem[:-4]

    cleaned = re.sub(r"[^\w.-]+", "_", stem, flags=re.ASCII)
    cleaned = cleaned.strip("_.")
    if not cleaned:
        return "document.pdf"
    return f"{cleaned}.pdf"


def inject_css(html: str, css: str) -> str:
    """
    Add a stylesheet to an HTML document.

    Full documents get a <style> element right before </head>. Fragments
    are wrapped in a minimal document carrying the stylesheet.
    """
    if not css:
        return html

    style_tag = f"<style>{css}</style>"

    head_close = re.search(r"</head\s*>", html, flags=re.IGNORECASE)
    if head_close:
        return html[:head_close.start()] + style_tag + html[head_close.start():]

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    {style_tag}
</head>
<body>
    {html}
</body>
</html>
"""
