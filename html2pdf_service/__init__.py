"""
HTML to PDF Service - Render HTML documents to PDF over HTTP.

Each request launches a headless Chromium through Playwright, loads the
submitted HTML, optionally sizes the page to the rendered body, and streams
the printed PDF back to the caller.
"""

__version__ = "0.1.0"
