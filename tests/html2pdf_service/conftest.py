"""
Pytest fixtures for PDF service tests.
"""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

# IMPORTANT: Set environment variables BEFORE any imports from html2pdf_service
# so ServiceSettings is configured correctly when first loaded.
os.environ["ENVIRONMENT"] = "development"
os.environ["MAX_CONCURRENT_PDFS"] = "2"
os.environ["MAX_BODY_BYTES"] = "65536"
os.environ["PLAYWRIGHT_TIMEOUT"] = "5000"
os.environ["KEEPALIVE_INTERVAL_SECONDS"] = "0"
os.environ["VALIDATE_BROWSER_ON_STARTUP"] = "false"

import pytest
from fastapi.testclient import TestClient


def build_browser_mocks(pdf_bytes=b"%PDF-1.4 fake pdf content", body_box=None, body_margin_bottom=8):
    """
    Build the Playwright object chain used by the renderer.

    async_playwright() -> p.chromium.launch() -> browser.new_page() -> page
    """
    if body_box is None:
        body_box = {"x": 8, "y": 8, "width": 784, "height": 500}

    body = AsyncMock()
    body.bounding_box = AsyncMock(return_value=body_box)
    body.evaluate = AsyncMock(return_value=body_margin_bottom)

    page = AsyncMock()
    page.set_default_timeout = MagicMock()
    page.query_selector = AsyncMock(return_value=body)
    page.pdf = AsyncMock(return_value=pdf_bytes)

    browser = AsyncMock()
    browser.new_page = AsyncMock(return_value=page)

    chromium = MagicMock(launch=AsyncMock(return_value=browser))
    playwright = MagicMock(chromium=chromium)

    return SimpleNamespace(
        playwright=playwright,
        chromium=chromium,
        browser=browser,
        page=page,
        body=body,
    )


@pytest.fixture
def browser_mocks():
    """Patch async_playwright in the renderer with a mocked Chromium."""
    mocks = build_browser_mocks()
    with patch("html2pdf_service.renderer.async_playwright") as mock_async_playwright:
        mock_async_playwright.return_value.__aenter__ = AsyncMock(return_value=mocks.playwright)
        mocks.async_playwright = mock_async_playwright
        yield mocks


@pytest.fixture
def settings():
    """Fresh settings instance built from the test environment."""
    from html2pdf_service.config import ServiceSettings
    return ServiceSettings()


@pytest.fixture
def client():
    """Create test client for PDF service with the browser marked as ready."""
    import html2pdf_service.app as app_module
    app_module._browser_ready = True
    app_module._browser_error = None
    from html2pdf_service.app import app
    return TestClient(app)


@pytest.fixture
def client_browser_unavailable():
    """Create test client with the browser marked as unavailable."""
    import html2pdf_service.app as app_module
    app_module._browser_ready = False
    app_module._browser_error = "Test: Chromium not available"
    from html2pdf_service.app import app
    yield TestClient(app)
    app_module._browser_ready = True
    app_module._browser_error = None
