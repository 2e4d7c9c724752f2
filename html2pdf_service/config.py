"""
HTML to PDF Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .pdf_helpers import parse_css_length

# Flags that let Chromium run inside small containers and serverless sandboxes
DEFAULT_CHROMIUM_ARGS = (
    "--no-sandbox,"
    "--disable-setuid-sandbox,"
    "--disable-dev-shm-usage,"
    "--disable-gpu,"
    "--no-zygote"
)


class ServiceSettings(BaseSettings):
    """
    PDF service configuration with validation.

    All settings can be overridden via environment variables.
    Validation happens at startup to fail fast on misconfiguration.
    """

    # === Server ===
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port the HTTP server listens on"
    )
    host: str = Field(
        default="0.0.0.0",
        description="Address the HTTP server binds to"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_format: str = Field(
        default="simple",
        description="Log format: 'simple' or 'json'"
    )
    log_request_headers: bool = Field(
        default=False,
        description="Log incoming request headers at DEBUG level"
    )

    # === Limits ===
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1024,
        description="Maximum accepted request body size in bytes (default 10 MB)"
    )
    max_concurrent_pdfs: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum simultaneous PDF renders (1-50)"
    )

    # === Browser ===
    playwright_timeout: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Default Playwright operation timeout in milliseconds"
    )
    playwright_headless: bool = Field(
        default=True,
        description="Launch Chromium headless"
    )
    chromium_executable_path: Optional[str] = Field(
        default=None,
        description="Path to a custom (e.g. lightweight serverless) Chromium binary"
    )
    chromium_args: str = Field(
        default=DEFAULT_CHROMIUM_ARGS,
        description="Comma-separated list of extra Chromium launch arguments"
    )
    validate_browser_on_startup: bool = Field(
        default=True,
        description="Render a probe PDF at startup to verify the browser works"
    )

    # === Page geometry ===
    viewport_width: int = Field(
        default=1280,
        ge=100,
        le=10000,
        description="Default viewport width in px"
    )
    viewport_height: int = Field(
        default=800,
        ge=100,
        le=10000,
        description="Viewport height in px"
    )
    default_page_width: str = Field(
        default="800px",
        description="Page width used when a request does not specify one"
    )
    fallback_page_height: str = Field(
        default="1123px",
        description="Page height used when the body height cannot be measured"
    )
    max_page_height_px: int = Field(
        default=19200,
        ge=100,
        description="Upper bound for auto-computed page heights in px (200in)"
    )

    # === Keep-alive ===
    keepalive_interval_seconds: int = Field(
        default=300,
        ge=0,
        description="Heartbeat log interval in seconds (0 disables)"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(allowed))}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in {"simple", "json"}:
            raise ValueError("log_format must be 'simple' or 'json'")
        return v_lower

    @field_validator("default_page_width", "fallback_page_height")
    @classmethod
    def validate_css_length(cls, v: str) -> str:
        """Reject page dimensions Chromium cannot print."""
        if parse_css_length(v) <= 0:
            raise ValueError("page dimensions must be greater than zero")
        return v

    @property
    def chromium_args_list(self) -> List[str]:
        """Parse Chromium launch arguments into a list."""
        if not self.chromium_args:
            return []
        return [arg.strip() for arg in self.chromium_args.split(",") if arg.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.playwright_headless:
                issues.append("CRITICAL: PLAYWRIGHT_HEADLESS must be true in production")
            if self.log_level == "DEBUG":
                issues.append("WARNING: LOG_LEVEL=DEBUG in production")
            if self.log_request_headers:
                issues.append("WARNING: LOG_REQUEST_HEADERS enabled in production")
            if self.keepalive_interval_seconds == 0:
                issues.append("WARNING: keep-alive heartbeat disabled")

        return issues

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # PLAYWRIGHT_TIMEOUT = playwright_timeout


@lru_cache()
def get_settings() -> ServiceSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    Use this function to access configuration throughout the app.
    """
    return ServiceSettings()


def validate_config_on_startup() -> None:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    import logging
    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    # Check production-specific requirements
    issues = settings.validate_production_config()

    for issue in issues:
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        else:
            logger.warning(issue)

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  listen={settings.host}:{settings.port}")
    logger.info(f"  max_concurrent_pdfs={settings.max_concurrent_pdfs}")
    logger.info(f"  max_body_bytes={settings.max_body_bytes}")
    logger.info(f"  playwright_timeout={settings.playwright_timeout}ms")
    logger.info(f"  chromium_executable_path={settings.chromium_executable_path or 'bundled'}")
    logger.info(f"  keepalive_interval={settings.keepalive_interval_seconds}s")
