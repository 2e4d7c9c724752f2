"""
Run the PDF service with uvicorn.

    python -m html2pdf_service

HOST and PORT come from the environment (PORT defaults to 3000). uvicorn
handles SIGTERM/SIGINT by draining connections and running the app's
shutdown hooks before exiting.
"""

import uvicorn

from .config import get_settings
from .logger import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    uvicorn.run(
        "html2pdf_service.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
