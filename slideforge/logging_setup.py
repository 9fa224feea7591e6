from __future__ import annotations

import logging

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "google_genai", "urllib3")


def configure_logging(level: str | int = "INFO") -> None:
    """Configure the root handler once and quiet chatty client libraries."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    root.setLevel(level)
    logging.getLogger("slideforge").setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
