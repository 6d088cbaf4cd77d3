# src/recipe_auth/observability.py

import logging
import os
import typing


def setup_logging(level: typing.Optional[str] = None) -> None:
    """
    Configure process-wide logging. Call once at startup.
    The level comes from the argument, else LOG_LEVEL, else INFO.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Request lines from httpx would otherwise include callback codes at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
