"""
Configuration management for trivault.

Loads storage and seal settings from environment variables.
TRIVAULT_DB_PATH is read by the storage layer when a store is opened.
"""

import logging
import os
from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

STORAGE_PREFIX = os.getenv("TRIVAULT_STORAGE_PREFIX", "trivault_")
TOTAL_SEALS_RAW = os.getenv("TRIVAULT_TOTAL_SEALS", "3")
LOG_LEVEL = os.getenv("TRIVAULT_LOG_LEVEL", "WARNING")


def _parse_total_seals(raw: str) -> int | None:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


TOTAL_SEALS = _parse_total_seals(TOTAL_SEALS_RAW) or 3


def validate_config():
    """Validate that configuration values are usable."""
    invalid = []

    if _parse_total_seals(TOTAL_SEALS_RAW) is None:
        invalid.append("TRIVAULT_TOTAL_SEALS")

    if not STORAGE_PREFIX:
        invalid.append("TRIVAULT_STORAGE_PREFIX")

    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        invalid.append("TRIVAULT_LOG_LEVEL")

    if invalid:
        raise ValueError(
            f"Invalid configuration: {', '.join(invalid)}\n"
            "TRIVAULT_TOTAL_SEALS must be a positive integer, "
            "TRIVAULT_STORAGE_PREFIX must be non-empty and "
            "TRIVAULT_LOG_LEVEL must be a logging level name."
        )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for command-line use."""
    level_name = (level or LOG_LEVEL).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
