"""Environment configuration for the clinic scheduler."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATA_DIR = "data"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def get_data_dir() -> Path:
    """Directory holding the backing files (CLINIC_DATA_DIR)."""
    return Path(os.environ.get("CLINIC_DATA_DIR", DEFAULT_DATA_DIR))


def get_log_level() -> int:
    """Logging level from CLINIC_LOG_LEVEL, falling back to WARNING."""
    name = os.environ.get("CLINIC_LOG_LEVEL", DEFAULT_LOG_LEVEL).split("#")[0].strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging() -> None:
    logging.basicConfig(level=get_log_level(), format=LOG_FORMAT)
