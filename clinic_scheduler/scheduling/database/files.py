"""Backing file access for the data store."""

import logging
import os
from pathlib import Path

from .errors import RecordParseError, StorageError

logger = logging.getLogger(__name__)


def init_data_dir(data_dir: Path) -> Path:
    """Create the data directory if it does not exist yet."""
    if not data_dir.exists():
        data_dir.mkdir(parents=True)
        logger.info("Created data directory %s", data_dir)
    return data_dir


def read_lines(path: Path) -> list[tuple[int, str]]:
    """Return (line number, line) pairs for every non-blank line of a file.

    A missing file reads as empty. Bytes that are not UTF-8 raise
    RecordParseError naming the file and line.
    """
    if not path.exists():
        return []
    lines = []
    for line_no, raw in enumerate(path.read_bytes().splitlines(), start=1):
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RecordParseError(f"Invalid UTF-8: {e.reason}", source=path.name, line_no=line_no) from e
        if line.strip():
            lines.append((line_no, line))
    return lines


def write_lines(path: Path, lines: list[str]) -> None:
    """Replace the whole file with the given lines.

    The content goes to a sibling temp file first and is moved over the
    target, so a failed write leaves the previous file intact.
    """
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line + "\n")
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        tmp_path.unlink(missing_ok=True)
        raise StorageError(path, e) from e
