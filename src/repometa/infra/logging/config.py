from __future__ import annotations

"""
Logging Configuration Models.

Settings consumed by the logging bootstrap, plus the mapping from
textual severity names (as found in config.json or on the CLI) to the
native logging constants.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem initialization.

    Attributes:
        level: Minimum severity level to capture.
        console: Emit records on stderr.
        log_file: Optional path of a rotating diagnostic log.
        max_bytes: Size threshold that triggers a rollover.
        backup_count: Number of rolled-over segments to keep.
        console_fmt: Format for terminal output.
        file_fmt: Format for file entries.
        datefmt: Timestamp format used in file entries.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(name)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @staticmethod
    def parse_level(level: Optional[str]) -> int:
        """Convert a textual level to its numeric constant, defaulting to INFO."""
        if not level:
            return logging.INFO
        return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)
