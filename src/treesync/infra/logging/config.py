from __future__ import annotations

"""
Logging Configuration Models.

Settings for the optional logging setup an application embedding treesync
can install. The library itself only emits records through module loggers.
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
    Immutable logging settings.

    Attributes:
        level: Minimum severity; per-node snapshot records are DEBUG.
        console: Write records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Rotation threshold of the log file.
        backup_count: Rotated files to keep.
        fmt: Record format shared by every handler.
        datefmt: Timestamp format.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 512 * 1024
    backup_count: int = 1

    fmt: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    datefmt: str = "%H:%M:%S"
