from __future__ import annotations

"""
Logging Core Orchestrator.

Configures the root logger once per process. Records are pushed through a
QueueHandler and fanned out by a QueueListener, so file writes never block
the snapshot walk.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from treesync.infra.logging.config import _LEVEL_MAP, LoggingConfig
from treesync.infra.logging.handlers import (
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_treesync_configured"
_QUEUE_LISTENER_ATTR: str = "_treesync_queue_listener"

UNIX_APP_DIR_NAME = ".treesync"

# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = "treesync.log") -> str:
    """
    Resolve the default log location under the user's home directory.

    Args:
        file_name: Target log filename.

    Returns:
        str: Absolute path to the log file (not created here).
    """
    base_dir = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)
    return os.path.join(os.path.abspath(base_dir), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger idempotently.

    Args:
        cfg: Logging settings.
        force: If True, tear down and rebuild handlers even if already configured.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    _remove_our_handlers(root)
    _stop_existing_listener(root)

    handlers_list: List[logging.Handler] = []

    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level_int)
        sh.setFormatter(logging.Formatter(cfg.fmt, datefmt=cfg.datefmt))
        _tag_handler(sh)
        handlers_list.append(sh)

    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    root.addHandler(queue_handler)
    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    # Flush pending records on shutdown; one hook per process
    atexit.unregister(_stop_active_listener)
    atexit.register(_stop_active_listener)

    return root


def get_logger(name: str) -> logging.Logger:
    """Acquire a named logger (usually __name__)."""
    return logging.getLogger(name)

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a textual logging level to its numeric constant."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    """Detach and close every treesync-managed handler on the root."""
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Stop the current QueueListener, if any."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _stop_active_listener() -> None:
    """Stop whichever listener is currently attached to the root logger."""
    _stop_existing_listener(logging.getLogger())


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a QueueListener and close the handlers it owns."""
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
    for handler in listener.handlers:
        handler.close()
