"""Logging for the mcp-forge pipeline.

Library modules log through ``logging.getLogger(__name__)`` and stay
silent unless a handler is installed; the CLI calls ``setup_logging``.
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager

_logger = logging.getLogger("mcp_forge")


class _StageFormatter(logging.Formatter):
    """Prefix records with a timestamp and the pipeline stage, if any."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = time.strftime("%H:%M:%S", time.localtime(record.created))
        stage = getattr(record, "stage", None)
        stage_tag = f" [{stage}]" if stage else ""
        return f"{timestamp}{stage_tag} {record.levelname.lower()}: {record.getMessage()}"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure and return the package logger."""
    _logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Rebind to the current stderr on every call.
    for old in list(_logger.handlers):
        _logger.removeHandler(old)
    handler = logging.StreamHandler()
    handler.setFormatter(_StageFormatter())
    _logger.addHandler(handler)

    _logger.propagate = False
    return _logger


@contextmanager
def log_stage(stage_name: str) -> Generator[logging.Logger, None, None]:
    """Log entry and exit of a pipeline stage with its duration."""
    start = time.perf_counter()
    extra = {"stage": stage_name}
    _logger.debug("%s ...", stage_name, extra=extra)
    try:
        yield _logger
    except Exception:
        _logger.error("%s failed (%.2fs)", stage_name, time.perf_counter() - start, extra=extra)
        raise
    else:
        _logger.debug("%s done (%.2fs)", stage_name, time.perf_counter() - start, extra=extra)
