"""
Logging configuration for minimax_image.

Nothing is configured at import time: library users who never call
set_verbosity or configure_logging see no output unless they configure logging
themselves. The single handler writes to stderr, because under `serve` stdout
carries the MCP stdio stream and any stray byte there corrupts the protocol.

Verbosity levels:
- 0 (default): INFO. Predictions created, images saved, failures.
- 1: INFO plus prompt text.
- 2: DEBUG plus prompt text. Request URLs, status codes, timings.

MINIMAX_IMAGE_VERBOSITY (0/1/2) is read by the CLI; -v flags override it.
"""

import logging
import os
import sys

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
# MCP clients usually append server stderr to a log file; timestamps help there
SERVER_LOG_FORMAT = "%(asctime)s " + LOG_FORMAT
ROOT_LOGGER_NAME = "minimax_image"
VERBOSITY_ENV = "MINIMAX_IMAGE_VERBOSITY"
MAX_VERBOSITY = 2

# verbosity -> (logger level, log prompt text)
_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts: bool = False
_handler: logging.Handler | None = None


def _root() -> logging.Logger:
    return logging.getLogger(ROOT_LOGGER_NAME)


def _ensure_handler(fmt: str = LOG_FORMAT) -> logging.Handler:
    """Attach one stderr handler to the minimax_image logger; later calls only swap its format."""
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _root().addHandler(_handler)
    _handler.setFormatter(logging.Formatter(fmt))
    return _handler


def set_verbosity(level: int) -> None:
    """Set verbosity 0, 1 or 2; out-of-range values are clamped."""
    global _log_prompts
    if _handler is None:
        _ensure_handler()
    logger_level, _log_prompts = _LEVELS[max(0, min(level, MAX_VERBOSITY))]
    _root().setLevel(logger_level)


def log_prompts() -> bool:
    """True when prompt text may be logged (verbosity 1 or 2)."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False, timestamps: bool = False) -> None:
    """
    Configure logging for the CLI or the MCP server.

    Args:
        verbose_level: 0, 1 or 2 (see module docstring)
        quiet: Only warnings and errors; prompts are never logged
        timestamps: Prefix records with the time (used by `serve`)
    """
    global _log_prompts
    _ensure_handler(SERVER_LOG_FORMAT if timestamps else LOG_FORMAT)
    if quiet:
        _root().setLevel(logging.WARNING)
        _log_prompts = False
        return
    set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """Read MINIMAX_IMAGE_VERBOSITY; missing or non-numeric values mean 0."""
    raw = os.environ.get(VERBOSITY_ENV, "").strip()
    try:
        return max(0, min(int(raw), MAX_VERBOSITY))
    except ValueError:
        return 0


def get_logger(name: str) -> logging.Logger:
    """Return a logger under minimax_image (e.g. minimax_image.core.replicate)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompts",
    "set_verbosity",
]
