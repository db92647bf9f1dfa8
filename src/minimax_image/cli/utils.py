"""CLI exit codes."""

EXIT_SUCCESS = 0
# Replicate or transport failure, failed/cancelled prediction, timeout
EXIT_REMOTE_OR_NETWORK = 1
# Rejected before any remote call
EXIT_VALIDATION_OR_CONFIG = 2
# Ctrl-C (128 + SIGINT)
EXIT_INTERRUPTED = 130

__all__ = [
    "EXIT_INTERRUPTED",
    "EXIT_REMOTE_OR_NETWORK",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_OR_CONFIG",
]
