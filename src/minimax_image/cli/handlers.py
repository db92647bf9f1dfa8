"""
Error handling for the CLI.

Commands put their work in a closure and hand it to run_with_error_handling,
which turns library exceptions into a message on stderr and an exit code.
"""

import sys
from collections.abc import Callable

import click

from minimax_image.cli import progress
from minimax_image.cli.utils import (
    EXIT_INTERRUPTED,
    EXIT_REMOTE_OR_NETWORK,
    EXIT_VALIDATION_OR_CONFIG,
)
from minimax_image.utils.exceptions import (
    ConfigurationError,
    MinimaxImageError,
    RequestTimeoutError,
    ValidationError,
)

INTERRUPTED_MESSAGE = (
    "Interrupted. A prediction that was already submitted keeps running (and billing) "
    "on Replicate; use 'minimax-image cancel <id>' to stop it."
)


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map an exception to (exit_code, user_message)."""
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, ValidationError):
        if exc.field:
            message = f"{message} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, message)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, message)
    if isinstance(exc, RequestTimeoutError) and exc.job_id:
        # the prediction may still finish; give the user its id
        return (EXIT_REMOTE_OR_NETWORK, f"{message} (prediction: {exc.job_id})")
    # RemoteError, NotFoundError, EmptyOutputError and anything unexpected
    return (EXIT_REMOTE_OR_NETWORK, message)


def _report(message: str, quiet: bool) -> None:
    if quiet:
        click.echo(message, err=True)
    else:
        progress.print_error(message)


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Run fn(); on failure print a message and sys.exit with the mapped code.

    With debug=True unexpected (non-library) exceptions propagate with their
    traceback instead.
    """
    try:
        fn()
    except KeyboardInterrupt:
        _report(INTERRUPTED_MESSAGE, quiet)
        sys.exit(EXIT_INTERRUPTED)
    except MinimaxImageError as e:
        code, msg = map_exception_to_exit(e)
        _report(msg, quiet)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        code, msg = map_exception_to_exit(e)
        _report(msg, quiet)
        sys.exit(code)


__all__ = ["INTERRUPTED_MESSAGE", "map_exception_to_exit", "run_with_error_handling"]
