"""
Shared pytest setup.

- `slow` tests are skipped unless --run-slow is given.
- `integration` tests also need MINIMAX_IMAGE_RUN_INTEGRATION_TESTS=1 (they bill
  a real Replicate account).
- Each test starts without the minimax_image stderr handler, and the logger
  level is restored afterwards, since CLI and logging tests reconfigure it.
"""

import logging
import os

import pytest

import minimax_image.logging_config as logging_config

INTEGRATION_ENV = "MINIMAX_IMAGE_RUN_INTEGRATION_TESTS"


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Replicate API). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_slow = config.getoption("--run-slow", False)
    run_integration = os.getenv(INTEGRATION_ENV, "").strip() == "1"
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    skip_integration = pytest.mark.skip(reason=f"Live API test; set {INTEGRATION_ENV}=1 to run")
    for item in items:
        if "slow" in item.keywords and not run_slow:
            item.add_marker(skip_slow)
        elif "integration" in item.keywords and not run_integration:
            item.add_marker(skip_integration)


def _drop_handler(root: logging.Logger) -> None:
    # the handler binds sys.stderr when created; pytest swaps sys.stderr per test
    if logging_config._handler is not None:
        root.removeHandler(logging_config._handler)
        logging_config._handler = None


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger(logging_config.ROOT_LOGGER_NAME)
    level = root.level
    prompts = logging_config._log_prompts
    _drop_handler(root)
    yield
    _drop_handler(root)
    root.setLevel(level)
    logging_config._log_prompts = prompts
