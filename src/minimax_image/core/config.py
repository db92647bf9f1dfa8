"""
Configuration management for minimax_image.

This module handles the Replicate API token, model selection, output
directory and timeouts. A Config is built once (usually via from_env) and
passed explicitly to the job adapter, downloader and tool registry; it is
read-only after construction.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from minimax_image.logging_config import get_logger
from minimax_image.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_REPLICATE_BASE_URL = "https://api.replicate.com/v1"
DEFAULT_MODEL = "minimax/image-01"
DEFAULT_OUTPUT_DIR_NAME = "images"
DEFAULT_REQUEST_TIMEOUT = 60
DEFAULT_GENERATION_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_DOWNLOAD_WORKERS = 1

_MODEL_ID_RE = re.compile(r"^[A-Za-z0-9][\w.-]*/[A-Za-z0-9][\w.-]*$")


def _default_output_dir() -> Path:
    return Path.cwd() / DEFAULT_OUTPUT_DIR_NAME


@dataclass(frozen=True)
class Config:
    """Configuration for the Replicate minimax/image-01 adapter."""

    # API Configuration (api_token excluded from repr to avoid leaking secrets)
    api_token: str = field(default="", repr=False)
    base_url: str = DEFAULT_REPLICATE_BASE_URL
    model: str = DEFAULT_MODEL

    # Local storage for downloaded images (created on demand)
    output_dir: Path = field(default_factory=_default_output_dir)

    # Timeout Configuration (seconds)
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT  # per HTTP call
    generation_timeout: int = DEFAULT_GENERATION_TIMEOUT  # overall wait in sync mode
    poll_interval: float = DEFAULT_POLL_INTERVAL

    # Parallel downloads per response; 1 downloads in index order
    download_workers: int = DEFAULT_DOWNLOAD_WORKERS

    # Debug: log request payloads and response bodies
    debug_api: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            REPLICATE_API_TOKEN: Required for every remote call
            REPLICATE_BASE_URL: Optional API base URL
            MINIMAX_IMAGE_MODEL: Optional model id (owner/name)
            MINIMAX_IMAGE_OUTPUT_DIR: Optional directory for downloaded images
            MINIMAX_IMAGE_REQUEST_TIMEOUT: Optional per-request timeout in seconds
            MINIMAX_IMAGE_GENERATION_TIMEOUT: Optional overall sync generation timeout
            MINIMAX_IMAGE_POLL_INTERVAL: Optional seconds between status polls
            MINIMAX_IMAGE_DOWNLOAD_WORKERS: Optional parallel downloads per response
            MINIMAX_IMAGE_DEBUG_API: Optional "1"/"true" to log payloads

        Returns:
            Config instance populated from environment

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """

        def _int_env(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None or val.strip() == "":
                return default
            try:
                return int(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be an integer, got {val!r}.") from e

        def _float_env(name: str, default: float) -> float:
            val = os.getenv(name)
            if val is None or val.strip() == "":
                return default
            try:
                return float(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be a number, got {val!r}.") from e

        output_dir_raw = os.getenv("MINIMAX_IMAGE_OUTPUT_DIR", "").strip()
        output_dir = (
            Path(output_dir_raw).expanduser().resolve() if output_dir_raw else _default_output_dir()
        )
        debug_api = os.getenv("MINIMAX_IMAGE_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            api_token=os.getenv("REPLICATE_API_TOKEN", "").strip(),
            base_url=os.getenv("REPLICATE_BASE_URL", "").strip().rstrip("/")
            or DEFAULT_REPLICATE_BASE_URL,
            model=os.getenv("MINIMAX_IMAGE_MODEL", "").strip() or DEFAULT_MODEL,
            output_dir=output_dir,
            request_timeout=_int_env("MINIMAX_IMAGE_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            generation_timeout=_int_env(
                "MINIMAX_IMAGE_GENERATION_TIMEOUT", DEFAULT_GENERATION_TIMEOUT
            ),
            poll_interval=_float_env("MINIMAX_IMAGE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            download_workers=_int_env("MINIMAX_IMAGE_DOWNLOAD_WORKERS", DEFAULT_DOWNLOAD_WORKERS),
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if not self.api_token:
            raise ConfigurationError(
                "REPLICATE_API_TOKEN environment variable is required. "
                "Set your Replicate API token: export REPLICATE_API_TOKEN=r8_your_token_here"
            )
        if not _MODEL_ID_RE.match(self.model):
            raise ConfigurationError(
                f"Model id must look like 'owner/name', got {self.model!r}."
            )
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"base_url must be an http(s) URL, got {self.base_url!r}.")
        for name in ("request_timeout", "generation_timeout", "poll_interval", "download_workers"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}.")

    @property
    def model_owner(self) -> str:
        return self.model.split("/", 1)[0]

    @property
    def model_name(self) -> str:
        return self.model.split("/", 1)[1]
