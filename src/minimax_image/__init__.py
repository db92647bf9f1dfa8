"""
minimax_image - Replicate minimax/image-01 tools for MCP clients

Exposes four tools over the Model Context Protocol (generate, generate async,
get prediction, cancel prediction) and saves generated images locally.

Library usage:
- Build a Config (Config.from_env() or explicitly) and pass it to
  ReplicateJobAdapter, AssetDownloader or ToolRegistry; there is no shared config.
- ToolRegistry.call(name, arguments) never raises; failures come back as
  ToolResult(is_error=True).
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  MINIMAX_IMAGE_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("replicate-minimax-image")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from minimax_image.core.config import DEFAULT_MODEL, DEFAULT_REPLICATE_BASE_URL, Config
from minimax_image.core.downloader import AssetDownloader, materialize, materialize_all
from minimax_image.core.formatter import ToolResult
from minimax_image.core.models import (
    AspectRatio,
    AsyncGenerationRequest,
    DownloadedAsset,
    GenerationRequest,
    GenerationResult,
    ImageReference,
    Job,
    JobStatus,
    StreamReference,
    URLReference,
    WebhookEvent,
)
from minimax_image.core.replicate import ReplicateJobAdapter
from minimax_image.logging_config import configure_logging, set_verbosity
from minimax_image.tools.registry import ToolRegistry
from minimax_image.utils.exceptions import (
    ConfigurationError,
    DownloadError,
    EmptyOutputError,
    ErrorInfo,
    MinimaxImageError,
    NetworkError,
    NotFoundError,
    RemoteError,
    RequestTimeoutError,
    ValidationError,
)
from minimax_image.utils.filenames import derive_filename

__all__ = [
    "AspectRatio",
    "AssetDownloader",
    "AsyncGenerationRequest",
    "Config",
    "ConfigurationError",
    "DEFAULT_MODEL",
    "DEFAULT_REPLICATE_BASE_URL",
    "DownloadError",
    "DownloadedAsset",
    "EmptyOutputError",
    "ErrorInfo",
    "GenerationRequest",
    "GenerationResult",
    "ImageReference",
    "Job",
    "JobStatus",
    "MinimaxImageError",
    "NetworkError",
    "NotFoundError",
    "RemoteError",
    "ReplicateJobAdapter",
    "RequestTimeoutError",
    "StreamReference",
    "ToolRegistry",
    "ToolResult",
    "URLReference",
    "ValidationError",
    "WebhookEvent",
    "configure_logging",
    "derive_filename",
    "materialize",
    "materialize_all",
    "set_verbosity",
]
