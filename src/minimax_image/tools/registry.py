"""
Registry of MCP tools.

Maps tool names (and short aliases) to an input contract and a handler. Each
call validates arguments, runs the job adapter, saves images where the
operation produced them, and returns the formatter's ToolResult. Nothing
raised inside a handler escapes call(); failures come back as flagged
error results so the server keeps serving later calls.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from minimax_image.core.base import JobAdapter
from minimax_image.core.config import Config
from minimax_image.core.downloader import AssetDownloader
from minimax_image.core.formatter import (
    ToolResult,
    format_error,
    format_generation,
    format_job_cancelled,
    format_job_created,
    format_job_status,
)
from minimax_image.core.models import (
    AsyncGenerationRequest,
    GenerationRequest,
    JobRequest,
    JobStatus,
    validate_input,
)
from minimax_image.core.replicate import ReplicateJobAdapter
from minimax_image.logging_config import get_logger
from minimax_image.tools.catalog import get_tool_description
from minimax_image.tools.names import (
    TOOL_ALIASES,
    TOOL_CANCEL_PREDICTION,
    TOOL_GENERATE,
    TOOL_GENERATE_ASYNC,
    TOOL_GET_PREDICTION,
)
from minimax_image.utils.exceptions import (
    ErrorInfo,
    MinimaxImageError,
    ValidationError,
)

logger = get_logger(__name__)

# Used to name downloaded files when the job's input echo has no prompt
FALLBACK_PROMPT = "prediction"


@dataclass(frozen=True)
class ToolSpec:
    """A callable tool: name, description, input contract and handler."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[Any], ToolResult]
    failure_action: str

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the tool's arguments."""
        return self.input_model.model_json_schema()


class ToolRegistry:
    """Registry mapping tool names to ToolSpec and dispatching calls."""

    def __init__(
        self,
        config: Config,
        adapter: JobAdapter | None = None,
        downloader: AssetDownloader | None = None,
    ) -> None:
        self.config = config
        self.adapter: JobAdapter = adapter if adapter is not None else ReplicateJobAdapter(config)
        self.downloader = downloader if downloader is not None else AssetDownloader(config)
        self._tools: dict[str, ToolSpec] = {}
        self._register_builtins()

    def _register_builtins(self) -> None:
        self.register(
            ToolSpec(
                TOOL_GENERATE,
                get_tool_description(TOOL_GENERATE),
                GenerationRequest,
                self._generate,
                "generate images",
            )
        )
        self.register(
            ToolSpec(
                TOOL_GENERATE_ASYNC,
                get_tool_description(TOOL_GENERATE_ASYNC),
                AsyncGenerationRequest,
                self._generate_async,
                "create prediction",
            )
        )
        self.register(
            ToolSpec(
                TOOL_GET_PREDICTION,
                get_tool_description(TOOL_GET_PREDICTION),
                JobRequest,
                self._get_prediction,
                "get prediction status",
            )
        )
        self.register(
            ToolSpec(
                TOOL_CANCEL_PREDICTION,
                get_tool_description(TOOL_CANCEL_PREDICTION),
                JobRequest,
                self._cancel_prediction,
                "cancel prediction",
            )
        )

    def register(self, spec: ToolSpec) -> None:
        """Register a tool. Idempotent for the same name."""
        self._tools[spec.name] = spec

    def get(self, name: str) -> ToolSpec | None:
        """Return the tool for a name or alias, or None if unknown."""
        return self._tools.get(TOOL_ALIASES.get(name, name))

    def tools(self) -> list[ToolSpec]:
        """Return registered tools in registration order."""
        return list(self._tools.values())

    def call(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """Validate arguments and run a tool. Never raises."""
        spec = self.get(name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", name)
            return format_error(
                "call tool", ErrorInfo("validation", f"Unknown tool: {name}", field="name")
            )
        try:
            params = validate_input(spec.input_model, arguments)
            return spec.handler(params)
        except ValidationError as e:
            logger.warning("Rejected %s input: %s", spec.name, e)
            return format_error(spec.failure_action, ErrorInfo.from_exception(e))
        except MinimaxImageError as e:
            logger.error("Failed to %s: %s", spec.failure_action, e)
            return format_error(spec.failure_action, ErrorInfo.from_exception(e))
        except Exception as e:  # last-resort boundary for the transport layer
            logger.exception("Unexpected error in %s", spec.name)
            return format_error(spec.failure_action, ErrorInfo.from_exception(e))

    def _output_dir_label(self) -> str:
        return str(self.downloader.output_dir)

    def _generate(self, request: GenerationRequest) -> ToolResult:
        logger.info("Generating %d image(s)", request.number_of_images)
        result = self.adapter.generate_sync(request)
        assets = self.downloader.materialize_all(result.images, request.prompt)
        return format_generation(result, assets, self._output_dir_label())

    def _generate_async(self, request: AsyncGenerationRequest) -> ToolResult:
        job = self.adapter.generate_async(request)
        return format_job_created(job, request)

    def _get_prediction(self, request: JobRequest) -> ToolResult:
        job = self.adapter.get_job(request.prediction_id)
        assets = []
        if job.status is JobStatus.SUCCEEDED and job.output:
            assets = self.downloader.materialize_all(job.output, job.prompt or FALLBACK_PROMPT)
        return format_job_status(job, assets, self._output_dir_label())

    def _cancel_prediction(self, request: JobRequest) -> ToolResult:
        job = self.adapter.cancel_job(request.prediction_id)
        return format_job_cancelled(job)


__all__ = ["FALLBACK_PROMPT", "ToolRegistry", "ToolSpec"]
