"""
Render adapter results as tool responses.

Every function returns a ToolResult: human-readable text plus a data dict with
the machine-relevant fields (job id, status, assets, error). Source references
are always listed, even when the local save failed.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from minimax_image.core.models import (
    DownloadedAsset,
    GenerationRequest,
    GenerationResult,
    Job,
    JobStatus,
)
from minimax_image.tools.names import TOOL_GET_PREDICTION
from minimax_image.utils.exceptions import ErrorInfo


@dataclass(frozen=True)
class ToolResult:
    """Response envelope handed back to the transport layer."""

    text: str
    data: dict[str, Any] = field(default_factory=dict)
    is_error: bool = False


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parameter_lines(params: Mapping[str, Any]) -> list[str]:
    """Echo generation parameters in a fixed order; absent values are skipped."""
    lines = []
    if params.get("prompt") is not None:
        lines.append(f'Prompt: "{params["prompt"]}"')
    if params.get("aspect_ratio"):
        lines.append(f"Aspect Ratio: {params['aspect_ratio']}")
    if params.get("number_of_images") is not None:
        lines.append(f"Number of Images: {params['number_of_images']}")
    if params.get("prompt_optimizer") is not None:
        lines.append(f"Prompt Optimizer: {_render_value(params['prompt_optimizer'])}")
    if params.get("subject_reference"):
        lines.append(f"Subject Reference: {params['subject_reference']}")
    return lines


def _asset_block(asset: DownloadedAsset) -> str:
    lines = [f"Image {asset.index}:"]
    if asset.local_path is not None:
        lines.append(f"  Local Path: {asset.local_path}")
    label = "Original URL" if asset.source.startswith(("http://", "https://")) else "Source"
    lines.append(f"  {label}: {asset.source}")
    lines.append(f"  Filename: {asset.filename}")
    if asset.error is not None:
        lines.append(f"  Local Save Failed: {asset.error.message}")
    return "\n".join(lines)


def save_note(assets: Sequence[DownloadedAsset], output_dir: str = "images") -> str:
    """Say whether every image was saved locally or the save was degraded."""
    saved = sum(1 for asset in assets if asset.saved)
    if saved == len(assets):
        return f"All images have been saved to the local '{output_dir}' directory in JPEG format."
    if saved == 0:
        return (
            "Note: Local save failed, but the remote generation succeeded. "
            "The original URLs above are still usable."
        )
    return (
        f"Note: Local save degraded: {len(assets) - saved} of {len(assets)} image(s) could not "
        "be saved locally, but the remote generation succeeded. "
        "The original URLs above are still usable."
    )


def _save_status(assets: Sequence[DownloadedAsset]) -> str:
    saved = sum(1 for asset in assets if asset.saved)
    if saved == len(assets):
        return "complete"
    return "failed" if saved == 0 else "degraded"


def _timestamp_lines(job: Job) -> list[str]:
    lines = []
    if job.created_at:
        lines.append(f"Created: {job.created_at}")
    if job.started_at:
        lines.append(f"Started: {job.started_at}")
    if job.completed_at:
        lines.append(f"Completed: {job.completed_at}")
    return lines


def _job_data(job: Job) -> dict[str, Any]:
    return {
        "job_id": job.id,
        "status": job.status.value,
        "model": job.model,
        "created_at": job.created_at,
        "started_at": job.started_at,
        "completed_at": job.completed_at,
    }


def format_generation(
    result: GenerationResult,
    assets: Sequence[DownloadedAsset],
    output_dir: str = "images",
) -> ToolResult:
    """Report a finished synchronous generation and its saved images."""
    blocks = "\n\n".join(_asset_block(asset) for asset in assets)
    lines = [
        f"Successfully generated {len(assets)} image(s) using {result.model}:",
        "",
        *_parameter_lines(result.request.to_remote_input()),
    ]
    if result.job_id:
        lines.append(f"Prediction ID: {result.job_id}")
    lines += ["", "Generated Images:", blocks, "", save_note(assets, output_dir)]
    return ToolResult(
        text="\n".join(lines),
        data={
            "job_id": result.job_id,
            "status": JobStatus.SUCCEEDED.value,
            "model": result.model,
            "input": result.request.to_remote_input(),
            "images": [asset.as_dict() for asset in assets],
            "local_save": _save_status(assets),
        },
    )


def format_job_created(job: Job, request: GenerationRequest) -> ToolResult:
    """Report a newly submitted prediction."""
    params = request.to_remote_input()
    webhook = getattr(request, "webhook", None)
    lines = [
        "Async prediction created successfully:",
        "",
        f"Prediction ID: {job.id}",
        f"Status: {job.status.value}",
        f"Model: {job.model}",
        *_parameter_lines(params),
        f"Webhook: {webhook}" if webhook else "No webhook configured",
        "",
        f"Use '{TOOL_GET_PREDICTION}' with the prediction ID to check status and retrieve results.",
    ]
    data = {**_job_data(job), "input": params}
    if webhook:
        data["webhook"] = webhook
    return ToolResult(text="\n".join(lines), data=data)


def format_job_status(
    job: Job,
    assets: Sequence[DownloadedAsset] = (),
    output_dir: str = "images",
) -> ToolResult:
    """Report a prediction's state, including saved images when it succeeded."""
    lines = [
        f"Prediction Status for {job.id}:",
        "",
        f"Status: {job.status.value}",
        f"Model: {job.model}",
        *_timestamp_lines(job),
    ]
    if job.input:
        lines += ["", "Input Parameters:", *_parameter_lines(job.input)]
    if job.error:
        lines += ["", f"Error: {job.error}"]
    if job.logs:
        lines += ["", "Logs:", job.logs.rstrip("\n")]
    if assets:
        lines += [
            "",
            "Generated Images:",
            "\n\n".join(_asset_block(asset) for asset in assets),
            "",
            save_note(assets, output_dir),
        ]
    elif not job.status.is_terminal:
        lines += ["", f"The prediction is still {job.status.value}; check again later."]

    data = {**_job_data(job), "input": dict(job.input), "error": job.error, "logs": job.logs}
    data["images"] = [asset.as_dict() for asset in assets]
    if assets:
        data["local_save"] = _save_status(assets)
    return ToolResult(text="\n".join(lines), data=data)


def format_job_cancelled(job: Job) -> ToolResult:
    """Report the snapshot returned by a cancel request, whatever its status."""
    if job.status is JobStatus.CANCELLED:
        headline = f"Prediction {job.id} has been cancelled."
        footer = "The prediction has been stopped and will not consume additional resources."
    elif job.status.is_terminal:
        headline = f"Prediction {job.id} had already finished; nothing was cancelled."
        footer = f"The prediction ended with status {job.status.value}."
    else:
        headline = f"Cancellation requested for prediction {job.id}."
        footer = f"Cancellation is in progress; check it with '{TOOL_GET_PREDICTION}'."
    lines = [
        headline,
        "",
        f"Status: {job.status.value}",
        f"Model: {job.model}",
        *_timestamp_lines(job),
        "",
        footer,
    ]
    return ToolResult(text="\n".join(lines), data=_job_data(job))


def format_error(action: str, error: ErrorInfo) -> ToolResult:
    """Flagged error response, e.g. format_error("generate images", info)."""
    text = f"Failed to {action}: {error.message}"
    if error.field:
        text += f" (field: {error.field})"
    return ToolResult(text=text, data={"error": error.as_dict()}, is_error=True)


__all__ = [
    "ToolResult",
    "format_error",
    "format_generation",
    "format_job_cancelled",
    "format_job_created",
    "format_job_status",
    "save_note",
]
