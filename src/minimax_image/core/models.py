"""
Data model for minimax/image-01 generation.

Input contracts are pydantic models so the same definitions validate tool
arguments and publish JSON schemas. Remote state (Job, image references,
downloaded assets) is plain frozen dataclasses: it is only ever read and
never mutated locally.
"""

import base64
import binascii
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, TypeVar
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from minimax_image.utils.exceptions import ErrorInfo, RemoteError, ValidationError

MIN_IMAGES = 1
MAX_IMAGES = 9


class AspectRatio(str, Enum):
    """The fixed set of aspect ratios minimax/image-01 accepts."""

    SQUARE = "1:1"
    WIDESCREEN = "16:9"
    STANDARD = "4:3"
    PHOTO = "3:2"
    PHOTO_PORTRAIT = "2:3"
    STANDARD_PORTRAIT = "3:4"
    VERTICAL = "9:16"
    ULTRAWIDE = "21:9"


class WebhookEvent(str, Enum):
    START = "start"
    OUTPUT = "output"
    LOGS = "logs"
    COMPLETED = "completed"


def _check_uri(value: str, field_name: str, schemes: tuple[str, ...]) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in schemes:
        raise ValueError(f"{field_name} must be a URI with scheme {' or '.join(schemes)}")
    if parsed.scheme in ("http", "https") and not parsed.netloc:
        raise ValueError(f"{field_name} must include a host")
    return value


class GenerationRequest(BaseModel):
    """Arguments for one minimax/image-01 generation."""

    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=False)

    prompt: str = Field(..., description="Text prompt for generation")
    aspect_ratio: AspectRatio = Field(default=AspectRatio.SQUARE, description="Image aspect ratio")
    number_of_images: int = Field(
        default=1,
        ge=MIN_IMAGES,
        le=MAX_IMAGES,
        strict=True,
        description="Number of images to generate",
    )
    prompt_optimizer: bool = Field(default=True, strict=True, description="Use prompt optimizer")
    subject_reference: str | None = Field(
        default=None,
        json_schema_extra={"format": "uri"},
        description=(
            "An optional character reference image (human face) to use as the subject "
            "in the generated image(s)"
        ),
    )

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt cannot be empty")
        return value

    @field_validator("subject_reference")
    @classmethod
    def _subject_reference_is_uri(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_uri(value, "subject_reference", ("http", "https", "data"))

    def to_remote_input(self) -> dict[str, Any]:
        """Build the model input payload; subject_reference is sent only when set."""
        payload: dict[str, Any] = {
            "prompt": self.prompt,
            "aspect_ratio": self.aspect_ratio.value,
            "number_of_images": self.number_of_images,
            "prompt_optimizer": self.prompt_optimizer,
        }
        if self.subject_reference:
            payload["subject_reference"] = self.subject_reference
        return payload


class AsyncGenerationRequest(GenerationRequest):
    """GenerationRequest plus optional webhook delivery settings."""

    webhook: str | None = Field(
        default=None,
        description="Webhook URL to receive updates when the prediction completes",
    )
    webhook_events_filter: list[WebhookEvent] = Field(
        default_factory=lambda: [WebhookEvent.COMPLETED],
        min_length=1,
        description="Events to send to the webhook",
    )

    @field_validator("webhook")
    @classmethod
    def _webhook_is_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_uri(value, "webhook", ("http", "https"))

    @field_validator("webhook_events_filter")
    @classmethod
    def _dedupe_events(cls, value: list[WebhookEvent]) -> list[WebhookEvent]:
        return list(dict.fromkeys(value))

    def to_webhook_options(self) -> dict[str, Any]:
        """Webhook fields for the create call; empty when no webhook is configured."""
        if not self.webhook:
            return {}
        return {
            "webhook": self.webhook,
            "webhook_events_filter": [event.value for event in self.webhook_events_filter],
        }


class JobRequest(BaseModel):
    """Arguments that address an existing job."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    prediction_id: str = Field(
        ...,
        min_length=1,
        pattern=r"^[A-Za-z0-9_-]+$",
        validation_alias=AliasChoices("prediction_id", "job_id"),
        description="The prediction ID returned from minimax_image_01_generate_async",
    )


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_input(model_cls: type[ModelT], arguments: dict[str, Any] | None) -> ModelT:
    """Validate raw tool arguments against a contract.

    Raises:
        ValidationError: naming the first offending field; lists every problem.
    """
    try:
        return model_cls.model_validate(arguments or {})
    except PydanticValidationError as e:
        errors = e.errors()
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in errors
        )
        first_field = ".".join(str(p) for p in errors[0]["loc"]) if errors else ""
        raise ValidationError(f"Invalid input: {problems}", field=first_field) from e


class JobStatus(str, Enum):
    """Lifecycle of a remote job. Terminal states: succeeded, failed, cancelled."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)

    @classmethod
    def from_remote(cls, raw: Any) -> "JobStatus":
        """Map a Replicate prediction status onto the job lifecycle."""
        status = _REMOTE_STATUS.get(str(raw).strip().lower()) if raw is not None else None
        if status is None:
            raise RemoteError(f"Unexpected job status from remote API: {raw!r}")
        return status


_REMOTE_STATUS = {
    "starting": JobStatus.QUEUED,
    "queued": JobStatus.QUEUED,
    "processing": JobStatus.RUNNING,
    "running": JobStatus.RUNNING,
    "succeeded": JobStatus.SUCCEEDED,
    "failed": JobStatus.FAILED,
    "canceled": JobStatus.CANCELLED,
    "cancelled": JobStatus.CANCELLED,
    "aborted": JobStatus.CANCELLED,
}


@dataclass(frozen=True)
class URLReference:
    """Generated image served at a URL."""

    kind: ClassVar[str] = "url"

    url: str

    @property
    def source(self) -> str:
        return self.url


@dataclass(frozen=True)
class StreamReference:
    """Generated image available as an in-memory byte stream."""

    kind: ClassVar[str] = "stream"

    label: str
    opener: Callable[[], Iterable[bytes]] = field(repr=False, compare=False)

    @property
    def source(self) -> str:
        return self.label

    def iter_bytes(self) -> Iterator[bytes]:
        return iter(self.opener())

    @classmethod
    def from_bytes(cls, label: str, data: bytes) -> "StreamReference":
        return cls(label=label, opener=lambda: [data])

    @classmethod
    def from_data_uri(cls, uri: str) -> "StreamReference":
        """Wrap a base64 data URI; the payload is decoded only when read."""
        header, _, payload = uri.partition(",")
        mime = header[len("data:") :].split(";", 1)[0] or "application/octet-stream"

        def _open() -> Iterable[bytes]:
            if ";base64" not in header:
                raise ValueError("Only base64 data URIs are supported")
            try:
                return [base64.b64decode(payload, validate=True)]
            except (binascii.Error, ValueError) as e:
                raise ValueError(f"Invalid base64 image data: {e}") from e

        return cls(label=f"data:{mime};base64 ({len(payload)} chars inline)", opener=_open)


ImageReference = URLReference | StreamReference


def normalize_output(raw: Any) -> tuple[ImageReference, ...]:
    """
    Normalize the remote ``output`` field to an ordered tuple of references.

    Accepted shapes: null (no images), a single string, or a list of strings.
    http(s) strings become URLReference; data: URIs become StreamReference.

    Raises:
        RemoteError: If the output has any other shape.
    """
    if raw is None:
        return ()
    items = [raw] if isinstance(raw, str) else raw
    if not isinstance(items, list):
        raise RemoteError(f"Unexpected output shape from remote API: {type(raw).__name__}")
    refs: list[ImageReference] = []
    for item in items:
        if not isinstance(item, str) or not item:
            raise RemoteError(f"Unexpected output element from remote API: {item!r}")
        if item.startswith("data:"):
            refs.append(StreamReference.from_data_uri(item))
        elif item.startswith(("http://", "https://")):
            refs.append(URLReference(item))
        else:
            raise RemoteError(f"Unsupported image reference from remote API: {item[:80]!r}")
    return tuple(refs)


@dataclass(frozen=True)
class Job:
    """Snapshot of a remote prediction. Never mutated locally."""

    id: str
    status: JobStatus
    model: str = ""
    created_at: str | None = None
    started_at: str | None = None
    completed_at: str | None = None
    input: dict[str, Any] = field(default_factory=dict)
    output: tuple[ImageReference, ...] = ()
    error: str | None = None
    logs: str | None = None

    @classmethod
    def from_remote(cls, payload: Any) -> "Job":
        """Build a Job from a Replicate prediction object.

        Output references are kept only for succeeded jobs.

        Raises:
            RemoteError: If the payload is not a prediction.
        """
        if not isinstance(payload, dict) or not payload.get("id"):
            raise RemoteError("Remote API returned a prediction without an id", response=str(payload))
        status = JobStatus.from_remote(payload.get("status"))
        output = normalize_output(payload.get("output")) if status is JobStatus.SUCCEEDED else ()
        raw_input = payload.get("input")
        error = payload.get("error")
        return cls(
            id=str(payload["id"]),
            status=status,
            model=str(payload.get("model") or ""),
            created_at=payload.get("created_at"),
            started_at=payload.get("started_at"),
            completed_at=payload.get("completed_at"),
            input=dict(raw_input) if isinstance(raw_input, dict) else {},
            output=output,
            error=str(error) if error else None,
            logs=payload.get("logs") or None,
        )

    @property
    def prompt(self) -> str | None:
        prompt = self.input.get("prompt")
        return prompt if isinstance(prompt, str) else None


@dataclass(frozen=True)
class GenerationResult:
    """Final output of a synchronous generation."""

    request: GenerationRequest
    images: tuple[ImageReference, ...]
    job_id: str = ""
    model: str = ""
    generation_time: float = 0.0


@dataclass(frozen=True)
class DownloadedAsset:
    """Outcome of materializing one image reference to local storage."""

    index: int  # 1-based, matches output order
    filename: str
    source: str
    local_path: Path | None = None
    error: ErrorInfo | None = None

    @property
    def saved(self) -> bool:
        return self.local_path is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "filename": self.filename,
            "source": self.source,
            "local_path": str(self.local_path) if self.local_path is not None else None,
            "error": self.error.as_dict() if self.error else None,
        }
