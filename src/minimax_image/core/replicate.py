"""
Job adapter for the Replicate predictions API.

Wraps create (blocking and tracked), get and cancel for minimax/image-01
predictions and normalizes remote predictions into Job snapshots. The adapter
holds only its read-only Config; it never touches local storage.

There is no retry or backoff here. A transient failure surfaces as RemoteError
and the caller may invoke the operation again. No idempotency key is sent, so
retrying generate_sync can create a second billable prediction.
"""

import json
import time
from collections.abc import Callable
from typing import Any

import requests

from minimax_image.core.config import Config
from minimax_image.core.models import (
    AsyncGenerationRequest,
    GenerationRequest,
    GenerationResult,
    Job,
    JobRequest,
    JobStatus,
    validate_input,
)
from minimax_image.logging_config import get_logger, log_prompts
from minimax_image.utils.exceptions import (
    EmptyOutputError,
    NetworkError,
    NotFoundError,
    RemoteError,
    RequestTimeoutError,
)

logger = get_logger(__name__)

# Replicate holds a "Prefer: wait" request open for at most 60 seconds
MAX_PREFER_WAIT = 60

_PROMPT_LOG_MAX = 50_000
_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"prompt", "error", "logs", "detail"})


def _truncate_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long strings (data URIs, base64) with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        if obj.startswith("data:"):
            return f"<data URL, {len(obj)} chars>"
        return f"<string, {len(obj)} chars>"
    return obj


def _error_detail(response: requests.Response) -> str:
    """Best-effort human-readable detail from an error response."""
    try:
        body = response.json()
    except ValueError:
        return (response.text or "").strip()[:500]
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("title") or body.get("error")
        if detail:
            return str(detail)
    return str(body)[:500]


class ReplicateJobAdapter:
    """Stateless client for minimax/image-01 predictions on Replicate."""

    def __init__(
        self,
        config: Config,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._clock = clock

    def _headers(self, prefer_wait: int | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.api_token}",
            "Content-Type": "application/json",
        }
        if prefer_wait:
            headers["Prefer"] = f"wait={prefer_wait}"
        return headers

    @property
    def _create_url(self) -> str:
        return (
            f"{self.config.base_url}/models/{self.config.model_owner}/"
            f"{self.config.model_name}/predictions"
        )

    def _prediction_url(self, job_id: str) -> str:
        return f"{self.config.base_url}/predictions/{job_id}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        payload: dict[str, Any] | None = None,
        prefer_wait: int | None = None,
        job_id: str | None = None,
    ) -> Job:
        """Perform one HTTP call and parse the prediction. Maps failures to exceptions."""
        timeout = self.config.request_timeout + (prefer_wait or 0)
        logger.debug("API request %s %s timeout=%s", method, url, timeout)
        if self.config.debug_api and payload is not None:
            logger.info(
                "API request payload: %s",
                json.dumps(_truncate_for_log(payload), indent=2, default=str),
            )
        start_time = time.time()
        try:
            if method == "POST":
                response = requests.post(
                    url, headers=self._headers(prefer_wait), json=payload, timeout=timeout
                )
            else:
                response = requests.get(url, headers=self._headers(), timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request to Replicate timed out after {timeout} seconds.",
                job_id=job_id or "",
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to the Replicate API. Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e
        logger.debug(
            "API response status=%s time=%.2fs",
            response.status_code,
            time.time() - start_time,
        )

        self._raise_for_status(response, job_id)

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteError(
                f"Failed to parse API response as JSON: {str(e)}",
                status_code=response.status_code,
                response=response.text,
            ) from e
        if self.config.debug_api:
            logger.info(
                "API response: %s", json.dumps(_truncate_for_log(body), indent=2, default=str)
            )
        return Job.from_remote(body)

    def _raise_for_status(self, response: requests.Response, job_id: str | None) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return
        detail = _error_detail(response)
        if status in (401, 403):
            raise RemoteError(
                "Authentication failed. Please check your REPLICATE_API_TOKEN.",
                status_code=status,
                response=response.text,
            )
        if status == 404:
            if job_id is not None:
                raise NotFoundError(
                    f"Prediction not found: {job_id}", job_id=job_id, response=response.text
                )
            raise RemoteError(
                f"Model not found or endpoint unavailable: {self.config.model}",
                status_code=404,
                response=response.text,
            )
        if status == 422:
            raise RemoteError(
                f"Replicate rejected the input: {detail}",
                status_code=422,
                response=response.text,
            )
        if status == 429:
            raise RemoteError(
                "Rate limit exceeded. Please wait before making more requests.",
                status_code=429,
                response=response.text,
            )
        if status >= 500:
            raise RemoteError(
                f"Replicate service error: {status}",
                status_code=status,
                response=response.text,
            )
        raise RemoteError(
            f"API request failed with status {status}: {detail}",
            status_code=status,
            response=response.text,
        )

    def _create(self, request: GenerationRequest, prefer_wait: int | None = None) -> Job:
        payload: dict[str, Any] = {"input": request.to_remote_input()}
        if isinstance(request, AsyncGenerationRequest):
            payload.update(request.to_webhook_options())
        logger.info(
            "Creating prediction model=%s images=%s aspect_ratio=%s",
            self.config.model,
            request.number_of_images,
            request.aspect_ratio.value,
        )
        if log_prompts():
            prompt = request.prompt
            if len(prompt) > _PROMPT_LOG_MAX:
                prompt = prompt[:_PROMPT_LOG_MAX] + "..."
            logger.info("Prompt: %s", prompt)
        return self._send("POST", self._create_url, payload=payload, prefer_wait=prefer_wait)

    def generate_sync(self, request: GenerationRequest | dict[str, Any]) -> GenerationResult:
        """
        Generate images and block until the prediction reaches a terminal state.

        Args:
            request: GenerationRequest or raw arguments (validated before any remote call)

        Returns:
            GenerationResult with the ordered image references

        Raises:
            ValidationError: If the request is malformed
            RemoteError: If the API call fails or the prediction failed/was cancelled
            RequestTimeoutError: If the prediction is not done within generation_timeout
            EmptyOutputError: If the prediction succeeded without any images
        """
        if not isinstance(request, GenerationRequest):
            request = validate_input(GenerationRequest, request)

        start = self._clock()
        deadline = start + self.config.generation_timeout
        job = self._create(
            request, prefer_wait=min(MAX_PREFER_WAIT, self.config.generation_timeout)
        )
        while not job.status.is_terminal:
            if self._clock() >= deadline:
                raise RequestTimeoutError(
                    f"Generation did not finish within {self.config.generation_timeout} seconds. "
                    f"Prediction {job.id} may still complete; check it with get_prediction.",
                    job_id=job.id,
                )
            self._sleep(self.config.poll_interval)
            job = self.get_job(job.id)

        if job.status is JobStatus.FAILED:
            raise RemoteError(f"Generation failed: {job.error or 'unknown error'}")
        if job.status is JobStatus.CANCELLED:
            raise RemoteError(f"Prediction {job.id} was cancelled before producing images.")
        if not job.output:
            raise EmptyOutputError("No images returned from the API", job_id=job.id)

        elapsed = self._clock() - start
        logger.info("Generated %d image(s) in %.1fs id=%s", len(job.output), elapsed, job.id)
        return GenerationResult(
            request=request,
            images=job.output,
            job_id=job.id,
            model=job.model or self.config.model,
            generation_time=elapsed,
        )

    def generate_async(self, request: AsyncGenerationRequest | dict[str, Any]) -> Job:
        """Submit a prediction and return immediately with its initial snapshot."""
        if not isinstance(request, AsyncGenerationRequest):
            request = validate_input(AsyncGenerationRequest, request)
        job = self._create(request)
        logger.info("Created prediction id=%s status=%s", job.id, job.status.value)
        return job

    def get_job(self, job_id: str) -> Job:
        """
        Fetch the current state of a prediction.

        Raises:
            ValidationError: If job_id is malformed
            NotFoundError: If the id is unknown to Replicate
            RemoteError: For transport, auth or server failures
        """
        job_id = validate_input(JobRequest, {"prediction_id": job_id}).prediction_id
        logger.info("Fetching prediction id=%s", job_id)
        return self._send("GET", self._prediction_url(job_id), job_id=job_id)

    def cancel_job(self, job_id: str) -> Job:
        """
        Request cancellation and return whatever status Replicate reports.

        Cancellation is advisory; the returned snapshot may still be non-terminal
        or already terminal (e.g. cancelling an already-cancelled prediction).
        """
        job_id = validate_input(JobRequest, {"prediction_id": job_id}).prediction_id
        logger.info("Cancelling prediction id=%s", job_id)
        return self._send("POST", f"{self._prediction_url(job_id)}/cancel", job_id=job_id)


__all__ = ["MAX_PREFER_WAIT", "ReplicateJobAdapter"]
