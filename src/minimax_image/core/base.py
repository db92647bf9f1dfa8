"""
Job adapter protocol.

Defines the interface the tool registry needs from a remote job API. The
Replicate adapter implements it; tests substitute in-memory stubs.
"""

from __future__ import annotations

from typing import Any, Protocol

from minimax_image.core.models import (
    AsyncGenerationRequest,
    GenerationRequest,
    GenerationResult,
    Job,
)


class JobAdapter(Protocol):
    """Protocol for remote job APIs offering create/get/cancel-by-id."""

    def generate_sync(self, request: GenerationRequest | dict[str, Any]) -> GenerationResult:
        """Generate and wait for final output.

        May raise ValidationError, RemoteError, NotFoundError or EmptyOutputError.
        """
        ...

    def generate_async(self, request: AsyncGenerationRequest | dict[str, Any]) -> Job:
        """Submit a job and return its initial snapshot."""
        ...

    def get_job(self, job_id: str) -> Job:
        """Return the current snapshot; NotFoundError for unknown ids."""
        ...

    def cancel_job(self, job_id: str) -> Job:
        """Request cancellation and return the snapshot the remote reports."""
        ...
