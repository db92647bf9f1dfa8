"""
Save generated images to local storage.

materialize() writes a single image reference (URL or byte stream) to disk
and always returns a DownloadedAsset; failures are reported in the result,
never raised, so a failed save cannot mask a successful generation.
"""

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import requests

from minimax_image.core.config import DEFAULT_REQUEST_TIMEOUT, Config
from minimax_image.core.models import DownloadedAsset, ImageReference, URLReference
from minimax_image.logging_config import get_logger
from minimax_image.utils.exceptions import DownloadError, ErrorInfo
from minimax_image.utils.filenames import derive_filename

logger = get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


def ensure_directory(path: Path) -> Path:
    """Create path (and parents) if missing. Safe when another caller creates it first."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def _write_chunks(chunks: Iterable[bytes], target: Path) -> int:
    written = 0
    with open(target, "wb") as f:
        for chunk in chunks:
            if chunk:
                f.write(chunk)
                written += len(chunk)
    return written


def _remove_partial(target: Path) -> None:
    try:
        target.unlink(missing_ok=True)
    except OSError as e:
        # e.g. the destination "directory" is a regular file
        logger.debug("Could not remove partial file %s: %s", target, e)


def _download_url(url: str, target: Path, timeout: int) -> int:
    with requests.get(url, stream=True, timeout=timeout) as response:
        if not 200 <= response.status_code < 300:
            raise DownloadError(
                f"Download failed with status {response.status_code}", source=url
            )
        return _write_chunks(response.iter_content(chunk_size=_CHUNK_SIZE), target)


def materialize(
    reference: ImageReference,
    destination_dir: Path,
    filename: str,
    *,
    index: int = 1,
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
) -> DownloadedAsset:
    """
    Write one image reference to destination_dir/filename.

    Args:
        reference: URLReference (fetched over HTTP) or StreamReference (read fully)
        destination_dir: Directory to write into; created if absent
        filename: Target file name
        index: 1-based position of the image in its response
        timeout: HTTP timeout for URL references

    Returns:
        DownloadedAsset with local_path on success, or with error and no local_path.
        A partially written file is removed on failure.
    """
    target = destination_dir / filename
    try:
        ensure_directory(destination_dir)
        if isinstance(reference, URLReference):
            size = _download_url(reference.url, target, timeout)
        else:
            size = _write_chunks(reference.iter_bytes(), target)
    except Exception as e:  # any failure becomes a per-asset result
        _remove_partial(target)
        error = e if isinstance(e, DownloadError) else DownloadError(str(e), source=reference.source)
        logger.warning("Failed to save image %d (%s): %s", index, reference.source, error)
        return DownloadedAsset(
            index=index,
            filename=filename,
            source=reference.source,
            local_path=None,
            error=ErrorInfo.from_exception(error),
        )
    logger.info("Saved image %d: %s (%d bytes)", index, filename, size)
    return DownloadedAsset(
        index=index,
        filename=filename,
        source=reference.source,
        local_path=target.resolve(),
    )


def materialize_all(
    references: Sequence[ImageReference],
    destination_dir: Path,
    prompt: str,
    *,
    workers: int = 1,
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
) -> list[DownloadedAsset]:
    """
    Save every reference, returning one DownloadedAsset per reference in output order.

    With workers > 1 downloads run in parallel; each writes a distinct file.
    Returns only after every download has finished or failed.
    """
    jobs = [
        (reference, derive_filename(prompt, i), i) for i, reference in enumerate(references, 1)
    ]
    if workers <= 1 or len(jobs) <= 1:
        return [
            materialize(ref, destination_dir, name, index=i, timeout=timeout)
            for ref, name, i in jobs
        ]
    with ThreadPoolExecutor(max_workers=min(workers, len(jobs))) as pool:
        return list(
            pool.map(
                lambda job: materialize(
                    job[0], destination_dir, job[1], index=job[2], timeout=timeout
                ),
                jobs,
            )
        )


class AssetDownloader:
    """Saves generated images into the configured output directory."""

    def __init__(self, config: Config) -> None:
        self.config = config

    @property
    def output_dir(self) -> Path:
        return self.config.output_dir

    def materialize_all(
        self, references: Sequence[ImageReference], prompt: str
    ) -> list[DownloadedAsset]:
        return materialize_all(
            references,
            self.config.output_dir,
            prompt,
            workers=self.config.download_workers,
            timeout=self.config.request_timeout,
        )


__all__ = ["AssetDownloader", "ensure_directory", "materialize", "materialize_all"]
