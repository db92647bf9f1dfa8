"""
Filesystem-safe filenames for downloaded images.

Names are derived from the prompt plus the image index and the current
instant, so repeated calls with the same prompt never collide.
"""

import re
from datetime import datetime, timezone

FILENAME_PREFIX = "minimax_image_01"
IMAGE_EXTENSION = "jpeg"
MAX_PROMPT_CHARS = 50

_UNSAFE_CHARS = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def safe_prompt_segment(prompt: str) -> str:
    """Lower-case the prompt, drop symbols, join words with underscores, cap at 50 chars."""
    cleaned = _UNSAFE_CHARS.sub("", prompt.lower())
    return _WHITESPACE.sub("_", cleaned)[:MAX_PROMPT_CHARS]


def timestamp_segment(now: datetime | None = None) -> str:
    """Render an instant as an ISO-8601 UTC string with ':' and '.' replaced by '-'."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return stamp.replace(":", "-").replace(".", "-")


def derive_filename(prompt: str, index: int, now: datetime | None = None) -> str:
    """
    Build the local filename for image ``index`` (1-based) of a prompt.

    Example: ``derive_filename("A Red Panda!!!", 1)`` ->
    ``minimax_image_01_a_red_panda_1_2026-10-18T01-55-00-123Z.jpeg``.
    An empty or all-symbol prompt yields an empty prompt segment.
    """
    return (
        f"{FILENAME_PREFIX}_{safe_prompt_segment(prompt)}_{index}_"
        f"{timestamp_segment(now)}.{IMAGE_EXTENSION}"
    )


__all__ = [
    "FILENAME_PREFIX",
    "IMAGE_EXTENSION",
    "derive_filename",
    "safe_prompt_segment",
    "timestamp_segment",
]
