"""Upload and ad-count rules shared by the wizard UI and the relay.

The wizard checks these before submitting; the relay checks them again
on every request.
"""

from __future__ import annotations

import mimetypes
import re
from pathlib import Path

MAX_IMAGES = 5
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MIN_ADS = 1
MAX_ADS = 5
DEFAULT_ADS = 1

ACCEPTED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})

# mimetypes tables vary by platform; image suffixes are pinned here.
_SUFFIX_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

TOO_MANY_IMAGES_MESSAGE = f"You can upload a maximum of {MAX_IMAGES} images"
UNSUPPORTED_TYPE_MESSAGE = "Only JPG, PNG, and WEBP images are allowed"
TOO_LARGE_MESSAGE = "Image must be smaller than 5MB"


def clamp_ad_count(value) -> int:
    """Return the effective number of ads for a raw input value.

    Accepts ints, floats and strings.  Strings are read up to the first
    non-digit, so ``"3 ads"`` means three.  Anything without a leading
    integer (including ``None`` and ``""``) counts as the default of one;
    the parsed value is then clamped into ``[MIN_ADS, MAX_ADS]``.

    Args:
        value: Raw ad count as received from a form or widget.

    Returns:
        Integer between 1 and 5 inclusive.
    """
    if isinstance(value, int):
        parsed = value
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        parsed = int(match.group(0)) if match else 0

    # Zero is treated as missing, not as a request below the minimum.
    if not parsed:
        parsed = DEFAULT_ADS

    return min(MAX_ADS, max(MIN_ADS, parsed))


def guess_image_type(filename: str) -> str | None:
    """Guess an image MIME type from a filename suffix."""
    suffix = Path(filename).suffix.lower()
    if suffix in _SUFFIX_TYPES:
        return _SUFFIX_TYPES[suffix]
    return mimetypes.guess_type(filename)[0]


def check_image(content_type: str | None, size: int) -> str | None:
    """Check a single image against the type and size limits.

    Args:
        content_type: MIME type of the file.
        size: File size in bytes.

    Returns:
        A user-facing error message, or ``None`` if the image is acceptable.
    """
    if content_type not in ACCEPTED_IMAGE_TYPES:
        return UNSUPPORTED_TYPE_MESSAGE
    if size > MAX_IMAGE_BYTES:
        return TOO_LARGE_MESSAGE
    return None


def check_batch_size(existing: int, incoming: int) -> str | None:
    """Check that adding *incoming* images keeps the total within limits.

    Returns:
        A user-facing error message, or ``None`` if the batch fits.
    """
    if existing + incoming > MAX_IMAGES:
        return TOO_MANY_IMAGES_MESSAGE
    return None
