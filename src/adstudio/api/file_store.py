"""File-backed storage helpers for the relay.

Disk layout:

- received source images live in ``uploads/<uuid><ext>`` until the relay
  call finishes
- generated images live in ``results/<uuid>.png`` and are never evicted,
  except those of a request that fails before answering

Every name is a fresh ``uuid4`` so concurrent requests never collide.
"""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

RESULT_EXTENSION = ".png"


@dataclass(frozen=True)
class StoredUpload:
    """A received source image written to the uploads directory.

    Attributes:
        path: Location of the stored file.
        filename: Original client-side filename, forwarded to the image API.
        content_type: MIME type declared by the client.
    """

    path: Path
    filename: str
    content_type: str


def save_upload(uploads_dir: Path, filename: str, content_type: str, data: bytes) -> StoredUpload:
    """Write a received source image under a random name.

    The original extension is kept; a name without one is stored without
    an extension.

    Args:
        uploads_dir: Directory for transient uploads.
        filename: Original client-side filename.
        content_type: Declared MIME type.
        data: Raw file contents.

    Returns:
        The :class:`StoredUpload` describing the written file.
    """
    extension = Path(filename).suffix.lower()
    path = uploads_dir / f"{uuid.uuid4()}{extension}"
    path.write_bytes(data)
    return StoredUpload(path=path, filename=filename or path.name, content_type=content_type)


def discard_uploads(uploads: list[StoredUpload]) -> None:
    """Delete stored uploads, ignoring files that are already gone."""
    for upload in uploads:
        try:
            upload.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove upload {upload.path}: {e}")


def save_result_image(results_dir: Path, image_b64: str) -> str:
    """Decode a base64 image and write it to the results directory.

    Args:
        results_dir: Directory for generated images.
        image_b64: Base64-encoded image bytes as returned by the image API.

    Returns:
        The generated filename (not the full path).

    Raises:
        ValueError: If *image_b64* is not valid base64.
    """
    try:
        image_bytes = base64.b64decode(image_b64, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Image payload is not valid base64: {e}") from e

    filename = f"{uuid.uuid4()}{RESULT_EXTENSION}"
    path = results_dir / filename
    try:
        path.write_bytes(image_bytes)
    except OSError:
        path.unlink(missing_ok=True)
        raise
    return filename


def discard_results(results_dir: Path, filenames: list[str]) -> None:
    """Delete result images written by a request that went on to fail."""
    for filename in filenames:
        path = results_dir / filename
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove result {path}: {e}")
