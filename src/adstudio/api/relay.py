"""Ad generation relay service.

:class:`AdRelayService` owns the whole request flow behind
``POST /api/generate-ads``:

1. Validate the received images and text fields.
2. Compose the generation instruction.
3. Store the source images in the uploads directory.
4. Forward one edit request to the image API.
5. Decode every returned image into the results directory.
6. Remove the stored source images.

The service never raises for request failures.  It returns a tagged
:data:`RelayResult` which the route handler turns into JSON.

Upload and result directories are passed in at construction; nothing here
reads the global configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from adstudio.api.file_store import (
    StoredUpload,
    discard_results,
    discard_uploads,
    save_result_image,
    save_upload,
)
from adstudio.api.prompt_builder import build_ad_prompt
from adstudio.core.errors import AdStudioError, ErrorKind, UnexpectedError, ValidationError
from adstudio.core.rules import check_batch_size, check_image, clamp_ad_count

logger = logging.getLogger(__name__)

NO_IMAGES_MESSAGE = "No images uploaded"
MISSING_FIELDS_MESSAGE = "Product name and guidance prompt are required"


@dataclass(frozen=True)
class IncomingImage:
    """A source image as received in the multipart body.

    ``declared_size`` is set instead of ``data`` for parts that were too
    large to read.
    """

    filename: str
    content_type: str | None
    data: bytes
    declared_size: int | None = None

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.data)


@dataclass(frozen=True)
class RelaySuccess:
    """Successful generation: root-relative URLs in API order."""

    images: list[str] = field(default_factory=list)
    status_code: int = 200

    @property
    def count(self) -> int:
        return len(self.images)


@dataclass(frozen=True)
class RelayFailure:
    """Failed generation, tagged with the error kind."""

    kind: ErrorKind
    message: str
    status_code: int

    @classmethod
    def from_error(cls, error: AdStudioError) -> RelayFailure:
        return cls(kind=error.kind, message=error.message, status_code=error.status_code)


RelayResult = RelaySuccess | RelayFailure


def validate_submission(
    product_name: str | None,
    guidance_prompt: str | None,
    images: list[IncomingImage],
) -> None:
    """Check a submission in the same order the upload pipeline sees it.

    File limits are checked first (count, then type and size per file),
    then presence of at least one image, then the text fields.

    Raises:
        ValidationError: With the user-facing message for the first failure.
    """
    message = check_batch_size(0, len(images))
    if message:
        raise ValidationError(message)

    for image in images:
        message = check_image(image.content_type, image.size)
        if message:
            raise ValidationError(message)

    if not images:
        raise ValidationError(NO_IMAGES_MESSAGE)

    if not (product_name or "").strip() or not (guidance_prompt or "").strip():
        raise ValidationError(MISSING_FIELDS_MESSAGE)


class AdRelayService:
    """Relay between the wizard and the external image API.

    Args:
        uploads_dir: Directory for transient source images.
        results_dir: Directory for generated images.
        image_client: Object exposing ``async edit_images(prompt, count,
            references) -> list[str]`` (see
            :class:`~adstudio.api.image_client.OpenAIImageClient`).
        results_url_prefix: URL path under which *results_dir* is served.
    """

    def __init__(
        self,
        uploads_dir: Path,
        results_dir: Path,
        image_client,
        results_url_prefix: str = "/results",
    ) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.results_dir = Path(results_dir)
        self.image_client = image_client
        self.results_url_prefix = results_url_prefix.rstrip("/")

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)

    async def generate_ads(
        self,
        product_name: str | None,
        guidance_prompt: str | None,
        number_of_ads,
        images: list[IncomingImage],
    ) -> RelayResult:
        """Run one generation request end to end.

        Args:
            product_name: Raw ``productName`` form value.
            guidance_prompt: Raw ``guidancePrompt`` form value.
            number_of_ads: Raw ``numberOfAds`` value; clamped to 1-5.
            images: Received source images.

        Returns:
            :class:`RelaySuccess` with result URLs, or :class:`RelayFailure`.
        """
        try:
            validate_submission(product_name, guidance_prompt, images)
            count = clamp_ad_count(number_of_ads)
            prompt = build_ad_prompt(product_name, guidance_prompt)
            urls = await self._relay(prompt, count, images)
        except AdStudioError as e:
            logger.warning(f"Ad generation failed ({e.kind.value}, {e.status_code}): {e.message}")
            return RelayFailure.from_error(e)
        except Exception as e:
            logger.error(f"Unexpected error generating ad images: {e}", exc_info=True)
            return RelayFailure.from_error(UnexpectedError())

        logger.info(f"Generated {len(urls)} ad image(s) for '{product_name.strip()}'")
        return RelaySuccess(images=urls)

    async def _relay(self, prompt: str, count: int, images: list[IncomingImage]) -> list[str]:
        """Store sources, call the API and persist the results.

        Stored uploads are removed whether or not the API call succeeds.
        Results already written are removed if a later one cannot be saved.
        """
        stored: list[StoredUpload] = []
        try:
            for image in images:
                stored.append(
                    save_upload(self.uploads_dir, image.filename, image.content_type, image.data)
                )

            payloads = await self.image_client.edit_images(prompt, count, stored)

            saved: list[str] = []
            try:
                for image_b64 in payloads:
                    saved.append(save_result_image(self.results_dir, image_b64))
            except Exception:
                discard_results(self.results_dir, saved)
                raise

            return [f"{self.results_url_prefix}/{filename}" for filename in saved]
        finally:
            discard_uploads(stored)
