"""Validation utilities for the wizard's step gates."""

import logging

from adstudio.core.errors import ValidationError
from adstudio.core.rules import (
    MAX_ADS,
    MIN_ADS,
    check_batch_size,
    check_image,
)

from .models import UploadedImage

logger = logging.getLogger(__name__)

__all__ = [
    "ValidationError",
    "validate_product_name",
    "validate_image_batch",
    "validate_has_images",
    "validate_guidance",
]


def validate_product_name(product_name: str) -> None:
    """Gate from step 1 to step 2.

    Raises:
        ValidationError: If the product name is empty after trimming.
    """
    if not product_name or not product_name.strip():
        raise ValidationError("Please enter a product name")


def validate_image_batch(existing: int, incoming: list[UploadedImage]) -> None:
    """Validate one file-selection event as a whole.

    The batch is rejected if it would push the total over the limit, or if
    any single file has the wrong type or is too large.  The first problem
    found is reported.

    Args:
        existing: Number of images already accepted.
        incoming: Described files from this selection.

    Raises:
        ValidationError: With a user-friendly message.
    """
    message = check_batch_size(existing, len(incoming))
    if message:
        raise ValidationError(message)

    for image in incoming:
        message = check_image(image.content_type, image.size_bytes)
        if message:
            logger.info(f"Rejected {image.filename}: {message}")
            raise ValidationError(message)


def validate_has_images(images: list[UploadedImage]) -> None:
    """Gate from step 2 to step 3."""
    if not images:
        raise ValidationError("Please upload at least one product image")


def validate_guidance(guidance_prompt: str, number_of_ads: int) -> None:
    """Gate from step 3 to submission.

    Raises:
        ValidationError: If the prompt is blank or the ad count is out of range.
    """
    if not guidance_prompt or not guidance_prompt.strip():
        raise ValidationError("Please describe how the ad should look")

    if number_of_ads < MIN_ADS or number_of_ads > MAX_ADS:
        raise ValidationError(f"Number of ads must be {MIN_ADS}-{MAX_ADS}, got {number_of_ads}")
