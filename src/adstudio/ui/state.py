"""Wizard state transitions.

Every function takes the session's :class:`WizardState`, applies one
transition and returns it.  Step gates raise :class:`ValidationError` and
leave the state untouched; the UI handlers catch the error and show its
message in the banner.

Transitions::

    PRODUCT_INFO --go_to_upload--> UPLOAD_IMAGES --go_to_guidance--> GUIDANCE
         ^                              |                              |
         +----------go_back-------------+<----------go_back-----------+
                                                                       |
    PRODUCT_INFO <--reset_wizard-- RESULTS <--------submit-------------+
"""

import logging
from pathlib import Path

from adstudio.core.rules import clamp_ad_count

from .client import RelayClient, RelayClientError
from .models import UploadedImage, WizardState, WizardStep
from .validation import (
    ValidationError,
    validate_guidance,
    validate_has_images,
    validate_image_batch,
    validate_product_name,
)

logger = logging.getLogger(__name__)


def _require_step(state: WizardState, *steps: WizardStep) -> None:
    if state.step not in steps:
        allowed = ", ".join(step.name for step in steps)
        raise ValidationError(f"Action not available on step {state.step.name} (expected {allowed})")


def go_to_upload(state: WizardState, product_name: str | None = None) -> WizardState:
    """Leave step 1 once a product name is present.

    Args:
        state: Wizard state
        product_name: Current textbox value; stored before the gate check

    Returns:
        Updated state on UPLOAD_IMAGES
    """
    _require_step(state, WizardStep.PRODUCT_INFO)
    if product_name is not None:
        state.product_name = product_name

    validate_product_name(state.product_name)

    state.step = WizardStep.UPLOAD_IMAGES
    state.error = ""
    return state


def add_images(state: WizardState, paths: list[str | Path]) -> WizardState:
    """Accept one file-selection event.

    All files are checked before any is accepted; a single bad file rejects
    the whole selection.

    Args:
        state: Wizard state
        paths: Files chosen by the user

    Returns:
        Updated state with new images and previews

    Raises:
        ValidationError: If the selection breaks a count, type or size limit,
            or a file cannot be copied for preview
    """
    _require_step(state, WizardStep.UPLOAD_IMAGES)
    if not paths:
        return state

    incoming = [UploadedImage.describe(path) for path in paths]
    validate_image_batch(len(state.images), incoming)

    for image in incoming:
        try:
            image.create_preview()
        except OSError as e:
            logger.error(f"Could not create preview for {image.filename}: {e}")
            for copied in incoming:
                copied.release()
            raise ValidationError(f"Could not read {image.filename}. Please try again.") from e

    state.images.extend(incoming)
    state.error = ""
    logger.info(f"Accepted {len(incoming)} image(s), {len(state.images)} total")
    return state


def remove_image(state: WizardState, index: int) -> WizardState:
    """Remove one accepted image and release its preview."""
    _require_step(state, WizardStep.UPLOAD_IMAGES)
    if index < 0 or index >= len(state.images):
        logger.warning(f"Ignoring removal of image {index}: only {len(state.images)} present")
        return state

    removed = state.images.pop(index)
    removed.release()
    return state


def go_to_guidance(state: WizardState) -> WizardState:
    """Leave step 2 once at least one image is accepted."""
    _require_step(state, WizardStep.UPLOAD_IMAGES)
    validate_has_images(state.images)

    state.step = WizardStep.GUIDANCE
    state.error = ""
    return state


def go_back(state: WizardState) -> WizardState:
    """Return to the previous step (from UPLOAD_IMAGES or GUIDANCE only)."""
    _require_step(state, WizardStep.UPLOAD_IMAGES, WizardStep.GUIDANCE)
    if state.is_submitting:
        return state

    state.step = WizardStep(state.step - 1)
    state.error = ""
    return state


def set_number_of_ads(state: WizardState, value) -> WizardState:
    """Store the requested ad count, clamped to the supported range."""
    state.number_of_ads = clamp_ad_count(value)
    return state


def begin_submission(
    state: WizardState,
    guidance_prompt: str | None = None,
    number_of_ads=None,
) -> WizardState:
    """Pass the step 3 gate and mark the submission as in progress.

    Args:
        state: Wizard state
        guidance_prompt: Current textbox value, if provided
        number_of_ads: Current selector value, if provided

    Returns:
        Updated state with ``is_submitting`` set
    """
    _require_step(state, WizardStep.GUIDANCE)
    if state.is_submitting:
        raise ValidationError("A submission is already in progress")

    if guidance_prompt is not None:
        state.guidance_prompt = guidance_prompt
    if number_of_ads is not None:
        state = set_number_of_ads(state, number_of_ads)

    validate_guidance(state.guidance_prompt, state.number_of_ads)
    validate_has_images(state.images)

    state.is_submitting = True
    state.error = ""
    return state


def submit(state: WizardState, client: RelayClient) -> WizardState:
    """Send the submission and move to RESULTS on success.

    Failures of any kind land in ``state.error`` and the wizard stays on
    GUIDANCE so the user can retry.  ``is_submitting`` is always cleared.

    Args:
        state: Wizard state (``begin_submission`` already applied)
        client: Relay client

    Returns:
        Updated state
    """
    if not state.is_submitting:
        state = begin_submission(state)

    try:
        urls = client.generate_ads(
            product_name=state.product_name,
            guidance_prompt=state.guidance_prompt,
            number_of_ads=state.number_of_ads,
            images=state.images,
        )
    except RelayClientError as e:
        logger.warning(f"Generation failed: {e}")
        state.error = str(e)
        return state
    finally:
        state.is_submitting = False

    state.generated_images = urls
    state.step = WizardStep.RESULTS
    state.error = ""
    logger.info(f"Received {len(urls)} generated image(s)")
    return state


def reset_wizard(state: WizardState) -> WizardState:
    """Start over: release every preview and return a fresh state."""
    for image in state.images:
        image.release()

    logger.info("Wizard reset")
    return WizardState()
