"""Gradio event handlers for the ad wizard.

Each handler applies one transition from :mod:`adstudio.ui.state` and then
re-renders the whole wizard with :func:`render`, so every event has the same
output list (``render_outputs`` in ``app.py`` mirrors its order).
"""

import logging

import gradio as gr

from adstudio.core.config import config
from adstudio.core.rules import MAX_IMAGES

from .client import RelayClient
from .models import WizardState, WizardStep
from .state import (
    add_images,
    begin_submission,
    go_back,
    go_to_guidance,
    go_to_upload,
    remove_image,
    reset_wizard,
    submit,
)
from .validation import ValidationError

logger = logging.getLogger(__name__)

STEP_TITLES = {
    WizardStep.PRODUCT_INFO: "Product Details",
    WizardStep.UPLOAD_IMAGES: "Upload Product Images",
    WizardStep.GUIDANCE: "Ad Specifics",
    WizardStep.RESULTS: "Generated Ad Images",
}


def get_relay_client() -> RelayClient:
    """Build the relay client from the global configuration."""
    return RelayClient(config.relay_url, public_url=config.public_relay_url)


def format_progress(state: WizardState) -> str:
    """Render the progress line shown above the wizard."""
    percent = round(state.progress * 100)
    return f"**Step {int(state.step)} of {len(WizardStep)}: {STEP_TITLES[state.step]}** ({percent}%)"


def format_error(state: WizardState) -> str:
    """Render the error banner (empty when there is no error)."""
    return f"⚠️ {state.error}" if state.error else ""


def format_image_list(state: WizardState) -> str:
    """List accepted images with their sizes."""
    if not state.images:
        return f"*No images yet. Add up to {MAX_IMAGES} JPG, PNG or WEBP files, max 5MB each.*"

    lines = [f"{i + 1}. {img.filename} ({img.size_mb:.2f} MB)" for i, img in enumerate(state.images)]
    lines.append(f"\n{len(state.images)} of {MAX_IMAGES} images")
    return "\n".join(lines)


def format_downloads(state: WizardState) -> str:
    """Render download links for generated images."""
    if not state.generated_images:
        return "*No images were generated. Try adjusting your prompt.*"
    return "\n".join(
        f"- [Download ad {i + 1}]({url})" for i, url in enumerate(state.generated_images)
    )


def render(state: WizardState) -> tuple:
    """Produce updates for every wizard component.

    Returns:
        Tuple matching ``render_outputs``: four step groups, progress,
        error banner, product name, preview gallery, image list, guidance,
        ad count, generate button, results gallery, download links, state.
    """
    step = state.step
    return (
        gr.update(visible=step == WizardStep.PRODUCT_INFO),
        gr.update(visible=step == WizardStep.UPLOAD_IMAGES),
        gr.update(visible=step == WizardStep.GUIDANCE),
        gr.update(visible=step == WizardStep.RESULTS),
        format_progress(state),
        gr.update(value=format_error(state), visible=bool(state.error)),
        gr.update(value=state.product_name),
        gr.update(value=[str(img.preview_path) for img in state.images if img.preview_path]),
        format_image_list(state),
        gr.update(value=state.guidance_prompt),
        gr.update(value=state.number_of_ads),
        gr.update(
            value="⏳ Generating..." if state.is_submitting else "Generate Ads",
            interactive=not state.is_submitting,
        ),
        gr.update(value=list(state.generated_images)),
        format_downloads(state),
        state,
    )


def _apply(transition, state: WizardState, *args) -> tuple:
    """Run a transition, turning gate failures into the error banner."""
    try:
        state = transition(state, *args)
    except ValidationError as e:
        state.error = e.message
    return render(state)


def handle_next_from_product(product_name: str, state: WizardState) -> tuple:
    return _apply(go_to_upload, state, product_name)


def handle_upload(files: list[str] | None, state: WizardState) -> tuple:
    """Accept a file selection, then clear the file picker."""
    paths = [getattr(f, "name", f) for f in files or []]
    return _apply(add_images, state, paths) + (gr.update(value=None),)


def handle_select_preview(state: WizardState, evt: gr.SelectData) -> int:
    """Remember which preview the user clicked."""
    return evt.index


def handle_remove(selected_index: int | None, state: WizardState) -> tuple:
    if selected_index is None:
        state.error = "Select an image to remove"
        return render(state) + (None,)
    return _apply(remove_image, state, int(selected_index)) + (None,)


def handle_next_from_upload(state: WizardState) -> tuple:
    return _apply(go_to_guidance, state)


def handle_back(state: WizardState) -> tuple:
    return _apply(go_back, state)


def handle_begin_submit(guidance_prompt: str, number_of_ads, state: WizardState) -> tuple:
    """Pass the guidance gate and show the busy indicator."""
    return _apply(begin_submission, state, guidance_prompt, number_of_ads)


def handle_submit(state: WizardState) -> tuple:
    """Send the submission if the gate was passed."""
    if not state.is_submitting:
        return render(state)
    return render(submit(state, get_relay_client()))


def handle_reset(state: WizardState) -> tuple:
    return render(reset_wizard(state))
