"""Gradio wizard for AdStudio Image Generator."""

import logging

import gradio as gr

from adstudio.core.config import config
from adstudio.core.rules import MAX_ADS, MIN_ADS

from .handlers import (
    handle_back,
    handle_begin_submit,
    handle_next_from_product,
    handle_next_from_upload,
    handle_remove,
    handle_reset,
    handle_select_preview,
    handle_submit,
    handle_upload,
    render,
)
from .models import WizardState

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the four-step wizard.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    custom_css = """
    .error-banner {
        border: 1px solid #fecaca;
        background: #fef2f2;
        color: #dc2626;
        border-radius: 6px;
        padding: 8px 12px;
    }
    """

    app = gr.Blocks(title="AdStudio Image Generator")

    with app:
        # Session state - one instance per user
        wizard_state = gr.State(WizardState())
        selected_preview = gr.State(None)

        gr.Markdown("# Generate Your Ad Images")
        progress = gr.Markdown()
        error_banner = gr.Markdown(visible=False, elem_classes=["error-banner"])

        # Step 1: product details
        with gr.Group(visible=True) as step1:
            product_name = gr.Textbox(
                label="Product Name",
                placeholder="e.g., Premium Coffee Beans",
            )
            next1_btn = gr.Button("Next", variant="primary")

        # Step 2: source images
        with gr.Group(visible=False) as step2:
            file_input = gr.File(
                label="Product Images (up to 5, JPG/PNG/WEBP, max 5MB each)",
                file_count="multiple",
                file_types=[".jpg", ".jpeg", ".png", ".webp"],
                type="filepath",
            )
            preview_gallery = gr.Gallery(
                label="Selected Images",
                columns=5,
                height=160,
                object_fit="cover",
                allow_preview=False,
            )
            image_list = gr.Markdown()
            remove_btn = gr.Button("Remove Selected Image", variant="secondary")
            with gr.Row():
                back2_btn = gr.Button("Previous")
                next2_btn = gr.Button("Next", variant="primary")

        # Step 3: guidance
        with gr.Group(visible=False) as step3:
            guidance_prompt = gr.Textbox(
                label="Guidance Prompt",
                lines=4,
                placeholder=(
                    "e.g., Show the product on a wooden table with a blurred background, "
                    "morning light."
                ),
            )
            number_of_ads = gr.Dropdown(
                label="Number of Ads to Generate",
                choices=list(range(MIN_ADS, MAX_ADS + 1)),
                value=MIN_ADS,
            )
            with gr.Row():
                back3_btn = gr.Button("Previous")
                generate_btn = gr.Button("Generate Ads", variant="primary")

        # Step 4: results
        with gr.Group(visible=False) as step4:
            results_gallery = gr.Gallery(label="Generated Ads", columns=2, height=480)
            downloads = gr.Markdown()
            reset_btn = gr.Button("Create New Ad", variant="primary")

        # Order must match handlers.render()
        render_outputs = [
            step1,
            step2,
            step3,
            step4,
            progress,
            error_banner,
            product_name,
            preview_gallery,
            image_list,
            guidance_prompt,
            number_of_ads,
            generate_btn,
            results_gallery,
            downloads,
            wizard_state,
        ]

        app.load(fn=render, inputs=[wizard_state], outputs=render_outputs)

        next1_btn.click(
            fn=handle_next_from_product,
            inputs=[product_name, wizard_state],
            outputs=render_outputs,
        )
        product_name.submit(
            fn=handle_next_from_product,
            inputs=[product_name, wizard_state],
            outputs=render_outputs,
        )

        file_input.upload(
            fn=handle_upload,
            inputs=[file_input, wizard_state],
            outputs=render_outputs + [file_input],
        )
        preview_gallery.select(
            fn=handle_select_preview,
            inputs=[wizard_state],
            outputs=[selected_preview],
        )
        remove_btn.click(
            fn=handle_remove,
            inputs=[selected_preview, wizard_state],
            outputs=render_outputs + [selected_preview],
        )
        next2_btn.click(fn=handle_next_from_upload, inputs=[wizard_state], outputs=render_outputs)
        back2_btn.click(fn=handle_back, inputs=[wizard_state], outputs=render_outputs)
        back3_btn.click(fn=handle_back, inputs=[wizard_state], outputs=render_outputs)

        # Gate + busy indicator first, then the (blocking) relay call
        generate_btn.click(
            fn=handle_begin_submit,
            inputs=[guidance_prompt, number_of_ads, wizard_state],
            outputs=render_outputs,
        ).then(
            fn=handle_submit,
            inputs=[wizard_state],
            outputs=render_outputs,
        )

        reset_btn.click(fn=handle_reset, inputs=[wizard_state], outputs=render_outputs)

    return app, custom_css


def main():
    """Main entry point for the wizard UI."""
    logger.info("Starting AdStudio wizard...")
    logger.info(f"Relay: {config.relay_url}")

    app, custom_css = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
        css=custom_css,
    )


if __name__ == "__main__":
    main()
