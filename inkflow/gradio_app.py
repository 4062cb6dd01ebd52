"""Gradio web interface for InkFlow.

This module creates the web application for composing AI-generated
calligraphy signatures onto photos. The workflow is split into three steps,
each on its own tab:

1. Upload a photo (or fetch a random sample)
2. Design the signature: name + calligraphy style, generated by Gemini
3. Place the signature by clicking on the photo, adjust size and rotation,
   and download the flattened JPEG

A settings panel stores the Gemini API key and an optional alternate base
URL in the browser's local storage.
"""

import logging
from uuid import uuid4

import gradio as gr

from inkflow.models.core_models import AppStep, CalligraphyStyle
from inkflow.settings_store import create_browser_store
from inkflow.ui_updates import (
    PARAMETERS,
    back_to_photo_view,
    cleanup_session,
    compose_view,
    drag_view,
    export_view,
    generate_signature_view,
    load_settings_view,
    photo_selected_view,
    reset_view,
    rotation_view,
    sample_photo_view,
    save_settings_view,
    scale_view,
)

logger = logging.getLogger(__name__)


def initialize_app(stored: dict | None) -> tuple:
    """Start a browser session and read the settings this browser saved.

    Args:
        stored: Settings mapping from the browser's local storage.

    Returns:
        Tuple of (session_id, settings, api_key_text, base_url_text).
    """
    settings, api_key, base_url = load_settings_view(stored)
    return str(uuid4()), settings, api_key, base_url


def cleanup_session_handler(session_id: str | None) -> None:
    """Clean up session state when the user disconnects.

    Args:
        session_id: Unique session identifier to clean up.
    """
    if not session_id:
        return
    try:
        cleanup_session(session_id)
    except OSError as e:
        # Log error but don't disrupt user experience
        logger.warning(f"Cleanup failed for session {session_id}: {e}")


def create_gradio_interface() -> gr.Blocks:
    """Create and configure the main Gradio web interface.

    Returns:
        Configured Gradio Blocks interface ready for launching.
    """
    initial = PARAMETERS.composite.initial_placement

    # Check every 30 minutes, delete cached files older than 1 hour
    with gr.Blocks(title="InkFlow 墨韵", delete_cache=(1800, 3600)) as interface:
        gr.Markdown("# 🖌️ InkFlow 墨韵")
        gr.Markdown(
            "Sign a fan photo with AI calligraphy: upload a photo, design the "
            "signature, then place it and save."
        )

        # Unique session ID for per-session surface and file management
        session_state = gr.State(None, delete_callback=cleanup_session_handler)
        settings_state = gr.State(None)
        browser_settings = create_browser_store()
        photo_state = gr.State(None)
        signature_state = gr.State(None)

        with gr.Accordion("⚙️ Settings", open=False):
            api_key_box = gr.Textbox(
                label="Gemini API Key",
                type="password",
                placeholder="Enter your API key",
            )
            base_url_box = gr.Textbox(
                label="Base URL (optional)",
                placeholder="https://...",
                info="Leave empty to use Google's default endpoint.",
            )
            save_settings_btn = gr.Button("Save settings")
            settings_status = gr.Markdown()

        with gr.Tabs(selected=int(AppStep.UPLOAD_PHOTO)) as steps:
            # 1. Photo
            with gr.Tab("1. Upload photo", id=int(AppStep.UPLOAD_PHOTO)):
                photo_input = gr.Image(
                    label="Fan photo",
                    type="filepath",
                    sources=["upload", "webcam", "clipboard"],
                )
                sample_btn = gr.Button("Try a random sample photo", size="sm")

            # 2. Signature
            with gr.Tab("2. Design signature", id=int(AppStep.GENERATE_SIGNATURE)):
                name_box = gr.Textbox(label="Name", placeholder="e.g. 李白")
                style_radio = gr.Radio(
                    choices=CalligraphyStyle.choices(),
                    value=CalligraphyStyle.RUNNING_SCRIPT.value,
                    label="Calligraphy style",
                )
                generate_error = gr.Markdown()
                with gr.Row():
                    back_btn = gr.Button("← Back to photo")
                    generate_btn = gr.Button("✨ Generate signature", variant="primary")
                signature_preview = gr.Image(
                    label="Generated signature", interactive=False, height=200
                )

            # 3. Composite
            with gr.Tab("3. Composite & save", id=int(AppStep.COMPOSITE_AND_SAVE)):
                composite_view = gr.Image(
                    label="Composite (click to move the signature)",
                    interactive=False,
                )
                composite_status = gr.Markdown()
                with gr.Row():
                    scale_slider = gr.Slider(
                        0.1,
                        1.5,
                        value=initial.scale,
                        step=0.05,
                        label="Size",
                    )
                    rotation_slider = gr.Slider(
                        -3.14,
                        3.14,
                        value=initial.rotation,
                        step=0.1,
                        label="Rotation",
                    )
                with gr.Row():
                    reset_btn = gr.Button("🗑️ Start over")
                    export_btn = gr.Button("⬇️ Save image", variant="primary")
                export_file = gr.File(label="Download", type="filepath")

        # SETTINGS: read from this browser on load, written on explicit save
        interface.load(
            fn=initialize_app,
            inputs=[browser_settings],
            outputs=[session_state, settings_state, api_key_box, base_url_box],
        )
        save_settings_btn.click(
            fn=save_settings_view,
            inputs=[api_key_box, base_url_box],
            outputs=[settings_state, browser_settings, settings_status],
        )

        # 1. Photo selection
        photo_input.upload(
            fn=photo_selected_view,
            inputs=[photo_input],
            outputs=[photo_state, steps],
        )
        sample_btn.click(
            fn=sample_photo_view,
            inputs=[session_state],
            outputs=[photo_state, steps],
        ).then(
            fn=lambda path: path,
            inputs=[photo_state],
            outputs=[photo_input],
        )

        # 2. Signature generation, then load the surface
        generate_btn.click(
            fn=generate_signature_view,
            inputs=[name_box, style_radio, settings_state],
            outputs=[signature_state, signature_preview, generate_error, steps],
        ).then(
            fn=compose_view,
            inputs=[session_state, photo_state, signature_state],
            outputs=[composite_view, composite_status, scale_slider, rotation_slider],
        )
        back_btn.click(
            fn=back_to_photo_view,
            inputs=[session_state],
            outputs=[signature_state, signature_preview, steps],
        )

        # 3. Placement and export
        composite_view.select(
            fn=drag_view,
            inputs=[session_state],
            outputs=[composite_view],
        )
        scale_slider.input(
            fn=scale_view,
            inputs=[session_state, scale_slider],
            outputs=[composite_view],
        )
        rotation_slider.input(
            fn=rotation_view,
            inputs=[session_state, rotation_slider],
            outputs=[composite_view],
        )
        export_btn.click(
            fn=export_view,
            inputs=[session_state],
            outputs=[export_file],
        )
        reset_btn.click(
            fn=reset_view,
            inputs=[session_state],
            outputs=[
                photo_state,
                signature_state,
                signature_preview,
                composite_view,
                export_file,
                composite_status,
                steps,
            ],
        ).then(
            fn=lambda: None,
            outputs=[photo_input],
        )

    return interface


if __name__ == "__main__":
    import asyncio
    import sys

    logging.basicConfig(level=logging.INFO)
    # Reduce logging verbosity for asyncio to suppress connection noise
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Windows-specific: Use SelectorEventLoop to avoid ProactorEventLoop issues
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    demo = create_gradio_interface()
    demo.launch(
        share=False,
        show_error=True,
        server_port=7860,
    )
