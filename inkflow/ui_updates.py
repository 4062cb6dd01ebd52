"""UI update functions for the Gradio interface.

This module provides the callbacks that sit between the Gradio components
and the InkFlow core. Each browser session owns one Composer and one file
manager, kept in module-level registries keyed by session id. Errors from
the core are caught here, logged, and turned into user-facing messages.
"""

import logging

import gradio as gr
import numpy as np
import requests

from inkflow.composer import Composer
from inkflow.errors import ImageDecodeError, SignatureError, SurfaceNotReadyError
from inkflow.file_manager import SessionFileManager
from inkflow.generation import generate_signature
from inkflow.image_loading import load_bitmap
from inkflow.models.core_models import AppStep, CalligraphyStyle
from inkflow.models.settings_models import AppParameters, InkflowSettings
from inkflow.settings_store import settings_from_storage, settings_to_storage

logger = logging.getLogger(__name__)

PARAMETERS = AppParameters()

# Per-session state
_composers: dict[str, Composer] = {}
_file_managers: dict[str, SessionFileManager] = {}


def get_or_create_composer(session_id: str) -> Composer:
    """Return the session's Composer, creating it on first use."""
    if session_id not in _composers:
        _composers[session_id] = Composer(PARAMETERS.composite)
    return _composers[session_id]


def get_or_create_file_manager(session_id: str) -> SessionFileManager:
    """Return the session's file manager, creating it on first use."""
    if session_id not in _file_managers:
        _file_managers[session_id] = SessionFileManager(session_id)
    return _file_managers[session_id]


def cleanup_session(session_id: str) -> None:
    """Release everything held for a session. Safe for unknown sessions."""
    composer = _composers.pop(session_id, None)
    if composer is not None:
        composer.teardown()

    file_manager = _file_managers.pop(session_id, None)
    if file_manager is not None:
        file_manager.cleanup_all()


def cleanup_cache(session_id: str | None = None) -> None:
    """Clean up one session, or every session when no id is given."""
    if session_id is not None:
        cleanup_session(session_id)
        return
    for sid in set(_composers) | set(_file_managers):
        cleanup_session(sid)


# Settings


def load_settings_view(stored: dict | None) -> tuple:
    """Read the settings this browser has stored for the settings panel.

    Returns:
        Tuple of (settings, api_key_text, base_url_text).
    """
    settings = settings_from_storage(stored)
    return settings, settings.api_key, settings.base_url


def save_settings_view(api_key: str, base_url: str) -> tuple:
    """Persist the settings entered by the user in their browser.

    Returns:
        Tuple of (settings, stored_mapping, status_text).
    """
    settings = InkflowSettings(api_key=(api_key or "").strip(), base_url=(base_url or "").strip())
    return settings, settings_to_storage(settings), "✅ Settings saved in this browser."


# Step 1: photo


def photo_selected_view(photo_path: str | None) -> tuple:
    """Accept an uploaded photo and move on to signature design.

    Returns:
        Tuple of (photo_path, tabs_update).
    """
    if not photo_path:
        return None, gr.Tabs(selected=int(AppStep.UPLOAD_PHOTO))
    return photo_path, gr.Tabs(selected=int(AppStep.GENERATE_SIGNATURE))


def sample_photo_view(session_id: str) -> tuple:
    """Fetch a random sample photo and use it as the background.

    Returns:
        Tuple of (photo_path, tabs_update).
    """
    url = PARAMETERS.generation.sample_photo_url
    try:
        response = requests.get(url, timeout=30)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Sample photo download failed: {e}")
        gr.Warning("Could not download a sample photo. Please upload one instead.")
        return None, gr.Tabs(selected=int(AppStep.UPLOAD_PHOTO))

    file_manager = get_or_create_file_manager(session_id)
    path = file_manager.write_file("sample", response.content, "sample.jpg")
    return photo_selected_view(path)


# Step 2: signature


def generate_signature_view(
    name: str, style_value: str, settings: InkflowSettings | None
) -> tuple:
    """Generate a signature and advance to compositing on success.

    Returns:
        Tuple of (signature_uri, preview_image, error_text, tabs_update).
        On failure the uri and preview are None and the user stays on the
        design step with a message describing what went wrong.
    """
    settings = settings or InkflowSettings()
    try:
        style = CalligraphyStyle(style_value)
    except ValueError:
        logger.warning(f"Unknown calligraphy style {style_value!r}")
        return (
            None,
            None,
            "Please choose a calligraphy style.",
            gr.Tabs(selected=int(AppStep.GENERATE_SIGNATURE)),
        )

    try:
        signature = generate_signature(
            name or "", style, settings, PARAMETERS.generation
        )
        preview = load_bitmap(signature.url).pixels
    except SignatureError as e:
        logger.warning(f"Signature generation failed: {e}")
        return None, None, e.user_message, gr.Tabs(selected=int(AppStep.GENERATE_SIGNATURE))
    except ImageDecodeError as e:
        logger.warning(f"Generated signature could not be decoded: {e}")
        return (
            None,
            None,
            "The generated image could not be decoded. Please try again.",
            gr.Tabs(selected=int(AppStep.GENERATE_SIGNATURE)),
        )

    return signature.url, preview, "", gr.Tabs(selected=int(AppStep.COMPOSITE_AND_SAVE))


# Step 3: composite


async def compose_view(
    session_id: str, photo_path: str | None, signature_uri: str | None
) -> tuple:
    """Load the photo and signature into the session's surface.

    Returns:
        Tuple of (composite_image, status_text, scale, rotation). The
        sliders are reset to the initial placement.
    """
    initial = PARAMETERS.composite.initial_placement
    if not photo_path or not signature_uri:
        return None, "", initial.scale, initial.rotation

    composer = get_or_create_composer(session_id)
    try:
        surface = await composer.load(photo_path, signature_uri)
    except ImageDecodeError as e:
        logger.warning(f"Image load failed for session {session_id}: {e}")
        return None, f"⚠️ Could not load images: {e}", initial.scale, initial.rotation

    if surface is None:
        return gr.update(), "", initial.scale, initial.rotation
    return (
        surface.pixels,
        "Click on the photo to move the signature.",
        initial.scale,
        initial.rotation,
    )


def _current_pixels(composer: Composer) -> np.ndarray | None:
    return composer.surface.pixels if composer.surface is not None else None


def scale_view(session_id: str, scale: float):
    """Apply the scale slider and return the re-rendered composite."""
    composer = get_or_create_composer(session_id)
    if not composer.is_ready:
        return gr.update()
    return composer.set_scale(float(scale)).pixels


def rotation_view(session_id: str, rotation: float):
    """Apply the rotation slider and return the re-rendered composite."""
    composer = get_or_create_composer(session_id)
    if not composer.is_ready:
        return gr.update()
    return composer.set_rotation(float(rotation)).pixels


def drag_view(session_id: str, evt: gr.SelectData):
    """Move the signature to the clicked point of the composite image."""
    composer = get_or_create_composer(session_id)
    try:
        x, y = evt.index
        return composer.drag_to(float(x), float(y)).pixels
    except SurfaceNotReadyError:
        return _current_pixels(composer)


def export_view(session_id: str) -> str | None:
    """Export the current composite and return the file to download."""
    composer = get_or_create_composer(session_id)
    try:
        result = composer.export(get_or_create_file_manager(session_id))
    except SurfaceNotReadyError as e:
        logger.warning(f"Export refused for session {session_id}: {e}")
        gr.Warning("The composite is not ready yet.")
        return None
    return result.file_path


def back_to_photo_view(session_id: str) -> tuple:
    """Discard the signature and return to the upload step.

    Returns:
        Tuple of (signature_uri, preview_image, tabs_update).
    """
    get_or_create_composer(session_id).teardown()
    return None, None, gr.Tabs(selected=int(AppStep.UPLOAD_PHOTO))


def reset_view(session_id: str) -> tuple:
    """Start over: drop photo, signature and composite.

    Returns:
        Tuple of (photo_path, signature_uri, preview_image, composite_image,
        export_file, status_text, tabs_update).
    """
    cleanup_session(session_id)
    return None, None, None, None, None, "", gr.Tabs(selected=int(AppStep.UPLOAD_PHOTO))
