"""Per-browser persistence of the user's API settings.

Settings live in the browser's local storage as a small key-value mapping,
so every device keeps its own API key. They are read when the page loads
and written only when the user explicitly saves.
"""

import logging
import os

import gradio as gr

from inkflow.models.settings_models import InkflowSettings

logger = logging.getLogger(__name__)

API_KEY_KEY = "INKFLOW_API_KEY"
BASE_URL_KEY = "INKFLOW_BASE_URL"

STORAGE_KEY = "inkflow_settings"


def empty_storage() -> dict[str, str]:
    return {API_KEY_KEY: "", BASE_URL_KEY: ""}


def settings_from_storage(stored) -> InkflowSettings:
    """Build settings from the browser's stored mapping.

    Missing or malformed storage yields empty settings; the user can always
    re-enter and save them.
    """
    if not stored:
        return InkflowSettings()
    if not isinstance(stored, dict):
        logger.warning("Ignoring malformed browser settings")
        return InkflowSettings()

    return InkflowSettings(
        api_key=str(stored.get(API_KEY_KEY) or ""),
        base_url=str(stored.get(BASE_URL_KEY) or ""),
    )


def settings_to_storage(settings: InkflowSettings) -> dict[str, str]:
    return {API_KEY_KEY: settings.api_key, BASE_URL_KEY: settings.base_url}


def create_browser_store() -> gr.BrowserState:
    """Create the local-storage component holding the settings.

    Stored values are encrypted with INKFLOW_STORAGE_SECRET when it is set,
    which keeps them readable across server restarts.
    """
    return gr.BrowserState(
        empty_storage(),
        storage_key=STORAGE_KEY,
        secret=os.environ.get("INKFLOW_STORAGE_SECRET") or None,
    )
