"""Tests for UI update functions and session management.

This module tests the behavioral contracts of the Gradio callbacks without
starting a Gradio server or reaching the network.
"""

import asyncio
from types import SimpleNamespace

import numpy as np
import pytest

from inkflow import ui_updates
from inkflow.gradio_app import initialize_app
from inkflow.models.core_models import AppStep, CalligraphyStyle
from inkflow.models.settings_models import InkflowSettings
from inkflow.ui_updates import (
    _composers,
    _file_managers,
    cleanup_cache,
    cleanup_session,
    compose_view,
    drag_view,
    export_view,
    generate_signature_view,
    get_or_create_composer,
    get_or_create_file_manager,
    load_settings_view,
    photo_selected_view,
    rotation_view,
    save_settings_view,
    scale_view,
)


@pytest.fixture(autouse=True)
def clean_registry(tmp_path, monkeypatch):
    """Isolate session registries and temporary files between tests."""
    monkeypatch.setenv("GRADIO_TEMP_DIR", str(tmp_path))
    _composers.clear()
    _file_managers.clear()
    yield
    cleanup_cache()


@pytest.fixture
def composed_session(photo_uri, signature_uri):
    session_id = "composed"
    asyncio.run(compose_view(session_id, photo_uri, signature_uri))
    return session_id


def test_get_or_create_returns_consistent_instances():
    assert get_or_create_composer("a") is get_or_create_composer("a")
    assert get_or_create_file_manager("a") is get_or_create_file_manager("a")


def test_different_sessions_are_isolated():
    assert get_or_create_composer("a") is not get_or_create_composer("b")


def test_cleanup_session_removes_from_registry():
    get_or_create_composer("s")
    get_or_create_file_manager("s")
    cleanup_session("s")
    assert "s" not in _composers
    assert "s" not in _file_managers


def test_cleanup_session_is_idempotent():
    cleanup_session("never-existed")


def test_cleanup_cache_with_specific_session():
    get_or_create_composer("keep")
    get_or_create_composer("drop")
    cleanup_cache(session_id="drop")
    assert "keep" in _composers
    assert "drop" not in _composers


def test_cleanup_cache_removes_all_sessions():
    for sid in ("1", "2", "3"):
        get_or_create_composer(sid)
        get_or_create_file_manager(sid)
    cleanup_cache()
    assert _composers == {}
    assert _file_managers == {}


def test_settings_round_trip():
    settings, stored, status = save_settings_view(" key ", "")
    assert settings.api_key == "key"
    assert "saved" in status

    loaded, api_key, base_url = load_settings_view(stored)
    assert (api_key, base_url) == ("key", "")
    assert loaded == settings


def test_saved_key_stays_in_saving_browser():
    _, first_browser, _ = save_settings_view("first-key", "https://proxy.example")

    session_a, settings_a, key_a, _ = initialize_app(first_browser)
    session_b, settings_b, key_b, url_b = initialize_app(None)

    assert key_a == "first-key"
    assert settings_a.has_credential
    assert session_a != session_b
    assert (key_b, url_b) == ("", "")
    assert not settings_b.has_credential


def test_unknown_style_stays_on_design():
    uri, preview, error, tabs = generate_signature_view(
        "李白", "not-a-style", InkflowSettings(api_key="k")
    )
    assert uri is None and preview is None
    assert "style" in error
    assert tabs.selected == AppStep.GENERATE_SIGNATURE


def test_photo_selected_advances_to_design():
    path, tabs = photo_selected_view("/tmp/photo.jpg")
    assert path == "/tmp/photo.jpg"
    assert tabs.selected == AppStep.GENERATE_SIGNATURE


def test_no_photo_stays_on_upload():
    path, tabs = photo_selected_view(None)
    assert path is None
    assert tabs.selected == AppStep.UPLOAD_PHOTO


def test_generate_without_key_asks_for_configuration():
    uri, preview, error, tabs = generate_signature_view(
        "李白", CalligraphyStyle.CURSIVE.value, InkflowSettings()
    )
    assert uri is None and preview is None
    assert "API key" in error
    assert tabs.selected == AppStep.GENERATE_SIGNATURE


def test_generate_success_moves_to_composite(monkeypatch, signature_uri):
    def fake_generate(name, style, settings, params):
        return SimpleNamespace(url=signature_uri)

    monkeypatch.setattr(ui_updates, "generate_signature", fake_generate)
    uri, preview, error, tabs = generate_signature_view(
        "李白", CalligraphyStyle.REGULAR.value, InkflowSettings(api_key="k")
    )
    assert uri == signature_uri
    assert preview.shape == (20, 40, 3)
    assert error == ""
    assert tabs.selected == AppStep.COMPOSITE_AND_SAVE


def test_compose_view_renders_and_resets_sliders(photo_uri, signature_uri):
    image, status, scale, rotation = asyncio.run(
        compose_view("s", photo_uri, signature_uri)
    )
    assert image.shape == (60, 80, 3)
    assert status
    assert scale == pytest.approx(0.4)
    assert rotation == 0.0


def test_compose_view_reports_bad_images(photo_uri):
    image, status, _, _ = asyncio.run(
        compose_view("s", photo_uri, "data:image/png;base64,AAAA")
    )
    assert image is None
    assert "Could not load" in status
    assert get_or_create_composer("s").surface is None


def test_slider_views_rerender(composed_session):
    image = scale_view(composed_session, 1.0)
    assert isinstance(image, np.ndarray)
    assert get_or_create_composer(composed_session).placement.scale == 1.0

    rotation_view(composed_session, 1.5)
    assert get_or_create_composer(composed_session).placement.rotation == 1.5


def test_drag_view_moves_signature(composed_session):
    image = drag_view(composed_session, SimpleNamespace(index=[10, 50]))
    placement = get_or_create_composer(composed_session).placement
    assert image.shape == (60, 80, 3)
    assert placement.x == pytest.approx(10 / 80)
    assert placement.y == pytest.approx(50 / 60)


def test_drag_view_before_compose_returns_nothing():
    assert drag_view("empty", SimpleNamespace(index=[1, 1])) is None


def test_export_view_writes_jpeg(composed_session):
    path = export_view(composed_session)
    with open(path, "rb") as f:
        assert f.read(2) == b"\xff\xd8"


def test_export_view_before_compose_returns_none():
    assert export_view("nothing-yet") is None
