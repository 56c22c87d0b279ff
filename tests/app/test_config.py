from __future__ import annotations

import math
from collections.abc import Callable
from pathlib import Path

import pytest

from adapters.memory.host import InMemoryDiagramHost, RecordingCamera
from adapters.memory.scheduling import ManualClock, ManualFrameScheduler
from app.config import AppSettings, load_settings, resolve_config_path
from app.wiring import (
    build_controller,
    build_insertion_options,
    build_navigation_options,
    build_viewport_options,
)
from domain.models import Size
from domain.services.directional_search import NavigationOptions
from domain.services.viewport_follower import ViewportOptions


def _write_yaml(path: Path) -> Path:
    path.write_text(
        "\n".join(
            [
                "navigation:",
                "  modifier: alt",
                "  debounce_frames: 3",
                "placement:",
                "  component_width: 160",
                "connections:",
                "  target_handle_prefix: target-",
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_defaults_match_domain_defaults(app_settings: AppSettings) -> None:
    assert app_settings.navigation.modifier == "none"
    assert app_settings.navigation.debounce_frames == 2
    assert app_settings.connections.target_handle_prefix == ""
    assert build_viewport_options(app_settings) == ViewportOptions()

    navigation = build_navigation_options(app_settings)
    defaults = NavigationOptions()
    assert navigation.tolerance_bands() == defaults.tolerance_bands()
    assert navigation.base_angle == pytest.approx(math.pi / 6)
    assert navigation.angle_widening == pytest.approx(defaults.angle_widening)


def test_yaml_file_overrides_defaults(tmp_path: Path) -> None:
    settings = load_settings(_write_yaml(tmp_path / "keynav.yaml"))

    assert settings.navigation.modifier == "alt"
    assert settings.navigation.debounce_frames == 3
    assert settings.navigation.min_distance == 20
    assert settings.connections.target_handle_prefix == "target-"
    assert build_insertion_options(settings).component_size == Size(160, 80)


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYNAV_CONFIG_PATH", str(_write_yaml(tmp_path / "keynav.yaml")))

    assert load_settings().navigation.debounce_frames == 3


def test_environment_beats_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYNAV_NAVIGATION__MODIFIER", "NONE")
    monkeypatch.setenv("KEYNAV_VIEWPORT__PAN_DURATION_MS", "250")

    settings = load_settings(_write_yaml(tmp_path / "keynav.yaml"))

    assert settings.navigation.modifier == "none"
    assert settings.navigation.debounce_frames == 3
    assert settings.viewport.pan_duration_ms == 250


def test_missing_explicit_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_settings(tmp_path / "missing.yaml")


def test_invalid_values_are_rejected(
    app_settings_factory: Callable[..., AppSettings],
) -> None:
    with pytest.raises(ValueError):
        app_settings_factory(debounce_frames=0)
    with pytest.raises(ValueError):
        app_settings_factory(modifier="ctrl")


def test_build_controller_applies_settings(tmp_path: Path) -> None:
    settings = load_settings(_write_yaml(tmp_path / "keynav.yaml"))

    controller = build_controller(
        settings, InMemoryDiagramHost(), RecordingCamera(), ManualFrameScheduler(), ManualClock()
    )

    assert controller.navigation_modifier == "alt"
    assert controller.navigator.debounce_frames == 3
    assert controller.creation.context.target_handle_prefix == "target-"


def test_resolve_config_path_prefers_argument_then_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert resolve_config_path() is None

    from_env = _write_yaml(tmp_path / "env.yaml")
    explicit = _write_yaml(tmp_path / "explicit.yaml")
    monkeypatch.setenv("KEYNAV_CONFIG_PATH", str(from_env))

    assert resolve_config_path() == from_env
    assert resolve_config_path(explicit) == explicit

    monkeypatch.setenv("KEYNAV_CONFIG_PATH", str(tmp_path / "gone.yaml"))
    with pytest.raises(FileNotFoundError, match="gone.yaml"):
        resolve_config_path()
