from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

DEFAULT_CONFIG_PATH = Path("config/keynav.yaml")
CONFIG_PATH_ENV = "KEYNAV_CONFIG_PATH"


class NavigationSettings(BaseModel):
    min_distance: float = 20.0
    tolerance_step: float = Field(default=50.0, gt=0)
    max_tolerance: float = 500.0
    base_angle_degrees: float = 30.0
    angle_widening_degrees: float = 30.0
    angle_reference: float = Field(default=500.0, gt=0)
    modifier: Literal["none", "alt"] = "none"
    debounce_frames: int = Field(default=2, ge=1)
    edit_exit_grace_ms: float = Field(default=100.0, ge=0)

    @field_validator("modifier", mode="before")
    @classmethod
    def normalize_modifier(cls, value: object) -> str:
        return str(value).strip().lower() if value else "none"


class ViewportSettings(BaseModel):
    node_padding: float = 50.0
    connection_padding: float = 15.0
    center_bias_y: float = 100.0
    pan_duration_ms: int = 400
    fallback_node_width: float = 200.0
    fallback_node_height: float = 100.0
    overlay_top_margin: float = 16.0
    overlay_height: float = 80.0
    authoring_trigger_zone: float = 150.0
    authoring_target_ratio: float = Field(default=0.4, ge=0, le=1)
    authoring_fallback_height: float = 100.0
    authoring_pan_duration_ms: int = 300
    fit_view_padding: float = 0.2
    fit_view_duration_ms: int = 400


class PlacementSettings(BaseModel):
    padding: float = -10.0
    gap: float = 20.0
    component_width: float = 140.0
    component_height: float = 80.0
    boundary_width: float = 150.0
    boundary_height: float = 75.0


class ConnectionSettings(BaseModel):
    target_handle_prefix: str = ""


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KEYNAV_", env_nested_delimiter="__")

    navigation: NavigationSettings = NavigationSettings()
    viewport: ViewportSettings = ViewportSettings()
    placement: PlacementSettings = PlacementSettings()
    connections: ConnectionSettings = ConnectionSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Precedence: explicit arguments, KEYNAV_* variables, the YAML file.
        if cls._yaml_path is None:
            return init_settings, env_settings
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path),
        )


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    if config_path is None and os.getenv(CONFIG_PATH_ENV):
        config_path = Path(os.environ[CONFIG_PATH_ENV])
    if config_path is None:
        return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.is_file() else None
    if not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)
    return config_path


def load_settings(config_path: Path | None = None) -> AppSettings:
    previous = AppSettings._yaml_path
    AppSettings._yaml_path = resolve_config_path(config_path)
    try:
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
