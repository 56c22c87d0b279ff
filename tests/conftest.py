from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from adapters.memory.host import InMemoryDiagramHost, RecordingCamera
from adapters.memory.scheduling import ManualClock, ManualFrameScheduler
from app.config import AppSettings, NavigationSettings
from domain.models import Diagram
from domain.services.canvas_controller import CanvasController
from tests.helpers.diagram_fixtures import Canvas


def _clear_keynav_env() -> None:
    for key in list(os.environ):
        if key.startswith("KEYNAV_"):
            os.environ.pop(key, None)


_clear_keynav_env()


@pytest.fixture(autouse=True)
def clear_keynav_env() -> Generator[None, None, None]:
    _clear_keynav_env()
    yield
    _clear_keynav_env()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def app_settings_factory() -> Callable[..., AppSettings]:
    def _factory(**navigation_overrides: object) -> AppSettings:
        return AppSettings(navigation=NavigationSettings(**navigation_overrides))

    return _factory


@pytest.fixture
def canvas_factory() -> Callable[..., Canvas]:
    def _factory(diagram: Diagram, **controller_options: object) -> Canvas:
        host = InMemoryDiagramHost(diagram)
        camera = RecordingCamera()
        frames = ManualFrameScheduler()
        clock = ManualClock()
        controller = CanvasController(host, camera, frames, clock, **controller_options)
        return Canvas(host=host, camera=camera, frames=frames, clock=clock, controller=controller)

    return _factory
