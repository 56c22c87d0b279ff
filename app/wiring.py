from __future__ import annotations

import math

from app.config import AppSettings
from domain.models import Size
from domain.ports.host import Camera, Clock, DiagramHost, FrameScheduler
from domain.services.canvas_controller import CanvasController
from domain.services.directional_search import NavigationOptions
from domain.services.node_insertion import InsertionOptions
from domain.services.placement import PlacementOptions
from domain.services.viewport_follower import ViewportOptions


def build_navigation_options(settings: AppSettings) -> NavigationOptions:
    nav = settings.navigation
    return NavigationOptions(
        min_distance=nav.min_distance,
        tolerance_step=nav.tolerance_step,
        max_tolerance=nav.max_tolerance,
        base_angle=math.radians(nav.base_angle_degrees),
        angle_widening=math.radians(nav.angle_widening_degrees),
        angle_reference=nav.angle_reference,
    )


def build_viewport_options(settings: AppSettings) -> ViewportOptions:
    return ViewportOptions(**settings.viewport.model_dump())


def build_insertion_options(settings: AppSettings) -> InsertionOptions:
    placement = settings.placement
    return InsertionOptions(
        component_size=Size(placement.component_width, placement.component_height),
        boundary_size=Size(placement.boundary_width, placement.boundary_height),
        placement=PlacementOptions(
            padding=placement.padding,
            gap=placement.gap,
            fallback_width=placement.component_width,
            fallback_height=placement.component_height,
        ),
    )


def build_controller(
    settings: AppSettings,
    host: DiagramHost,
    camera: Camera,
    frames: FrameScheduler,
    clock: Clock,
) -> CanvasController:
    return CanvasController(
        host,
        camera,
        frames,
        clock,
        navigation=build_navigation_options(settings),
        viewport=build_viewport_options(settings),
        insertion=build_insertion_options(settings),
        navigation_modifier=settings.navigation.modifier,
        debounce_frames=settings.navigation.debounce_frames,
        edit_exit_grace_ms=settings.navigation.edit_exit_grace_ms,
        target_handle_prefix=settings.connections.target_handle_prefix,
    )
