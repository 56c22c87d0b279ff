from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import (
    CenterCommand,
    Connection,
    DiagramNode,
    FitViewCommand,
    Viewport,
    ViewportCommand,
)
from domain.services.selectable_items import connection_midpoint


@dataclass(frozen=True)
class ViewportOptions:
    node_padding: float = 50.0
    connection_padding: float = 15.0
    # Keeps the re-centered node clear of the status overlay at the top.
    center_bias_y: float = 100.0
    pan_duration_ms: int = 400
    fallback_node_width: float = 200.0
    fallback_node_height: float = 100.0
    overlay_top_margin: float = 16.0
    overlay_height: float = 80.0
    authoring_trigger_zone: float = 150.0
    authoring_target_ratio: float = 0.4
    authoring_fallback_height: float = 100.0
    authoring_pan_duration_ms: int = 300
    fit_view_padding: float = 0.2
    fit_view_duration_ms: int = 400


DEFAULT_VIEWPORT_OPTIONS = ViewportOptions()


def _outside(
    left: float,
    top: float,
    right: float,
    bottom: float,
    viewport: Viewport,
    padding: float,
) -> bool:
    return (
        left < padding
        or right > viewport.width - padding
        or top < padding
        or bottom > viewport.height - padding
    )


def pan_to_node(
    node: DiagramNode,
    viewport: Viewport,
    options: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS,
) -> CenterCommand | None:
    width = node.width or options.fallback_node_width
    height = node.height or options.fallback_node_height
    screen_x, screen_y = viewport.to_screen(node.position.x, node.position.y)
    screen_width = width * viewport.zoom
    screen_height = height * viewport.zoom

    if not _outside(
        screen_x,
        screen_y,
        screen_x + screen_width,
        screen_y + screen_height,
        viewport,
        options.node_padding,
    ):
        return None

    return CenterCommand(
        x=node.position.x + width / 2,
        y=node.position.y + height / 2 + options.center_bias_y,
        zoom=viewport.zoom,
        duration_ms=options.pan_duration_ms,
    )


def pan_to_connection(
    connection: Connection,
    nodes: Sequence[DiagramNode],
    viewport: Viewport,
    options: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS,
) -> CenterCommand | None:
    midpoint = connection_midpoint(connection, {node.id: node for node in nodes})
    if midpoint is None:
        return None

    screen_x, screen_y = viewport.to_screen(*midpoint)
    if not _outside(screen_x, screen_y, screen_x, screen_y, viewport, options.connection_padding):
        return None

    return CenterCommand(
        x=midpoint[0],
        y=midpoint[1],
        zoom=viewport.zoom,
        duration_ms=options.pan_duration_ms,
    )


def pan_for_authoring(
    node: DiagramNode,
    viewport: Viewport,
    options: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS,
) -> ViewportCommand | None:
    overlay_bottom = options.overlay_top_margin + options.overlay_height
    trigger_zone = overlay_bottom + options.authoring_trigger_zone * max(1.0, viewport.zoom)

    _, node_screen_y = viewport.to_screen(node.position.x, node.position.y)
    if node_screen_y >= trigger_zone:
        return None

    node_screen_height = (node.height or options.authoring_fallback_height) * viewport.zoom
    node_center_y = node_screen_y + node_screen_height / 2
    pan_y = viewport.height * options.authoring_target_ratio - node_center_y

    return ViewportCommand(
        x=viewport.x,
        y=viewport.y + pan_y,
        zoom=viewport.zoom,
        duration_ms=options.authoring_pan_duration_ms,
    )


def fit_view(options: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS) -> FitViewCommand:
    return FitViewCommand(padding=options.fit_view_padding, duration_ms=options.fit_view_duration_ms)
