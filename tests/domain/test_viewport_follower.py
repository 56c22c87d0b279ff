from __future__ import annotations

from domain.models import CenterCommand, FitViewCommand, Viewport, ViewportCommand
from domain.services.viewport_follower import (
    fit_view,
    pan_for_authoring,
    pan_to_connection,
    pan_to_node,
)
from tests.helpers.diagram_fixtures import make_connection, make_node

VIEWPORT = Viewport(x=0, y=0, zoom=1, width=1280, height=800)


def test_visible_node_does_not_pan() -> None:
    assert pan_to_node(make_node("a", 100, 100), VIEWPORT) is None


def test_node_near_the_edge_is_centered_with_bias() -> None:
    command = pan_to_node(make_node("a", 1250, 300), VIEWPORT)

    assert command == CenterCommand(x=1300, y=425, zoom=1, duration_ms=400)


def test_node_inside_padding_counts_as_outside() -> None:
    # Top edge at 40 px is within the 50 px inset.
    assert pan_to_node(make_node("a", 100, 40), VIEWPORT) is not None


def test_unsized_node_uses_fallback_box() -> None:
    command = pan_to_node(make_node("a", 1200, 300, width=None, height=None), VIEWPORT)

    assert command == CenterCommand(x=1300, y=450, zoom=1, duration_ms=400)


def test_node_pan_respects_zoom_and_offset() -> None:
    viewport = Viewport(x=-100, y=0, zoom=2, width=1280, height=800)

    command = pan_to_node(make_node("a", 0, 100), viewport)

    assert command == CenterCommand(x=50, y=225, zoom=2, duration_ms=400)


def test_connection_uses_tighter_padding_and_no_bias() -> None:
    nodes = [make_node("a", 0, 0), make_node("b", 300, 0)]
    # Midpoint (200, 25) is within 50 px of the top but outside the 15 px inset.
    assert pan_to_connection(make_connection("f", "a", "b"), nodes, VIEWPORT) is None

    far = [make_node("a", 1200, 300), make_node("b", 1500, 300)]
    command = pan_to_connection(make_connection("f", "a", "b"), far, VIEWPORT)
    assert command == CenterCommand(x=1400, y=325, zoom=1, duration_ms=400)


def test_dangling_connection_does_not_pan() -> None:
    nodes = [make_node("a", 5000, 5000)]

    assert pan_to_connection(make_connection("f", "a", "ghost"), nodes, VIEWPORT) is None


def test_authoring_pan_moves_node_out_from_under_overlay() -> None:
    command = pan_for_authoring(make_node("a", 100, 50), VIEWPORT)

    assert command == ViewportCommand(x=0, y=245, zoom=1, duration_ms=300)


def test_authoring_pan_skips_nodes_below_the_trigger_zone() -> None:
    assert pan_for_authoring(make_node("a", 100, 300), VIEWPORT) is None


def test_authoring_pan_in_screen_space_when_zoomed() -> None:
    viewport = Viewport(x=0, y=10, zoom=2, width=1280, height=800)

    # Trigger zone grows to 96 + 300; node top lands at 310 on screen.
    command = pan_for_authoring(make_node("a", 0, 150), viewport)

    assert command == ViewportCommand(x=0, y=-30, zoom=2, duration_ms=300)


def test_authoring_pan_fallback_height() -> None:
    command = pan_for_authoring(make_node("a", 0, 0, width=None, height=None), VIEWPORT)

    assert command == ViewportCommand(x=0, y=270, zoom=1, duration_ms=300)


def test_fit_view_command() -> None:
    assert fit_view() == FitViewCommand(padding=0.2, duration_ms=400)
