from __future__ import annotations

from collections.abc import Callable

from domain.models import ConnectRequest, FitViewCommand, NodeHints, Position
from domain.services.authoring_overlay import (
    AUTHORING_KEYBINDINGS,
    CREATION_TITLE,
    RECONNECTION_TITLE,
)
from tests.helpers.diagram_fixtures import (
    Canvas,
    make_connection,
    make_diagram,
    make_node,
    press,
    release,
    tap_keys,
    two_nodes,
)

CanvasFactory = Callable[..., Canvas]


def _selected_connection_canvas(canvas_factory: CanvasFactory) -> Canvas:
    return canvas_factory(
        make_diagram(
            [make_node("a", 0, 300), make_node("b", 400, 300)],
            [make_connection("f", "a", "b", selected=True)],
        )
    )


def test_arrow_keys_move_selection_through_debounce(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())

    assert canvas.controller.handle_key(press("ArrowRight"))
    canvas.frames.run_frames(2)
    assert not canvas.controller.handle_key(release("ArrowRight"))

    assert canvas.host.selected_node_ids() == ["b"]


def test_creation_takes_and_returns_input_ownership(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())
    controller = canvas.controller

    assert controller.handle_key(press("d"))
    assert controller.owner == "creation"
    overlay = controller.overlay
    assert overlay is not None
    assert overlay.title == CREATION_TITLE
    assert overlay.instruction == "Select source handle"
    assert overlay.keybindings == AUTHORING_KEYBINDINGS

    tap_keys(controller, ["Enter", "Enter", "Enter"])

    assert canvas.host.connect_requests == [
        ConnectRequest(source="b", target="a", source_handle="top-1", target_handle="top-1")
    ]
    assert controller.owner == "selection"
    assert controller.overlay is None


def test_arrows_drive_the_owner_not_the_selection(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())
    controller = canvas.controller

    controller.handle_key(press("d"))
    assert controller.handle_key(press("ArrowRight"))
    assert not controller.handle_key(release("ArrowRight"))

    assert canvas.frames.pending == 0
    assert controller.creation.state.focused_handle_id == "top-2"
    assert canvas.host.selected_node_ids() == ["a"]


def test_d_falls_back_to_reconnection(canvas_factory: CanvasFactory) -> None:
    canvas = _selected_connection_canvas(canvas_factory)
    controller = canvas.controller

    assert controller.handle_key(press("d"))

    assert controller.owner == "reconnection"
    assert controller.overlay is not None
    assert controller.overlay.title == RECONNECTION_TITLE
    assert controller.overlay.instruction == "Select source node"
    assert canvas.host.hints["a"] == NodeHints(
        is_focused_for_connection=True, is_in_connection_authoring=True
    )
    assert canvas.host.hints["b"] == NodeHints(is_in_connection_authoring=True)

    tap_keys(controller, ["Enter"] * 4)

    assert len(canvas.host.connection_updates) == 1
    assert controller.owner == "selection"


def test_d_without_selection_is_not_consumed(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes(selected=""))

    assert not canvas.controller.handle_key(press("d"))
    assert not canvas.controller.handle_key(press("d", shift=True))
    assert canvas.controller.owner == "selection"


def test_escape_cancels_and_clears_hints(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())
    controller = canvas.controller

    controller.handle_key(press("d"))
    assert canvas.host.hints["a"] == NodeHints(
        focused_handle_id="top-1", is_in_connection_authoring=True, is_handle_selection_mode=True
    )
    controller.handle_key(press("Enter"))
    assert canvas.host.hints["b"] == NodeHints(is_focused_for_connection=True)

    assert controller.handle_key(press("Escape"))

    assert controller.owner == "selection"
    assert set(canvas.host.hints.values()) == {NodeHints()}
    assert canvas.host.connect_requests == []


def test_boundaries_get_empty_hints(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(
        make_diagram(
            [
                make_node("a", 0, 300, selected=True),
                make_node("box", 0, 500, kind="boundary"),
            ]
        )
    )

    canvas.controller.handle_key(press("d"))

    assert canvas.host.hints["box"] == NodeHints()


def test_input_is_ignored_while_editing_and_during_grace(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())
    controller = canvas.controller

    controller.set_editing_mode(True)
    assert not controller.handle_key(press("ArrowRight"))
    assert not controller.handle_key(press("d"))

    controller.set_editing_mode(False)
    assert not controller.handle_key(press("ArrowRight"))
    canvas.clock.advance(0.05)
    assert controller.in_edit_exit_grace()
    assert not controller.handle_key(press("d"))

    canvas.clock.advance(0.06)
    assert not controller.in_edit_exit_grace()
    assert controller.handle_key(press("ArrowRight"))


def test_text_fields_and_platform_modifiers_block_input(canvas_factory: CanvasFactory) -> None:
    controller = canvas_factory(two_nodes()).controller

    assert not controller.handle_key(press("ArrowRight", in_text_field=True))
    assert not controller.handle_key(press("ArrowRight", ctrl=True))
    assert not controller.handle_key(press("d", meta=True))
    assert controller.owner == "selection"


def test_navigation_modifier(canvas_factory: CanvasFactory) -> None:
    plain = canvas_factory(two_nodes()).controller
    assert not plain.handle_key(press("ArrowRight", alt=True))
    assert not plain.handle_key(press("ArrowRight", shift=True))

    alt = canvas_factory(two_nodes(), navigation_modifier="alt").controller
    assert not alt.handle_key(press("ArrowRight"))
    assert alt.handle_key(press("ArrowRight", alt=True))


def test_shift_f_fits_the_view(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())

    assert canvas.controller.handle_key(press("F", shift=True))

    assert canvas.camera.commands == [FitViewCommand(padding=0.2, duration_ms=400)]


def test_sync_releases_ownership_when_selection_disappears(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())
    controller = canvas.controller

    controller.handle_key(press("d"))
    canvas.host.clear_selection()
    controller.sync()

    assert controller.owner == "selection"
    assert not controller.creation.is_active


def test_cancel_returns_every_machine_to_idle(canvas_factory: CanvasFactory) -> None:
    canvas = _selected_connection_canvas(canvas_factory)
    controller = canvas.controller

    controller.handle_key(press("d"))
    controller.cancel()

    assert controller.owner == "selection"
    assert not controller.reconnection.is_active
    assert controller.overlay is None


def test_insert_node_places_and_selects(canvas_factory: CanvasFactory) -> None:
    canvas = canvas_factory(two_nodes())

    node = canvas.controller.insert_node("component", Position(x=50, y=325))

    assert node.id == "component-1"
    assert node.position == Position(x=-20, y=385)
    assert canvas.host.selected_node_ids() == ["component-1"]
