from __future__ import annotations

import logging

from domain.keyboard import Direction, direction_from_held
from domain.models import SelectableItem, SelectionChange
from domain.ports.host import Camera, DiagramHost, FrameScheduler
from domain.services.directional_search import (
    DEFAULT_NAVIGATION_OPTIONS,
    NavigationOptions,
    find_closest_in_direction,
)
from domain.services.selectable_items import (
    connection_midpoint,
    get_selectable_items,
    node_center,
)
from domain.services.viewport_follower import (
    DEFAULT_VIEWPORT_OPTIONS,
    ViewportOptions,
    pan_to_connection,
    pan_to_node,
)

logger = logging.getLogger(__name__)


class SelectionNavigator:
    def __init__(
        self,
        host: DiagramHost,
        camera: Camera,
        frames: FrameScheduler,
        *,
        navigation: NavigationOptions = DEFAULT_NAVIGATION_OPTIONS,
        viewport: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS,
        debounce_frames: int = 2,
    ) -> None:
        if debounce_frames < 1:
            msg = f"debounce_frames must be at least 1, got {debounce_frames}"
            raise ValueError(msg)
        self.host = host
        self.camera = camera
        self.frames = frames
        self.navigation = navigation
        self.viewport = viewport
        self.debounce_frames = debounce_frames
        self._held: set[str] = set()
        self._pending: int | None = None

    @property
    def held_keys(self) -> frozenset[str]:
        return frozenset(self._held)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def key_down(self, key: str) -> None:
        self._held.add(key)
        self._cancel_pending()
        self._schedule(self.debounce_frames)

    def key_up(self, key: str) -> None:
        self._held.discard(key)
        self._cancel_pending()

    def reset(self) -> None:
        self._held.clear()
        self._cancel_pending()

    def navigate(self, direction: Direction) -> SelectableItem | None:
        current = self._current_item()
        if current is None:
            return None

        nodes = self.host.nodes()
        connections = self.host.connections()
        candidates = [
            item
            for item in get_selectable_items(nodes, connections)
            if not (item.id == current.id and item.kind == current.kind)
        ]
        target = find_closest_in_direction(
            current.x, current.y, direction, candidates, self.navigation
        )
        if target is None:
            logger.debug("No item %s of %s %s", direction, current.kind, current.id)
            return None

        logger.debug("Selection %s %s -> %s %s", current.kind, current.id, target.kind, target.id)
        self.host.set_selection(SelectionChange.for_item(target))
        self._follow(target)
        return target

    def _schedule(self, remaining: int) -> None:
        def tick() -> None:
            if remaining > 1:
                self._pending = None
                self._schedule(remaining - 1)
                return
            self._pending = None
            self._perform()

        self._pending = self.frames.request_frame(tick)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self.frames.cancel_frame(self._pending)
            self._pending = None

    def _perform(self) -> None:
        direction = direction_from_held(self._held)
        if direction is None:
            return
        self.navigate(direction)

    def _current_item(self) -> SelectableItem | None:
        nodes = self.host.nodes()
        selected_nodes = [node for node in nodes if node.selected]
        if selected_nodes:
            node = selected_nodes[0]
            x, y = node_center(node)
            return SelectableItem(id=node.id, x=x, y=y, kind="node")

        selected_connections = [c for c in self.host.connections() if c.selected]
        if not selected_connections:
            return None
        connection = selected_connections[0]
        midpoint: tuple[float, float] | None = connection_midpoint(
            connection, {node.id: node for node in nodes}
        )
        if midpoint is None:
            return None
        return SelectableItem(id=connection.id, x=midpoint[0], y=midpoint[1], kind="connection")

    def _follow(self, item: SelectableItem) -> None:
        viewport = self.camera.viewport()
        nodes = self.host.nodes()
        if item.kind == "node":
            node = next((n for n in nodes if n.id == item.id), None)
            command = pan_to_node(node, viewport, self.viewport) if node is not None else None
        else:
            connection = next((c for c in self.host.connections() if c.id == item.id), None)
            command = (
                pan_to_connection(connection, nodes, viewport, self.viewport)
                if connection is not None
                else None
            )
        if command is not None:
            self.camera.pan(command)
