from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass

from domain.keyboard import CardinalDirection
from domain.models import DiagramNode
from domain.ports.host import Camera, DiagramHost
from domain.services.directional_search import (
    DEFAULT_NAVIGATION_OPTIONS,
    NavigationOptions,
    find_closest_node_in_direction,
)
from domain.services.selectable_items import node_center
from domain.services.viewport_follower import (
    DEFAULT_VIEWPORT_OPTIONS,
    ViewportOptions,
    pan_for_authoring,
    pan_to_node,
)


@dataclass(frozen=True)
class AuthoringContext:
    host: DiagramHost
    camera: Camera
    navigation: NavigationOptions = DEFAULT_NAVIGATION_OPTIONS
    viewport: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS
    target_handle_prefix: str = ""

    def find_node(self, node_id: str | None) -> DiagramNode | None:
        if node_id is None:
            return None
        return next((node for node in self.host.nodes() if node.id == node_id), None)

    def nodes_exist(self, *node_ids: str | None) -> bool:
        known = {node.id for node in self.host.nodes()}
        return all(node_id is not None and node_id in known for node_id in node_ids)

    def connectable_nodes(self) -> list[DiagramNode]:
        return connectable_nodes(self.host.nodes())

    def move_node_focus(
        self,
        focused_id: str,
        direction: CardinalDirection,
        exclude_ids: Collection[str],
    ) -> str | None:
        current = self.find_node(focused_id)
        if current is None:
            return None
        origin_x, origin_y = node_center(current)
        target = find_closest_node_in_direction(
            origin_x,
            origin_y,
            direction,
            self.connectable_nodes(),
            exclude_ids,
            self.navigation,
        )
        if target is None:
            return None
        command = pan_to_node(target, self.camera.viewport(), self.viewport)
        if command is not None:
            self.camera.pan(command)
        return target.id

    def reveal_for_authoring(self, node: DiagramNode) -> None:
        command = pan_for_authoring(node, self.camera.viewport(), self.viewport)
        if command is not None:
            self.camera.pan(command)


def connectable_nodes(nodes: Sequence[DiagramNode]) -> list[DiagramNode]:
    return [node for node in nodes if node.kind == "component"]
