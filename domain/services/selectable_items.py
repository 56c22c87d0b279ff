from __future__ import annotations

import math
from collections.abc import Collection, Mapping, Sequence

from domain.models import Connection, DiagramNode, SelectableItem
from domain.services.handle_ring import Side, handle_side

CONTROL_OFFSET = 50.0

_CONTROL_VECTORS: dict[Side, tuple[float, float]] = {
    "top": (0.0, -CONTROL_OFFSET),
    "bottom": (0.0, CONTROL_OFFSET),
    "left": (-CONTROL_OFFSET, 0.0),
    "right": (CONTROL_OFFSET, 0.0),
}


def node_center(node: DiagramNode) -> tuple[float, float]:
    return (
        node.position.x + (node.width or 0) / 2,
        node.position.y + (node.height or 0) / 2,
    )


def connection_midpoint(
    connection: Connection, nodes_by_id: Mapping[str, DiagramNode]
) -> tuple[float, float] | None:
    source = nodes_by_id.get(connection.source)
    target = nodes_by_id.get(connection.target)
    if source is None or target is None:
        return None

    source_x, source_y = node_center(source)
    target_x, target_y = node_center(target)
    source_dx, source_dy = _CONTROL_VECTORS[handle_side(connection.source_handle)]
    target_dx, target_dy = _CONTROL_VECTORS[handle_side(connection.target_handle)]

    # B(0.5) = 0.125 P0 + 0.375 P1 + 0.375 P2 + 0.125 P3
    x = (
        0.125 * source_x
        + 0.375 * (source_x + source_dx)
        + 0.375 * (target_x + target_dx)
        + 0.125 * target_x
    )
    y = (
        0.125 * source_y
        + 0.375 * (source_y + source_dy)
        + 0.375 * (target_y + target_dy)
        + 0.125 * target_y
    )
    return x, y


def get_selectable_items(
    nodes: Sequence[DiagramNode], connections: Sequence[Connection]
) -> list[SelectableItem]:
    nodes_by_id = {node.id: node for node in nodes}
    items: list[SelectableItem] = []
    for node in nodes:
        x, y = node_center(node)
        items.append(SelectableItem(id=node.id, x=x, y=y, kind="node"))
    for connection in connections:
        midpoint = connection_midpoint(connection, nodes_by_id)
        if midpoint is None:
            continue
        items.append(
            SelectableItem(id=connection.id, x=midpoint[0], y=midpoint[1], kind="connection")
        )
    return items


def find_closest_node(
    x: float,
    y: float,
    nodes: Sequence[DiagramNode],
    exclude_ids: Collection[str] = (),
) -> DiagramNode | None:
    closest: DiagramNode | None = None
    closest_distance = math.inf
    for node in nodes:
        if node.id in exclude_ids:
            continue
        node_x, node_y = node_center(node)
        distance = math.hypot(node_x - x, node_y - y)
        if distance < closest_distance:
            closest = node
            closest_distance = distance
    return closest
