from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import DiagramNode, NodeKind, Position, Size
from domain.services.placement import (
    DEFAULT_PLACEMENT_OPTIONS,
    PlacementOptions,
    find_unoccupied_position,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertionOptions:
    component_size: Size = Size(140, 80)
    boundary_size: Size = Size(150, 75)
    placement: PlacementOptions = DEFAULT_PLACEMENT_OPTIONS

    def size_for(self, kind: NodeKind) -> Size:
        return self.boundary_size if kind == "boundary" else self.component_size


DEFAULT_INSERTION_OPTIONS = InsertionOptions()


def next_node_id(kind: NodeKind, existing: Sequence[DiagramNode]) -> str:
    prefix = "boundary" if kind == "boundary" else "component"
    taken = {node.id for node in existing}
    index = 1
    while f"{prefix}-{index}" in taken:
        index += 1
    return f"{prefix}-{index}"


def plan_node_insertion(
    kind: NodeKind,
    anchor: Position,
    existing: Sequence[DiagramNode],
    options: InsertionOptions = DEFAULT_INSERTION_OPTIONS,
    node_id: str | None = None,
) -> DiagramNode:
    size = options.size_for(kind)
    target_x = round(anchor.x - size.width / 2)
    target_y = round(anchor.y - size.height / 2)
    position = find_unoccupied_position(
        target_x, target_y, existing, size.width, size.height, options.placement
    )
    new_id = node_id or next_node_id(kind, existing)
    logger.debug(
        "Placing %s %s at (%s, %s) for anchor (%s, %s)",
        kind,
        new_id,
        position.x,
        position.y,
        anchor.x,
        anchor.y,
    )
    return DiagramNode(
        id=new_id,
        kind=kind,
        position=position,
        width=size.width,
        height=size.height,
        selected=True,
    )
