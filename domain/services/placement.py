from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import DiagramNode, Position

# Grid offsets in units of (width + gap, height + gap), tried in order.
# Vertical displacement is preferred over horizontal, then the ring widens.
PLACEMENT_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, 0),
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (-1, 1),
    (1, -1),
    (-1, -1),
    (0, 2),
    (0, -2),
    (2, 0),
    (-2, 0),
    (2, 1),
    (-2, 1),
    (2, -1),
    (-2, -1),
    (1, 2),
    (-1, 2),
    (1, -2),
    (-1, -2),
)


@dataclass(frozen=True)
class PlacementOptions:
    # Negative padding tolerates that much intrusion before counting a collision.
    padding: float = -10.0
    gap: float = 20.0
    fallback_width: float = 140.0
    fallback_height: float = 80.0


DEFAULT_PLACEMENT_OPTIONS = PlacementOptions()


def rects_overlap(
    ax: float,
    ay: float,
    aw: float,
    ah: float,
    bx: float,
    by: float,
    bw: float,
    bh: float,
    padding: float = 0.0,
) -> bool:
    return not (
        ax + aw + padding <= bx
        or bx + bw + padding <= ax
        or ay + ah + padding <= by
        or by + bh + padding <= ay
    )


def find_unoccupied_position(
    target_x: float,
    target_y: float,
    existing: Sequence[DiagramNode],
    width: float,
    height: float,
    options: PlacementOptions = DEFAULT_PLACEMENT_OPTIONS,
) -> Position:
    obstacles = [node for node in existing if node.kind != "boundary"]
    step_x = width + options.gap
    step_y = height + options.gap

    def collides(x: float, y: float) -> bool:
        for node in obstacles:
            if rects_overlap(
                x,
                y,
                width,
                height,
                node.position.x,
                node.position.y,
                node.width if node.width is not None else options.fallback_width,
                node.height if node.height is not None else options.fallback_height,
                padding=options.padding,
            ):
                return True
        return False

    for column, row in PLACEMENT_OFFSETS:
        x = target_x + column * step_x
        y = target_y + row * step_y
        if not collides(x, y):
            return Position(x=x, y=y)

    return Position(x=target_x, y=target_y)
