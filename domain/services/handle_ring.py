from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from domain.keyboard import CardinalDirection
from domain.models import strip_handle_prefix

Side = Literal["top", "right", "bottom", "left"]


@dataclass(frozen=True)
class Handle:
    id: str
    side: Side
    offset: float


# Every node exposes the same 12 handles, three per side.
HANDLES: tuple[Handle, ...] = (
    Handle("top-1", "top", 0.0),
    Handle("top-2", "top", 0.33),
    Handle("top-3", "top", 0.66),
    Handle("right-1", "right", 0.0),
    Handle("right-2", "right", 0.33),
    Handle("right-3", "right", 0.66),
    Handle("bottom-1", "bottom", 0.0),
    Handle("bottom-2", "bottom", 0.33),
    Handle("bottom-3", "bottom", 0.66),
    Handle("left-1", "left", 0.0),
    Handle("left-2", "left", 0.33),
    Handle("left-3", "left", 0.66),
)

DEFAULT_HANDLE_ID = HANDLES[0].id

CORNER_HANDLES = frozenset({"top-1", "top-3", "bottom-1", "bottom-3"})
MIDDLE_HANDLES = frozenset({"top-2", "bottom-2", "left-2", "right-2"})
EDGE_HANDLES = frozenset({"left-1", "left-3", "right-1", "right-3"})
SIDES: tuple[Side, ...] = ("top", "right", "bottom", "left")

# (up, down, left, right)
_CORNER_MOVES: dict[str, tuple[str, str, str, str]] = {
    "top-1": ("bottom-1", "left-1", "left-1", "top-2"),
    "top-3": ("bottom-3", "right-1", "top-2", "right-1"),
    "bottom-1": ("left-3", "top-1", "left-3", "bottom-2"),
    "bottom-3": ("right-3", "top-3", "bottom-2", "right-3"),
}

_MIDDLE_MOVES: dict[str, tuple[str, str, str, str]] = {
    "top-2": ("bottom-2", "bottom-2", "top-1", "top-3"),
    "bottom-2": ("top-2", "top-2", "bottom-1", "bottom-3"),
    "left-2": ("left-1", "left-3", "right-2", "right-2"),
    "right-2": ("right-1", "right-3", "left-2", "left-2"),
}

_EDGE_MOVES: dict[str, tuple[str, str, str, str]] = {
    "left-1": ("top-1", "left-2", "right-1", "top-1"),
    "left-3": ("left-2", "bottom-1", "right-3", "bottom-1"),
    "right-1": ("top-3", "right-2", "top-3", "left-1"),
    "right-3": ("right-2", "bottom-3", "bottom-3", "left-3"),
}

_DIRECTION_INDEX: dict[str, int] = {"up": 0, "down": 1, "left": 2, "right": 3}


def get_next_handle(current_handle_id: str, direction: CardinalDirection) -> str:
    index = _DIRECTION_INDEX[direction]
    if current_handle_id in CORNER_HANDLES:
        return _CORNER_MOVES[current_handle_id][index]
    if current_handle_id in MIDDLE_HANDLES:
        return _MIDDLE_MOVES[current_handle_id][index]
    if current_handle_id in EDGE_HANDLES:
        return _EDGE_MOVES[current_handle_id][index]
    # Unknown ids restart the ring.
    return DEFAULT_HANDLE_ID


def handle_side(handle_id: str | None) -> Side:
    clean_id = strip_handle_prefix(handle_id)
    if not clean_id:
        return "right"
    for side in SIDES:
        if clean_id.startswith(f"{side}-"):
            return side
    return "right"
