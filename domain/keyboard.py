from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Literal

Direction = Literal[
    "left", "right", "up", "down", "up-left", "up-right", "down-left", "down-right"
]
CardinalDirection = Literal["left", "right", "up", "down"]
KeyEventType = Literal["down", "up"]

ARROW_LEFT = "ArrowLeft"
ARROW_RIGHT = "ArrowRight"
ARROW_UP = "ArrowUp"
ARROW_DOWN = "ArrowDown"
ARROW_KEYS = frozenset({ARROW_LEFT, ARROW_RIGHT, ARROW_UP, ARROW_DOWN})

KEY_START_AUTHORING = "d"
KEY_CONFIRM = "Enter"
KEY_CANCEL = "Escape"
KEY_BACK = "Backspace"
KEY_FIT_VIEW = "F"

_ARROW_DIRECTIONS: dict[str, CardinalDirection] = {
    ARROW_LEFT: "left",
    ARROW_RIGHT: "right",
    ARROW_UP: "up",
    ARROW_DOWN: "down",
}


@dataclass(frozen=True)
class KeyEvent:
    key: str
    type: KeyEventType = "down"
    alt: bool = False
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    in_text_field: bool = False

    @property
    def is_arrow(self) -> bool:
        return self.key in ARROW_KEYS

    @property
    def has_platform_modifier(self) -> bool:
        return self.ctrl or self.meta


def arrow_direction(key: str) -> CardinalDirection | None:
    return _ARROW_DIRECTIONS.get(key)


def direction_from_held(keys: Collection[str]) -> Direction | None:
    has_left = ARROW_LEFT in keys
    has_right = ARROW_RIGHT in keys
    has_up = ARROW_UP in keys
    has_down = ARROW_DOWN in keys

    # Diagonal chords win over single axes.
    if has_up and has_left:
        return "up-left"
    if has_up and has_right:
        return "up-right"
    if has_down and has_left:
        return "down-left"
    if has_down and has_right:
        return "down-right"
    if has_left:
        return "left"
    if has_right:
        return "right"
    if has_up:
        return "up"
    if has_down:
        return "down"
    return None
