from __future__ import annotations

from domain.models import AuthoringOverlay, KeyBinding

CREATION_TITLE = "Creating Data-Flow Connection"
RECONNECTION_TITLE = "Reconnecting Data-Flow"

PHASE_INSTRUCTIONS: dict[str, str] = {
    "source-node": "Select source node",
    "source-handle": "Select source handle",
    "target-node": "Select target node",
    "target-handle": "Select target handle",
}

AUTHORING_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding(keys=("Esc",), label="Cancel"),
    KeyBinding(keys=("⌫",), label="Back"),
    KeyBinding(keys=(), label="Navigate", is_arrow_keys=True),
    KeyBinding(keys=("↵",), label="Confirm"),
)


def build_overlay(creation_phase: str, reconnection_phase: str) -> AuthoringOverlay | None:
    if creation_phase != "idle":
        title, phase = CREATION_TITLE, creation_phase
    elif reconnection_phase != "idle":
        title, phase = RECONNECTION_TITLE, reconnection_phase
    else:
        return None
    return AuthoringOverlay(
        title=title,
        instruction=PHASE_INSTRUCTIONS.get(phase, ""),
        keybindings=AUTHORING_KEYBINDINGS,
    )
