from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

from domain.keyboard import (
    KEY_BACK,
    KEY_CANCEL,
    KEY_CONFIRM,
    CardinalDirection,
    KeyEvent,
    arrow_direction,
)
from domain.models import ConnectRequest
from domain.services.authoring import AuthoringContext
from domain.services.handle_ring import DEFAULT_HANDLE_ID, get_next_handle
from domain.services.selectable_items import find_closest_node, node_center

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreationIdle:
    phase: ClassVar[str] = "idle"


@dataclass(frozen=True)
class SelectingSourceHandle:
    phase: ClassVar[str] = "source-handle"
    source_element_id: str
    focused_handle_id: str


@dataclass(frozen=True)
class SelectingTargetNode:
    phase: ClassVar[str] = "target-node"
    source_element_id: str
    source_handle_id: str
    focused_element_id: str | None


@dataclass(frozen=True)
class SelectingTargetHandle:
    phase: ClassVar[str] = "target-handle"
    source_element_id: str
    source_handle_id: str
    target_element_id: str
    focused_handle_id: str


CreationState = (
    CreationIdle | SelectingSourceHandle | SelectingTargetNode | SelectingTargetHandle
)

CREATION_IDLE = CreationIdle()


@dataclass(frozen=True)
class CreationSnapshot:
    phase: str
    source_element_id: str | None = None
    source_handle_id: str | None = None
    focused_handle_id: str | None = None
    target_element_id: str | None = None
    focused_element_id: str | None = None


class ConnectionCreationMachine:
    """Keyboard protocol that authors a new connection from the selected node.

    idle -> source-handle -> target-node -> target-handle -> idle, emitting a
    connect request on the last confirmation. The request points from the
    chosen target back to the source node, which is the host's edge direction.
    """

    def __init__(self, context: AuthoringContext) -> None:
        self.context = context
        self._state: CreationState = CREATION_IDLE

    @property
    def state(self) -> CreationState:
        return self._state

    @property
    def is_active(self) -> bool:
        return not isinstance(self._state, CreationIdle)

    def snapshot(self) -> CreationSnapshot:
        state = self._state
        if isinstance(state, SelectingSourceHandle):
            return CreationSnapshot(
                phase=state.phase,
                source_element_id=state.source_element_id,
                focused_handle_id=state.focused_handle_id,
            )
        if isinstance(state, SelectingTargetNode):
            return CreationSnapshot(
                phase=state.phase,
                source_element_id=state.source_element_id,
                source_handle_id=state.source_handle_id,
                focused_element_id=state.focused_element_id,
            )
        if isinstance(state, SelectingTargetHandle):
            return CreationSnapshot(
                phase=state.phase,
                source_element_id=state.source_element_id,
                source_handle_id=state.source_handle_id,
                target_element_id=state.target_element_id,
                focused_handle_id=state.focused_handle_id,
            )
        return CreationSnapshot(phase=state.phase)

    def can_start(self) -> bool:
        if self.is_active:
            return False
        host = self.context.host
        selected_nodes = [node for node in host.nodes() if node.selected]
        if len(selected_nodes) != 1 or selected_nodes[0].kind != "component":
            return False
        return not any(connection.selected for connection in host.connections())

    def start(self) -> bool:
        if not self.can_start():
            return False
        source = next(node for node in self.context.host.nodes() if node.selected)
        self.context.reveal_for_authoring(source)
        self._transition(
            SelectingSourceHandle(source_element_id=source.id, focused_handle_id=DEFAULT_HANDLE_ID)
        )
        return True

    def handle_key(self, event: KeyEvent) -> bool:
        if not self.is_active or event.type != "down":
            return False
        if event.key == KEY_CANCEL:
            self.cancel()
            return True
        if event.key == KEY_BACK:
            self.back()
            return True
        if event.key == KEY_CONFIRM:
            self.confirm()
            return True
        direction = arrow_direction(event.key)
        if direction is not None:
            self.move(direction)
            return True
        return False

    def cancel(self) -> None:
        if self.is_active:
            logger.debug("Connection creation cancelled in phase %s", self._state.phase)
        self._state = CREATION_IDLE

    def sync(self) -> bool:
        state = self._state
        if isinstance(state, CreationIdle):
            return False
        source = self.context.find_node(state.source_element_id)
        if source is not None and source.selected:
            return False
        logger.warning(
            "Aborting connection creation: source node %s is gone or deselected",
            state.source_element_id,
        )
        self._state = CREATION_IDLE
        return True

    def confirm(self) -> None:
        state = self._state
        if isinstance(state, SelectingSourceHandle):
            if not self._ensure_nodes(state.source_element_id):
                return
            self._transition(
                SelectingTargetNode(
                    source_element_id=state.source_element_id,
                    source_handle_id=state.focused_handle_id,
                    focused_element_id=self._initial_target(state.source_element_id),
                )
            )
        elif isinstance(state, SelectingTargetNode):
            if state.focused_element_id is None:
                return
            if not self._ensure_nodes(state.source_element_id, state.focused_element_id):
                return
            self._transition(
                SelectingTargetHandle(
                    source_element_id=state.source_element_id,
                    source_handle_id=state.source_handle_id,
                    target_element_id=state.focused_element_id,
                    focused_handle_id=DEFAULT_HANDLE_ID,
                )
            )
        elif isinstance(state, SelectingTargetHandle):
            if not self._ensure_nodes(state.source_element_id, state.target_element_id):
                return
            request = ConnectRequest(
                source=state.target_element_id,
                target=state.source_element_id,
                source_handle=state.focused_handle_id,
                target_handle=f"{self.context.target_handle_prefix}{state.source_handle_id}",
            )
            logger.info(
                "Creating connection %s:%s -> %s:%s",
                request.source,
                request.source_handle,
                request.target,
                request.target_handle,
            )
            self._state = CREATION_IDLE
            self.context.host.connect(request)

    def back(self) -> None:
        state = self._state
        if isinstance(state, SelectingSourceHandle):
            self.cancel()
        elif isinstance(state, SelectingTargetNode):
            self._transition(
                SelectingSourceHandle(
                    source_element_id=state.source_element_id,
                    focused_handle_id=state.source_handle_id,
                )
            )
        elif isinstance(state, SelectingTargetHandle):
            self._transition(
                SelectingTargetNode(
                    source_element_id=state.source_element_id,
                    source_handle_id=state.source_handle_id,
                    focused_element_id=state.target_element_id,
                )
            )

    def move(self, direction: CardinalDirection) -> None:
        state = self._state
        if isinstance(state, SelectingSourceHandle):
            self._state = SelectingSourceHandle(
                source_element_id=state.source_element_id,
                focused_handle_id=get_next_handle(state.focused_handle_id, direction),
            )
        elif isinstance(state, SelectingTargetHandle):
            self._state = SelectingTargetHandle(
                source_element_id=state.source_element_id,
                source_handle_id=state.source_handle_id,
                target_element_id=state.target_element_id,
                focused_handle_id=get_next_handle(state.focused_handle_id, direction),
            )
        elif isinstance(state, SelectingTargetNode) and state.focused_element_id is not None:
            next_id = self.context.move_node_focus(
                state.focused_element_id, direction, exclude_ids=(state.source_element_id,)
            )
            if next_id is not None:
                self._state = SelectingTargetNode(
                    source_element_id=state.source_element_id,
                    source_handle_id=state.source_handle_id,
                    focused_element_id=next_id,
                )

    def _initial_target(self, source_id: str) -> str | None:
        source = self.context.find_node(source_id)
        if source is None:
            return None
        x, y = node_center(source)
        closest = find_closest_node(x, y, self.context.connectable_nodes(), exclude_ids=(source_id,))
        return closest.id if closest is not None else None

    def _ensure_nodes(self, *node_ids: str) -> bool:
        if self.context.nodes_exist(*node_ids):
            return True
        logger.warning(
            "Aborting connection creation in phase %s: node missing among %s",
            self._state.phase,
            ", ".join(node_ids),
        )
        self._state = CREATION_IDLE
        return False

    def _transition(self, state: CreationState) -> None:
        logger.debug("Connection creation %s -> %s", self._state.phase, state.phase)
        self._state = state
