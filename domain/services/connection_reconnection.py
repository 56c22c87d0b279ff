from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import ClassVar

from domain.keyboard import (
    KEY_BACK,
    KEY_CANCEL,
    KEY_CONFIRM,
    CardinalDirection,
    KeyEvent,
    arrow_direction,
)
from domain.models import Connection, ConnectionUpdate, strip_handle_prefix
from domain.services.authoring import AuthoringContext
from domain.services.handle_ring import DEFAULT_HANDLE_ID, get_next_handle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointDraft:
    connection_id: str
    source_element_id: str
    source_handle_id: str | None
    target_element_id: str
    target_handle_id: str | None


@dataclass(frozen=True)
class ReconnectIdle:
    phase: ClassVar[str] = "idle"


@dataclass(frozen=True)
class SelectingSourceNode:
    phase: ClassVar[str] = "source-node"
    draft: EndpointDraft
    focused_element_id: str


@dataclass(frozen=True)
class SelectingSourceHandle:
    phase: ClassVar[str] = "source-handle"
    draft: EndpointDraft
    focused_handle_id: str


@dataclass(frozen=True)
class SelectingTargetNode:
    phase: ClassVar[str] = "target-node"
    draft: EndpointDraft
    focused_element_id: str


@dataclass(frozen=True)
class SelectingTargetHandle:
    phase: ClassVar[str] = "target-handle"
    draft: EndpointDraft
    focused_handle_id: str


ReconnectionState = (
    ReconnectIdle
    | SelectingSourceNode
    | SelectingSourceHandle
    | SelectingTargetNode
    | SelectingTargetHandle
)

RECONNECT_IDLE = ReconnectIdle()


class ConnectionReconnectionMachine:
    """Keyboard protocol that re-points both ends of the selected connection.

    idle -> source-node -> source-handle -> target-node -> target-handle -> idle.
    Every phase starts focused on the connection's current endpoint, so
    accepting all defaults writes back the current endpoints.
    """

    def __init__(self, context: AuthoringContext) -> None:
        self.context = context
        self._state: ReconnectionState = RECONNECT_IDLE

    @property
    def state(self) -> ReconnectionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return not isinstance(self._state, ReconnectIdle)

    @property
    def draft(self) -> EndpointDraft | None:
        state = self._state
        return None if isinstance(state, ReconnectIdle) else state.draft

    def can_start(self) -> bool:
        if self.is_active:
            return False
        host = self.context.host
        selected = [connection for connection in host.connections() if connection.selected]
        if len(selected) != 1:
            return False
        return not any(node.selected for node in host.nodes())

    def start(self) -> bool:
        if not self.can_start():
            return False
        connection = next(c for c in self.context.host.connections() if c.selected)
        if not self.context.nodes_exist(connection.source, connection.target):
            logger.warning("Connection %s has a dangling endpoint, not reconnecting", connection.id)
            return False

        draft = EndpointDraft(
            connection_id=connection.id,
            source_element_id=connection.source,
            source_handle_id=strip_handle_prefix(connection.source_handle),
            target_element_id=connection.target,
            target_handle_id=strip_handle_prefix(connection.target_handle),
        )
        source = self.context.find_node(connection.source)
        if source is not None:
            self.context.reveal_for_authoring(source)
        self._transition(SelectingSourceNode(draft=draft, focused_element_id=draft.source_element_id))
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
            logger.debug("Reconnection cancelled in phase %s", self._state.phase)
        self._state = RECONNECT_IDLE

    def sync(self) -> bool:
        draft = self.draft
        if draft is None:
            return False
        connection = self._find_connection(draft.connection_id)
        if connection is not None and connection.selected:
            return False
        logger.warning(
            "Aborting reconnection: connection %s is gone or deselected", draft.connection_id
        )
        self._state = RECONNECT_IDLE
        return True

    def confirm(self) -> None:
        state = self._state
        if isinstance(state, ReconnectIdle):
            return
        draft = state.draft

        if isinstance(state, SelectingSourceNode):
            if not self._ensure_live(draft, state.focused_element_id, draft.target_element_id):
                return
            unchanged = state.focused_element_id == draft.source_element_id
            self._transition(
                SelectingSourceHandle(
                    draft=replace(draft, source_element_id=state.focused_element_id),
                    focused_handle_id=(
                        draft.source_handle_id
                        if unchanged and draft.source_handle_id
                        else DEFAULT_HANDLE_ID
                    ),
                )
            )
        elif isinstance(state, SelectingSourceHandle):
            if not self._ensure_live(draft, draft.source_element_id, draft.target_element_id):
                return
            self._transition(
                SelectingTargetNode(
                    draft=replace(draft, source_handle_id=state.focused_handle_id),
                    focused_element_id=draft.target_element_id,
                )
            )
        elif isinstance(state, SelectingTargetNode):
            if not self._ensure_live(draft, draft.source_element_id, state.focused_element_id):
                return
            unchanged = state.focused_element_id == draft.target_element_id
            self._transition(
                SelectingTargetHandle(
                    draft=replace(draft, target_element_id=state.focused_element_id),
                    focused_handle_id=(
                        draft.target_handle_id
                        if unchanged and draft.target_handle_id
                        else DEFAULT_HANDLE_ID
                    ),
                )
            )
        elif isinstance(state, SelectingTargetHandle):
            if not self._ensure_live(draft, draft.source_element_id, draft.target_element_id):
                return
            update = ConnectionUpdate(
                connection_id=draft.connection_id,
                source=draft.source_element_id,
                target=draft.target_element_id,
                source_handle=draft.source_handle_id or DEFAULT_HANDLE_ID,
                target_handle=f"{self.context.target_handle_prefix}{state.focused_handle_id}",
            )
            logger.info(
                "Reconnecting %s to %s:%s -> %s:%s",
                update.connection_id,
                update.source,
                update.source_handle,
                update.target,
                update.target_handle,
            )
            self._state = RECONNECT_IDLE
            self.context.host.update_connection(update)

    def back(self) -> None:
        state = self._state
        if isinstance(state, SelectingSourceNode):
            self.cancel()
        elif isinstance(state, SelectingSourceHandle):
            self._transition(
                SelectingSourceNode(draft=state.draft, focused_element_id=state.draft.source_element_id)
            )
        elif isinstance(state, SelectingTargetNode):
            self._transition(
                SelectingSourceHandle(
                    draft=state.draft,
                    focused_handle_id=state.draft.source_handle_id or DEFAULT_HANDLE_ID,
                )
            )
        elif isinstance(state, SelectingTargetHandle):
            self._transition(
                SelectingTargetNode(draft=state.draft, focused_element_id=state.draft.target_element_id)
            )

    def move(self, direction: CardinalDirection) -> None:
        state = self._state
        if isinstance(state, (SelectingSourceHandle, SelectingTargetHandle)):
            self._state = replace(
                state, focused_handle_id=get_next_handle(state.focused_handle_id, direction)
            )
        elif isinstance(state, SelectingSourceNode):
            # The other endpoint stays out of reach so the edge cannot loop onto itself.
            next_id = self.context.move_node_focus(
                state.focused_element_id, direction, exclude_ids=(state.draft.target_element_id,)
            )
            if next_id is not None:
                self._state = replace(state, focused_element_id=next_id)
        elif isinstance(state, SelectingTargetNode):
            next_id = self.context.move_node_focus(
                state.focused_element_id, direction, exclude_ids=(state.draft.source_element_id,)
            )
            if next_id is not None:
                self._state = replace(state, focused_element_id=next_id)

    def _find_connection(self, connection_id: str) -> Connection | None:
        return next(
            (c for c in self.context.host.connections() if c.id == connection_id),
            None,
        )

    def _ensure_live(self, draft: EndpointDraft, *node_ids: str) -> bool:
        if self._find_connection(draft.connection_id) is not None and self.context.nodes_exist(
            *node_ids
        ):
            return True
        logger.warning(
            "Aborting reconnection of %s in phase %s: connection or node missing",
            draft.connection_id,
            self._state.phase,
        )
        self._state = RECONNECT_IDLE
        return False

    def _transition(self, state: ReconnectionState) -> None:
        logger.debug("Reconnection %s -> %s", self._state.phase, state.phase)
        self._state = state
