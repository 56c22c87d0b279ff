from __future__ import annotations

import logging
from typing import Literal

from domain.keyboard import KEY_FIT_VIEW, KEY_START_AUTHORING, KeyEvent
from domain.models import (
    AuthoringOverlay,
    DiagramNode,
    NodeHints,
    NodeKind,
    Position,
    SelectionChange,
)
from domain.ports.host import Camera, Clock, DiagramHost, FrameScheduler
from domain.services import connection_creation as creation_states
from domain.services import connection_reconnection as reconnection_states
from domain.services.authoring import AuthoringContext
from domain.services.authoring_overlay import build_overlay
from domain.services.connection_creation import ConnectionCreationMachine
from domain.services.connection_reconnection import ConnectionReconnectionMachine
from domain.services.directional_search import DEFAULT_NAVIGATION_OPTIONS, NavigationOptions
from domain.services.node_insertion import (
    DEFAULT_INSERTION_OPTIONS,
    InsertionOptions,
    plan_node_insertion,
)
from domain.services.selection_navigator import SelectionNavigator
from domain.services.viewport_follower import DEFAULT_VIEWPORT_OPTIONS, ViewportOptions, fit_view

logger = logging.getLogger(__name__)

InputOwner = Literal["selection", "creation", "reconnection"]
NavigationModifier = Literal["none", "alt"]


class CanvasController:
    def __init__(
        self,
        host: DiagramHost,
        camera: Camera,
        frames: FrameScheduler,
        clock: Clock,
        *,
        navigation: NavigationOptions = DEFAULT_NAVIGATION_OPTIONS,
        viewport: ViewportOptions = DEFAULT_VIEWPORT_OPTIONS,
        insertion: InsertionOptions = DEFAULT_INSERTION_OPTIONS,
        navigation_modifier: NavigationModifier = "none",
        debounce_frames: int = 2,
        edit_exit_grace_ms: float = 100.0,
        target_handle_prefix: str = "",
    ) -> None:
        self.host = host
        self.camera = camera
        self.clock = clock
        self.viewport_options = viewport
        self.insertion = insertion
        self.navigation_modifier = navigation_modifier
        self.edit_exit_grace_ms = edit_exit_grace_ms

        context = AuthoringContext(
            host=host,
            camera=camera,
            navigation=navigation,
            viewport=viewport,
            target_handle_prefix=target_handle_prefix,
        )
        self.navigator = SelectionNavigator(
            host,
            camera,
            frames,
            navigation=navigation,
            viewport=viewport,
            debounce_frames=debounce_frames,
        )
        self.creation = ConnectionCreationMachine(context)
        self.reconnection = ConnectionReconnectionMachine(context)

        self._owner: InputOwner = "selection"
        self._editing = False
        self._edit_exited_at: float | None = None

    @property
    def owner(self) -> InputOwner:
        return self._owner

    @property
    def is_editing(self) -> bool:
        return self._editing

    @property
    def overlay(self) -> AuthoringOverlay | None:
        return build_overlay(self.creation.state.phase, self.reconnection.state.phase)

    def set_editing_mode(self, editing: bool) -> None:
        if editing and not self._editing:
            self.navigator.reset()
        if not editing and self._editing:
            self._edit_exited_at = self.clock.now()
        self._editing = editing

    def in_edit_exit_grace(self) -> bool:
        if self._edit_exited_at is None:
            return False
        elapsed_ms = (self.clock.now() - self._edit_exited_at) * 1000
        return elapsed_ms < self.edit_exit_grace_ms

    def handle_key(self, event: KeyEvent) -> bool:
        if event.type == "up":
            if event.is_arrow:
                self.navigator.key_up(event.key)
            return False

        if self._editing or event.in_text_field or event.has_platform_modifier:
            return False

        if self._owner == "creation":
            consumed = self.creation.handle_key(event)
            if not self.creation.is_active:
                self._release()
            self.publish_hints()
            return consumed

        if self._owner == "reconnection":
            consumed = self.reconnection.handle_key(event)
            if not self.reconnection.is_active:
                self._release()
            self.publish_hints()
            return consumed

        return self._handle_selection_key(event)

    def sync(self) -> None:
        cancelled = False
        if self._owner == "creation":
            cancelled = self.creation.sync()
        elif self._owner == "reconnection":
            cancelled = self.reconnection.sync()
        if cancelled:
            self._release()
            self.publish_hints()

    def cancel(self) -> None:
        was_active = self._owner != "selection"
        self.creation.cancel()
        self.reconnection.cancel()
        self.navigator.reset()
        self._owner = "selection"
        if was_active:
            self.publish_hints()

    def insert_node(self, kind: NodeKind, anchor: Position) -> DiagramNode:
        self.cancel()
        node = plan_node_insertion(kind, anchor, self.host.nodes(), self.insertion)
        self.host.add_node(node)
        self.host.set_selection(SelectionChange(node_ids=frozenset({node.id})))
        return node

    def node_hints(self) -> dict[str, NodeHints]:
        hints: dict[str, NodeHints] = {}
        for node in self.host.nodes():
            if node.kind != "component":
                hints[node.id] = NodeHints()
                continue
            hints[node.id] = self._hints_for(node.id)
        return hints

    def publish_hints(self) -> None:
        self.host.apply_hints(self.node_hints())

    def _handle_selection_key(self, event: KeyEvent) -> bool:
        if self.in_edit_exit_grace():
            return False

        if event.key == KEY_START_AUTHORING and not (event.alt or event.shift):
            return self._start_authoring()

        if event.key == KEY_FIT_VIEW and event.shift and not event.alt:
            self.camera.pan(fit_view(self.viewport_options))
            return True

        if event.is_arrow and self._navigation_modifier_matches(event):
            self.navigator.key_down(event.key)
            return True

        return False

    def _navigation_modifier_matches(self, event: KeyEvent) -> bool:
        if event.shift:
            return False
        if self.navigation_modifier == "alt":
            return event.alt
        return not event.alt

    def _start_authoring(self) -> bool:
        if self.creation.start():
            self._take_ownership("creation")
            return True
        if self.reconnection.start():
            self._take_ownership("reconnection")
            return True
        return False

    def _take_ownership(self, owner: InputOwner) -> None:
        logger.debug("Input ownership %s -> %s", self._owner, owner)
        self.navigator.reset()
        self._owner = owner
        self.publish_hints()

    def _release(self) -> None:
        logger.debug("Input ownership %s -> selection", self._owner)
        self._owner = "selection"

    def _hints_for(self, node_id: str) -> NodeHints:
        state = self.creation.state
        if isinstance(state, creation_states.SelectingSourceHandle):
            handle_focus = node_id == state.source_element_id
            return NodeHints(
                focused_handle_id=state.focused_handle_id if handle_focus else None,
                is_in_connection_authoring=node_id == state.source_element_id,
                is_handle_selection_mode=handle_focus,
            )
        if isinstance(state, creation_states.SelectingTargetNode):
            return NodeHints(
                is_focused_for_connection=node_id == state.focused_element_id,
                is_in_connection_authoring=node_id == state.source_element_id,
            )
        if isinstance(state, creation_states.SelectingTargetHandle):
            handle_focus = node_id == state.target_element_id
            return NodeHints(
                focused_handle_id=state.focused_handle_id if handle_focus else None,
                is_in_connection_authoring=node_id == state.source_element_id,
                is_handle_selection_mode=handle_focus,
            )

        recon = self.reconnection.state
        if isinstance(recon, reconnection_states.ReconnectIdle):
            return NodeHints()
        draft = recon.draft
        endpoint = node_id in (draft.source_element_id, draft.target_element_id)
        node_phases = (reconnection_states.SelectingSourceNode, reconnection_states.SelectingTargetNode)
        if isinstance(recon, node_phases):
            return NodeHints(
                is_focused_for_connection=node_id == recon.focused_element_id,
                is_in_connection_authoring=endpoint,
            )
        handle_node = (
            draft.source_element_id
            if isinstance(recon, reconnection_states.SelectingSourceHandle)
            else draft.target_element_id
        )
        handle_focus = node_id == handle_node
        return NodeHints(
            focused_handle_id=recon.focused_handle_id if handle_focus else None,
            is_in_connection_authoring=endpoint,
            is_handle_selection_mode=handle_focus,
        )
