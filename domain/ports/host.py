from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol

from domain.models import (
    Connection,
    ConnectionUpdate,
    ConnectRequest,
    DiagramNode,
    NodeHints,
    PanCommand,
    SelectionChange,
    Viewport,
)


class DiagramHost(Protocol):
    def nodes(self) -> Sequence[DiagramNode]: ...

    def connections(self) -> Sequence[Connection]: ...

    def set_selection(self, change: SelectionChange) -> None: ...

    def add_node(self, node: DiagramNode) -> None: ...

    def connect(self, request: ConnectRequest) -> None: ...

    def update_connection(self, update: ConnectionUpdate) -> None: ...

    def apply_hints(self, hints: Mapping[str, NodeHints]) -> None: ...


class Camera(Protocol):
    def viewport(self) -> Viewport: ...

    def pan(self, command: PanCommand) -> None: ...


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...


class Clock(Protocol):
    def now(self) -> float: ...
