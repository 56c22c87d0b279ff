from __future__ import annotations

from collections.abc import Mapping

from domain.models import (
    CenterCommand,
    Connection,
    ConnectionUpdate,
    ConnectRequest,
    Diagram,
    DiagramNode,
    FitViewCommand,
    NodeHints,
    PanCommand,
    SelectionChange,
    Viewport,
    ViewportCommand,
)
from domain.ports.host import Camera, DiagramHost


class InMemoryDiagramHost(DiagramHost):
    def __init__(self, diagram: Diagram | None = None) -> None:
        self.diagram = diagram.model_copy(deep=True) if diagram is not None else Diagram()
        self.selection_changes: list[SelectionChange] = []
        self.connect_requests: list[ConnectRequest] = []
        self.connection_updates: list[ConnectionUpdate] = []
        self.hints: dict[str, NodeHints] = {}
        self._next_connection = len(self.diagram.connections) + 1

    def nodes(self) -> list[DiagramNode]:
        return list(self.diagram.nodes)

    def connections(self) -> list[Connection]:
        return list(self.diagram.connections)

    def set_selection(self, change: SelectionChange) -> None:
        self.selection_changes.append(change)
        self.diagram.nodes = [
            node.model_copy(update={"selected": node.id in change.node_ids})
            for node in self.diagram.nodes
        ]
        self.diagram.connections = [
            connection.model_copy(update={"selected": connection.id in change.connection_ids})
            for connection in self.diagram.connections
        ]

    def add_node(self, node: DiagramNode) -> None:
        if any(existing.id == node.id for existing in self.diagram.nodes):
            msg = f"Duplicate node id found: {node.id}"
            raise ValueError(msg)
        self.diagram.nodes = [*self.diagram.nodes, node]

    def remove_node(self, node_id: str) -> None:
        self.diagram.nodes = [node for node in self.diagram.nodes if node.id != node_id]
        self.diagram.connections = [
            connection
            for connection in self.diagram.connections
            if node_id not in (connection.source, connection.target)
        ]

    def remove_connection(self, connection_id: str) -> None:
        self.diagram.connections = [
            connection for connection in self.diagram.connections if connection.id != connection_id
        ]

    def clear_selection(self) -> None:
        self.set_selection(SelectionChange())

    def connect(self, request: ConnectRequest) -> None:
        self.connect_requests.append(request)
        taken = {connection.id for connection in self.diagram.connections}
        connection_id = f"flow-{self._next_connection}"
        while connection_id in taken:
            self._next_connection += 1
            connection_id = f"flow-{self._next_connection}"
        self._next_connection += 1
        self.diagram.connections = [
            *self.diagram.connections,
            Connection(
                id=connection_id,
                source=request.source,
                target=request.target,
                source_handle=request.source_handle,
                target_handle=request.target_handle,
            ),
        ]

    def update_connection(self, update: ConnectionUpdate) -> None:
        self.connection_updates.append(update)
        self.diagram.connections = [
            connection.model_copy(
                update={
                    "source": update.source,
                    "target": update.target,
                    "source_handle": update.source_handle,
                    "target_handle": update.target_handle,
                }
            )
            if connection.id == update.connection_id
            else connection
            for connection in self.diagram.connections
        ]

    def apply_hints(self, hints: Mapping[str, NodeHints]) -> None:
        self.hints = dict(hints)

    def selected_node_ids(self) -> list[str]:
        return [node.id for node in self.diagram.nodes if node.selected]

    def selected_connection_ids(self) -> list[str]:
        return [connection.id for connection in self.diagram.connections if connection.selected]


class RecordingCamera(Camera):
    def __init__(
        self,
        width: float = 1280.0,
        height: float = 800.0,
        x: float = 0.0,
        y: float = 0.0,
        zoom: float = 1.0,
    ) -> None:
        self._viewport = Viewport(x=x, y=y, zoom=zoom, width=width, height=height)
        self.commands: list[PanCommand] = []

    def viewport(self) -> Viewport:
        return self._viewport

    def pan(self, command: PanCommand) -> None:
        self.commands.append(command)
        current = self._viewport
        if isinstance(command, CenterCommand):
            self._viewport = Viewport(
                x=current.width / 2 - command.x * command.zoom,
                y=current.height / 2 - command.y * command.zoom,
                zoom=command.zoom,
                width=current.width,
                height=current.height,
            )
        elif isinstance(command, ViewportCommand):
            self._viewport = Viewport(
                x=command.x,
                y=command.y,
                zoom=command.zoom,
                width=current.width,
                height=current.height,
            )
        elif isinstance(command, FitViewCommand):
            # Fitting needs rendered bounds; the recorded command is enough here.
            pass
