from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

NodeKind = Literal["component", "boundary"]
ItemKind = Literal["node", "connection"]

TARGET_HANDLE_PREFIX = "target-"


def strip_handle_prefix(handle_id: str | None) -> str | None:
    if handle_id is None:
        return None
    if handle_id.startswith(TARGET_HANDLE_PREFIX):
        return handle_id[len(TARGET_HANDLE_PREFIX) :]
    return handle_id


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class DiagramNode(BaseModel):
    id: str = Field(..., min_length=1)
    kind: NodeKind = "component"
    position: Position = Field(default_factory=Position)
    width: float | None = None
    height: float | None = None
    selected: bool = False
    label: str = ""

    @field_validator("width", "height", mode="after")
    @classmethod
    def ensure_non_negative(cls, value: float | None) -> float | None:
        if value is not None and value < 0:
            msg = f"Node dimensions must be non-negative, got {value}"
            raise ValueError(msg)
        return value


class Connection(BaseModel):
    id: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    source_handle: str | None = None
    target_handle: str | None = None
    selected: bool = False
    label: str = ""


class Diagram(BaseModel):
    nodes: list[DiagramNode] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_consistent_ids(self) -> "Diagram":
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                msg = f"Duplicate node id found: {node.id}"
                raise ValueError(msg)
            seen.add(node.id)
        connection_ids: set[str] = set()
        for connection in self.connections:
            if connection.id in connection_ids:
                msg = f"Duplicate connection id found: {connection.id}"
                raise ValueError(msg)
            connection_ids.add(connection.id)
            for endpoint in (connection.source, connection.target):
                if endpoint not in seen:
                    msg = f"Connection {connection.id} references unknown node: {endpoint}"
                    raise ValueError(msg)
        return self


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class SelectableItem:
    id: str
    x: float
    y: float
    kind: ItemKind


@dataclass(frozen=True)
class Viewport:
    x: float
    y: float
    zoom: float
    width: float
    height: float

    def to_screen(self, flow_x: float, flow_y: float) -> tuple[float, float]:
        return flow_x * self.zoom + self.x, flow_y * self.zoom + self.y


@dataclass(frozen=True)
class CenterCommand:
    x: float
    y: float
    zoom: float
    duration_ms: int


@dataclass(frozen=True)
class ViewportCommand:
    x: float
    y: float
    zoom: float
    duration_ms: int


@dataclass(frozen=True)
class FitViewCommand:
    padding: float
    duration_ms: int


PanCommand = CenterCommand | ViewportCommand | FitViewCommand


@dataclass(frozen=True)
class SelectionChange:
    node_ids: frozenset[str] = frozenset()
    connection_ids: frozenset[str] = frozenset()

    @classmethod
    def for_item(cls, item: SelectableItem) -> "SelectionChange":
        if item.kind == "node":
            return cls(node_ids=frozenset({item.id}))
        return cls(connection_ids=frozenset({item.id}))


@dataclass(frozen=True)
class ConnectRequest:
    source: str
    target: str
    source_handle: str
    target_handle: str


@dataclass(frozen=True)
class ConnectionUpdate:
    connection_id: str
    source: str
    target: str
    source_handle: str
    target_handle: str


@dataclass(frozen=True)
class NodeHints:
    focused_handle_id: str | None = None
    is_focused_for_connection: bool = False
    is_in_connection_authoring: bool = False
    is_handle_selection_mode: bool = False


@dataclass(frozen=True)
class KeyBinding:
    keys: tuple[str, ...]
    label: str
    is_arrow_keys: bool = False


@dataclass(frozen=True)
class AuthoringOverlay:
    title: str
    instruction: str
    keybindings: tuple[KeyBinding, ...] = field(default_factory=tuple)
