from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import Diagram


class DiagramRepository(Protocol):
    def load(self, path: Path) -> Diagram: ...

    def save(self, diagram: Diagram, path: Path) -> None: ...
