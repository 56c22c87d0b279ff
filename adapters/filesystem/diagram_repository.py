from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import load_json_object, replace_json_file
from domain.models import Diagram
from domain.ports.repositories import DiagramRepository


class FileSystemDiagramRepository(DiagramRepository):
    def load(self, path: Path) -> Diagram:
        return Diagram.model_validate(load_json_object(path))

    def save(self, diagram: Diagram, path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            replace_json_file(path, diagram.model_dump(mode="json"))
