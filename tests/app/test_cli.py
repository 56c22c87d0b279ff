from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from adapters.filesystem.diagram_repository import FileSystemDiagramRepository
from app.cli import app, parse_keys
from domain.models import Diagram, Position
from tests.helpers.diagram_fixtures import make_diagram, make_node, two_nodes

runner = CliRunner()


def _save(diagram: Diagram, path: Path) -> Path:
    FileSystemDiagramRepository().save(diagram, path)
    return path


def test_validate_accepts_a_diagram(tmp_path: Path) -> None:
    path = _save(two_nodes(), tmp_path / "diagram.json")

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 0
    assert "Valid diagram" in result.output


def test_validate_reports_missing_and_invalid_files(tmp_path: Path) -> None:
    missing = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])
    assert missing.exit_code == 1
    assert "File not found" in missing.output

    broken = tmp_path / "broken.json"
    broken.write_text('{"nodes": [{"id": "a"}, {"id": "a"}]}', encoding="utf-8")
    invalid = runner.invoke(app, ["validate", str(broken)])
    assert invalid.exit_code == 1
    assert "Validation failed" in invalid.output


def test_replay_moves_selection(tmp_path: Path) -> None:
    path = _save(two_nodes(), tmp_path / "diagram.json")

    result = runner.invoke(app, ["replay", str(path), "--keys", "ArrowRight"])

    assert result.exit_code == 0
    assert "Selection: b" in result.output


def test_replay_chord_moves_diagonally(tmp_path: Path) -> None:
    diagram = make_diagram(
        [
            make_node("a", 0, 300, selected=True),
            make_node("b", 200, 300),
            make_node("c", 200, 100),
            make_node("d", 0, 100),
        ]
    )
    path = _save(diagram, tmp_path / "diagram.json")

    result = runner.invoke(app, ["replay", str(path), "--keys", "ArrowUp+ArrowRight"])

    assert result.exit_code == 0
    assert "Selection: c" in result.output


def test_replay_authors_a_connection_and_saves(tmp_path: Path) -> None:
    path = _save(two_nodes(), tmp_path / "diagram.json")
    output = tmp_path / "out.json"

    result = runner.invoke(
        app, ["replay", str(path), "--keys", "d,Enter,Enter,Enter", "--output", str(output)]
    )

    assert result.exit_code == 0
    assert "Input owner: selection" in result.output
    saved = FileSystemDiagramRepository().load(output)
    assert [(c.id, c.source, c.target) for c in saved.connections] == [("flow-1", "b", "a")]


def test_replay_rejects_modifier_only_chords(tmp_path: Path) -> None:
    path = _save(two_nodes(), tmp_path / "diagram.json")

    result = runner.invoke(app, ["replay", str(path), "--keys", "Shift"])

    assert result.exit_code == 1
    assert "Invalid keys" in result.output


def test_place_inserts_a_node_next_to_existing_ones(tmp_path: Path) -> None:
    path = _save(two_nodes(), tmp_path / "diagram.json")

    result = runner.invoke(app, ["place", str(path), "--x", "50", "--y", "325"])

    assert result.exit_code == 0
    saved = FileSystemDiagramRepository().load(path)
    placed = saved.nodes[-1]
    assert placed.id == "component-1"
    assert placed.position == Position(x=-20, y=385)
    assert [node.id for node in saved.nodes if node.selected] == ["component-1"]


def test_place_rejects_unknown_kind(tmp_path: Path) -> None:
    path = _save(two_nodes(), tmp_path / "diagram.json")

    result = runner.invoke(app, ["place", str(path), "--x", "0", "--y", "0", "--kind", "circle"])

    assert result.exit_code == 1
    assert "Unknown node kind" in result.output


def test_parse_keys_builds_chords_with_modifiers() -> None:
    chords = parse_keys("ArrowUp+ArrowLeft, Shift+F ,d")

    assert [[event.key for event in chord] for chord in chords] == [
        ["ArrowUp", "ArrowLeft"],
        ["F"],
        ["d"],
    ]
    assert chords[1][0].shift
    assert not chords[0][0].shift

    with pytest.raises(ValueError, match="Empty key"):
        parse_keys("ArrowUp+")
