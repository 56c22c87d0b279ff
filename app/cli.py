from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from adapters.filesystem.diagram_repository import FileSystemDiagramRepository
from adapters.memory.host import InMemoryDiagramHost, RecordingCamera
from adapters.memory.scheduling import ManualClock, ManualFrameScheduler
from app.config import AppSettings, load_settings
from app.wiring import build_controller
from domain.keyboard import KeyEvent
from domain.models import Diagram, NodeKind, Position

app = typer.Typer(no_args_is_help=True)
console = Console()

MODIFIER_KEYS = {"alt", "ctrl", "meta", "shift"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def parse_keys(keys: str) -> list[list[KeyEvent]]:
    chords: list[list[KeyEvent]] = []
    for raw_chord in keys.split(","):
        raw_chord = raw_chord.strip()
        if not raw_chord:
            continue
        modifiers: set[str] = set()
        chord_keys: list[str] = []
        for part in raw_chord.split("+"):
            part = part.strip()
            if not part:
                msg = f"Empty key in chord: {raw_chord!r}"
                raise ValueError(msg)
            if part.lower() in MODIFIER_KEYS:
                modifiers.add(part.lower())
            else:
                chord_keys.append(part)
        if not chord_keys:
            msg = f"Chord has no key besides modifiers: {raw_chord!r}"
            raise ValueError(msg)
        chords.append(
            [
                KeyEvent(
                    key=key,
                    alt="alt" in modifiers,
                    ctrl="ctrl" in modifiers,
                    meta="meta" in modifiers,
                    shift="shift" in modifiers,
                )
                for key in chord_keys
            ]
        )
    return chords


def _load_diagram(path: Path) -> Diagram:
    if not path.exists():
        console.print(f"[red]File not found:[/] {path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemDiagramRepository().load(path)
    except ValueError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _load_settings(config_path: Path | None) -> AppSettings:
    try:
        return load_settings(config_path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Invalid configuration:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Diagram JSON file to validate.")) -> None:
    diagram = _load_diagram(input_path)
    console.print(
        f"[green]Valid diagram:[/] {input_path} "
        f"({len(diagram.nodes)} nodes, {len(diagram.connections)} connections)"
    )


@app.command("replay")
def replay(
    input_path: Path = typer.Argument(..., help="Diagram JSON file to replay keys against."),
    keys: str = typer.Option(
        ..., "--keys", help="Comma separated key presses; '+' joins a chord, e.g. ArrowUp+ArrowLeft.",
    ),
    output: Path | None = typer.Option(None, help="Write the resulting diagram to this file."),
    config: Path | None = typer.Option(None, help="YAML settings file."),
) -> None:
    diagram = _load_diagram(input_path)
    settings = _load_settings(config)
    try:
        chords = parse_keys(keys)
    except ValueError as exc:
        console.print(f"[red]Invalid keys:[/] {exc}")
        raise typer.Exit(code=1) from exc

    host = InMemoryDiagramHost(diagram)
    camera = RecordingCamera()
    frames = ManualFrameScheduler()
    controller = build_controller(settings, host, camera, frames, ManualClock())

    for chord in chords:
        for event in chord:
            controller.handle_key(event)
        frames.drain()
        for event in chord:
            controller.handle_key(KeyEvent(key=event.key, type="up"))

    _print_replay(host, camera, controller.owner)

    if output is not None:
        FileSystemDiagramRepository().save(host.diagram, output)
        console.print(f"[green]Wrote[/] {output}")


@app.command("place")
def place(
    input_path: Path = typer.Argument(..., help="Diagram JSON file to insert the node into."),
    x: float = typer.Option(..., help="Anchor x in flow coordinates."),
    y: float = typer.Option(..., help="Anchor y in flow coordinates."),
    kind: str = typer.Option("component", help="Node kind: component or boundary."),
    output: Path | None = typer.Option(None, help="Target file, defaults to the input file."),
    config: Path | None = typer.Option(None, help="YAML settings file."),
) -> None:
    if kind not in ("component", "boundary"):
        console.print(f"[red]Unknown node kind:[/] {kind}")
        raise typer.Exit(code=1)
    diagram = _load_diagram(input_path)
    settings = _load_settings(config)

    host = InMemoryDiagramHost(diagram)
    controller = build_controller(
        settings, host, RecordingCamera(), ManualFrameScheduler(), ManualClock()
    )
    node = controller.insert_node(cast(NodeKind, kind), Position(x=x, y=y))

    target_path = output or input_path
    FileSystemDiagramRepository().save(host.diagram, target_path)
    console.print(
        f"[green]Placed[/] {node.id} at ({node.position.x:g}, {node.position.y:g}) in {target_path}"
    )


def _print_replay(host: InMemoryDiagramHost, camera: RecordingCamera, owner: str) -> None:
    selected = host.selected_node_ids() + host.selected_connection_ids()
    console.print(f"Selection: {', '.join(selected) if selected else '[dim]none[/]'}")
    console.print(f"Input owner: {owner}")

    if host.connect_requests or host.connection_updates:
        table = Table(title="Connection requests")
        table.add_column("Kind")
        table.add_column("Source")
        table.add_column("Target")
        for request in host.connect_requests:
            table.add_row(
                "connect",
                f"{request.source}:{request.source_handle}",
                f"{request.target}:{request.target_handle}",
            )
        for update in host.connection_updates:
            table.add_row(
                f"update {update.connection_id}",
                f"{update.source}:{update.source_handle}",
                f"{update.target}:{update.target_handle}",
            )
        console.print(table)

    for command in camera.commands:
        console.print(f"Pan: {command}")


if __name__ == "__main__":
    app()
