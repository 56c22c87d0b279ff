from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def load_json_object(path: Path) -> dict[str, Any]:
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        msg = f"{path} is not valid JSON: {exc}"
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def dump_json_bytes(payload: Any) -> bytes:
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)


def replace_json_file(path: Path, payload: Any) -> None:
    data = dump_json_bytes(payload)
    path.parent.mkdir(parents=True, exist_ok=True)
    # Hidden sibling so the final rename stays on one filesystem.
    staging_path = path.with_name(f".{path.name}.tmp")
    try:
        staging_path.write_bytes(data)
        staging_path.replace(path)
    finally:
        staging_path.unlink(missing_ok=True)
