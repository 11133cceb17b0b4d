"""File utilities."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict


def ensure_dir(path: str) -> Path:
    """Ensure directory exists and return Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_text_file(path: str) -> str:
    """Read a file as UTF-8.

    Raises FileNotFoundError for a missing path and ValueError when the bytes
    aren't valid UTF-8.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        return p.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"Unable to read text file: {p.name}") from exc


def load_json_document(path: str) -> Dict[str, Any]:
    """Load a persisted topic document; the top level must be a JSON object."""
    try:
        data = json.loads(read_text_file(path))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {Path(path).name}: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {Path(path).name}")
    return data


def save_json_document(path: str, document: Dict[str, Any]) -> Path:
    p = Path(path)
    if p.parent != Path("."):
        ensure_dir(str(p.parent))
    p.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return p
