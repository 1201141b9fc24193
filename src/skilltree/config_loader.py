"""Read and write skill tree configuration files (YAML or JSON)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

JSON_SUFFIXES = {".json"}

DEFAULT_CONFIG_TEXT = """\
title: Skill Tree Editor
skills:
  a:
    requires:
    - exp: 10
  b:
    requires:
    - exp: 10
  c:
    requires:
    - skill: a
    - skill: b
"""


def default_config() -> dict[str, Any]:
    """Return a fresh copy of the sample configuration."""
    return parse_config(DEFAULT_CONFIG_TEXT)


def parse_config(text: str, *, as_json: bool = False) -> dict[str, Any]:
    """Parse configuration text into a mapping."""
    raw: object = json.loads(text) if as_json else yaml.safe_load(text)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration root must be a mapping.")
    return raw


def load_config(path: Path | str) -> dict[str, Any]:
    """Load configuration from a YAML or JSON file."""
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8-sig")
    try:
        return parse_config(text, as_json=file_path.suffix.lower() in JSON_SUFFIXES)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Could not parse configuration '{file_path}': {exc}") from exc


def dump_config(config: dict[str, Any], path: Path | str) -> None:
    """Write configuration back to disk, keeping key order."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if file_path.suffix.lower() in JSON_SUFFIXES:
        text = json.dumps(config, indent=2) + "\n"
    else:
        text = yaml.safe_dump(config, sort_keys=False, allow_unicode=True)
    file_path.write_text(text, encoding="utf-8")
