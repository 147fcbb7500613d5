"""Persisted state files and rendering of the final schedule."""

import json
from pathlib import Path
from typing import Any

import yaml

from src.dropin_scraper.errors import OutputError
from src.dropin_scraper.logging import get_logger

log = get_logger(__name__)

FORMATS = ("json", "yaml")


def load_json(path: str | Path) -> dict[str, Any]:
    """Load a JSON object from disk.

    Returns:
        The parsed object, or {} if the file is missing, unreadable, not JSON,
        or not a JSON object.
    """
    path = Path(path)
    if not path.exists():
        log.debug("state_file_missing", path=str(path))
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("state_file_corrupt", path=str(path), error=str(e))
        return {}
    if not isinstance(data, dict):
        log.warning("state_file_corrupt", path=str(path), error="not an object")
        return {}
    return data


def save_json(path: str | Path, value: Any) -> Path:
    """Write `value` as indented UTF-8 JSON, replacing any previous file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(value, f, indent=2, ensure_ascii=False)
    log.debug("state_file_saved", path=str(path))
    return path


def normalize_format(value: str) -> str:
    """Any value starting with "y" selects YAML, everything else JSON."""
    return "yaml" if value.lower().startswith("y") else "json"


def render(schedule: dict[str, Any], fmt: str = "yaml") -> str:
    """Serialize the schedule as JSON or YAML, keeping location order."""
    if normalize_format(fmt) == "yaml":
        return yaml.safe_dump(schedule, sort_keys=False, allow_unicode=True)
    return json.dumps(schedule, indent=2, ensure_ascii=False)


def write_output(text: str, outfile: str | Path) -> Path:
    """Write rendered output to a file.

    Raises:
        OutputError: If the file cannot be written.
    """
    path = Path(outfile)
    try:
        if path.parent != Path("."):
            path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Cannot write {path}: {e}") from e
    log.info("output_written", path=str(path), bytes=len(text.encode("utf-8")))
    return path
