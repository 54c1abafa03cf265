from __future__ import annotations

import datetime as dt
import shutil
import sys
from pathlib import Path


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value]
    else:
        text = str(value).strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        items = [item.strip().strip("'\"") for item in text.split(",")]
    return [item for item in items if item]


def iso_day(value: dt.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(dt.timezone.utc)
    return value.date().isoformat()


def modified_utc(path: Path) -> dt.datetime:
    return dt.datetime.fromtimestamp(path.stat().st_mtime, tz=dt.timezone.utc)


def short_name(path: Path, root: Path) -> str:
    try:
        rel = path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
    return "/" if rel == "." else f"/{rel}"


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved or output_resolved in root_resolved.parents:
        print("Refusing to clean project root.", file=sys.stderr)
        sys.exit(1)
    shutil.rmtree(output_dir)
