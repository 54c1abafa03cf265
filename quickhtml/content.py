from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

DELIMITER = "---"
META_SEPARATOR = ": "


class _Absent:
    """Marker for a value that is not set anywhere, as opposed to an empty one."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class Metadata(Mapping):
    """Front matter values, keyed by lowercase name in insertion order."""

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._data: dict[str, str] = {}
        for key, value in items:
            self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: object = ABSENT) -> object:
        return self._data.get(key.lower(), default)

    def __repr__(self) -> str:
        return f"Metadata({self._data!r})"


@dataclass(frozen=True)
class PageDocument:
    meta: Metadata = field(default_factory=Metadata)
    body: str = ""


def load_page(lines: Iterable[str]) -> PageDocument:
    # 0: before front matter, 1: in front matter, 2: in body
    state = 0
    items: list[tuple[str, str]] = []
    body: list[str] = []
    remaining = iter(lines)
    for line in remaining:
        text = line.strip()
        if state == 0:
            body.append(line)
            if text == DELIMITER:
                state = 1
                body = []
            elif text:
                # Content before any delimiter: the whole file is body.
                body.extend(remaining)
                break
        elif state == 1:
            if text == DELIMITER:
                state = 2
                continue
            key, sep, value = text.partition(META_SEPARATOR)
            key = key.strip()
            if sep and key:
                items.append((key, value.strip()))
        else:
            body.append(line)
    return PageDocument(Metadata(items), "\n".join(body))


def parse_front_matter(text: str) -> PageDocument:
    return load_page(text.lstrip("\ufeff").splitlines())


def read_page(path: Path) -> PageDocument:
    return parse_front_matter(path.read_text(encoding="utf-8"))


def derive_title(path: Path) -> str:
    words = re.sub(r"[-_]+", " ", path.stem).strip()
    return words[:1].upper() + words[1:] if words else "Untitled"
