from __future__ import annotations

import re
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .content import ABSENT

# Exactly "{{ name }}": one space on each side, no braces or whitespace in the name.
PLACEHOLDER_RE = re.compile(r"\{\{ ([^{}\s]+) \}\}")
PLACEHOLDER_OPEN = "{{"
MAX_PASSES = 3
LOCAL_LINK_RE = re.compile(r'(\s(?:href|src)=")\./')


class VariableSource:
    def __init__(self, name: str, values: Mapping[str, object]) -> None:
        self.name = name
        self._values = MappingProxyType(dict(values))

    @property
    def values(self) -> Mapping[str, object]:
        return self._values

    def lookup(self, key: str) -> object:
        value = self._values.get(key, ABSENT)
        if value is ABSENT or value is None:
            return ABSENT
        return str(value)

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not ABSENT

    def __repr__(self) -> str:
        return f"VariableSource({self.name!r}, {len(self._values)} values)"


@dataclass(frozen=True)
class Resolution:
    text: str
    unresolved: tuple[str, ...] = field(default_factory=tuple)
    detail: str = ""

    @property
    def ok(self) -> bool:
        return not self.detail and PLACEHOLDER_OPEN not in self.text

    def problem(self) -> str:
        if self.detail:
            return self.detail
        if self.unresolved:
            names = ", ".join(dict.fromkeys(self.unresolved))
            return f"unknown variable {names}"
        return "unresolved placeholder"


def resolve(template: str, sources: Sequence[VariableSource], passes: int = MAX_PASSES) -> Resolution:
    """Substitute ``{{ name }}`` tokens, highest-precedence source first.

    A value may itself contain placeholders, so substitution is repeated up to
    ``passes`` times. Unknown tokens are left as written.
    """

    def repl(match: re.Match) -> str:
        key = match.group(1)
        for source in sources:
            value = source.lookup(key)
            if value is not ABSENT:
                return value
        return match.group(0)

    output = template
    for _ in range(passes):
        if PLACEHOLDER_OPEN not in output:
            break
        updated = PLACEHOLDER_RE.sub(repl, output)
        if updated == output:
            break
        output = updated
    if PLACEHOLDER_OPEN not in output:
        return Resolution(output)
    return Resolution(output, tuple(PLACEHOLDER_RE.findall(output)))


def relocate_links(html_text: str, root: str) -> str:
    if root in ("", "."):
        return html_text
    return LOCAL_LINK_RE.sub(lambda m: f"{m.group(1)}{root}/", html_text)


def read_template(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_file(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
