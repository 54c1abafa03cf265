from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, NoReturn

from .render import VariableSource
from .typography import Typography
from .utils import parse_bool, parse_list

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

DEFAULT_LANG = "en"


class ConfigError(Exception):
    pass


def _parse_toml(text: str) -> object:
    if toml is None:
        raise ConfigError("TOML config requires tomllib (Python 3.11+) or tomli.")
    return toml.loads(text)


def _parse_yaml(text: str) -> object:
    if yaml is None:
        raise ConfigError("YAML config requires PyYAML.")
    data = yaml.safe_load(text)
    return {} if data is None else data


# suffix -> (format name, parser); anything else is read as JSON
CONFIG_FORMATS: dict[str, tuple[str, Callable[[str], object]]] = {
    ".toml": ("TOML", _parse_toml),
    ".yml": ("YAML", _parse_yaml),
    ".yaml": ("YAML", _parse_yaml),
}


def _fail(message: str) -> NoReturn:
    print(message, file=sys.stderr)
    sys.exit(1)


def load_config(path: Path) -> dict:
    """Read a site config file; a missing file means an empty config.

    A parse error or a document that is not a mapping ends the run.
    """
    if not path.exists():
        return {}
    kind, parse = CONFIG_FORMATS.get(path.suffix.lower(), ("JSON", json.loads))
    text = path.read_text(encoding="utf-8")
    try:
        data = parse(text)
    except ConfigError as exc:
        _fail(str(exc))
    except Exception as exc:  # parser-specific error types
        _fail(f"Invalid {kind} in config file {path}: {exc}")
    if not isinstance(data, dict):
        _fail(f"{kind} config must be a mapping: {path}")
    return data


def _scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class SiteConfig:
    lang: str = DEFAULT_LANG
    url: str = ""
    changefreq: str = ""
    priority: str = ""
    ligatures: list[str] = field(default_factory=list)
    spacing: bool | None = None
    nbsp_entities: bool = False
    highlight: bool = False
    pygments_style: str = "default"
    values: dict = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict) -> SiteConfig:
        spacing = data.get("spacing")
        return cls(
            lang=str(data.get("lang") or DEFAULT_LANG),
            url=str(data.get("url") or "").strip(),
            changefreq=str(data.get("changefreq") or ""),
            priority=str(data.get("priority") or ""),
            ligatures=parse_list(data.get("ligatures")),
            spacing=None if spacing is None else parse_bool(spacing),
            nbsp_entities=parse_bool(data.get("nbsp_entities")),
            highlight=parse_bool(data.get("highlight")),
            pygments_style=str(data.get("pygments_style") or "default"),
            values=dict(data),
        )

    def typography(self) -> Typography:
        return Typography.for_locale(self.lang, self.ligatures, self.spacing, self.nbsp_entities)

    def variables(self) -> VariableSource:
        # Nested tables and lists are not addressable by a flat placeholder.
        values = {
            key: _scalar(value)
            for key, value in self.values.items()
            if value is not None and not isinstance(value, (dict, list))
        }
        values["lang"] = self.lang
        if self.url:
            values["url"] = self.url
        return VariableSource("site", values)
