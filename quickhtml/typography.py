from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

NBSP = "\u00a0"
NBSP_ENTITY = "&nbsp;"
APOSTROPHE = "’"
ELLIPSIS = "…"
EM_DASH = "—"
EN_DASH = "–"

LIGATURES = {
    "oe": "œ",
    "Oe": "Œ",
    "OE": "Œ",
    "ae": "æ",
    "Ae": "Æ",
    "AE": "Æ",
}

QUOTE_MARKER_RE = re.compile(r'&quot;|"')
DASH_RE = re.compile(r"(?<=[\s,])--(?!-) ")
LEADING_DASH_RE = re.compile(r"\A(--|[–—]) ")
SPACED_PUNCT = ("?", ";", ":", "!", "»")


class QuoteState:
    """Open/close parity of neutral quote markers across one document."""

    def __init__(self) -> None:
        self.expect_open = True

    def advance(self) -> bool:
        opening = self.expect_open
        self.expect_open = not self.expect_open
        return opening


def is_french(locale: str) -> bool:
    primary = re.split(r"[-_]", (locale or "").strip(), maxsplit=1)[0]
    return primary.lower() == "fr"


@dataclass(frozen=True)
class Typography:
    locale: str = "en"
    ligatures: tuple[str, ...] = ()
    spacing: bool | None = None
    nbsp_entities: bool = False

    @classmethod
    def for_locale(
        cls,
        locale: str,
        ligatures: Iterable[str] = (),
        spacing: bool | None = None,
        nbsp_entities: bool = False,
    ) -> Typography:
        return cls(locale or "en", tuple(ligatures), spacing, nbsp_entities)

    @property
    def french(self) -> bool:
        return is_french(self.locale)

    @property
    def gap(self) -> str:
        return NBSP_ENTITY if self.nbsp_entities else NBSP

    @property
    def dash(self) -> str:
        return EN_DASH if self.french else EM_DASH

    @property
    def spacing_enabled(self) -> bool:
        return self.french if self.spacing is None else self.spacing

    def substitute_characters(self, text: str) -> str:
        text = text.replace("'", APOSTROPHE)
        text = text.replace("...", ELLIPSIS)
        if self.french:
            for digraph in self.ligatures:
                for variant in (digraph.lower(), digraph.capitalize(), digraph.upper()):
                    glyph = LIGATURES.get(variant)
                    if glyph:
                        text = text.replace(variant, glyph)
        return text

    def normalize_dashes(self, text: str) -> str:
        return DASH_RE.sub(self.dash + self.gap, text)

    def apply_spacing(self, text: str) -> str:
        if not self.spacing_enabled:
            return text
        for mark in SPACED_PUNCT:
            text = text.replace(" " + mark, self.gap + mark)
        return text.replace("« ", "«" + self.gap)

    def pair_quotes(self, text: str, state: QuoteState) -> str:
        parts: list[str] = []
        pos = 0
        trim_next = False
        for match in QUOTE_MARKER_RE.finditer(text):
            chunk = text[pos : match.start()]
            if trim_next:
                chunk = chunk.lstrip()
            opening = state.advance()
            if self.french:
                if opening:
                    parts.append(chunk)
                    parts.append("«" + self.gap)
                else:
                    parts.append(chunk.rstrip())
                    parts.append(self.gap + "»")
                trim_next = opening
            else:
                parts.append(chunk)
                parts.append("“" if opening else "”")
            pos = match.end()
        tail = text[pos:]
        parts.append(tail.lstrip() if trim_next else tail)
        return "".join(parts)

    def transform(self, text: str, state: QuoteState) -> str:
        text = self.substitute_characters(text)
        text = self.normalize_dashes(text)
        text = self.pair_quotes(text, state)
        return self.apply_spacing(text)

    def cleanup(self, text: str) -> str:
        """Fix a dash that opens a prose run right after a tag."""

        def repl(match: re.Match) -> str:
            dash = self.dash if match.group(1) == "--" else match.group(1)
            return dash + self.gap

        return LEADING_DASH_RE.sub(repl, text, count=1)
