from __future__ import annotations

import enum
from dataclasses import dataclass


class LiteralKind(enum.Enum):
    CODE_BLOCK = "code"
    PRE_BLOCK = "pre"
    SCRIPT_BLOCK = "script"
    STYLE_BLOCK = "style"
    COMMENT = "comment"
    TAG = "tag"


BLOCK_TAGS = {
    "code": LiteralKind.CODE_BLOCK,
    "pre": LiteralKind.PRE_BLOCK,
    "script": LiteralKind.SCRIPT_BLOCK,
    "style": LiteralKind.STYLE_BLOCK,
}
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"


@dataclass(frozen=True)
class Span:
    text: str
    kind: LiteralKind | None = None

    @property
    def is_prose(self) -> bool:
        return self.kind is None


def _block_name(html: str, pos: int) -> str | None:
    for name in BLOCK_TAGS:
        end = pos + 1 + len(name)
        if html.startswith(name, pos + 1) and (end == len(html) or html[end] in "> \t\r\n/"):
            return name
    return None


def _consume(html: str, start: int, marker: str) -> int:
    end = html.find(marker, start)
    return len(html) if end == -1 else end + len(marker)


def scan(html: str) -> list[Span]:
    spans: list[Span] = []
    pos = 0
    search = 0
    length = len(html)
    while pos < length:
        start = html.find("<", search)
        if start == -1:
            spans.append(Span(html[pos:]))
            break
        nxt = html[start + 1 : start + 2]
        name = _block_name(html, start)
        if name is not None:
            kind = BLOCK_TAGS[name]
            end = _consume(html, start, f"</{name}>")
        elif html.startswith(COMMENT_OPEN, start):
            kind = LiteralKind.COMMENT
            end = _consume(html, start + len(COMMENT_OPEN), COMMENT_CLOSE)
        elif nxt == "/" or (nxt.isascii() and nxt.isalpha()):
            kind = LiteralKind.TAG
            end = _consume(html, start, ">")
        else:
            search = start + 1
            continue
        if start > pos:
            spans.append(Span(html[pos:start]))
        spans.append(Span(html[start:end], kind))
        pos = search = end
    return spans


def join_spans(spans: list[Span]) -> str:
    return "".join(span.text for span in spans)
