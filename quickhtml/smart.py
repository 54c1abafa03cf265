from __future__ import annotations

from .scanner import LiteralKind, scan
from .typography import QuoteState, Typography


def smarten(html: str, typography: Typography) -> str:
    """Apply typographic corrections to the prose parts of an HTML fragment.

    Code, pre, script and style blocks, comments and tag markup are copied
    verbatim. Quote pairing is tracked over the whole fragment, so a quotation
    may open and close on either side of an inline tag.
    """
    state = QuoteState()
    parts = []
    previous = None
    for span in scan(html):
        if span.is_prose:
            text = typography.transform(span.text, state)
            if previous is LiteralKind.TAG:
                text = typography.cleanup(text)
            parts.append(text)
        else:
            parts.append(span.text)
        previous = span.kind
    return "".join(parts)
