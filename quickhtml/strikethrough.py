from __future__ import annotations

import xml.etree.ElementTree as etree

from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor

RE_STRIKE = r"~~(?=\S)(?P<text>.+?)(?<=\S)~~"


class StrikethroughProcessor(InlineProcessor):
    def handleMatch(self, m, data):
        el = etree.Element("del")
        el.text = m.group("text")
        return el, m.start(0), m.end(0)


class StrikethroughExtension(Extension):
    """``~~text~~`` becomes ``<del>text</del>``."""

    def extendMarkdown(self, md):
        md.inlinePatterns.register(StrikethroughProcessor(RE_STRIKE, md), "strikethrough", 175)
