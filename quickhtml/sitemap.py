from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from .content import ABSENT, Metadata, PageDocument
from .render import Resolution, VariableSource, resolve
from .utils import iso_day

URL_FRAGMENT_RE = re.compile(r"\s*<url>(.*?)</url>", re.DOTALL)
INDEX_NAME = "index.md"
SOURCE_SUFFIX = ".md"
PUBLISHED_SUFFIX = ".html"
DEFAULT_CHANGEFREQ = "yearly"
DEFAULT_PRIORITY = "1.0"
MISSING_FRAGMENT = "sitemap template has no <url> fragment"


@dataclass(frozen=True)
class PageRecord:
    path: str
    meta: Metadata
    modified: dt.datetime


@dataclass(frozen=True)
class SitemapEntry:
    location: str
    last_modified: str
    change_frequency: str
    priority: str

    def variables(self) -> VariableSource:
        return VariableSource(
            "page",
            {
                "loc": self.location,
                "lastmod": self.last_modified,
                "changefreq": self.change_frequency,
                "priority": self.priority,
            },
        )


def normalize_base_url(url: str) -> str:
    url = url.strip()
    return url if url.endswith("/") else url + "/"


def page_location(base_url: str, path: str) -> str:
    rel = PurePosixPath(path.lstrip("/"))
    if rel.name == INDEX_NAME:
        parent = rel.parent.as_posix()
        return base_url if parent == "." else f"{base_url}{parent}/"
    if rel.suffix == SOURCE_SUFFIX:
        rel = rel.with_suffix(PUBLISHED_SUFFIX)
    return base_url + rel.as_posix()


def _first_defined(*candidates: object, fallback: str) -> str:
    for value in candidates:
        if value is not ABSENT and value is not None:
            return str(value)
    return fallback


class SitemapAssembler:
    """Collects one ``<url>`` entry per page and renders them in sorted order."""

    def __init__(self, template: PageDocument, base_url: str, site: VariableSource | None = None) -> None:
        self.template = template
        self.base_url = normalize_base_url(base_url)
        self.site = site or VariableSource("site", {})
        match = URL_FRAGMENT_RE.search(template.body)
        self.fragment = match.group(0) if match else ""
        self.rendered: list[Resolution] = []

    def entry_for(self, record: PageRecord) -> SitemapEntry:
        defaults = self.template.meta
        return SitemapEntry(
            location=page_location(self.base_url, record.path),
            last_modified=iso_day(record.modified),
            change_frequency=_first_defined(
                record.meta.get("changefreq"),
                defaults.get("changefreq"),
                self.site.lookup("changefreq"),
                fallback=DEFAULT_CHANGEFREQ,
            ),
            priority=_first_defined(
                record.meta.get("priority"),
                defaults.get("priority"),
                self.site.lookup("priority"),
                fallback=DEFAULT_PRIORITY,
            ),
        )

    def add(self, record: PageRecord) -> SitemapEntry:
        entry = self.entry_for(record)
        self.rendered.append(resolve(self.fragment, [entry.variables()]))
        return entry

    def render(self) -> Resolution:
        urls = sorted(item.text for item in self.rendered)
        unresolved = tuple(name for item in self.rendered for name in item.unresolved)
        if not self.fragment:
            return Resolution(self.template.body, unresolved, MISSING_FRAGMENT)
        body = self.template.body.replace(self.fragment, "".join(urls), 1)
        return Resolution(body, unresolved)


def render_robots(template: PageDocument, base_url: str, site: VariableSource | None = None) -> Resolution:
    base_url = normalize_base_url(base_url)
    page = VariableSource(
        "robots",
        {**template.meta, "url": base_url, "sitemap": base_url + "sitemap.xml"},
    )
    sources = [page] if site is None else [page, site]
    return resolve(template.body, sources)
