from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import markdown
from pygments.formatters import HtmlFormatter

from .config import SiteConfig
from .content import ABSENT, PageDocument, derive_title, read_page
from .render import Resolution, VariableSource, copy_file, relocate_links, resolve, write_text
from .sitemap import PageRecord
from .smart import smarten
from .strikethrough import StrikethroughExtension
from .typography import Typography
from .utils import modified_utc, short_name

LAYOUT_NAME = "layout.html"
SITEMAP_NAME = "sitemap.md"
ROBOTS_NAME = "robots.md"
LOG_NAME = "qh.log"
HIGHLIGHT_CSS = "css/highlight.css"
COPY_SUFFIXES = {".css", ".html", ".ico", ".jpg", ".js", ".pdf", ".png", ".txt", ".xml"}

WRITTEN = "written"
COPIED = "copied"
SKIPPED = "skipped"
PROBLEM = "problem"


@dataclass(frozen=True)
class PageResult:
    status: str
    path: str
    detail: str = ""

    @property
    def is_problem(self) -> bool:
        return self.status == PROBLEM


@dataclass
class BuildReport:
    results: list[PageResult] = field(default_factory=list)

    def add(self, result: PageResult) -> PageResult:
        self.results.append(result)
        return result

    @property
    def problems(self) -> list[PageResult]:
        return [result for result in self.results if result.is_problem]


@dataclass
class BuildContext:
    src_dir: Path
    dist_dir: Path
    layout: str
    config: SiteConfig = field(default_factory=SiteConfig)

    def __post_init__(self) -> None:
        self.typography: Typography = self.config.typography()
        self.site: VariableSource = self.config.variables()


def create_markdown(config: SiteConfig) -> markdown.Markdown:
    extensions: list = ["fenced_code", "tables", StrikethroughExtension()]
    configs: dict = {}
    if config.highlight:
        extensions.append("codehilite")
        configs["codehilite"] = {"css_class": "codehilite", "guess_lang": False}
    return markdown.Markdown(extensions=extensions, extension_configs=configs)


def markdown_to_html(body: str, typography: Typography, config: SiteConfig | None = None) -> str:
    md = create_markdown(config or SiteConfig())
    return smarten(md.convert(body), typography)


def root_path(depth: int) -> str:
    return "/".join([".."] * depth) if depth else "."


def page_variables(page: PageDocument, source: Path, typography: Typography, content: str, root: str) -> VariableSource:
    meta = page.meta
    title = meta.get("title")
    if title is ABSENT:
        title = derive_title(source)
    title = typography.substitute_characters(title)
    index = meta.get("index")
    index = title if index is ABSENT else typography.substitute_characters(index)
    values = dict(meta)
    values.update({"title": title, "index": index, "content": content, "root": root})
    return VariableSource("page", values)


def render_page(
    page: PageDocument, source: Path, layout: str, context: BuildContext, depth: int = 0
) -> Resolution:
    content = markdown_to_html(page.body, context.typography, context.config)
    root = root_path(depth)
    variables = page_variables(page, source, context.typography, content, root)
    return resolve(relocate_links(layout, root), [variables, context.site])


def build_markdown_page(source: Path, destination: Path, context: BuildContext, depth: int = 0) -> PageResult:
    name = short_name(source, context.src_dir)
    page = read_page(source)
    resolution = render_page(page, source, context.layout, context, depth)
    write_text(destination.with_suffix(".html"), resolution.text)
    if not resolution.ok:
        return PageResult(PROBLEM, name, resolution.problem())
    return PageResult(WRITTEN, name)


def shadowed_by_jpeg(source: Path) -> bool:
    return source.suffix == ".png" and source.with_suffix(".jpg").exists()


def process_file(source: Path, context: BuildContext) -> PageResult:
    name = short_name(source, context.src_dir)
    rel = source.relative_to(context.src_dir)
    destination = context.dist_dir / rel
    depth = len(rel.parts) - 1
    if shadowed_by_jpeg(source):
        return PageResult(SKIPPED, name)
    try:
        if source.suffix == ".md":
            return build_markdown_page(source, destination, context, depth)
        if source.suffix in COPY_SUFFIXES or depth == 0:
            copy_file(source, destination)
            return PageResult(COPIED, name)
    except (OSError, UnicodeDecodeError) as exc:
        return PageResult(PROBLEM, name, str(exc))
    return PageResult(PROBLEM, name, "no valid file extension")


def page_record(source: Path, src_dir: Path) -> PageRecord:
    return PageRecord(
        path=source.relative_to(src_dir).as_posix(),
        meta=read_page(source).meta,
        modified=modified_utc(source),
    )


def write_highlight_css(dist_dir: Path, style: str) -> Path:
    path = dist_dir / HIGHLIGHT_CSS
    write_text(path, HtmlFormatter(style=style).get_style_defs(".codehilite"))
    return path
