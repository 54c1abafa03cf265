from __future__ import annotations

import argparse
import datetime as dt
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from pygments.util import ClassNotFound

from . import __version__
from .config import SiteConfig, load_config
from .content import ABSENT, read_page
from .pages import (
    LAYOUT_NAME,
    LOG_NAME,
    PROBLEM,
    ROBOTS_NAME,
    SITEMAP_NAME,
    WRITTEN,
    BuildContext,
    BuildReport,
    PageResult,
    page_record,
    process_file,
    write_highlight_css,
)
from .render import read_template, write_text
from .sitemap import SitemapAssembler, render_robots
from .utils import clean_output_dir, short_name

LABELS = {
    "written": "WRITE",
    "copied": " copy",
    "skipped": "   no",
    "problem": "ALERT",
}


class BuildLog:
    def __init__(self, echo: Callable[[str], None] = print) -> None:
        self.echo = echo
        self.lines: list[str] = []

    def trace(self, action: str, detail: str = "") -> None:
        line = f"{action}: {detail}" if detail else action
        self.echo(line)
        self.lines.append(line)

    def result(self, result: PageResult) -> None:
        detail = result.path
        if result.detail:
            detail = f"{detail} ({result.detail})"
        self.trace(LABELS.get(result.status, result.status), detail)

    def save(self, path: Path) -> None:
        write_text(path, "\n".join(self.lines) + "\n")


def find_src_folder(value: str) -> Optional[Path]:
    folder = Path(value or ".").resolve()
    if (folder / LAYOUT_NAME).exists():
        return folder
    if (folder / "src" / LAYOUT_NAME).exists():
        return folder / "src"
    return None


def find_dist_folder(value: str, project_dir: Path) -> Optional[Path]:
    folder = Path(value).resolve() if value else project_dir / "dist"
    if not folder.exists() or (folder / LOG_NAME).exists():
        return folder
    if (folder / "dist" / LOG_NAME).exists():
        return folder / "dist"
    return None


def list_source_files(src_dir: Path) -> list[Path]:
    files = [path for path in src_dir.rglob("*") if path.is_file()]
    return sorted(files, key=lambda p: (len(p.relative_to(src_dir).parts), p.as_posix()))


def is_reserved(path: Path, src_dir: Path) -> bool:
    return path.parent == src_dir and path.name in {LAYOUT_NAME, SITEMAP_NAME, ROBOTS_NAME, LOG_NAME}


def site_url_for(config: SiteConfig, template_meta) -> str:
    if config.url:
        return config.url
    value = template_meta.get("url")
    return "" if value is ABSENT else str(value).strip()


def build_sitemap(context: BuildContext, sources: list[Path]) -> PageResult:
    template = read_page(context.src_dir / SITEMAP_NAME)
    name = f"/{SITEMAP_NAME}"
    site_url = site_url_for(context.config, template.meta)
    if not site_url:
        return PageResult(PROBLEM, name, "missing site url")
    assembler = SitemapAssembler(template, site_url, context.site)
    for source in sources:
        if source.suffix == ".md":
            assembler.add(page_record(source, context.src_dir))
    resolution = assembler.render()
    write_text(context.dist_dir / "sitemap.xml", resolution.text)
    if not resolution.ok:
        return PageResult(PROBLEM, name, resolution.problem())
    return PageResult(WRITTEN, name)


def build_robots(context: BuildContext) -> PageResult:
    template = read_page(context.src_dir / ROBOTS_NAME)
    name = f"/{ROBOTS_NAME}"
    site_url = site_url_for(context.config, template.meta)
    sitemap_path = context.src_dir / SITEMAP_NAME
    if not site_url and sitemap_path.exists():
        site_url = site_url_for(context.config, read_page(sitemap_path).meta)
    if not site_url:
        return PageResult(PROBLEM, name, "missing site url")
    resolution = render_robots(template, site_url, context.site)
    write_text(context.dist_dir / "robots.txt", resolution.text)
    if not resolution.ok:
        return PageResult(PROBLEM, name, resolution.problem())
    return PageResult(WRITTEN, name)


def build_site(
    src_dir: Path, dist_dir: Path, config: SiteConfig, on_result: Callable[[PageResult], None] | None = None
) -> BuildReport:
    report = BuildReport()

    def record(result: PageResult) -> None:
        report.add(result)
        if on_result is not None:
            on_result(result)

    layout = read_template(src_dir / LAYOUT_NAME)
    dist_dir.mkdir(parents=True, exist_ok=True)
    context = BuildContext(src_dir, dist_dir, layout, config)

    sources = [path for path in list_source_files(src_dir) if not is_reserved(path, src_dir)]
    for source in sources:
        record(process_file(source, context))

    if config.highlight:
        try:
            path = write_highlight_css(dist_dir, config.pygments_style)
            record(PageResult(WRITTEN, short_name(path, dist_dir)))
        except ClassNotFound as exc:
            record(PageResult(PROBLEM, f"/{config.pygments_style}", str(exc)))

    extras: dict[str, Callable[[], PageResult]] = {
        SITEMAP_NAME: lambda: build_sitemap(context, sources),
        ROBOTS_NAME: lambda: build_robots(context),
    }
    for name, build in extras.items():
        if not (src_dir / name).exists():
            continue
        try:
            record(build())
        except (OSError, UnicodeDecodeError) as exc:
            record(PageResult(PROBLEM, f"/{name}", str(exc)))
    return report


def run(args: argparse.Namespace, log: BuildLog) -> int:
    log.trace(f"quickhtml {__version__}", " ".join(filter(None, [args.src, args.dist])))
    log.trace("---")
    log.trace("date", dt.datetime.now().replace(microsecond=0).isoformat(sep=" "))

    src_dir = find_src_folder(args.src)
    if src_dir is None:
        log.trace(f"ERROR: {Path(args.src or '.').resolve()} is not a valid src folder.")
        return 1
    log.trace("src", src_dir.as_posix())

    project_dir = src_dir.parent
    dist_dir = find_dist_folder(args.dist, project_dir)
    if dist_dir is None:
        log.trace(f"ERROR: {Path(args.dist or project_dir / 'dist').resolve()} is not a valid dist folder.")
        return 1
    log.trace("dist", dist_dir.as_posix())
    log.trace("---")

    config_path = Path(args.config)
    if not config_path.is_absolute() and not config_path.exists():
        config_path = project_dir / config_path
    config = SiteConfig.from_mapping(load_config(config_path))
    if args.lang:
        config.lang = args.lang
    if args.url:
        config.url = args.url

    if dist_dir.exists():
        log.trace("rmdir", "/*.*")
        clean_output_dir(dist_dir, project_dir)

    report = build_site(src_dir, dist_dir, config, on_result=log.result)
    log.trace("---")
    log.trace("problems", str(len(report.problems)))
    log.save(dist_dir / LOG_NAME)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Markdown to HTML site generator.")
    parser.add_argument("src", nargs="?", default="", help="Source folder, or the project folder holding src/.")
    parser.add_argument("dist", nargs="?", default="", help="Output folder (default: <project>/dist).")
    parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON), relative to the project folder if not found.",
    )
    parser.add_argument("--lang", default="", help="Override the language tag from the config file.")
    parser.add_argument("--url", default="", help="Override the public site URL used for sitemap and robots.")
    args = parser.parse_args(argv)

    start = time.perf_counter()
    status = run(args, BuildLog())
    elapsed = time.perf_counter() - start
    if status:
        sys.exit(status)
    print(f"Build completed in {elapsed:.2f}s.")
