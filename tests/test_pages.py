"""Tests for page building and per-file processing."""

from pathlib import Path

import pytest

from quickhtml.config import SiteConfig
from quickhtml.content import parse_front_matter
from quickhtml.pages import (
    COPIED,
    PROBLEM,
    SKIPPED,
    WRITTEN,
    BuildContext,
    BuildReport,
    PageResult,
    markdown_to_html,
    page_variables,
    process_file,
    render_page,
    root_path,
    write_highlight_css,
)
from quickhtml.typography import Typography

NBSP = "\u00a0"
LAYOUT = '<html lang="{{ lang }}"><link href="./css/site.css"><title>{{ title }}</title>\n{{ content }}</html>'


@pytest.fixture
def site(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "layout.html").write_text(LAYOUT, encoding="utf-8")
    return BuildContext(src, tmp_path / "dist", LAYOUT, SiteConfig())


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestMarkdownToHtml:
    def test_curly_quotes(self):
        assert markdown_to_html('She said "hi"', Typography()) == "<p>She said “hi”</p>"

    def test_french(self):
        html = markdown_to_html('Bonjour "vous" !', Typography.for_locale("fr"))
        assert html == f"<p>Bonjour «{NBSP}vous{NBSP}»{NBSP}!</p>"

    def test_code_is_untouched(self):
        html = markdown_to_html("It's here:\n\n```\nit's \"x\"...\n```", Typography())
        assert html.startswith("<p>It’s here:</p>")
        assert "it's" in html
        assert "..." in html

    def test_inline_code_is_untouched(self):
        html = markdown_to_html("Use `'a'` not 'b'", Typography())
        assert "<code>'a'</code>" in html
        assert "’b’" in html

    def test_inline_code_starting_with_dash(self):
        assert markdown_to_html("Use `-- x` here", Typography()) == "<p>Use <code>-- x</code> here</p>"

    def test_fenced_block_starting_with_dash(self):
        html = markdown_to_html("```\n-- select all\nSELECT 1;\n```", Typography())
        assert "<code>-- select all\nSELECT 1;\n</code>" in html
        assert NBSP not in html

    def test_strikethrough(self):
        assert markdown_to_html("~~gone~~ ok", Typography()) == "<p><del>gone</del> ok</p>"

    def test_highlighting(self):
        html = markdown_to_html("```python\nx = 'a'\n```", Typography(), SiteConfig(highlight=True))
        assert 'class="codehilite"' in html
        assert "’" not in html


class TestPageVariables:
    def test_title_from_file_name(self):
        page = parse_front_matter("just text")
        variables = page_variables(page, Path("about-us.md"), Typography(), "<p>x</p>", ".")
        assert variables.lookup("title") == "About us"
        assert variables.lookup("index") == "About us"

    def test_title_and_index_get_character_substitution(self):
        page = parse_front_matter("---\ntitle: It's here...\n---\n")
        variables = page_variables(page, Path("a.md"), Typography(), "", ".")
        assert variables.lookup("title") == "It’s here…"
        assert variables.lookup("index") == "It’s here…"

    def test_explicit_index_and_extra_keys(self):
        page = parse_front_matter("---\ntitle: A\nindex: Home\nid: home\n---\n")
        variables = page_variables(page, Path("a.md"), Typography(), "body", "..")
        assert variables.lookup("index") == "Home"
        assert variables.lookup("id") == "home"
        assert variables.lookup("content") == "body"
        assert variables.lookup("root") == ".."


class TestRenderPage:
    def test_end_to_end(self, site):
        page = parse_front_matter('---\ntitle: Hello\n---\nShe said "hi"')
        result = render_page(page, site.src_dir / "a.md", site.layout, site)
        assert result.ok
        assert "<title>Hello</title>" in result.text
        assert "<p>She said “hi”</p>" in result.text
        assert 'lang="en"' in result.text

    def test_page_content_placeholders_resolve(self, site):
        page = parse_front_matter("---\ntitle: Hello\n---\nWelcome to {{ title }}.")
        result = render_page(page, site.src_dir / "a.md", site.layout, site)
        assert "<p>Welcome to Hello.</p>" in result.text

    def test_subfolder_links(self, site):
        page = parse_front_matter("---\ntitle: Deep\n---\ntext")
        result = render_page(page, site.src_dir / "a" / "b" / "c.md", site.layout, site, depth=2)
        assert 'href="../../css/site.css"' in result.text

    def test_root_path(self):
        assert root_path(0) == "."
        assert root_path(1) == ".."
        assert root_path(3) == "../../.."


class TestProcessFile:
    def test_markdown_is_written(self, site):
        source = write(site.src_dir / "a.md", "---\ntitle: A\n---\nHello")
        result = process_file(source, site)
        assert result == PageResult(WRITTEN, "/a.md")
        html = (site.dist_dir / "a.html").read_text(encoding="utf-8")
        assert "<title>A</title>" in html

    def test_subfolder_page(self, site):
        source = write(site.src_dir / "sub" / "page.md", "---\ntitle: P\n---\nHello")
        assert process_file(source, site).status == WRITTEN
        html = (site.dist_dir / "sub" / "page.html").read_text(encoding="utf-8")
        assert 'href="../css/site.css"' in html

    def test_known_extension_is_copied(self, site):
        source = write(site.src_dir / "css" / "site.css", "body {}")
        assert process_file(source, site) == PageResult(COPIED, "/css/site.css")
        assert (site.dist_dir / "css" / "site.css").read_text(encoding="utf-8") == "body {}"

    def test_unknown_extension_at_root_is_copied(self, site):
        source = write(site.src_dir / "CNAME", "example.org")
        assert process_file(source, site).status == COPIED
        assert (site.dist_dir / "CNAME").exists()

    def test_unknown_extension_in_subfolder_is_a_problem(self, site):
        source = write(site.src_dir / "docs" / "notes.xyz", "x")
        result = process_file(source, site)
        assert result.status == PROBLEM
        assert result.is_problem
        assert "extension" in result.detail
        assert not (site.dist_dir / "docs" / "notes.xyz").exists()

    def test_png_shadowed_by_jpeg_is_skipped(self, site):
        png = write(site.src_dir / "img" / "photo.png", "png")
        jpg = write(site.src_dir / "img" / "photo.jpg", "jpg")
        assert process_file(png, site) == PageResult(SKIPPED, "/img/photo.png")
        assert process_file(jpg, site).status == COPIED
        assert not (site.dist_dir / "img" / "photo.png").exists()

    def test_unresolved_placeholder_is_reported_and_written(self, tmp_path):
        src = tmp_path / "src"
        layout = "<meta content=\"{{ description }}\">{{ content }}"
        context = BuildContext(src, tmp_path / "dist", layout, SiteConfig())
        source = write(src / "a.md", "---\ntitle: A\n---\nHello")
        result = process_file(source, context)
        assert result.status == PROBLEM
        assert result.detail == "unknown variable description"
        html = (context.dist_dir / "a.html").read_text(encoding="utf-8")
        assert "{{ description }}" in html

    def test_empty_value_from_config_satisfies_placeholder(self, tmp_path):
        src = tmp_path / "src"
        layout = "<meta content=\"{{ description }}\">{{ content }}"
        config = SiteConfig.from_mapping({"description": ""})
        context = BuildContext(src, tmp_path / "dist", layout, config)
        source = write(src / "a.md", "Hello")
        assert process_file(source, context).status == WRITTEN


class TestReport:
    def test_problems(self):
        report = BuildReport()
        report.add(PageResult(WRITTEN, "/a.md"))
        report.add(PageResult(PROBLEM, "/b.md", "unknown variable x"))
        assert [result.path for result in report.problems] == ["/b.md"]


def test_write_highlight_css(tmp_path):
    path = write_highlight_css(tmp_path, "default")
    assert path == tmp_path / "css" / "highlight.css"
    assert ".codehilite" in path.read_text(encoding="utf-8")
