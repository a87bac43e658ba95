"""Unit tests for Markdown conversion."""

from pathlib import Path

from markdown import Markdown

from plainwiki.config import Settings
from plainwiki.core.markup import (
    CommandMarkdownConverter,
    PythonMarkdownConverter,
    build_converter,
    create_parser,
    fallback_html,
)
from plainwiki.core.models import CommandResult


def convert(text: str) -> str:
    return PythonMarkdownConverter().convert_text(text)


# ============================================================
# Strikethrough extension
# ============================================================


class TestStrikethrough:
    def test_basic_strikethrough(self):
        html = convert("~~deleted~~")
        assert "<del>deleted</del>" in html

    def test_strikethrough_in_paragraph(self):
        html = convert("This is ~~removed~~ text.")
        assert "<del>removed</del>" in html
        assert "This is" in html
        assert "text." in html

    def test_strikethrough_multiple(self):
        html = convert("~~one~~ and ~~two~~")
        assert html.count("<del>") == 2


# ============================================================
# Python-Markdown conversion
# ============================================================


class TestPythonMarkdownConverter:
    def test_markdown_headings(self):
        html = convert("# Title\n\n## Subtitle")
        assert "<h1" in html
        assert "Title</h1>" in html
        assert "<h2" in html

    def test_markdown_bold_italic(self):
        html = convert("**bold** and *italic*")
        assert "<strong>bold</strong>" in html
        assert "<em>italic</em>" in html

    def test_code_block_is_highlighted(self):
        html = convert("```python\nprint('hi')\n```")
        assert "codehilite" in html
        assert "print" in html

    def test_inline_math(self):
        html = convert("Euler: $e^{i\\pi} + 1 = 0$")
        assert 'class="arithmatex"' in html

    def test_task_list(self):
        html = convert("- [ ] todo\n- [x] done")
        assert 'type="checkbox"' in html

    def test_table(self):
        html = convert("| A | B |\n|---|---|\n| 1 | 2 |")
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_wiki_links_survive_conversion(self):
        html = convert("See [[The Sandbox|redirect]] and [[Cats]].")
        assert "[[The Sandbox|redirect]]" in html
        assert "[[Cats]]" in html

    def test_convert_reads_file(self, tmp_path):
        path = tmp_path / "content.md"
        path.write_text("**from file**", encoding="utf-8")
        assert "<strong>from file</strong>" in PythonMarkdownConverter().convert(path)

    def test_create_parser_returns_markdown(self):
        assert isinstance(create_parser(), Markdown)


# ============================================================
# External converter
# ============================================================


class FakeConverterRunner:
    def __init__(self, result: CommandResult):
        self.result = result
        self.argv: list[str] = []
        self.seen_text: str | None = None

    def __call__(self, argv, cwd=None, timeout=None):
        self.argv = list(argv)
        self.seen_text = Path(argv[-1]).read_text(encoding="utf-8")
        return self.result


class TestCommandMarkdownConverter:
    def test_path_is_appended_to_argv(self, tmp_path):
        path = tmp_path / "content.md"
        path.write_text("hello", encoding="utf-8")
        runner = FakeConverterRunner(CommandResult(argv=[], returncode=0, stdout="<p>hello</p>"))
        converter = CommandMarkdownConverter(["markdown", "--safe"], runner=runner)

        assert converter.convert(path) == "<p>hello</p>"
        assert runner.argv == ["markdown", "--safe", str(path)]

    def test_failure_degrades_to_escaped_text(self, tmp_path):
        path = tmp_path / "content.md"
        path.write_text("<b>raw</b>", encoding="utf-8")
        runner = FakeConverterRunner(CommandResult(argv=[], returncode=2, stderr="boom"))
        converter = CommandMarkdownConverter(["markdown"], runner=runner)

        html = converter.convert(path)
        assert html == fallback_html("<b>raw</b>")
        assert "&lt;b&gt;raw&lt;/b&gt;" in html

    def test_timeout_degrades(self, tmp_path):
        path = tmp_path / "content.md"
        path.write_text("slow", encoding="utf-8")
        runner = FakeConverterRunner(
            CommandResult(argv=[], returncode=-1, timed_out=True)
        )
        html = CommandMarkdownConverter(["markdown"], runner=runner).convert(path)
        assert "<pre" in html
        assert "slow" in html

    def test_convert_text_uses_temporary_file(self):
        runner = FakeConverterRunner(CommandResult(argv=[], returncode=0, stdout="ok"))
        converter = CommandMarkdownConverter(["markdown"], runner=runner)

        assert converter.convert_text("some text") == "ok"
        assert runner.seen_text == "some text"
        assert not Path(runner.argv[-1]).exists()


class TestBuildConverter:
    def test_default_is_in_process(self):
        assert isinstance(build_converter(Settings(_env_file=None)), PythonMarkdownConverter)

    def test_command_configured(self):
        converter = build_converter(
            Settings(_env_file=None, markdown_command=["pandoc", "-f", "markdown"])
        )
        assert isinstance(converter, CommandMarkdownConverter)
        assert converter.argv == ["pandoc", "-f", "markdown"]
