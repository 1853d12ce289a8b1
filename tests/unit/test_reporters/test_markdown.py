"""Tests for the Markdown reporter."""

from pathlib import Path

import pytest

from package_licenses.reporters.markdown import MarkdownReporter, escape_cell


class TestEscapeCell:
    """Test suite for Markdown cell escaping."""

    def test_plain_text(self) -> None:
        assert escape_cell("MIT License") == "MIT License"

    def test_pipe_and_backslash(self) -> None:
        """Test that table syntax is escaped."""
        assert escape_cell("a|b") == "a\\|b"
        assert escape_cell("C:\\path") == "C:\\\\path"

    def test_line_breaks(self) -> None:
        """Test that line breaks stay inside the cell."""
        assert escape_cell("one\r\ntwo\nthree\rfour") == "one<br>two<br>three<br>four"


class TestMarkdownReporter:
    """Test suite for MarkdownReporter."""

    def test_format_properties(self, tmp_path: Path) -> None:
        """Test format name and extension."""
        reporter = MarkdownReporter(tmp_path / "Licenses.md")
        assert reporter.format_name == "markdown"
        assert reporter.default_extension == ".md"

    @pytest.mark.asyncio
    async def test_renders_table(self, tmp_path: Path) -> None:
        """Test the default template renders a table with every row."""
        path = tmp_path / "Licenses.md"
        reporter = MarkdownReporter(path, title="Contoso.App.csproj")

        await reporter.write_header(["Id", "Version", "License"])
        await reporter.write_row(["Contoso.Widgets", "1.0", "MIT"])
        await reporter.write_row(["Pipes", "2.0", "A|B"])
        await reporter.flush()
        reporter.close()

        content = path.read_text(encoding="utf-8")
        lines = content.splitlines()
        assert lines[0] == "# Third-Party Licenses: Contoso.App.csproj"
        assert "2 package(s)" in content
        assert "| Id | Version | License |" in lines
        assert "| --- | --- | --- |" in lines
        assert "| Contoso.Widgets | 1.0 | MIT |" in lines
        assert "| Pipes | 2.0 | A\\|B |" in lines

    @pytest.mark.asyncio
    async def test_no_file_without_writes(self, tmp_path: Path) -> None:
        """Test that nothing is written when no rows were received."""
        reporter = MarkdownReporter(tmp_path / "Licenses.md")

        await reporter.flush()
        reporter.close()

        assert not (tmp_path / "Licenses.md").exists()

    @pytest.mark.asyncio
    async def test_close_writes_pending_rows(self, tmp_path: Path) -> None:
        """Test that close renders rows added after the last flush."""
        path = tmp_path / "Licenses.md"
        reporter = MarkdownReporter(path)

        await reporter.write_header(["Id"])
        await reporter.flush()
        await reporter.write_row(["Late"])
        reporter.close()
        reporter.close()

        assert "| Late |" in path.read_text(encoding="utf-8").splitlines()

    @pytest.mark.asyncio
    async def test_custom_template(self, tmp_path: Path) -> None:
        """Test rendering with a user-supplied template."""
        template = tmp_path / "custom.md.j2"
        template.write_text(
            "{{ title }}\n{% for row in rows %}{{ row[0] | cell }};{% endfor %}\n",
            encoding="utf-8",
        )
        path = tmp_path / "out.md"
        reporter = MarkdownReporter(path, title="Custom", template_path=template)

        await reporter.write_header(["Id"])
        await reporter.write_row(["a|b"])
        reporter.close()

        assert path.read_text(encoding="utf-8") == "Custom\na\\|b;\n"
