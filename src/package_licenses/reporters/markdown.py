"""Markdown reporter for generating license inventory tables.

This module provides a reporter that renders the report rows into a
Markdown document using Jinja2 templates.
"""

import asyncio
from collections.abc import Sequence
from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from package_licenses.reporters.base import BaseReporter


def escape_cell(value: str) -> str:
    """Escape a value for use inside a Markdown table cell."""
    text = value.replace("\\", "\\\\").replace("|", "\\|")
    return text.replace("\r\n", "<br>").replace("\n", "<br>").replace("\r", "<br>")


class MarkdownReporter(BaseReporter):
    """Reporter that writes the report as a Markdown table.

    Rows are collected in memory and the whole document is rendered on
    ``flush()`` and ``close()``.

    Attributes:
        output_path: File receiving the document.
        title: Document title, naming the package source.
        template: The Jinja2 template to use for rendering.
    """

    def __init__(
        self,
        output_path: Path,
        title: str = "Packages",
        template_path: Optional[Path] = None,
    ) -> None:
        """Initialize the Markdown reporter.

        Args:
            output_path: File receiving the document.
            title: Document title, naming the package source.
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
        """
        self.output_path = output_path
        self.title = title
        if template_path:
            env = self._environment(FileSystemLoader(template_path.parent))
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

        self._columns: Optional[list[str]] = None
        self._rows: list[list[str]] = []
        self._dirty = False
        self._closed = False

    @staticmethod
    def _environment(loader=None) -> Environment:
        env = Environment(loader=loader, autoescape=False, keep_trailing_newline=True)
        env.filters["cell"] = escape_cell
        return env

    def _load_default_template(self) -> Template:
        """Load the default bundled Jinja2 template.

        Returns:
            The default template loaded from package resources.
        """
        template_content = (
            files("package_licenses.templates")
            .joinpath("licenses.md.j2")
            .read_text(encoding="utf-8")
        )
        return self._environment().from_string(template_content)

    def render(self) -> str:
        """Render the collected header and rows.

        Returns:
            Rendered Markdown document as a string.
        """
        return self.template.render(
            title=self.title,
            columns=self._columns or [],
            rows=self._rows,
            generated_at=datetime.now(),
        )

    def _write(self) -> None:
        self.output_path.write_text(self.render(), encoding="utf-8")
        self._dirty = False

    async def write_header(self, columns: Sequence[str]) -> None:
        self._columns = list(columns)
        self._dirty = True

    async def write_row(self, values: Sequence[str]) -> None:
        self._rows.append(list(values))
        self._dirty = True

    async def flush(self) -> None:
        if self._dirty:
            await asyncio.to_thread(self._write)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._dirty:
            self._write()

    @property
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            The string "markdown".
        """
        return "markdown"

    @property
    def default_extension(self) -> str:
        """Return the default file extension for Markdown files.

        Returns:
            The string ".md".
        """
        return ".md"
