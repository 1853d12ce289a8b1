"""Tabular report sinks and the row builder feeding them.

This module provides reporters for writing the license report as
delimited text and Markdown.
"""

from package_licenses.reporters.base import BaseReporter
from package_licenses.reporters.delimited import DelimitedTextReporter
from package_licenses.reporters.markdown import MarkdownReporter
from package_licenses.reporters.rows import HEADERS, ReportRowBuilder

__all__ = [
    "BaseReporter",
    "DelimitedTextReporter",
    "HEADERS",
    "MarkdownReporter",
    "ReportRowBuilder",
]
