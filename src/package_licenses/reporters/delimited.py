"""Delimited-text reporter writing the report as TSV (or CSV/SSV)."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from package_licenses.reporters.base import BaseReporter
from package_licenses.separated_values import SeparatedValuesWriter, WriterSetting

logger = logging.getLogger(__name__)


class DelimitedTextReporter(BaseReporter):
    """Writes report rows to a separated-values text file.

    Attributes:
        output_path: File receiving the report.
        setting: Separator and quoting configuration (TSV by default).
        encoding: Text encoding of the file.
    """

    def __init__(
        self,
        output_path: Path,
        setting: Optional[WriterSetting] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.output_path = output_path
        self.setting = setting or WriterSetting.tsv()
        self.encoding = encoding
        self._writer: Optional[SeparatedValuesWriter] = None

    def _get_writer(self) -> SeparatedValuesWriter:
        if self._writer is None:
            logger.debug("Opening %s", self.output_path)
            self._writer = SeparatedValuesWriter.open(
                self.output_path, self.setting, encoding=self.encoding
            )
        return self._writer

    async def write_header(self, columns: Sequence[str]) -> None:
        await self._get_writer().write_record_async(columns)

    async def write_row(self, values: Sequence[str]) -> None:
        await self._get_writer().write_record_async(values)

    async def flush(self) -> None:
        if self._writer is not None:
            await self._writer.flush_async()

    def close(self) -> None:
        if self._writer is not None and not self._writer.closed:
            self._writer.close()

    @property
    def format_name(self) -> str:
        return "tsv" if self.setting.field_separator == "\t" else "delimited"

    @property
    def default_extension(self) -> str:
        return ".txt"
