"""Delimited-text record writer.

Formats sequences of values as separated-value records (CSV, TSV, SSV or a
custom layout) and writes them to a text stream, either synchronously or
from a coroutine.

Quoting is slightly stricter than minimal CSV: besides fields containing the
separator, the quote character or a line break, any field that starts or ends
with a space or a tab is quoted as well, so consumers that trim unquoted
whitespace still read the exact value back.
"""

import asyncio
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, TextIO

_EDGE_WHITESPACE = ("\t", " ")


@dataclass(frozen=True)
class WriterSetting:
    """Separator and quoting configuration for a SeparatedValuesWriter.

    Attributes:
        field_separator: Text placed between fields.
        record_separator: Text terminating every record.
        quote: Character wrapping quoted fields; doubled when escaped.
    """

    field_separator: str = ","
    record_separator: str = field(default_factory=lambda: os.linesep)
    quote: str = '"'

    def __post_init__(self) -> None:
        if not self.field_separator:
            raise ValueError("field_separator must not be empty")
        if not self.quote:
            raise ValueError("quote must not be empty")

    @classmethod
    def csv(cls) -> "WriterSetting":
        """Comma-separated values."""
        return cls(field_separator=",")

    @classmethod
    def tsv(cls) -> "WriterSetting":
        """Tab-separated values."""
        return cls(field_separator="\t")

    @classmethod
    def ssv(cls) -> "WriterSetting":
        """Space-separated values."""
        return cls(field_separator=" ")


class SeparatedValuesWriter:
    """Writes quoted, separated records to a text stream.

    The writer owns the stream it is given and closes it in ``close()``.
    Use as a context manager to release the stream automatically.

    Attributes:
        setting: The separator and quoting configuration.
    """

    def __init__(self, stream: TextIO, setting: Optional[WriterSetting] = None) -> None:
        """Initialize the writer.

        Args:
            stream: Open text stream to write records to.
            setting: Writer configuration. Defaults to CSV.
        """
        self._stream = stream
        self.setting = setting or WriterSetting.csv()
        self._lock = asyncio.Lock()

    @classmethod
    def open(
        cls,
        path: Path,
        setting: Optional[WriterSetting] = None,
        append: bool = False,
        encoding: str = "utf-8",
    ) -> "SeparatedValuesWriter":
        """Open a file and return a writer for it.

        The file is opened with ``newline=""`` so the configured record
        separator reaches the file unchanged.

        Args:
            path: File to write.
            setting: Writer configuration. Defaults to CSV.
            append: Append to an existing file instead of truncating it.
            encoding: Text encoding of the file.

        Returns:
            A writer owning the opened file.
        """
        stream = open(path, "a" if append else "w", encoding=encoding, newline="")
        return cls(stream, setting)

    def __enter__(self) -> "SeparatedValuesWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def write_record(self, fields: Optional[Iterable[Any]], quote_always: bool = False) -> None:
        """Format and write one record.

        Args:
            fields: Field values; None values become empty fields.
            quote_always: Quote every field regardless of content.

        Raises:
            ValueError: If fields is None.
        """
        self._stream.write(self.format_record(fields, quote_always))

    async def write_record_async(
        self, fields: Optional[Iterable[Any]], quote_always: bool = False
    ) -> None:
        """Format and write one record without blocking the event loop.

        The record is formatted before the first suspension point and writes
        are serialized, so records keep the order in which they were issued.

        Args:
            fields: Field values; None values become empty fields.
            quote_always: Quote every field regardless of content.

        Raises:
            ValueError: If fields is None.
        """
        record = self.format_record(fields, quote_always)
        async with self._lock:
            await asyncio.to_thread(self._stream.write, record)

    def flush(self) -> None:
        """Flush buffered records to the underlying stream."""
        self._stream.flush()

    async def flush_async(self) -> None:
        """Flush buffered records without blocking the event loop."""
        async with self._lock:
            await asyncio.to_thread(self._stream.flush)

    def close(self) -> None:
        """Close the underlying stream."""
        self._stream.close()

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def format_record(self, fields: Optional[Iterable[Any]], quote_always: bool = False) -> str:
        """Return one formatted record including its record separator.

        Raises:
            ValueError: If fields is None.
        """
        if fields is None:
            raise ValueError("fields must not be None")

        formatted = (self.format_field(value, quote_always) for value in fields)
        return self.setting.field_separator.join(formatted) + self.setting.record_separator

    def format_field(self, value: Any, quote_always: bool = False) -> str:
        """Return a single field, quoted and escaped when necessary."""
        text = "" if value is None else str(value)

        if quote_always or self.needs_quote(text):
            quote = self.setting.quote
            return quote + text.replace(quote, quote + quote) + quote
        return text

    def needs_quote(self, text: str) -> bool:
        """Check whether a field must be quoted to survive a round trip."""
        return (
            "\r" in text
            or "\n" in text
            or self.setting.quote in text
            or self.setting.field_separator in text
            or text.startswith(_EDGE_WHITESPACE)
            or text.endswith(_EDGE_WHITESPACE)
        )
