"""Base interface for tabular report sinks.

Reporters receive the report header and one row of string values per
package, and persist them in their own format (delimited text, Markdown).
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class BaseReporter(ABC):
    """Abstract base class for tabular report sinks.

    Implementations open their destination lazily on the first write, so a
    reporter that never receives a header or row produces no output.
    """

    @abstractmethod
    async def write_header(self, columns: Sequence[str]) -> None:
        """Write the column header.

        Args:
            columns: Column names in report order.
        """
        ...

    @abstractmethod
    async def write_row(self, values: Sequence[str]) -> None:
        """Append one row.

        Args:
            values: Cell values in column order.
        """
        ...

    async def flush(self) -> None:
        """Force buffered rows to the destination."""
        return None

    @abstractmethod
    def close(self) -> None:
        """Release the destination. Safe to call more than once."""
        ...

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            Format name like "tsv", "markdown", etc.
        """
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format.

        Returns:
            Extension like ".txt", ".md", etc.
        """
        ...
