"""Base interface for package scanners.

Scanners enumerate the packages a project depends on and read their nuspec
metadata into PackageRecord objects.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from package_licenses.models import PackageRecord


class BaseScanner(ABC):
    """Abstract base class for package scanners.

    Attributes:
        source_path: Optional path to the folder or project file being scanned.
    """

    def __init__(self, source_path: Optional[Path] = None) -> None:
        """Initialize the scanner.

        Args:
            source_path: Optional path to the package folder or project file.
        """
        self.source_path = source_path

    @abstractmethod
    def scan(self) -> list[PackageRecord]:
        """Scan the source and read package records.

        Returns:
            List of PackageRecord objects in a stable order.

        Raises:
            FileNotFoundError: If the source does not exist.
            ValueError: If the source format is invalid.
        """
        ...

    @classmethod
    @abstractmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if this scanner can handle the given path.

        Args:
            path: Path to check.

        Returns:
            True if this scanner can process the path, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's source.

        Returns:
            Name like "packages", "App.csproj", etc.
        """
        ...
