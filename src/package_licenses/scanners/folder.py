"""Scanner for local NuGet package folders.

Handles both folder layouts NuGet produces:

- v2 ("packages.config" style): ``<root>/<Id>.<Version>/<Id>.<Version>.nupkg``
  or ``.nupkg`` files directly under the root.
- v3 (global packages folder style): ``<root>/<id>/<version>/<id>.nuspec``.

The layout is detected per folder; callers only see package records.
"""

import enum
import logging
from pathlib import Path
from typing import Optional

from package_licenses.models import PackageRecord
from package_licenses.scanners.base import BaseScanner
from package_licenses.scanners.nuspec import read_nupkg, read_nuspec

logger = logging.getLogger(__name__)

# Solution directories keep restored packages in this subfolder
SOLUTION_PACKAGES_DIR = "packages"


class FeedType(enum.Enum):
    """Detected layout of a local package folder."""

    UNKNOWN = "unknown"
    FILE_SYSTEM_V2 = "v2"
    FILE_SYSTEM_V3 = "v3"


def detect_feed_type(root: Path) -> FeedType:
    """Detect the layout of a local package folder.

    Args:
        root: Package folder.

    Returns:
        The detected FeedType, UNKNOWN if no packages were found.
    """
    if any(root.glob("*.nupkg")) or any(root.glob("*/*.nupkg")):
        return FeedType.FILE_SYSTEM_V2
    if any(root.glob("*/*/*.nuspec")) or any(root.glob("*/*/*.nupkg")):
        return FeedType.FILE_SYSTEM_V3
    return FeedType.UNKNOWN


def find_manifest(version_dir: Path) -> Optional[Path]:
    """Pick the manifest of one v3 ``<id>/<version>`` directory.

    Prefers the extracted ``.nuspec`` over the ``.nupkg`` archive.
    """
    if not version_dir.is_dir():
        return None
    nuspecs = sorted(version_dir.glob("*.nuspec"))
    if nuspecs:
        return nuspecs[0]
    nupkgs = sorted(version_dir.glob("*.nupkg"))
    return nupkgs[0] if nupkgs else None


def read_manifest(path: Path) -> PackageRecord:
    """Read a PackageRecord from a ``.nuspec`` file or ``.nupkg`` archive."""
    if path.suffix.lower() == ".nuspec":
        return read_nuspec(path)
    return read_nupkg(path)


class LocalFolderScanner(BaseScanner):
    """Scanner for a local package folder or a solution directory.

    When given a solution directory containing a ``packages`` subfolder,
    that subfolder is scanned instead.
    """

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if this scanner can handle the given path.

        Args:
            path: Path to check.

        Returns:
            True if the path is a directory.
        """
        return path.is_dir()

    @property
    def source_name(self) -> str:
        if self.source_path is None:
            return SOLUTION_PACKAGES_DIR
        return self.packages_root.name

    @property
    def packages_root(self) -> Path:
        """Return the folder actually holding the packages."""
        if self.source_path is None:
            raise ValueError("source_path must be provided")
        nested = self.source_path / SOLUTION_PACKAGES_DIR
        if nested.is_dir() and detect_feed_type(nested) is not FeedType.UNKNOWN:
            return nested
        return self.source_path

    def scan(self) -> list[PackageRecord]:
        """Read every package in the folder, ordered by path.

        Packages whose metadata cannot be read are skipped with a warning.

        Returns:
            List of PackageRecord objects.

        Raises:
            FileNotFoundError: If the folder does not exist.
            ValueError: If the source path was not provided.
        """
        if self.source_path is None:
            raise ValueError("source_path must be provided")
        if not self.source_path.is_dir():
            raise FileNotFoundError(f"Package folder not found: {self.source_path}")

        root = self.packages_root
        feed_type = detect_feed_type(root)
        logger.debug("Detected %s layout in %s", feed_type.value, root)

        if feed_type is FeedType.FILE_SYSTEM_V2:
            paths = sorted([*root.glob("*.nupkg"), *root.glob("*/*.nupkg")])
        elif feed_type is FeedType.FILE_SYSTEM_V3:
            paths = [p for p in map(find_manifest, sorted(root.glob("*/*"))) if p]
        else:
            return []

        packages = []
        for path in paths:
            try:
                packages.append(read_manifest(path))
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable package %s: %s", path, e)

        return packages
