"""Package scanners for NuGet package folders and project files.

This module provides scanners for enumerating package dependencies and a
single entry point that picks the right one for a path.
"""

from pathlib import Path

from package_licenses.models import PackageRecord
from package_licenses.scanners.base import BaseScanner
from package_licenses.scanners.folder import FeedType, LocalFolderScanner, detect_feed_type
from package_licenses.scanners.nuspec import parse_nuspec, read_nupkg, read_nuspec
from package_licenses.scanners.project import (
    PackageReferenceScanner,
    find_project_files,
    global_packages_folder,
)

__all__ = [
    "BaseScanner",
    "FeedType",
    "LocalFolderScanner",
    "PackageReferenceScanner",
    "detect_feed_type",
    "find_project_files",
    "get_packages",
    "get_scanner",
    "global_packages_folder",
    "parse_nuspec",
    "read_nupkg",
    "read_nuspec",
]

# Registry of available scanners in priority order
_SCANNERS: list[type[BaseScanner]] = [
    PackageReferenceScanner,
    LocalFolderScanner,
]


def get_scanner(path: Path) -> BaseScanner:
    """Get the appropriate scanner for a given path.

    Args:
        path: Project file, package folder or solution directory.

    Returns:
        Scanner instance configured for the given path.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If no scanner can handle the given path.
    """
    if not path.exists():
        raise FileNotFoundError(f"Not Found: '{path}'")

    for scanner_cls in _SCANNERS:
        if scanner_cls.can_handle(path):
            return scanner_cls(path)

    raise ValueError(
        f"No scanner available for '{path.name}'. "
        f"Supported inputs: package folders, solution directories, "
        f"*.csproj, *.fsproj, *.vbproj"
    )


def get_packages(path: Path) -> list[PackageRecord]:
    """Enumerate the packages of a project file or package folder.

    Args:
        path: Project file, package folder or solution directory.

    Returns:
        Package records in a stable order.
    """
    return get_scanner(path).scan()
