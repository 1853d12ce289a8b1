"""Core data models for package_licenses.

This module defines the data structures passed between the scanners,
classifiers, materializer and reporters: package records read from NuGet
metadata, resolved licenses, and the fixed-width report row.
"""

from dataclasses import astuple, dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class PackageRecord:
    """Immutable description of one package dependency.

    Produced by a scanner from nuspec metadata. Frozen for hashability so
    records can be used as dictionary keys.

    Attributes:
        id: Package id (e.g., "Newtonsoft.Json").
        version: Package version string (e.g., "13.0.1").
        authors: Optional comma-separated authors.
        title: Optional human-readable title.
        project_url: Optional project homepage URL.
        license_url: Optional declared license URL.
        require_license_acceptance: True if the package asks consumers to
            accept its license before installing.
        copyright: Optional copyright notice.
        source: Optional location of the metadata this record was read from.
    """

    id: str
    version: str
    authors: Optional[str] = None
    title: Optional[str] = None
    project_url: Optional[str] = None
    license_url: Optional[str] = None
    require_license_acceptance: bool = False
    copyright: Optional[str] = None
    source: Optional[Path] = None


@dataclass
class License:
    """A license determination returned by a classifier.

    Attributes:
        id: Short identifier, usually an SPDX id (e.g., "MIT").
        name: Human-readable license name (e.g., "MIT License").
        text: Full license text, or None if only the identity is known.
        is_master: True for a canonical license text shared by every package
            using it, False for a snapshot tied to one download location.
        download_uri: URI the text was fetched from, if any.
    """

    id: str
    name: str
    text: Optional[str] = None
    is_master: bool = False
    download_uri: Optional[str] = None


@dataclass(frozen=True)
class ReportRow:
    """One report record, in report column order.

    Every field is a string; absent upstream values are empty strings.
    """

    id: str = ""
    version: str = ""
    authors: str = ""
    title: str = ""
    project_url: str = ""
    license_url: str = ""
    require_license_acceptance: str = ""
    copyright: str = ""
    license_id: str = ""
    license_name: str = ""
    license_file: str = ""

    def values(self) -> list[str]:
        """Return the 11 cell values in column order."""
        return list(astuple(self))


@dataclass
class CacheEntry:
    """Cached classifier result for a single URL.

    Attributes:
        url: The classified URL.
        license_data: JSON-serialized License.
        resolved_at: Timestamp when classification occurred.
        expires_at: Timestamp when the entry expires.
    """

    url: str
    license_data: str
    resolved_at: datetime
    expires_at: datetime
