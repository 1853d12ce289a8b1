"""Package Licenses - NuGet package license inventory tool.

This package enumerates the NuGet packages a project depends on, infers
their licenses, saves the license texts and writes a reviewable report.
"""

__version__ = "0.1.0"

from package_licenses.models import (
    CacheEntry,
    License,
    PackageRecord,
    ReportRow,
)

__all__ = [
    "__version__",
    "CacheEntry",
    "License",
    "PackageRecord",
    "ReportRow",
]
