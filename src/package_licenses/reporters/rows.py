"""Mapping of packages and resolved licenses to report rows.

The column order is part of the report's external contract and must not
change.
"""

from typing import Optional

from package_licenses.models import License, PackageRecord, ReportRow

HEADERS: tuple[str, ...] = (
    "Id",
    "Version",
    "Authors",
    "Title",
    "ProjectUrl",
    "LicenseUrl",
    "RequireLicenseAcceptance",
    "Copyright",
    "Inferred License ID",
    "Inferred License Name",
    "Downloaded license text file",
)

# The transcript omits the saved filename column
TRANSCRIPT_COLUMNS = len(HEADERS) - 1


class ReportRowBuilder:
    """Builds report rows and the matching transcript lines."""

    headers = HEADERS

    def build_row(
        self,
        package: PackageRecord,
        lic: Optional[License] = None,
        filename: Optional[str] = None,
    ) -> ReportRow:
        """Build the report row for one package.

        Args:
            package: The package.
            lic: Its resolved license, if any.
            filename: Saved license text filename, if any.

        Returns:
            ReportRow with empty strings for every absent value.
        """
        return ReportRow(
            id=package.id or "",
            version=package.version or "",
            authors=package.authors or "",
            title=package.title or "",
            project_url=package.project_url or "",
            license_url=package.license_url or "",
            require_license_acceptance=str(bool(package.require_license_acceptance)),
            copyright=package.copyright or "",
            license_id=lic.id if lic is not None and lic.id else "",
            license_name=lic.name if lic is not None and lic.name else "",
            license_file=filename or "",
        )

    def transcript_header(self) -> str:
        """Return the tab-joined header line and its dashed divider."""
        columns = HEADERS[:TRANSCRIPT_COLUMNS]
        header = "\t".join(columns)
        divider = "\t".join("-" * len(c) for c in columns)
        return f"{header}\n{divider}"

    def transcript_line(self, package: PackageRecord, lic: Optional[License] = None) -> str:
        """Return the tab-joined transcript line for one package."""
        values = self.build_row(package, lic).values()
        return "\t".join(values[:TRANSCRIPT_COLUMNS])
