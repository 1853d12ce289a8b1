"""Scanner for SDK-style project files using PackageReference.

Reads ``<PackageReference Include="..." Version="..."/>`` items from a
``.csproj``/``.fsproj``/``.vbproj`` file and resolves each one against the
NuGet global packages folder.
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree

from package_licenses.models import PackageRecord
from package_licenses.scanners.base import BaseScanner
from package_licenses.scanners.folder import find_manifest, read_manifest

logger = logging.getLogger(__name__)

PROJECT_SUFFIXES = (".csproj", ".fsproj", ".vbproj")

GLOBAL_PACKAGES_ENV = "NUGET_PACKAGES"

# Exact version, optionally written as the range "[x.y.z]"
_EXACT_VERSION = re.compile(r"^\[?\s*([0-9][0-9A-Za-z.+-]*)\s*\]?$")


def global_packages_folder(environ: Optional[dict[str, str]] = None) -> Path:
    """Return the NuGet global packages folder.

    Uses the ``NUGET_PACKAGES`` environment variable when set, otherwise
    ``~/.nuget/packages``.
    """
    env = os.environ if environ is None else environ
    configured = env.get(GLOBAL_PACKAGES_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".nuget" / "packages"


def find_project_files(root: Path) -> list[Path]:
    """Find every project file below a directory, sorted by path."""
    return sorted(
        p for p in root.rglob("*") if p.suffix.lower() in PROJECT_SUFFIXES and p.is_file()
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class PackageReferenceScanner(BaseScanner):
    """Scanner resolving a project's PackageReference items.

    Attributes:
        packages_folder: Global packages folder the references resolve against.
    """

    def __init__(
        self,
        source_path: Optional[Path] = None,
        packages_folder: Optional[Path] = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            source_path: Project file to read.
            packages_folder: Global packages folder. Defaults to the NuGet
                global packages folder of the current user.
        """
        super().__init__(source_path)
        self.packages_folder = packages_folder or global_packages_folder()

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if the path is a .NET project file."""
        return path.suffix.lower() in PROJECT_SUFFIXES

    @property
    def source_name(self) -> str:
        return self.source_path.name if self.source_path else "PackageReference"

    def references(self) -> list[tuple[str, str]]:
        """Read the (id, version) pairs declared by the project.

        Returns:
            PackageReference ids and raw version strings in document order.

        Raises:
            FileNotFoundError: If the project file does not exist.
            ValueError: If the project file is not valid XML.
        """
        if self.source_path is None:
            raise ValueError("source_path must be provided")
        if not self.source_path.exists():
            raise FileNotFoundError(f"Project file not found: {self.source_path}")

        try:
            root = ElementTree.parse(self.source_path).getroot()
        except ElementTree.ParseError as e:
            raise ValueError(f"Invalid project XML in {self.source_path}: {e}") from e

        refs = []
        for element in root.iter():
            if _local_name(element.tag) != "PackageReference":
                continue

            package_id = element.get("Include")
            if not package_id:
                continue

            version = element.get("Version")
            if version is None:
                for child in element:
                    if _local_name(child.tag) == "Version":
                        version = (child.text or "").strip()
                        break

            if not version:
                logger.warning("PackageReference %s has no version, skipping", package_id)
                continue

            refs.append((package_id.strip(), version.strip()))

        return refs

    def scan(self) -> list[PackageRecord]:
        """Resolve every PackageReference in the global packages folder.

        References with floating or ranged versions, or missing from the
        packages folder, are skipped with a warning.

        Returns:
            List of PackageRecord objects in document order.
        """
        packages = []
        for package_id, version in self.references():
            match = _EXACT_VERSION.match(version)
            if not match:
                logger.warning(
                    "Unsupported version '%s' for %s, skipping", version, package_id
                )
                continue

            manifest = self._locate(package_id, match.group(1))
            if manifest is None:
                logger.warning(
                    "Package %s %s not found in %s",
                    package_id,
                    version,
                    self.packages_folder,
                )
                continue

            try:
                packages.append(read_manifest(manifest))
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable package %s: %s", manifest, e)

        return packages

    def _locate(self, package_id: str, version: str) -> Optional[Path]:
        """Find the manifest of a package in the global packages folder.

        The global folder stores ids and versions lower-cased; the declared
        spelling is tried as well for folders on case-sensitive filesystems.
        """
        for candidate_id, candidate_version in (
            (package_id.lower(), version.lower()),
            (package_id, version),
        ):
            manifest = find_manifest(self.packages_folder / candidate_id / candidate_version)
            if manifest is not None:
                return manifest
        return None
