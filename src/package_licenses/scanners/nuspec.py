"""Reading of NuGet package manifests (.nuspec).

Nuspec documents use several XML namespaces depending on the schema version,
so elements are matched by local name only.
"""

import logging
import zipfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote
from xml.etree import ElementTree

from package_licenses.models import PackageRecord

logger = logging.getLogger(__name__)

NUGET_LICENSE_URL = "https://licenses.nuget.org/{expression}"

# Placeholder licenseUrl written by NuGet when a license expression is used
DEPRECATED_LICENSE_URL = "https://aka.ms/deprecateLicenseUrl"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(metadata: ElementTree.Element, name: str) -> Optional[str]:
    for child in metadata:
        if _local_name(child.tag) == name:
            text = (child.text or "").strip()
            return text or None
    return None


def _child(metadata: ElementTree.Element, name: str) -> Optional[ElementTree.Element]:
    for child in metadata:
        if _local_name(child.tag) == name:
            return child
    return None


def parse_nuspec(data: bytes | str, source: Optional[Path] = None) -> PackageRecord:
    """Parse a nuspec document into a PackageRecord.

    Args:
        data: Raw nuspec XML.
        source: Location the document was read from.

    Returns:
        PackageRecord with the package's identity and license metadata.

    Raises:
        ValueError: If the XML is invalid or id/version are missing.
    """
    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as e:
        raise ValueError(f"Invalid nuspec XML in {source}: {e}") from e

    metadata = _child(root, "metadata")
    if metadata is None:
        raise ValueError(f"Nuspec missing 'metadata' element in {source}")

    package_id = _child_text(metadata, "id")
    version = _child_text(metadata, "version")
    if not package_id:
        raise ValueError(f"Nuspec missing required field 'id' in {source}")
    if not version:
        raise ValueError(f"Nuspec missing required field 'version' in {source}")

    license_url = _child_text(metadata, "licenseUrl")
    if not license_url or license_url == DEPRECATED_LICENSE_URL:
        license_element = _child(metadata, "license")
        if license_element is not None and license_element.get("type") == "expression":
            expression = (license_element.text or "").strip()
            if expression:
                license_url = NUGET_LICENSE_URL.format(expression=quote(expression))

    acceptance = _child_text(metadata, "requireLicenseAcceptance") or "false"

    return PackageRecord(
        id=package_id,
        version=version,
        authors=_child_text(metadata, "authors"),
        title=_child_text(metadata, "title"),
        project_url=_child_text(metadata, "projectUrl"),
        license_url=license_url,
        require_license_acceptance=acceptance.lower() == "true",
        copyright=_child_text(metadata, "copyright"),
        source=source,
    )


def read_nuspec(path: Path) -> PackageRecord:
    """Read a PackageRecord from an extracted .nuspec file."""
    return parse_nuspec(path.read_bytes(), source=path)


def read_nupkg(path: Path) -> PackageRecord:
    """Read a PackageRecord from the manifest inside a .nupkg archive.

    Raises:
        ValueError: If the archive is invalid or holds no root nuspec.
    """
    try:
        with zipfile.ZipFile(path) as archive:
            names = [
                n for n in archive.namelist() if "/" not in n and n.lower().endswith(".nuspec")
            ]
            if not names:
                raise ValueError(f"No nuspec found in {path}")
            data = archive.read(names[0])
    except zipfile.BadZipFile as e:
        raise ValueError(f"Invalid package archive {path}: {e}") from e

    return parse_nuspec(data, source=path)
