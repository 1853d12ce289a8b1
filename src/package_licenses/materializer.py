"""Write resolved license texts to the output directory.

Every distinct license text is saved once under a stable filename. Master
licenses are keyed by license id and shared across packages; snapshots are
keyed by the location they were downloaded from, or by package identity when
no location is known.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from package_licenses.models import License, PackageRecord

logger = logging.getLogger(__name__)


class LicenseFileMaterializer:
    """Saves license texts as ``.txt`` files, at most once per filename.

    A file that already exists is never rewritten, within a run or across
    runs targeting the same directory. Only one pipeline may write to a given
    output directory at a time.

    Attributes:
        encoding: Text encoding of the written files.
    """

    EXTENSION = ".txt"

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def filename_for(self, lic: License, package: PackageRecord) -> str:
        """Compute the filename a license text is saved under.

        Args:
            lic: The resolved license.
            package: The package the license was resolved for.

        Returns:
            Filename (not a path) ending in ``.txt``.
        """
        if lic.is_master:
            return f"{lic.id}{self.EXTENSION}"

        if lic.download_uri:
            stem = self._stem_from_uri(lic.download_uri)
            if stem:
                return f"{stem}{self.EXTENSION}"

        return f"{package.id}.{package.version}{self.EXTENSION}"

    def materialize(
        self,
        lic: Optional[License],
        package: PackageRecord,
        output_dir: Path,
    ) -> Optional[str]:
        """Save a license text and return its filename.

        Args:
            lic: The resolved license, or None.
            package: The package the license was resolved for.
            output_dir: Directory receiving the license files.

        Returns:
            The filename, or None when there is no license text to save.

        Raises:
            OSError: If the file cannot be written.
        """
        if lic is None or not lic.text:
            return None

        filename = self.filename_for(lic, package)
        path = output_dir / filename
        if path.exists():
            logger.debug("License file %s already present, skipping", filename)
            return filename

        try:
            with open(path, "x", encoding=self.encoding, newline="") as f:
                f.write(lic.text)
        except FileExistsError:
            logger.debug("License file %s created concurrently, skipping", filename)
        else:
            logger.debug("Wrote license file %s for %s %s", filename, package.id, package.version)

        return filename

    @staticmethod
    def _stem_from_uri(uri: str) -> str:
        parts = urlsplit(uri)
        path_and_query = parts.path or "/"
        if parts.query:
            path_and_query = f"{path_and_query}?{parts.query}"
        return path_and_query[1:].replace("/", "-").replace("?", "-")
