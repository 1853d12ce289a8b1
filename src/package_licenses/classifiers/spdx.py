"""SPDX classifier for well-known license URLs.

Recognizes URLs that name a license directly (licenses.nuget.org expressions,
opensource.org, spdx.org and choosealicense.com license pages, and a few
canonical license homes such as apache.org and gnu.org) and returns the
canonical SPDX license text as a master license shared by every package that
declares it.
"""

import logging
import re
from typing import Optional
from urllib.parse import unquote, urlsplit

from license_expression import ExpressionError, LicenseSymbol, get_spdx_licensing

from package_licenses.classifiers.http import HttpClassifier
from package_licenses.models import License

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

# Canonical license text, one file per SPDX id
TEXT_URL_TEMPLATE = "https://raw.githubusercontent.com/spdx/license-list-data/main/text/{id}.txt"

# Common SPDX identifiers mapped to human-readable names
# Based on https://spdx.org/licenses/
SPDX_NAMES = {
    "MIT": "MIT License",
    "Apache-2.0": "Apache License 2.0",
    "GPL-3.0-only": "GNU General Public License v3.0 only",
    "GPL-3.0-or-later": "GNU General Public License v3.0 or later",
    "GPL-2.0-only": "GNU General Public License v2.0 only",
    "GPL-2.0-or-later": "GNU General Public License v2.0 or later",
    "LGPL-3.0-only": "GNU Lesser General Public License v3.0 only",
    "LGPL-3.0-or-later": "GNU Lesser General Public License v3.0 or later",
    "LGPL-2.1-only": "GNU Lesser General Public License v2.1 only",
    "LGPL-2.1-or-later": "GNU Lesser General Public License v2.1 or later",
    "BSD-3-Clause": 'BSD 3-Clause "New" or "Revised" License',
    "BSD-2-Clause": 'BSD 2-Clause "Simplified" License',
    "ISC": "ISC License",
    "MPL-2.0": "Mozilla Public License 2.0",
    "MS-PL": "Microsoft Public License",
    "MS-RL": "Microsoft Reciprocal License",
    "EPL-2.0": "Eclipse Public License 2.0",
    "AGPL-3.0-only": "GNU Affero General Public License v3.0 only",
    "AGPL-3.0-or-later": "GNU Affero General Public License v3.0 or later",
    "CC0-1.0": "Creative Commons Zero v1.0 Universal",
    "Unlicense": "The Unlicense",
    "Zlib": "zlib License",
}

# Lowercased host + path (no extension, no trailing slash) -> SPDX id
KNOWN_URLS = {
    "www.apache.org/licenses/license-2.0": "Apache-2.0",
    "apache.org/licenses/license-2.0": "Apache-2.0",
    "www.gnu.org/licenses/gpl-3.0": "GPL-3.0-only",
    "www.gnu.org/licenses/gpl-2.0": "GPL-2.0-only",
    "www.gnu.org/licenses/lgpl-3.0": "LGPL-3.0-only",
    "www.gnu.org/licenses/lgpl-2.1": "LGPL-2.1-only",
    "www.gnu.org/licenses/agpl-3.0": "AGPL-3.0-only",
    "www.mozilla.org/mpl/2.0": "MPL-2.0",
    "mozilla.org/mpl/2.0": "MPL-2.0",
}

# Hosts whose last path segment names the license
LICENSE_PAGE_HOSTS = {
    "opensource.org": "/licenses/",
    "www.opensource.org": "/licenses/",
    "spdx.org": "/licenses/",
    "choosealicense.com": "/licenses/",
}

NUGET_LICENSE_HOST = "licenses.nuget.org"

_PAGE_SUFFIX = re.compile(r"(\.(php|html?|txt|json))$", re.IGNORECASE)
_LICENSE_SUFFIX = re.compile(r"-license$", re.IGNORECASE)

_CANONICAL_IDS = {key.lower(): key for key in SPDX_NAMES}


def normalize_license_id(candidate: str) -> Optional[str]:
    """Normalize a license id or expression to its SPDX spelling.

    Args:
        candidate: Raw id taken from a URL (e.g., "mit", "Apache-2.0").

    Returns:
        The SPDX id or rendered expression, or None if unknown.
    """
    candidate = candidate.strip()
    if not candidate:
        return None

    if candidate.lower() in _CANONICAL_IDS:
        return _CANONICAL_IDS[candidate.lower()]

    try:
        parsed = SPDX.parse(candidate, validate=True)
    except ExpressionError as e:
        logger.debug("Not an SPDX expression '%s': %s", candidate, e)
        return None

    if parsed is None:
        return None
    if isinstance(parsed, LicenseSymbol):
        return parsed.key
    return str(parsed)


class SPDXClassifier(HttpClassifier):
    """Classifier for URLs that identify a license by name.

    Single licenses are returned with their canonical SPDX text as master
    licenses. Compound expressions (e.g., "MIT OR Apache-2.0") are returned
    without text since there is no single canonical file for them.

    Priority: 10 (tried before repository-based classifiers)
    """

    @property
    def name(self) -> str:
        """Return the classifier name.

        Returns:
            "SPDX"
        """
        return "SPDX"

    @property
    def priority(self) -> int:
        return 10

    def can_handle(self, url: str) -> bool:
        return self.license_id_from_url(url) is not None

    def license_id_from_url(self, url: str) -> Optional[str]:
        """Extract and normalize the license id named by a URL.

        Args:
            url: Absolute URL.

        Returns:
            SPDX id or expression, or None if the URL does not name a license.
        """
        parts = urlsplit(url)
        host = parts.netloc.lower()
        path = unquote(parts.path).rstrip("/")

        if host == NUGET_LICENSE_HOST:
            expression = path.lstrip("/")
            return normalize_license_id(expression) if expression else None

        stem = _PAGE_SUFFIX.sub("", path)
        known = KNOWN_URLS.get(f"{host}{stem.lower()}")
        if known:
            return known

        prefix = LICENSE_PAGE_HOSTS.get(host)
        if prefix and stem.startswith(prefix):
            segment = stem[len(prefix):]
            if not segment or "/" in segment:
                return None
            return normalize_license_id(_LICENSE_SUFFIX.sub("", segment))

        return None

    async def classify(self, url: str) -> Optional[License]:
        """Classify a license URL.

        Args:
            url: Absolute URL naming a license.

        Returns:
            Master License for the named license, or None if the URL does not
            name a known license.

        Raises:
            aiohttp.ClientError: On network failures while fetching the text.
        """
        license_id = self.license_id_from_url(url)
        if license_id is None:
            return None

        name = SPDX_NAMES.get(license_id, license_id)
        if " " in license_id:
            logger.debug("Compound license expression %s from %s", license_id, url)
            return License(id=license_id, name=name, is_master=True)

        text_url = TEXT_URL_TEMPLATE.format(id=license_id)
        text = await self._fetch_text(text_url)

        return License(
            id=license_id,
            name=name,
            text=text,
            is_master=True,
            download_uri=text_url if text else None,
        )

    async def _fetch_text(self, url: str) -> Optional[str]:
        """Download a canonical license text.

        Returns:
            The text, or None if the SPDX list has no text for the id.
        """
        logger.debug("Fetching SPDX license text from %s", url)
        session = await self._get_session()
        async with session.get(url) as response:
            if response.status == 404:
                logger.warning("No SPDX license text at %s", url)
                return None
            response.raise_for_status()
            return await response.text()
