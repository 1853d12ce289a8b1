"""License resolution chain for a single package.

The declared license URL is a stronger signal than the project homepage, so
it is classified first and trusted alone when conclusive; the project URL is
only consulted when the license URL is unusable or yields nothing.
"""

import enum
import logging
from typing import Optional
from urllib.parse import urlsplit

from package_licenses.classifiers.base import BaseClassifier, ClassificationError
from package_licenses.models import License, PackageRecord

logger = logging.getLogger(__name__)


class ErrorPolicy(enum.Enum):
    """How classifier failures are treated by the resolution chain.

    IGNORE: a failure counts as "no license" for that URL and the chain moves
        on to the next URL.
    RAISE: a failure is wrapped in ClassificationError and propagates.
    """

    IGNORE = "ignore"
    RAISE = "raise"


def is_absolute_url(url: Optional[str]) -> bool:
    """Check that a URL is non-empty, well formed and absolute.

    Args:
        url: Candidate URL.

    Returns:
        True if the URL has a scheme and a host and contains no whitespace.
    """
    if not url or not url.strip():
        return False
    if any(c.isspace() for c in url):
        return False

    try:
        parts = urlsplit(url)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False

    return bool(parts.scheme) and bool(parts.netloc) and bool(parts.hostname)


class LicenseResolutionChain:
    """Resolves a package's license from its license URL, then project URL.

    Attributes:
        classifier: Classifier consulted for each usable URL.
        error_policy: Treatment of classifier failures.
        retries: Extra classifier attempts after a failure.
    """

    def __init__(
        self,
        classifier: BaseClassifier,
        error_policy: ErrorPolicy = ErrorPolicy.IGNORE,
        retries: int = 0,
    ) -> None:
        """Initialize the chain.

        Args:
            classifier: Classifier consulted for each usable URL.
            error_policy: Treatment of classifier failures.
            retries: Extra classifier attempts after a failure.
        """
        if retries < 0:
            raise ValueError("retries must not be negative")
        self.classifier = classifier
        self.error_policy = error_policy
        self.retries = retries

    async def resolve(self, package: PackageRecord) -> Optional[License]:
        """Resolve the license of a package.

        Args:
            package: Package to resolve.

        Returns:
            The first License found, or None if neither URL yields one.

        Raises:
            ClassificationError: If the classifier fails and the error policy
                is RAISE.
        """
        for url in (package.license_url, package.project_url):
            if not is_absolute_url(url):
                continue

            lic = await self._classify(url, package)
            if lic is not None:
                return lic

        return None

    async def _classify(self, url: str, package: PackageRecord) -> Optional[License]:
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self.classifier.classify(url)
            except Exception as e:
                if attempt < attempts:
                    logger.debug(
                        "Classifier failed for %s (attempt %d/%d): %s",
                        url,
                        attempt,
                        attempts,
                        e,
                    )
                    continue

                if self.error_policy is ErrorPolicy.RAISE:
                    if isinstance(e, ClassificationError):
                        raise
                    raise ClassificationError(f"Could not classify {url}: {e}") from e

                logger.warning(
                    "Could not classify %s for %s %s: %s",
                    url,
                    package.id,
                    package.version,
                    e,
                )
                return None
        return None
