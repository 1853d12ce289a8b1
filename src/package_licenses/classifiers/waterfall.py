"""Waterfall classifier orchestrating multiple classifiers in priority order.

This module chains the SPDX and GitHub classifiers so a URL is classified by
the most specific classifier that understands it, with an optional
persistent cache in front of them.
"""

import logging
from typing import Optional

from package_licenses.cache import LicenseCache
from package_licenses.classifiers.base import BaseClassifier
from package_licenses.classifiers.github import GitHubClassifier
from package_licenses.classifiers.spdx import SPDXClassifier
from package_licenses.config import GitHubCredentials
from package_licenses.models import License

logger = logging.getLogger(__name__)


class WaterfallClassifier(BaseClassifier):
    """Tries each applicable classifier in priority order.

    Classification stops at the first classifier returning a License.
    Exceptions from a classifier propagate unchanged so the caller decides
    how failures are treated.

    Attributes:
        classifiers: Classifiers sorted by ascending priority.
        cache: Optional cache consulted before classifying.
    """

    def __init__(
        self,
        classifiers: Optional[list[BaseClassifier]] = None,
        cache: Optional[LicenseCache] = None,
        credentials: Optional[GitHubCredentials] = None,
    ) -> None:
        """Initialize the waterfall.

        Args:
            classifiers: Classifiers to chain. Defaults to SPDX then GitHub.
            cache: Optional cache of previous results.
            credentials: GitHub credentials for the default GitHub classifier.
        """
        if classifiers is None:
            classifiers = [SPDXClassifier(), GitHubClassifier(credentials=credentials)]
        self.classifiers = sorted(classifiers, key=lambda c: c.priority)
        self.cache = cache

    @property
    def name(self) -> str:
        return "Waterfall"

    def can_handle(self, url: str) -> bool:
        return any(c.can_handle(url) for c in self.classifiers)

    async def classify(self, url: str) -> Optional[License]:
        """Classify a URL with the first classifier that succeeds.

        Args:
            url: Absolute URL to classify.

        Returns:
            License from the first successful classifier, or None.
        """
        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                logger.debug("Cache hit for %s", url)
                return cached

        for classifier in self.classifiers:
            if not classifier.can_handle(url):
                continue

            logger.debug("Classifying %s with %s", url, classifier.name)
            result = await classifier.classify(url)
            if result is not None:
                logger.debug("%s classified %s as %s", classifier.name, url, result.id)
                if self.cache is not None:
                    self.cache.set(url, result)
                return result

        logger.debug("No classifier recognized %s", url)
        return None

    async def close(self) -> None:
        """Close every chained classifier."""
        for classifier in self.classifiers:
            await classifier.close()

    async def __aenter__(self) -> "WaterfallClassifier":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
