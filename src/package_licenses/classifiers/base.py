"""Base interface for license classifiers.

A classifier turns a URL (a declared license URL or a project homepage) into
a License determination, or reports that it has no answer.
"""

from abc import ABC, abstractmethod
from typing import Optional

from package_licenses.models import License


class ClassificationError(Exception):
    """Raised when a classifier fails rather than finding no license."""


class BaseClassifier(ABC):
    """Abstract base class for license classifiers.

    Classifiers are async so HTTP-backed implementations can share a session
    without blocking the event loop.
    """

    @abstractmethod
    async def classify(self, url: str) -> Optional[License]:
        """Classify the license behind a URL.

        Args:
            url: Absolute URL to inspect.

        Returns:
            License if the URL could be classified, None otherwise.

        Raises:
            ClassificationError: If the classifier gave up on the URL.
            aiohttp.ClientError: On network failures.
        """
        ...

    def can_handle(self, url: str) -> bool:
        """Check whether this classifier understands the given URL.

        Defaults to True; specialized classifiers narrow it.
        """
        return True

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the classifier name for logging/debugging.

        Returns:
            Name like "SPDX", "GitHub", etc.
        """
        ...

    @property
    def priority(self) -> int:
        """Return classifier priority for waterfall ordering.

        Lower numbers are tried first. Default is 100.
        """
        return 100

    async def close(self) -> None:
        """Release any resources held by the classifier."""
        return None
