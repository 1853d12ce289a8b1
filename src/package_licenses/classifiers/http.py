from typing import Optional

import aiohttp

from package_licenses.classifiers.base import BaseClassifier


class HttpClassifier(BaseClassifier):
    """Base class for classifiers that make HTTP requests.

    Manages a shared aiohttp.ClientSession for connection pooling and reuse.
    """

    DEFAULT_TIMEOUT = 10

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the HttpClassifier.

        Args:
            timeout: Total timeout in seconds for each request.
        """
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = self._create_session()
        return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        """Create a new aiohttp.ClientSession.

        Subclasses can override this to provide custom session configuration.

        Returns:
            A new aiohttp.ClientSession instance.
        """
        connector = aiohttp.TCPConnector(ttl_dns_cache=300)
        return aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )

    async def close(self) -> None:
        """Close the aiohttp session.

        Should be called when done using the classifier to release resources.
        """
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpClassifier":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
