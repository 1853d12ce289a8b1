"""GitHub license classifier.

Fetches license information from GitHub's license API for repositories
referenced by project URLs or license file links.
"""

import asyncio
import base64
import binascii
import logging
from typing import Optional
from urllib.parse import urlsplit

import aiohttp

from package_licenses.classifiers.base import ClassificationError
from package_licenses.classifiers.http import HttpClassifier
from package_licenses.config import GitHubCredentials
from package_licenses.models import License

logger = logging.getLogger(__name__)

API_URL_TEMPLATE = "https://api.github.com/repos/{owner}/{repo}/license"

GITHUB_HOSTS = ("github.com", "www.github.com")
RAW_HOST = "raw.githubusercontent.com"


class GitHubClassifier(HttpClassifier):
    """Classifier that asks GitHub which license a repository carries.

    The returned license is a snapshot (``is_master=False``) of the
    repository's license file, with ``download_uri`` pointing at that file.
    Supports authentication with OAuth application credentials for higher
    rate limits.

    Attributes:
        credentials: Optional OAuth application credentials.
        max_retries: Number of retries when the API answers 403.
    """

    def __init__(
        self,
        credentials: Optional[GitHubCredentials] = None,
        max_retries: int = 3,
        timeout: float = HttpClassifier.DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize GitHubClassifier.

        Args:
            credentials: Optional client id/secret used as basic auth.
                Without them GitHub allows 60 requests/hour.
            max_retries: Retries on rate limiting before giving up.
            timeout: Total timeout in seconds for each request.
        """
        super().__init__(timeout=timeout)
        self.credentials = credentials
        self.max_retries = max_retries

    @property
    def name(self) -> str:
        """Return the classifier name.

        Returns:
            "GitHub"
        """
        return "GitHub"

    @property
    def priority(self) -> int:
        """Return classifier priority.

        Returns:
            80 (after URL-only classification, before generic fallbacks)
        """
        return 80

    def can_handle(self, url: str) -> bool:
        return self._parse_repository(url) is not None

    def _parse_repository(self, url: str) -> Optional[tuple[str, str]]:
        """Extract owner and repository name from a GitHub URL.

        Accepts repository URLs, blob/tree links into a repository and
        raw.githubusercontent.com file links.

        Args:
            url: Absolute URL.

        Returns:
            Tuple of (owner, repo) if the URL points into a GitHub repository,
            None otherwise.
        """
        parsed = urlsplit(url)
        host = parsed.netloc.lower()
        if host not in GITHUB_HOSTS and host != RAW_HOST:
            return None

        parts = [p for p in parsed.path.split("/") if p]
        if len(parts) < 2:
            return None

        owner, repo = parts[0], parts[1]
        if repo.endswith(".git"):
            repo = repo[:-4]
        if not owner or not repo:
            return None

        return (owner, repo)

    def _auth(self) -> Optional[aiohttp.BasicAuth]:
        if self.credentials is None:
            return None
        return aiohttp.BasicAuth(self.credentials.client_id, self.credentials.client_secret)

    async def _fetch_license(self, owner: str, repo: str, retry_count: int = 0) -> Optional[dict]:
        """Fetch license information from the GitHub API.

        Args:
            owner: Repository owner.
            repo: Repository name.
            retry_count: Current retry attempt.

        Returns:
            License data dictionary from the GitHub API, or None if the
            repository has no detectable license.

        Raises:
            ClassificationError: If still rate limited after max_retries.
            aiohttp.ClientError: On network errors and unexpected statuses.
        """
        url = API_URL_TEMPLATE.format(owner=owner, repo=repo)
        headers = {"Accept": "application/vnd.github+json"}

        session = await self._get_session()
        async with session.get(url, headers=headers, auth=self._auth()) as response:
            # Handle rate limiting
            if response.status == 403:
                if retry_count >= self.max_retries:
                    raise ClassificationError(f"GitHub rate limit exceeded for {owner}/{repo}")

                retry_after = response.headers.get("Retry-After")
                if retry_after and retry_after.isdigit():
                    wait_time = int(retry_after)
                else:
                    # Exponential backoff: 1s, 2s, 4s
                    wait_time = 2**retry_count

                logger.debug("GitHub rate limited, retrying in %ds", wait_time)
                await asyncio.sleep(wait_time)
                return await self._fetch_license(owner, repo, retry_count + 1)

            if response.status == 404:
                logger.debug("No license detected for %s/%s", owner, repo)
                return None

            response.raise_for_status()
            return await response.json()

    async def classify(self, url: str) -> Optional[License]:
        """Classify the license of the GitHub repository a URL points into.

        Args:
            url: GitHub repository, blob or raw file URL.

        Returns:
            Snapshot License with the decoded license text, or None if the URL
            is not a GitHub URL or the repository has no detectable license.

        Raises:
            ClassificationError: If rate limited past max_retries.
            aiohttp.ClientError: On network errors.
        """
        parsed = self._parse_repository(url)
        if parsed is None:
            return None

        owner, repo = parsed
        data = await self._fetch_license(owner, repo)
        if data is None:
            return None

        license_info = data.get("license") or {}
        spdx_id = license_info.get("spdx_id")
        name = license_info.get("name")
        if not spdx_id or not name:
            return None

        return License(
            id=spdx_id,
            name=name,
            text=self._decode_content(data),
            is_master=False,
            download_uri=data.get("download_url"),
        )

    @staticmethod
    def _decode_content(data: dict) -> Optional[str]:
        """Decode the base64 license file content of an API response."""
        content = data.get("content")
        if not content or data.get("encoding", "base64") != "base64":
            return None
        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            logger.warning("Could not decode license content: %s", e)
            return None
