"""Runtime configuration for package_licenses.

Holds the names of the files a run produces, the environment variable that
carries GitHub OAuth application credentials, and helpers for turning those
inputs into explicit values passed to the components that need them.
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

GITHUB_QUERY_ENV = "PACKAGE_LICENSES_GITHUB_QUERY"

REPORT_BASENAME = "Licenses"
DELIMITED_REPORT_NAME = f"{REPORT_BASENAME}.txt"
MARKDOWN_REPORT_NAME = f"{REPORT_BASENAME}.md"

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "package_licenses"

_QUERY_PATTERN = re.compile(r"client_id=(?P<id>.*?)&client_secret=(?P<secret>.*)")


@dataclass(frozen=True)
class GitHubCredentials:
    """OAuth application credentials for the GitHub API.

    Attributes:
        client_id: OAuth application client id.
        client_secret: OAuth application client secret.
    """

    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return f"GitHubCredentials(client_id={self.client_id!r}, client_secret='***')"


def parse_github_query(query: Optional[str]) -> Optional[GitHubCredentials]:
    """Parse a ``client_id=...&client_secret=...`` string.

    Args:
        query: Raw query string, usually read from the environment.

    Returns:
        GitHubCredentials, or None when the query is empty or malformed.
    """
    if not query or not query.strip():
        return None

    match = _QUERY_PATTERN.search(query.strip())
    if not match:
        logger.warning("Ignoring malformed GitHub credential query")
        return None

    return GitHubCredentials(
        client_id=match.group("id"),
        client_secret=match.group("secret"),
    )


def credentials_from_env(
    environ: Optional[dict[str, str]] = None,
) -> Optional[GitHubCredentials]:
    """Read GitHub credentials from the environment.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        GitHubCredentials, or None if the variable is unset or malformed.
    """
    env = os.environ if environ is None else environ
    return parse_github_query(env.get(GITHUB_QUERY_ENV))


def default_output_dir(base: Path, now: Optional[datetime] = None) -> Path:
    """Return a fresh timestamp-suffixed output directory path under base.

    Distinct runs must not share an output directory, so the name carries
    the UTC time down to microseconds.
    """
    now = now or datetime.now(UTC)
    return base / f"{REPORT_BASENAME}-{now.strftime('%Y%m%dT%H%M%S%fZ')}"
