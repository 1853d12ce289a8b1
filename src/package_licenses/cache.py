"""SQLite-based cache layer for license classification results.

This module provides a persistent cache to avoid repeated API calls when
classifying the same license or project URL across packages and runs.
"""

import contextlib
import json
import sqlite3
from dataclasses import asdict
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Optional

from package_licenses.config import DEFAULT_CACHE_DIR
from package_licenses.models import CacheEntry, License


class LicenseCache:
    """SQLite cache for storing classified licenses keyed by URL.

    Entries expire after a 30-day TTL so upstream license changes are picked
    up eventually.

    Attributes:
        db_path: Path to the SQLite database file.
        ttl_days: Number of days before cache entries expire (default: 30).
    """

    DEFAULT_TTL_DAYS = 30

    def __init__(
        self,
        db_path: Optional[Path] = None,
        ttl_days: int = DEFAULT_TTL_DAYS,
    ):
        """Initialize the license cache.

        Args:
            db_path: Path to SQLite database. If None, uses
                ~/.cache/package_licenses/cache.db.
            ttl_days: Number of days before cache entries expire.
        """
        if db_path is None:
            DEFAULT_CACHE_DIR.mkdir(parents=True, exist_ok=True)
            db_path = DEFAULT_CACHE_DIR / "cache.db"

        self.db_path = db_path
        self.ttl_days = ttl_days
        self._conn: Optional[sqlite3.Connection] = None
        self._init_database()

    def __enter__(self) -> "LicenseCache":
        """Enter context manager, keeping connection open."""
        self._conn = sqlite3.connect(self.db_path)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager, closing connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @contextlib.contextmanager
    def _connect(self):
        """Get a database connection.

        If used as a context manager (with statement), reuses the existing
        connection. Otherwise, creates a new one and closes it after use.
        """
        if self._conn:
            yield self._conn
        else:
            conn = sqlite3.connect(self.db_path)
            try:
                yield conn
            finally:
                conn.close()

    def _init_database(self) -> None:
        """Initialize the database schema if it doesn't exist."""
        with self._connect() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS license_cache (
                    url TEXT NOT NULL PRIMARY KEY,
                    license_data TEXT NOT NULL,
                    resolved_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
                """
            )

            # Index on expires_at for efficient TTL queries
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_expires
                ON license_cache(expires_at)
                """
            )

            conn.commit()

    def get_entry(self, url: str) -> Optional[CacheEntry]:
        """Retrieve the raw cache entry for a URL, expired or not.

        Args:
            url: The classified URL.

        Returns:
            CacheEntry if present, None otherwise.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT url, license_data, resolved_at, expires_at
                FROM license_cache
                WHERE url = ?
                """,
                (url,),
            )
            row = cursor.fetchone()

        if row is None:
            return None

        return CacheEntry(
            url=row[0],
            license_data=row[1],
            resolved_at=datetime.fromisoformat(row[2]),
            expires_at=datetime.fromisoformat(row[3]),
        )

    def get(self, url: str) -> Optional[License]:
        """Retrieve a cached license for a URL.

        Args:
            url: The classified URL.

        Returns:
            License if cache hit and not expired, None if cache miss or
            expired.
        """
        entry = self.get_entry(url)
        if entry is None:
            return None

        if datetime.now(UTC) >= entry.expires_at:
            return None

        try:
            return License(**json.loads(entry.license_data))
        except (json.JSONDecodeError, TypeError):
            # Corrupted data is a cache miss
            return None

    def set(self, url: str, lic: License) -> None:
        """Store a classified license in the cache.

        Args:
            url: The classified URL.
            lic: The license the URL was classified as.
        """
        resolved_at = datetime.now(UTC)
        expires_at = resolved_at + timedelta(days=self.ttl_days)

        with self._connect() as conn:
            cursor = conn.cursor()

            # REPLACE handles both insert and update
            cursor.execute(
                """
                REPLACE INTO license_cache
                (url, license_data, resolved_at, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    url,
                    json.dumps(asdict(lic)),
                    resolved_at.isoformat(),
                    expires_at.isoformat(),
                ),
            )
            conn.commit()

    def clear(self, url: Optional[str] = None) -> None:
        """Clear cache entries.

        Args:
            url: If specified, clear only this URL. If None, clear all entries.
        """
        with self._connect() as conn:
            cursor = conn.cursor()

            if url is None:
                cursor.execute("DELETE FROM license_cache")
            else:
                cursor.execute("DELETE FROM license_cache WHERE url = ?", (url,))
            conn.commit()

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Path to cache database file
                - count: Number of cached entries
                - size_bytes: Database file size in bytes
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM license_cache")
            count = cursor.fetchone()[0]

        size_bytes = self.db_path.stat().st_size if self.db_path.exists() else 0

        return {
            "path": str(self.db_path),
            "count": count,
            "size_bytes": size_bytes,
        }
