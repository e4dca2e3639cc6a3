"""
SQLite-backed system settings store.
Persists the administered playlist URL and an audit trail of admin changes.
Falls back to an in-memory mode when the database cannot be opened.
"""
import aiosqlite
import json
import logging
from pathlib import Path
from typing import Optional

from tvlive.config import get_settings
from tvlive.errors import InvalidPlaylistUrlError
from tvlive.services.stream_validator import is_valid_stream

logger = logging.getLogger(__name__)

M3U_URL_KEY = "m3u_url"


def validate_playlist_url(url: Optional[str]) -> str:
    """Return the trimmed URL or raise InvalidPlaylistUrlError if it is not absolute http(s)."""
    url = (url or "").strip()
    if not url:
        raise InvalidPlaylistUrlError("URL is required")

    if not is_valid_stream(url):
        raise InvalidPlaylistUrlError("Invalid URL")
    return url


class SettingsStore:
    """Async key/value settings with admin audit log."""

    def __init__(self, db_path: Optional[str] = None, default_m3u_url: Optional[str] = None):
        settings = get_settings()
        self.db_path = db_path or settings.database_path
        self.default_m3u_url = default_m3u_url or settings.default_m3u_url
        self.offline = False
        self._memory: dict[str, str] = {}
        self._memory_logs: list[dict] = []

    def _ensure_directory(self):
        """Create data directory if it doesn't exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    async def initialize(self):
        """Create tables and seed defaults; switch to offline mode on failure."""
        try:
            self._ensure_directory()
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS system_settings (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        description TEXT,
                        updated_by TEXT,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                await db.execute("""
                    CREATE TABLE IF NOT EXISTS admin_logs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        admin_id TEXT,
                        action TEXT NOT NULL,
                        target_type TEXT,
                        target_id TEXT,
                        details TEXT,
                        ip_address TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                await db.execute(
                    "INSERT OR IGNORE INTO system_settings (key, value, description) VALUES (?, ?, ?)",
                    (M3U_URL_KEY, self.default_m3u_url, "M3U playlist URL")
                )
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.warning(f"Settings database unavailable ({e}); running in offline mode")
            self.offline = True

    async def get(self, key: str) -> Optional[str]:
        if self.offline:
            return self._memory.get(key)

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT value FROM system_settings WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else None

    async def set(self, key: str, value: str, updated_by: Optional[str] = None):
        if self.offline:
            self._memory[key] = value
            return

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                INSERT INTO system_settings (key, value, updated_by, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_by = excluded.updated_by,
                    updated_at = CURRENT_TIMESTAMP
            """, (key, value, updated_by))
            await db.commit()

    async def get_m3u_url(self) -> str:
        """Current playlist URL, or the default when none is stored."""
        return await self.get(M3U_URL_KEY) or self.default_m3u_url

    async def set_m3u_url(self, url: str, admin_id: Optional[str] = None, ip_address: Optional[str] = None) -> str:
        """
        Validate and store a new playlist URL.

        Raises:
            InvalidPlaylistUrlError: if the URL is missing or not absolute http(s)
        """
        url = validate_playlist_url(url)
        await self.set(M3U_URL_KEY, url, updated_by=admin_id)
        await self.log_admin_action(admin_id, "UPDATE_M3U", "setting", None, {"url": url}, ip_address)
        logger.info(f"Playlist URL updated to {url}")
        return url

    async def log_admin_action(
        self,
        admin_id: Optional[str],
        action: str,
        target_type: Optional[str],
        target_id: Optional[str],
        details: Optional[dict],
        ip_address: Optional[str],
    ):
        """Record an admin action. Failures are logged, never raised."""
        entry = {
            "admin_id": admin_id,
            "action": action,
            "target_type": target_type,
            "target_id": target_id,
            "details": details,
            "ip_address": ip_address,
        }
        if self.offline:
            logger.info(f"[ADMIN LOG] {admin_id}: {action} on {target_type} {target_id}")
            self._memory_logs.append(entry)
            return

        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("""
                    INSERT INTO admin_logs (admin_id, action, target_type, target_id, details, ip_address)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (admin_id, action, target_type, target_id, json.dumps(details), ip_address))
                await db.commit()
        except aiosqlite.Error as e:
            logger.error(f"Failed to record admin action {action}: {e}")

    async def get_admin_logs(self, limit: int = 50) -> list[dict]:
        """Most recent admin actions first."""
        if self.offline:
            return list(reversed(self._memory_logs))[:limit]

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM admin_logs ORDER BY id DESC LIMIT ?", (limit,)
            ) as cursor:
                rows = await cursor.fetchall()

        logs = []
        for row in rows:
            entry = dict(row)
            entry["details"] = json.loads(entry["details"]) if entry.get("details") else None
            logs.append(entry)
        return logs


# Singleton
_settings_store: Optional[SettingsStore] = None


async def get_settings_store() -> SettingsStore:
    """Get or create the initialized settings store singleton."""
    global _settings_store
    if _settings_store is None:
        _settings_store = SettingsStore()
        await _settings_store.initialize()
    return _settings_store
