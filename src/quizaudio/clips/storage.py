"""SQLite clip metadata storage."""

import logging
from datetime import datetime
from pathlib import Path

from ..db import get_connection, placeholders
from .models import AudioClip

logger = logging.getLogger(__name__)

# SQLite caps bound parameters per statement
MAX_BATCH = 500

_COLUMNS = "fingerprint, url, owner_type, owner_id, provider, voice, duration_ms, created_at"


class ClipStorage:
    """SQLite-based storage for clip metadata rows.

    The fingerprint column is unique; duplicate inserts from racing callers
    are ignored rather than raised, so the table holds at most one row per
    fingerprint.
    """

    def __init__(self, db_path: Path):
        """Initialize clip storage, creating the schema if needed.

        Args:
            db_path: Path of the SQLite database file
        """
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audio_clips (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    fingerprint TEXT NOT NULL UNIQUE,
                    url TEXT NOT NULL,
                    owner_type TEXT NOT NULL,
                    owner_id TEXT NOT NULL,
                    provider TEXT NOT NULL,
                    voice TEXT NOT NULL,
                    duration_ms INTEGER,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_audio_clips_owner
                ON audio_clips(owner_type, owner_id)
            """)
            conn.commit()
        finally:
            conn.close()

    def insert(self, clip: AudioClip) -> bool:
        """Insert a clip row unless its fingerprint already exists.

        Returns:
            True if a row was written, False if another row already held
            the fingerprint
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                f"""
                INSERT INTO audio_clips ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(fingerprint) DO NOTHING
            """,
                (
                    clip.fingerprint,
                    clip.url,
                    clip.owner_type,
                    clip.owner_id,
                    clip.provider,
                    clip.voice,
                    clip.duration_ms,
                    clip.created_at.isoformat(),
                ),
            )
            conn.commit()
            inserted = cursor.rowcount == 1
        finally:
            conn.close()

        if not inserted:
            logger.debug(f"Clip {clip.fingerprint[:12]} already recorded, insert ignored")
        return inserted

    def get_by_fingerprint(self, fingerprint: str) -> AudioClip | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM audio_clips WHERE fingerprint = ?",
                (fingerprint,),
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_clip(row) if row is not None else None

    def get_many(self, fingerprints: list[str]) -> dict[str, AudioClip]:
        """Batch lookup of clips by fingerprint.

        Returns:
            Mapping of fingerprint to clip for every fingerprint found
        """
        unique = list(dict.fromkeys(fingerprints))
        found: dict[str, AudioClip] = {}
        if not unique:
            return found

        conn = get_connection(self.db_path)
        try:
            for start in range(0, len(unique), MAX_BATCH):
                batch = unique[start : start + MAX_BATCH]
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM audio_clips "
                    f"WHERE fingerprint IN ({placeholders(len(batch))})",
                    batch,
                ).fetchall()
                for row in rows:
                    found[row["fingerprint"]] = self._row_to_clip(row)
        finally:
            conn.close()
        return found

    def count(self) -> int:
        conn = get_connection(self.db_path)
        try:
            return conn.execute("SELECT COUNT(*) FROM audio_clips").fetchone()[0]
        finally:
            conn.close()

    @staticmethod
    def _row_to_clip(row) -> AudioClip:
        return AudioClip(
            fingerprint=row["fingerprint"],
            url=row["url"],
            owner_type=row["owner_type"],
            owner_id=row["owner_id"],
            provider=row["provider"],
            voice=row["voice"],
            duration_ms=row["duration_ms"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
