"""SQLite store for named snapshots of tailored resumes."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from jd_tailor.models.resume import Resume, SavedVersion

DEFAULT_DB_PATH = Path.home() / ".jd-tailor" / "versions.db"


class VersionStore:
    """Saved resume versions keyed by name; saving an existing name replaces it."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS saved_versions (
                    name TEXT PRIMARY KEY,
                    timestamp TEXT NOT NULL,
                    job_description TEXT NOT NULL DEFAULT '',
                    data_json TEXT NOT NULL
                )
            """)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def save(self, name: str, resume: Resume, job_description: str = "") -> SavedVersion:
        """Snapshot a resume under ``name``."""
        name = name.strip()
        if not name:
            raise ValueError("Version name must not be empty")
        version = SavedVersion(name=name, job_description=job_description, data=resume)
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO saved_versions
                   (name, timestamp, job_description, data_json)
                   VALUES (?, ?, ?, ?)""",
                (
                    version.name,
                    version.timestamp.isoformat(),
                    version.job_description,
                    resume.model_dump_json(by_alias=True),
                ),
            )
        return version

    def get(self, name: str) -> SavedVersion | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT name, timestamp, job_description, data_json FROM saved_versions WHERE name = ?",
                (name.strip(),),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_version(row)

    def list_versions(self) -> list[SavedVersion]:
        """All versions, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT name, timestamp, job_description, data_json FROM saved_versions "
                "ORDER BY timestamp DESC"
            ).fetchall()
        return [self._row_to_version(row) for row in rows]

    def delete(self, name: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM saved_versions WHERE name = ?", (name.strip(),))
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_version(row: tuple) -> SavedVersion:
        return SavedVersion(
            name=row[0],
            timestamp=datetime.fromisoformat(row[1]),
            job_description=row[2],
            data=Resume.model_validate_json(row[3]),
        )
