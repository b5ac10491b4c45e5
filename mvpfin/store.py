"""SQLite-backed record store for users and entry markers."""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from . import markers
from .auth import CredentialPolicy, WerkzeugCredentials
from .models import EntryMarker, User

logger = logging.getLogger(__name__)

USER_SORTS = {
    "name": "name COLLATE NOCASE ASC",
    "created_at": "created_at DESC, id DESC",
}


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


class StoreError(RuntimeError):
    """Raised when the record store cannot complete an operation."""


class RecordStore(Protocol):
    def list_markers(self) -> list[EntryMarker]: ...

    def insert_marker(self, marker: EntryMarker) -> None: ...

    def update_marker(self, key: str, *, label: str | None = None, icon: str | None | _Unset = UNSET) -> None: ...

    def delete_marker(self, key: str) -> None: ...

    def list_users(self, sort_by: str = "name") -> list[User]: ...

    def insert_user(self, name: str, username: str, password: str = "", role: str = "user") -> User: ...

    def delete_user(self, user_id: int) -> None: ...

    def authenticate(self, username: str, password: str) -> User | None: ...


def _user_from_row(row: sqlite3.Row) -> User:
    return User(
        id=int(row["id"]),
        name=row["name"],
        username=row["username"],
        role=row["role"],
        created_at=row["created_at"],
        has_password=bool(row["password_hash"]),
    )


class SQLiteRecordStore:
    def __init__(self, db_path: Path | str, credentials: CredentialPolicy | None = None):
        self.db_path = Path(db_path)
        self.credentials = credentials or WerkzeugCredentials()
        self._ensure_directory()
        self._initialize_database()

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists"""
        os.makedirs(self.db_path.parent, exist_ok=True)

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open {self.db_path}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _initialize_database(self) -> None:
        with self._get_connection() as connection:
            cursor = connection.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS app_users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                username TEXT NOT NULL UNIQUE,
                password_hash TEXT,
                role TEXT NOT NULL DEFAULT 'user',
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS entry_markers (
                key TEXT PRIMARY KEY,
                label TEXT NOT NULL,
                icon TEXT,
                "order" INTEGER NOT NULL DEFAULT 0
            );
            """)

            count = cursor.execute("SELECT COUNT(*) FROM entry_markers").fetchone()[0]
            if count == 0:
                logger.info("Seeding default entry markers into %s", self.db_path)
                cursor.executemany(
                    'INSERT INTO entry_markers (key, label, icon, "order") VALUES (?, ?, ?, ?)',
                    [(m.key, m.label, m.icon, m.order) for m in markers.default_markers()],
                )

    # Entry markers

    def list_markers(self) -> list[EntryMarker]:
        with self._get_connection() as connection:
            rows = connection.execute(
                'SELECT key, label, icon, "order" FROM entry_markers ORDER BY "order" ASC, key ASC'
            ).fetchall()
        return [markers.marker_from_record(dict(row)) for row in rows]

    def insert_marker(self, marker: EntryMarker) -> None:
        markers.validate_key(marker.key)
        with self._get_connection() as connection:
            connection.execute(
                'INSERT INTO entry_markers (key, label, icon, "order") VALUES (?, ?, ?, ?)',
                (marker.key, marker.label, marker.icon or None, marker.order),
            )
        logger.info("Added entry marker %r", marker.key)

    def update_marker(
        self,
        key: str,
        *,
        label: str | None = None,
        icon: str | None | _Unset = UNSET,
    ) -> None:
        """Change a marker's label and/or icon. An empty icon clears it."""

        assignments: list[str] = []
        params: list[object] = []
        if label is not None:
            assignments.append("label = ?")
            params.append(label)
        if icon is not UNSET:
            assignments.append("icon = ?")
            params.append(icon or None)
        if not assignments:
            return

        with self._get_connection() as connection:
            cursor = connection.execute(
                f"UPDATE entry_markers SET {', '.join(assignments)} WHERE key = ?",
                (*params, key),
            )
            if cursor.rowcount == 0:
                raise StoreError(f"No entry marker with key {key!r}")
        logger.info("Updated entry marker %r", key)

    def delete_marker(self, key: str) -> None:
        with self._get_connection() as connection:
            connection.execute("DELETE FROM entry_markers WHERE key = ?", (key,))
        logger.info("Deleted entry marker %r", key)

    # Users

    def list_users(self, sort_by: str = "name") -> list[User]:
        try:
            order_by = USER_SORTS[sort_by]
        except KeyError:
            raise ValueError(f"Cannot sort users by {sort_by!r}") from None

        with self._get_connection() as connection:
            rows = connection.execute(
                f"""
                SELECT id, name, username, role, created_at, password_hash
                FROM app_users
                ORDER BY {order_by}
                """
            ).fetchall()
        return [_user_from_row(row) for row in rows]

    def insert_user(self, name: str, username: str, password: str = "", role: str = "user") -> User:
        password_hash = self.credentials.hash(password) if password else None
        with self._get_connection() as connection:
            cursor = connection.execute(
                """
                INSERT INTO app_users (name, username, password_hash, role)
                VALUES (?, ?, ?, ?)
                """,
                (name, username, password_hash, role),
            )
            row = connection.execute(
                "SELECT id, name, username, role, created_at, password_hash FROM app_users WHERE id = ?",
                (cursor.lastrowid,),
            ).fetchone()
        logger.info("Added user %r", username)
        return _user_from_row(row)

    def delete_user(self, user_id: int) -> None:
        with self._get_connection() as connection:
            connection.execute("DELETE FROM app_users WHERE id = ?", (user_id,))
        logger.info("Deleted user %s", user_id)

    def authenticate(self, username: str, password: str) -> User | None:
        with self._get_connection() as connection:
            row = connection.execute(
                """
                SELECT id, name, username, role, created_at, password_hash
                FROM app_users
                WHERE username = ?
                """,
                (username,),
            ).fetchone()
        if row is None or not self.credentials.verify(row["password_hash"], password):
            return None
        return _user_from_row(row)


def load_registry(record_store: RecordStore) -> markers.MarkerRegistry:
    """Read the markers into a registry.

    A failed read returns an unloaded registry, never an empty loaded one, so
    callers can tell "still loading" apart from "nothing configured".
    """

    try:
        return markers.MarkerRegistry.loaded(record_store.list_markers())
    except (StoreError, ValueError):
        logger.exception("Could not load entry markers")
        return markers.MarkerRegistry()


def load_users(record_store: RecordStore, sort_by: str = "name") -> list[User]:
    try:
        return record_store.list_users(sort_by)
    except StoreError:
        logger.exception("Could not load users")
        return []
