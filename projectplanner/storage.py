"""sqlite-backed key/value persistence for the project collection.

The whole collection lives under one key as a single JSON array and is
rewritten on every save. No partial writes, no schema versioning.
"""
import json
import logging
import os
import sqlite3

from . import config

logger = logging.getLogger(__name__)

STORAGE_KEY = "projects"
TABLE_NAME = "kv_store"


class StorageError(Exception):
    pass


class InvalidPayloadError(StorageError, ValueError):
    """Raised by save() before writing anything."""


class MalformedDataError(StorageError):
    """Stored value exists but is not a JSON array."""


class ProjectStorage:
    def __init__(self, db_path=None, read_only=None):
        self.db_path = db_path or config.get_db_path()
        self.read_only = config.read_only_requested() if read_only is None else read_only

    def _connect(self):
        """Return an sqlite3 connection with WAL and busy timeout configured."""
        if self.read_only:
            return sqlite3.connect(_read_only_uri(self.db_path), uri=True)
        conn = sqlite3.connect(self.db_path)
        cur = conn.cursor()
        cur.execute("PRAGMA journal_mode=WAL")
        cur.execute("PRAGMA busy_timeout=5000")  # 5s
        conn.commit()
        return conn

    def ensure_schema(self, conn):
        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {TABLE_NAME} (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )

    def exists(self) -> bool:
        return os.path.exists(self.db_path)

    def load(self):
        """Return the stored list of project dicts, or None when nothing is stored.

        Raises MalformedDataError when the stored value is not a JSON array.
        """
        if not self.exists():
            return None
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database {self.db_path}: {e}")
        try:
            try:
                cur = conn.execute(f"SELECT value FROM {TABLE_NAME} WHERE key=?", (STORAGE_KEY,))
            except sqlite3.OperationalError:
                # table not created yet
                return None
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed reading {self.db_path}: {e}")
        finally:
            conn.close()
        if row is None:
            return None
        try:
            data = json.loads(row[0])
        except (TypeError, ValueError) as e:
            raise MalformedDataError(f"Stored '{STORAGE_KEY}' is not valid JSON: {e}")
        if not isinstance(data, list):
            raise MalformedDataError(f"Stored '{STORAGE_KEY}' must be a JSON array, got {type(data).__name__}")
        return data

    def save(self, projects):
        if not isinstance(projects, list):
            raise InvalidPayloadError("Invalid projects data")
        if self.read_only:
            raise StorageError(f"Database {self.db_path} is opened read-only")
        payload = json.dumps(projects, ensure_ascii=False)
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database {self.db_path}: {e}")
        try:
            with conn:
                self.ensure_schema(conn)
                conn.execute(
                    f"INSERT INTO {TABLE_NAME} (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    (STORAGE_KEY, payload),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed writing {self.db_path}: {e}")
        finally:
            conn.close()
        logger.debug("Saved %d projects to %s", len(projects), self.db_path)


def _read_only_uri(path: str) -> str:
    # Examples:
    #   C:\data\db.sqlite -> file:///C:/data/db.sqlite?mode=ro
    #   \\server\share\db.sqlite -> file:////server/share/db.sqlite?mode=ro
    if not path.startswith("\\\\") and not path.startswith("//"):
        path = os.path.abspath(path)
    p = path.replace("\\", "/")
    # UNC paths keep their leading "//" inside an empty authority
    if ":" in p and not p.startswith("/"):
        p = "/" + p
    uri = f"file://{p}"
    return uri + ("&" if "?" in uri else "?") + "mode=ro"
