"""
Base repository classes and database connection management.
"""

import sqlite3
import threading
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from ..exceptions import from_integrity_error
from ..utils.secure_logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class _ConnectionHolder:
    """Owns one thread's connection and closes it when the thread goes away."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._finalizer = weakref.finalize(self, conn.close)

    def close(self) -> None:
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive


class DatabaseConnection:
    """Thread-aware SQLite connection manager.

    Each thread gets its own connection. Transactions are re-entrant per
    thread: the outermost ``transaction()`` block begins and commits, nested
    blocks join it, and any exception rolls the whole unit back.
    """

    def __init__(
        self,
        db_path: str = "ledger.db",
        timeout: float = 30.0,
        enable_foreign_keys: bool = True,
    ):
        self.db_path = db_path
        self.timeout = timeout
        self.enable_foreign_keys = enable_foreign_keys
        self._lock = threading.Lock()
        self._local = threading.local()
        # Thread-local storage owns the holders; this set only tracks them
        self._holders: "weakref.WeakSet[_ConnectionHolder]" = weakref.WeakSet()

    @staticmethod
    def _dict_factory(cursor, row):
        """Convert row to dictionary"""
        return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}

    def _create_connection(self) -> sqlite3.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        # Autocommit mode; transactions are issued explicitly
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.timeout,
            check_same_thread=False,
            isolation_level=None,
        )
        conn.row_factory = self._dict_factory
        conn.execute(f"PRAGMA busy_timeout = {int(self.timeout * 1000)}")
        if self.enable_foreign_keys:
            conn.execute("PRAGMA foreign_keys = ON")

        logger.debug("SQLite connection created", db_path=self.db_path)
        return conn

    def connection(self) -> sqlite3.Connection:
        """Get the raw connection for the current thread."""
        holder = getattr(self._local, "holder", None)
        if holder is None or holder.closed:
            holder = _ConnectionHolder(self._create_connection())
            self._local.holder = holder
            with self._lock:
                self._holders.add(holder)
        return holder.conn

    @property
    def in_transaction(self) -> bool:
        return getattr(self._local, "depth", 0) > 0

    @contextmanager
    def transaction(self, immediate: bool = True) -> Iterator[sqlite3.Connection]:
        """Run a block as one atomic unit.

        Args:
            immediate: Take the write lock up front (``BEGIN IMMEDIATE``) so
                concurrent writers serialize instead of losing updates.
        """
        conn = self.connection()
        depth = getattr(self._local, "depth", 0)

        if depth:
            self._local.depth = depth + 1
            try:
                yield conn
            finally:
                self._local.depth = depth
            return

        conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
        self._local.depth = 1
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.debug("Transaction rolled back", db_path=self.db_path)
            raise
        else:
            conn.execute("COMMIT")
        finally:
            self._local.depth = 0

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a connection inside a (possibly shared) read/write transaction."""
        with self.transaction(immediate=False) as conn:
            yield conn

    def close_all_connections(self):
        """Close all database connections."""
        with self._lock:
            holders = list(self._holders)
            self._holders.clear()
        for holder in holders:
            holder.close()


class BaseRepository(ABC, Generic[T]):
    """Base repository class with common CRUD operations."""

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection
        self._table_name = self._get_table_name()
        self._model_class = self._get_model_class()

    @abstractmethod
    def _get_table_name(self) -> str:
        """Return the table name for this repository."""
        pass

    @abstractmethod
    def _get_model_class(self) -> Type[T]:
        """Return the model class for this repository."""
        pass

    @abstractmethod
    def _row_to_model(self, row: Dict[str, Any]) -> T:
        """Convert database row to model instance."""
        pass

    @abstractmethod
    def _model_to_dict(self, model: T) -> Dict[str, Any]:
        """Convert model instance to dictionary for database storage."""
        pass

    def _write(self, query: str, params: tuple = (), deleting: bool = False) -> sqlite3.Cursor:
        """Execute a write statement, translating integrity errors."""
        with self.db.get_connection() as conn:
            try:
                return conn.execute(query, params)
            except sqlite3.IntegrityError as e:
                raise from_integrity_error(e, self._table_name, deleting=deleting) from e

    def _fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        with self.db.get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def _fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        with self.db.get_connection() as conn:
            return conn.execute(query, params).fetchall()

    def find_by_id(self, id: int) -> Optional[T]:
        """Find entity by ID."""
        row = self._fetch_one(
            f"SELECT * FROM {self._table_name} WHERE id = ?", (id,)
        )
        return self._row_to_model(row) if row else None

    def find_all(self, limit: Optional[int] = None, offset: int = 0) -> List[T]:
        """Find all entities with optional pagination."""
        query = f"SELECT * FROM {self._table_name} ORDER BY id"
        params: list = []

        if limit:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        rows = self._fetch_all(query, tuple(params))
        return [self._row_to_model(row) for row in rows]

    def insert(self, model: T) -> T:
        """Insert a new entity and return it as stored."""
        data = {k: v for k, v in self._model_to_dict(model).items() if k != 'id'}

        columns = ', '.join(data.keys())
        placeholders = ', '.join(['?' for _ in data])
        cursor = self._write(
            f"INSERT INTO {self._table_name} ({columns}) VALUES ({placeholders})",
            tuple(data.values()),
        )
        return self.find_by_id(cursor.lastrowid)

    def update_fields(self, id: int, **fields: Any) -> bool:
        """Update selected columns of one row."""
        if not fields:
            return False

        set_clause = ', '.join(f"{column} = ?" for column in fields)
        cursor = self._write(
            f"UPDATE {self._table_name} SET {set_clause} WHERE id = ?",
            (*fields.values(), id),
        )
        return cursor.rowcount > 0

    def delete(self, id: int) -> bool:
        """Delete entity by ID."""
        cursor = self._write(
            f"DELETE FROM {self._table_name} WHERE id = ?", (id,), deleting=True
        )
        return cursor.rowcount > 0

    def count(self) -> int:
        """Count total entities."""
        row = self._fetch_one(f"SELECT COUNT(*) AS total FROM {self._table_name}")
        return row["total"]


class OwnedRepository(BaseRepository[T]):
    """Repository for tables scoped by ``user_id`` with an ``archived`` flag."""

    def find_owned(self, user_id: int, id: int) -> Optional[T]:
        """Find an entity only if it belongs to the given user."""
        row = self._fetch_one(
            f"SELECT * FROM {self._table_name} WHERE id = ? AND user_id = ?",
            (id, user_id),
        )
        return self._row_to_model(row) if row else None

    def find_by_user(self, user_id: int, include_archived: bool = False) -> List[T]:
        """Find all entities of a user, active ones only by default."""
        query = f"SELECT * FROM {self._table_name} WHERE user_id = ?"
        if not include_archived:
            query += " AND archived = 0"
        rows = self._fetch_all(query + " ORDER BY id", (user_id,))
        return [self._row_to_model(row) for row in rows]

    def set_archived(self, id: int, archived: bool) -> bool:
        """Set or clear the soft-delete flag."""
        return self.update_fields(id, archived=int(archived))

    def delete_by_user(self, user_id: int) -> int:
        """Delete every row owned by a user, returning the count."""
        cursor = self._write(
            f"DELETE FROM {self._table_name} WHERE user_id = ?", (user_id,), deleting=True
        )
        return cursor.rowcount


class NamedRepository(OwnedRepository[T]):
    """Owned repository whose rows carry a per-user unique ``name``."""

    def find_by_name(self, user_id: int, name: str) -> Optional[T]:
        """Find entity by its per-user unique name."""
        row = self._fetch_one(
            f"SELECT * FROM {self._table_name} WHERE user_id = ? AND name = ?",
            (user_id, name.strip()),
        )
        return self._row_to_model(row) if row else None
