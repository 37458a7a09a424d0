"""
Database migration runner
Manages schema migrations for the ledger database
"""

import importlib.util
import sqlite3
import sys
from contextlib import closing
from pathlib import Path
from typing import List, Optional

from ..config.settings import Settings
from ..utils.secure_logging import get_logger

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent


def get_db_path() -> str:
    """Get the database path"""
    return Settings().database.path


def connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection with explicit transaction control."""
    path = db_path or get_db_path()
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(path, isolation_level=None)


def init_migration_table(conn: sqlite3.Connection) -> None:
    """Initialize the migrations tracking table"""
    conn.execute('''
        CREATE TABLE IF NOT EXISTS migrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            migration_name TEXT UNIQUE NOT NULL,
            applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
        )
    ''')


def get_applied_migrations(conn: sqlite3.Connection) -> List[str]:
    """Get list of already applied migrations"""
    init_migration_table(conn)
    cursor = conn.execute('SELECT migration_name FROM migrations ORDER BY id')
    return [row[0] for row in cursor.fetchall()]


def get_available_migrations() -> List[str]:
    """Get list of available migration files"""
    return sorted(
        path.stem for path in MIGRATIONS_DIR.glob('[0-9][0-9][0-9]_*.py')
    )


def load_migration_module(migration_name: str):
    """Load a migration module dynamically"""
    file_path = MIGRATIONS_DIR / f"{migration_name}.py"
    if not file_path.exists():
        raise FileNotFoundError(f"Migration {migration_name} not found")

    spec = importlib.util.spec_from_file_location(migration_name, file_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    return module


def _apply(conn: sqlite3.Connection, migration_name: str, direction: str) -> None:
    """Run one migration step and its bookkeeping in a single transaction."""
    module = load_migration_module(migration_name)

    conn.execute('BEGIN')
    try:
        if direction == 'up':
            module.upgrade(conn)
            conn.execute(
                'INSERT INTO migrations (migration_name) VALUES (?)',
                (migration_name,)
            )
        else:
            module.downgrade(conn)
            conn.execute(
                'DELETE FROM migrations WHERE migration_name = ?',
                (migration_name,)
            )
    except Exception:
        conn.execute('ROLLBACK')
        raise
    conn.execute('COMMIT')


def migrate_up(db_path: Optional[str] = None) -> List[str]:
    """Run all pending migrations, returning the names applied."""
    with closing(connect(db_path)) as conn:
        applied = get_applied_migrations(conn)
        pending = [m for m in get_available_migrations() if m not in applied]

        if not pending:
            logger.debug("No pending migrations", db_path=db_path)
            return []

        for migration_name in pending:
            try:
                _apply(conn, migration_name, 'up')
            except Exception as e:
                logger.error(
                    "Migration failed",
                    migration=migration_name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise
            logger.info("Migration applied", migration=migration_name)

    return pending


def migrate_down(db_path: Optional[str] = None, migration_name: Optional[str] = None) -> Optional[str]:
    """Rollback the named migration, or the last applied one."""
    with closing(connect(db_path)) as conn:
        applied = get_applied_migrations(conn)

        if not applied:
            return None

        if migration_name is None:
            migration_name = applied[-1]
        elif migration_name not in applied:
            raise ValueError(f"Migration {migration_name} is not applied")

        _apply(conn, migration_name, 'down')
        logger.info("Migration rolled back", migration=migration_name)

    return migration_name


def migration_status(db_path: Optional[str] = None) -> List[tuple]:
    """Return (migration, applied) pairs for every available migration."""
    with closing(connect(db_path)) as conn:
        applied = set(get_applied_migrations(conn))
    return [(name, name in applied) for name in get_available_migrations()]


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI interface"""
    args = sys.argv[1:] if argv is None else argv

    if not args:
        print("Usage:")
        print("  moneyledger-migrate up          - Apply all pending migrations")
        print("  moneyledger-migrate down        - Rollback last migration")
        print("  moneyledger-migrate down <name> - Rollback specific migration")
        print("  moneyledger-migrate status      - Show migration status")
        return 1

    command = args[0]

    if command == "up":
        applied = migrate_up()
        if applied:
            for name in applied:
                print(f"Applied {name}")
        else:
            print("No pending migrations. Database is up to date.")
    elif command == "down":
        rolled_back = migrate_down(migration_name=args[1] if len(args) > 1 else None)
        print(f"Rolled back {rolled_back}" if rolled_back else "No migrations to rollback.")
    elif command == "status":
        status = migration_status()
        for name, is_applied in status:
            print(f"{name:<30} {'applied' if is_applied else 'pending'}")
        pending = len([name for name, is_applied in status if not is_applied])
        print(f"\nTotal: {len(status)} migrations, {pending} pending")
    else:
        print(f"Unknown command: {command}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
