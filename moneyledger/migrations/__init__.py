"""
Schema migrations for the ledger database.

Numbered modules (``NNN_name.py``) each define ``upgrade(conn)`` and
``downgrade(conn)``; ``migrate`` applies them in order.
"""

from .migrate import migrate_up, migrate_down, migration_status

__all__ = ["migrate_up", "migrate_down", "migration_status"]
