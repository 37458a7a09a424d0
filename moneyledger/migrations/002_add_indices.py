"""
Add the nullable entries.target column and lookup indices.
"""

INDICES = [
    ('idx_users_enabled', 'users', 'enabled'),
    ('idx_currencies_name', 'currencies', 'name'),
    ('idx_currencies_archived', 'currencies', 'archived'),
    ('idx_categories_name', 'categories', 'name'),
    ('idx_categories_archived', 'categories', 'archived'),
    ('idx_sources_name', 'sources', 'name'),
    ('idx_sources_amount', 'sources', 'amount'),
    ('idx_sources_archived', 'sources', 'archived'),
    ('idx_entries_amount', 'entries', 'amount'),
    ('idx_entries_date', 'entries', 'date'),
    ('idx_entries_created_at', 'entries', 'created_at'),
    ('idx_entries_entry_type', 'entries', 'entry_type'),
    ('idx_entries_archived', 'entries', 'archived'),
]


def _columns(cursor, table):
    cursor.execute(f"PRAGMA table_info({table})")
    return [col[1] for col in cursor.fetchall()]


def upgrade(conn):
    cursor = conn.cursor()

    if 'target' not in _columns(cursor, 'entries'):
        cursor.execute('ALTER TABLE entries ADD COLUMN target TEXT NULL')

    for name, table, column in INDICES:
        cursor.execute(f'CREATE INDEX IF NOT EXISTS {name} ON {table}({column})')

    # Most entries carry no target
    cursor.execute(
        'CREATE INDEX IF NOT EXISTS idx_entries_target ON entries(target) '
        'WHERE target IS NOT NULL'
    )


def downgrade(conn):
    cursor = conn.cursor()

    cursor.execute('DROP INDEX IF EXISTS idx_entries_target')
    for name, _, _ in INDICES:
        cursor.execute(f'DROP INDEX IF EXISTS {name}')

    if 'target' in _columns(cursor, 'entries'):
        cursor.execute('ALTER TABLE entries DROP COLUMN target')
