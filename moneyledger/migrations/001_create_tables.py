"""
Initial ledger schema
Creates users, currencies, categories, sources and entries
"""

ENTRY_TYPES = ('spend', 'income', 'lend', 'borrow', 'convert')

TABLES = ['entries', 'sources', 'categories', 'currencies', 'users']


def upgrade(conn):
    cursor = conn.cursor()

    # users.fixed_currency_id points forward at currencies; SQLite resolves
    # foreign keys lazily so the declaration order is free
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username VARCHAR(1023) UNIQUE NOT NULL,
            password VARCHAR(1023) NOT NULL,
            fixed_currency_id INTEGER,
            enabled INTEGER NOT NULL DEFAULT 0 CHECK (enabled IN (0, 1)),
            CONSTRAINT fixed_currency_id_fk FOREIGN KEY (fixed_currency_id)
                REFERENCES currencies(id) ON DELETE SET NULL
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS currencies (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(1023) NOT NULL,
            rate_to_fixed REAL NOT NULL,
            archived INTEGER NOT NULL DEFAULT 0 CHECK (archived IN (0, 1)),
            CONSTRAINT user_currency UNIQUE (user_id, name)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(1023) NOT NULL,
            archived INTEGER NOT NULL DEFAULT 0 CHECK (archived IN (0, 1)),
            CONSTRAINT user_category UNIQUE (user_id, name)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS sources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(1023) NOT NULL,
            currency_id INTEGER NOT NULL REFERENCES currencies(id) ON DELETE RESTRICT,
            amount REAL NOT NULL,
            archived INTEGER NOT NULL DEFAULT 0 CHECK (archived IN (0, 1)),
            CONSTRAINT user_source UNIQUE (user_id, name)
        )
    ''')

    entry_types = ', '.join(f"'{value}'" for value in ENTRY_TYPES)
    cursor.execute(f'''
        CREATE TABLE IF NOT EXISTS entries (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            description TEXT NOT NULL,
            category_id INTEGER NOT NULL REFERENCES categories(id) ON DELETE RESTRICT,
            amount REAL NOT NULL,
            date TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
            currency_id INTEGER NOT NULL REFERENCES currencies(id) ON DELETE RESTRICT,
            entry_type TEXT NOT NULL CHECK (entry_type IN ({entry_types})),
            source_id INTEGER NOT NULL REFERENCES sources(id) ON DELETE RESTRICT,
            secondary_source_id INTEGER NULL REFERENCES sources(id) ON DELETE RESTRICT,
            conversion_rate REAL NULL,
            conversion_rate_to_fixed REAL NOT NULL,
            archived INTEGER NOT NULL DEFAULT 0 CHECK (archived IN (0, 1))
        )
    ''')


def downgrade(conn):
    cursor = conn.cursor()

    # Drop tables in reverse dependency order
    for table in TABLES:
        cursor.execute(f'DROP TABLE IF EXISTS {table}')
