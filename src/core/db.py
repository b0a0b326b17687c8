"""
SQLite storage for language resources.
Structured fields (products, translations, productSpecific) are stored as JSON text.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from . import config


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection (path read at call time)."""
    Path(config.DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(config.DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db():
    """Initialize the database with required tables."""
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS resources (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT NOT NULL,
                products TEXT NOT NULL DEFAULT '[]',
                is_common BOOLEAN DEFAULT FALSE,
                section1 TEXT,
                section2 TEXT,
                artboard TEXT,
                component TEXT,
                translations TEXT NOT NULL DEFAULT '{}',
                product_specific TEXT NOT NULL DEFAULT '{}',
                korean_text_norm TEXT,  -- normalize(ko-KR), kept for external queries
                english_text_norm TEXT, -- normalize(en-US)
                status TEXT NOT NULL DEFAULT 'draft',
                author TEXT NOT NULL DEFAULT '',
                notes TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_resources_key ON resources(key)')

        conn.commit()


def health_check():
    """Check database health."""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [row[0] for row in cursor.fetchall()]
            return 'resources' in table_names
    except Exception:
        return False
