"""SQLite option table and engine setup via SQLAlchemy Core."""

from optguard.infrastructure.database.engine import create_db_engine, init_database
from optguard.infrastructure.database.schema import metadata, options

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "options",
]
