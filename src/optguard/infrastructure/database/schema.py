"""SQLAlchemy Core table definitions for the optguard database.

One row per option: the value column holds the JSON-encoded scalar or
compound value exactly as committed.
"""

from __future__ import annotations

from sqlalchemy import Column, MetaData, Table, Text

metadata = MetaData()

options = Table(
    "options",
    metadata,
    Column("name", Text, primary_key=True),
    Column("value", Text, nullable=False),  # JSON
    Column("modified", Text, nullable=False),
)
