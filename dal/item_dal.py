"""Async Data Access Layer for the item table.

Provides ItemDAL with async CRUD operations compatible with
`utils.database_init.AsyncDatabaseInitializer`. The table name comes from the
initializer so several catalogs can share one database file.
"""

from __future__ import annotations

import time
from typing import List, Optional, Sequence

from models.item_record import ItemRecord
from utils.database_init import AsyncDatabaseInitializer


class ItemDAL:
    """Data access layer for item records.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing a `table` attribute and an async `connection()` context manager
    that yields an `aiosqlite.Connection`).
    """

    _COLUMNS = (
        "item_id",
        "name",
        "location",
        "description",
        "image_url",
        "created_at",
    )
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer
        self._table = db_initializer.table

    async def put_item(self, record: ItemRecord) -> bool:
        """Insert or replace the row for `record.item_id`.

        Args:
            record: ItemRecord to persist. `created_at` defaults to now.

        Returns:
            True if a previous row with the same id was replaced.
        """
        created_at = record.created_at or int(time.time())

        async with self._db.connection() as conn:
            cur = await conn.execute(f"SELECT 1 FROM {self._table} WHERE item_id = ?", (record.item_id,))
            existed = await cur.fetchone() is not None
            await conn.execute(
                f"INSERT OR REPLACE INTO {self._table} ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record.item_id,
                    record.name,
                    record.location,
                    record.description,
                    record.image_url,
                    created_at,
                ),
            )
            await conn.commit()
            return existed

    async def get_item(self, item_id: str) -> Optional[ItemRecord]:
        """Return ItemRecord for `item_id`, or None if not found."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM {self._table} WHERE item_id = ?",
                (item_id,),
            )
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    async def list_items(self, limit: int = 100, offset: int = 0) -> List[ItemRecord]:
        """List item rows, newest first.

        Args:
            limit: Maximum number of rows to return.
            offset: Rows to skip.
        """
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM {self._table} ORDER BY created_at DESC, item_id LIMIT ? OFFSET ?",
                (limit, offset),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def list_item_ids(self) -> List[str]:
        async with self._db.connection() as conn:
            cur = await conn.execute(f"SELECT item_id FROM {self._table}")
            rows = await cur.fetchall()
            return [r[0] for r in rows]

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> ItemRecord:
        """Convert a DB row tuple into an ItemRecord."""
        return ItemRecord(
            item_id=row[0],
            name=row[1],
            location=row[2],
            description=row[3],
            image_url=row[4],
            created_at=row[5],
        )
