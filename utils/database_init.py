import asyncio
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class AsyncDatabaseInitializer:
    """
    Manage the async SQLite database holding item records.

    - The database file is located at: <database_dir>/app.db
    - `database_dir` is created if missing. A RuntimeError is raised if it
      points to a file or cannot be created.
    - On the first call to `ensure_database()` for a given instance:
        * If `reset=True`, any existing database file is deleted first.
        * The item table is created (and the `image_url` column ensured).
    - Subsequent calls to `ensure_database()` on the same instance are no-ops,
      so it is safe for `connection()` to call it.
    """

    def __init__(self, database_dir: Path | str, table: str = "lost_items", reset: bool = False) -> None:
        if not _TABLE_NAME.match(table):
            raise RuntimeError(f"Invalid item table name: {table!r}")

        db_dir = Path(database_dir).expanduser()

        # If the path exists but is not a directory, that's a configuration error.
        if db_dir.exists() and not db_dir.is_dir():
            raise RuntimeError(
                f"DATABASE_DIR={str(database_dir)!r} points to a file, not a directory "
                f"({db_dir}). Please set DATABASE_DIR to a directory path."
            )

        try:
            db_dir.mkdir(parents=True, exist_ok=True)
        except Exception as exc:
            raise RuntimeError(
                f"Failed to create or access database directory at {db_dir}"
            ) from exc

        self.db_dir = db_dir
        self.db_path = self.db_dir / "app.db"
        self.table = table
        self.reset = reset

        self._initialized = False

    async def ensure_database(self) -> None:
        """
        Ensure the SQLite database and item table exist at `self.db_path`.

        Subsequent calls on the same instance are no-ops.
        """
        if self._initialized:
            return

        if self.reset and self.db_path.exists():
            try:
                self.db_path.unlink()
            except Exception as exc:
                raise RuntimeError(
                    f"Failed to delete existing database at {self.db_path}"
                ) from exc

        max_attempts = 3
        for attempt in range(1, max_attempts + 1):
            try:
                async with aiosqlite.connect(self.db_path) as db:
                    await db.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS {self.table} (
                            item_id TEXT PRIMARY KEY,
                            name TEXT NOT NULL,
                            location TEXT NOT NULL,
                            description TEXT NOT NULL,
                            created_at INTEGER NOT NULL
                        )
                        """
                    )

                    # Older catalogs were created before image URLs were stored.
                    cur = await db.execute(f"PRAGMA table_info({self.table})")
                    cols = await cur.fetchall()
                    col_names = {col[1] for col in cols}
                    if "image_url" not in col_names:
                        await db.execute(f"ALTER TABLE {self.table} ADD COLUMN image_url TEXT")

                    await db.commit()
                break
            except FileNotFoundError:
                # On some platforms a transient missing file error may occur; retry a few times.
                if attempt >= max_attempts:
                    raise
                await asyncio.sleep(0.1 * attempt)

        self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding an `aiosqlite.Connection`.

        The database is created on the first use via `ensure_database()`.
        """
        await self.ensure_database()
        conn = await aiosqlite.connect(self.db_path)
        try:
            yield conn
        finally:
            await conn.close()
