"""
Delete ALL items + tags from the database. The command log is kept.

Stop the API first: a running server keeps its box occupancy in memory.

Run inside docker (recommended):
  docker exec -i storage-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/reset_storage.py"
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import delete

from db.database import async_session_maker
from db.item import ItemTag, StoredItem


async def main() -> None:
    async with async_session_maker() as db:
        # Delete children first (FK)
        res_tags = await db.execute(delete(ItemTag))
        res_items = await db.execute(delete(StoredItem))
        await db.commit()

        tags_n = int(getattr(res_tags, "rowcount", 0) or 0)
        items_n = int(getattr(res_items, "rowcount", 0) or 0)
        print(f"Deleted tags: {tags_n}, items: {items_n}")


if __name__ == "__main__":
    asyncio.run(main())
