"""
Seed a handful of demo items through the same command service the API uses.

This script can be run from either:
- backend/: `uv run python scripts/seed_demo_items.py`
- repo root: `uv run python backend/scripts/seed_demo_items.py`

Items that already exist are left untouched.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.grid import OccupancyCache
from db.database import async_session_maker, create_db_and_tables
from db.repository import SqlItemRepository
from schemas.commands import InsertItemCommand, InsertItemData
from services.storage import StorageService

DEMO_ITEMS = [
    ("AA Battery into a small box with tags aa battery power", 24),
    ("AAA Battery in a little box with tags aaa battery power", 16),
    ("Green motor driver with tags stepper driver electronics into a big box", 3),
    ("Soldering iron tips in a large container with tags solder", 10),
    ("M3 screws with tags screw bolt m3 hardware", 200),
    ("Heat shrink tubing", 1),
]


async def main() -> None:
    await create_db_and_tables()
    occupancy = OccupancyCache()

    async with async_session_maker() as db:
        service = StorageService(SqlItemRepository(db), occupancy)
        for info, quantity in DEMO_ITEMS:
            command = InsertItemCommand(
                command="InsertItem",
                data=InsertItemData(Info=info, Quantity=quantity),
            )
            outcome = await service.execute(command)
            print(f"{info!r}: {outcome.response}")


if __name__ == "__main__":
    asyncio.run(main())
