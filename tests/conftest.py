"""
Pytest Configuration and Fixtures

Shared fixtures for all tests. The database URL is pinned to an in-memory
SQLite database before any application module reads its settings.
"""

import asyncio
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["COMMAND_LOG_ENABLED"] = "true"

import dataclasses
from typing import Dict, Iterable, List, Optional

import pytest

from core.errors import CellTaken, DuplicateItem
from core.grid import OccupancyCache
from core.models import Cell, Item, SizeClass
from services.storage import StorageService


class InMemoryItemRepository:
    """Dict-backed stand-in for the SQL repository."""

    def __init__(self, items: Iterable[Item] = ()):
        self.items: Dict[str, Item] = {item.key: item for item in items}
        self.commits = 0
        self.rollbacks = 0
        self.fail_next_add = False

    async def find_item(self, name: str) -> Optional[Item]:
        item = self.items.get(name.strip().lower())
        # Yield like a real query would, so concurrent commands interleave
        await asyncio.sleep(0)
        return item

    async def list_items(self) -> List[Item]:
        return sorted(self.items.values(), key=lambda i: i.key)

    async def occupied_cells(self) -> List[Cell]:
        return [item.location for item in self.items.values()]

    async def add_item(self, item: Item) -> None:
        if self.fail_next_add:
            self.fail_next_add = False
            raise RuntimeError("storage unavailable")
        if item.key in self.items:
            raise DuplicateItem(item.name)
        if any(other.location == item.location for other in self.items.values()):
            raise CellTaken(f"{item.location.row},{item.location.col}")
        self.items[item.key] = item

    async def remove_item(self, name: str) -> Optional[Item]:
        return self.items.pop(name.strip().lower(), None)

    async def add_tags(self, name: str, tags: Iterable[str]) -> int:
        item = self.items[name.strip().lower()]
        new_tags = {t.lower() for t in tags} - item.tags
        self.items[item.key] = dataclasses.replace(item, tags=item.tags | new_tags)
        return len(new_tags)

    async def set_quantity(self, name: str, quantity: int) -> bool:
        item = self.items.get(name.strip().lower())
        if item is None:
            return False
        self.items[item.key] = dataclasses.replace(item, quantity=quantity)
        return True

    async def adjust_quantity(self, name: str, delta: int) -> bool:
        item = self.items.get(name.strip().lower())
        if item is None:
            return False
        self.items[item.key] = dataclasses.replace(item, quantity=max(0, item.quantity + delta))
        return True

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


def make_item(name: str, row: int = 0, col: int = 0, tags=None, quantity: int = 1) -> Item:
    size_class = SizeClass.SMALL if row < 8 else SizeClass.LARGE
    if tags is None:
        tags = name.lower().split()
    return Item(
        name=name,
        quantity=quantity,
        location=Cell(row, col),
        size_class=size_class,
        tags=frozenset(tags),
    )


@pytest.fixture
def repository() -> InMemoryItemRepository:
    return InMemoryItemRepository()


@pytest.fixture
def occupancy() -> OccupancyCache:
    return OccupancyCache()


@pytest.fixture
def service(repository, occupancy) -> StorageService:
    return StorageService(repository, occupancy)


@pytest.fixture
def item_factory():
    return make_item
