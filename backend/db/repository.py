from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import CellTaken, DuplicateItem
from core.models import Cell, Item, SizeClass
from .item import ItemTag, StoredItem


class SqlItemRepository:
    """Item/tag persistence on top of an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, name: str) -> Optional[StoredItem]:
        res = await self.db.execute(
            select(StoredItem).where(func.lower(StoredItem.name) == name.strip().lower())
        )
        return res.scalar_one_or_none()

    async def find_item(self, name: str) -> Optional[Item]:
        m = await self._get(name)
        return m.to_domain if m else None

    async def list_items(self) -> List[Item]:
        res = await self.db.execute(select(StoredItem).order_by(func.lower(StoredItem.name).asc()))
        return [m.to_domain for m in res.scalars().all()]

    async def occupied_cells(self) -> List[Cell]:
        res = await self.db.execute(select(StoredItem.row, StoredItem.col))
        return [Cell(row, col) for row, col in res.all()]

    async def add_item(self, item: Item) -> None:
        m = StoredItem(
            name=item.name,
            quantity=item.quantity,
            row=item.location.row,
            col=item.location.col,
            is_small_box=item.size_class is SizeClass.SMALL,
            tags=[ItemTag(tag=tag) for tag in sorted(item.tags)],
        )
        self.db.add(m)
        try:
            await self.db.flush()
        except IntegrityError as e:
            msg = str(e.orig)
            if "ux_items_name_lower" in msg:
                raise DuplicateItem(item.name) from e
            if "ux_items_row_col" in msg or "items.row" in msg:
                raise CellTaken(f"{item.location.row},{item.location.col}") from e
            raise

    async def remove_item(self, name: str) -> Optional[Item]:
        m = await self._get(name)
        if m is None:
            return None
        removed = m.to_domain
        # Tags go with the item (delete-orphan cascade)
        await self.db.delete(m)
        await self.db.flush()
        return removed

    async def add_tags(self, name: str, tags: Iterable[str]) -> int:
        m = await self._get(name)
        if m is None:
            return 0
        existing = {t.tag for t in m.tags}
        new_tags = sorted({t.strip().lower() for t in tags if t.strip()} - existing)
        for tag in new_tags:
            m.tags.append(ItemTag(tag=tag))
        await self.db.flush()
        return len(new_tags)

    async def set_quantity(self, name: str, quantity: int) -> bool:
        m = await self._get(name)
        if m is None:
            return False
        m.quantity = quantity
        await self.db.flush()
        return True

    async def adjust_quantity(self, name: str, delta: int) -> bool:
        m = await self._get(name)
        if m is None:
            return False
        # Never below zero
        m.quantity = max(0, m.quantity + delta)
        await self.db.flush()
        return True

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
