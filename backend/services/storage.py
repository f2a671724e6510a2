"""
Storage command service.

Runs one decoded command against an item repository and the occupancy cache.
Each call returns a CommandOutcome; logging and the audit trail are left to
the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from core import converters
from core.errors import CellTaken, DuplicateItem
from core.grid import OccupancyCache
from core.models import Cell, Item
from core.parser import parse_command
from core.ranking import match_by_name, rank_by_tags, split_query
from schemas.commands import (
    AddTagsData,
    InsertItemData,
    SetQuantityData,
    StorageCommand,
    UpdateQuantityData,
    command_data_text,
)


class ItemRepository(Protocol):
    async def find_item(self, name: str) -> Optional[Item]:
        ...

    async def list_items(self) -> List[Item]:
        ...

    async def occupied_cells(self) -> List[Cell]:
        ...

    async def add_item(self, item: Item) -> None:
        ...

    async def remove_item(self, name: str) -> Optional[Item]:
        ...

    async def add_tags(self, name: str, tags: Iterable[str]) -> int:
        ...

    async def set_quantity(self, name: str, quantity: int) -> bool:
        ...

    async def adjust_quantity(self, name: str, delta: int) -> bool:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


@dataclass(frozen=True)
class CommandOutcome:
    command: str
    data_in: str
    response: Dict[str, Any]
    succeeded: bool


Handler = Callable[[Any], Awaitable[Tuple[Dict[str, Any], bool]]]


class StorageService:
    def __init__(self, repository: ItemRepository, occupancy: OccupancyCache):
        self.repository = repository
        self.occupancy = occupancy
        self._handlers: Dict[str, Handler] = {
            converters.FIND_ITEM: self.find_item,
            converters.FIND_TAGS: self.find_tags,
            converters.INSERT_ITEM: self.insert_item,
            converters.REMOVE_ITEM: self.remove_item,
            converters.ADD_TAGS: self.add_tags,
            converters.UPDATE_QUANTITY: self.update_quantity,
            converters.SET_QUANTITY: self.set_quantity,
        }

    async def execute(self, command: StorageCommand) -> CommandOutcome:
        handler = self._handlers[command.command]
        response, succeeded = await handler(command.data)
        return CommandOutcome(
            command=command.command,
            data_in=command_data_text(command),
            response=response,
            succeeded=succeeded,
        )

    async def find_item(self, name: str) -> Tuple[Dict[str, Any], bool]:
        items = match_by_name(name, await self.repository.list_items())
        return converters.find_item_response(items), True

    async def find_tags(self, words: str) -> Tuple[Dict[str, Any], bool]:
        matches = rank_by_tags(split_query(words), await self.repository.list_items())
        return converters.find_tags_response(matches), True

    async def insert_item(self, data: InsertItemData) -> Tuple[Dict[str, Any], bool]:
        """
        1. Parse the info string into name, box size and tags.
        2. If the item already exists, answer with its current box.
        3. Reserve the first free box of the requested size.
        4. Store the item with its tags. A name taken by a concurrent insert
           frees the box and answers like step 2; a box already holding an
           item means the cache is stale, so it is dropped and reloaded on
           the next insert.
        """
        parsed = parse_command(data.info)
        if not parsed.item_name:
            return converters.insert_failed_response("Item name is required"), False

        existing = await self.repository.find_item(parsed.item_name)
        if existing is not None:
            return converters.find_item_response([existing]), False

        if not self.occupancy.loaded:
            self.occupancy.load(await self.repository.occupied_cells())

        size_class = parsed.resolved_size_class
        cell = self.occupancy.allocate(size_class)
        if cell is None:
            return converters.insert_failed_response(converters.no_boxes_left_message(size_class)), False

        item = Item(
            name=parsed.item_name,
            quantity=data.quantity,
            location=cell,
            size_class=size_class,
            tags=parsed.tags,
        )
        try:
            await self.repository.add_item(item)
            await self.repository.commit()
        except DuplicateItem:
            self.occupancy.release(cell)
            await self.repository.rollback()
            existing = await self.repository.find_item(parsed.item_name)
            return converters.find_item_response([existing] if existing else []), False
        except CellTaken:
            self.occupancy.invalidate()
            await self.repository.rollback()
            raise
        except Exception:
            self.occupancy.release(cell)
            await self.repository.rollback()
            raise

        return converters.insert_succeeded_response(cell), True

    async def remove_item(self, name: str) -> Tuple[Dict[str, Any], bool]:
        removed = await self.repository.remove_item(name)
        await self.repository.commit()
        if removed is None:
            return converters.remove_item_response(0), False
        self.occupancy.release(removed.location)
        return converters.remove_item_response(1), True

    async def add_tags(self, data: AddTagsData) -> Tuple[Dict[str, Any], bool]:
        item = await self.repository.find_item(data.item)
        if item is None:
            return converters.add_tags_missing_item_response(), False

        added = await self.repository.add_tags(item.name, split_query(data.tags))
        await self.repository.commit()
        return converters.add_tags_response(added), added > 0

    async def update_quantity(self, data: UpdateQuantityData) -> Tuple[Dict[str, Any], bool]:
        delta = data.quantity if data.add else -data.quantity
        updated = await self.repository.adjust_quantity(data.item, delta)
        await self.repository.commit()
        return await self._current_item(data.item), updated

    async def set_quantity(self, data: SetQuantityData) -> Tuple[Dict[str, Any], bool]:
        updated = await self.repository.set_quantity(data.item, data.quantity)
        await self.repository.commit()
        return await self._current_item(data.item), updated

    async def _current_item(self, name: str) -> Dict[str, Any]:
        # Answer with the item so the display can light its box
        item = await self.repository.find_item(name)
        return converters.find_item_response([item] if item else [])
