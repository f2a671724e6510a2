from typing import Dict, Iterable, List

from core.models import Cell, Item, RankedMatch, SizeClass

FIND_ITEM = "FindItem"
FIND_TAGS = "FindTags"
INSERT_ITEM = "InsertItem"
REMOVE_ITEM = "RemoveItem"
ADD_TAGS = "AddTags"
UPDATE_QUANTITY = "UpdateQuantity"
SET_QUANTITY = "SetQuantity"


def item_to_schema(item: Item) -> Dict:
    """Convert a stored item to the response dict shape"""
    return {
        "Name": item.name,
        "Quantity": item.quantity,
        "Row": item.location.row,
        "Col": item.location.col,
    }


def find_item_response(items: Iterable[Item]) -> Dict:
    result = [item_to_schema(item) for item in items]
    return {"Command": FIND_ITEM, "Count": len(result), "Result": result}


def find_tags_response(matches: Iterable[RankedMatch]) -> Dict:
    # Compact rows: [row, col, confidence]
    result: List[list] = [
        [m.item.location.row, m.item.location.col, round(m.confidence, 2)]
        for m in matches
    ]
    return {"Command": FIND_TAGS, "Count": len(result), "Result": result}


def insert_succeeded_response(cell: Cell) -> Dict:
    return {"Command": INSERT_ITEM, "InsertSucceeded": True, "Row": cell.row, "Col": cell.col}


def insert_failed_response(message: str) -> Dict:
    return {"Command": INSERT_ITEM, "InsertSucceeded": False, "Message": message}


def no_boxes_left_message(size_class: SizeClass) -> str:
    return f"No {size_class.value} boxes left!"


def remove_item_response(removed: int) -> Dict:
    return {"Command": REMOVE_ITEM, "Success": removed > 0, "Quantity": removed}


def add_tags_response(added: int) -> Dict:
    return {"Command": ADD_TAGS, "Success": added > 0, "Count": added}


def add_tags_missing_item_response() -> Dict:
    return {"Command": ADD_TAGS, "Success": False, "Message": "Item does not exist, cannot add tags"}
