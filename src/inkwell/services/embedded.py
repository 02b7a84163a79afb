"""
Helpers for lists of sub-items embedded in a toolbox record.

Plot points, locations, timeline periods, themes, motifs and symbols are
stored inside their parent record, each with its own ``_id``. Ordered lists
(plot points, timeline) also carry an ``order`` field that mirrors the list
position after any write.
"""

from typing import Any, Dict, List, Tuple

from ..utils.errors import NotFoundError, ValidationError
from ..utils.repository import is_valid_id, new_id, utc_now


def sort_by_order(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return items sorted by ``order`` (items without one go last, stable)."""
    return sorted(items, key=lambda item: (item.get("order") is None, item.get("order") or 0))


def renumber(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Rewrite ``order`` to match list position."""
    for index, item in enumerate(items):
        item["order"] = index
    return items


def stamp_item(data: Dict[str, Any]) -> Dict[str, Any]:
    """Give a new or replaced item an id and timestamps, keeping ones it already has."""
    now = utc_now()
    item = dict(data)
    if not is_valid_id(item.get("_id")):
        item["_id"] = new_id()
    item.setdefault("createdAt", now)
    item["updatedAt"] = now
    for key, value in list(item.items()):
        if isinstance(value, list):
            item[key] = [stamp_nested(v) for v in value]
    return item


def stamp_nested(value: Any) -> Any:
    # Nested objects that carry an _id slot (symbol occurrences, relationships) get one
    if isinstance(value, dict) and "_id" in value and not is_valid_id(value.get("_id")):
        value = dict(value)
        value["_id"] = new_id()
    return value


def normalize_items(items: List[Dict[str, Any]], ordered: bool = False) -> List[Dict[str, Any]]:
    """
    Prepare a client-supplied replacement list for storage.

    For ordered lists the client's list position is authoritative, which is
    how drag-and-drop reordering arrives from the editor.
    """
    stamped = [stamp_item(item) for item in items]
    return renumber(stamped) if ordered else stamped


def _clamp_position(position: Any, length: int) -> int:
    if not isinstance(position, int) or position > length:
        return length
    return max(position, 0)


def find_item(items: List[Dict[str, Any]], item_id: str, label: str) -> Tuple[int, Dict[str, Any]]:
    """
    Locate an item by id.

    Raises:
        NotFoundError: If no item has that id
    """
    for index, item in enumerate(items):
        if item.get("_id") == item_id:
            return index, item
    raise NotFoundError(label, item_id)


def add_item(items: List[Dict[str, Any]], data: Dict[str, Any], ordered: bool = False) -> Dict[str, Any]:
    """Append a new item; ordered items go to the end unless an order is given."""
    item = stamp_item({k: v for k, v in data.items() if k != "_id"})
    item["_id"] = new_id()
    if ordered:
        items.insert(_clamp_position(item.get("order"), len(items)), item)
        renumber(items)
    else:
        items.append(item)
    return item


def update_item(
    items: List[Dict[str, Any]],
    item_id: str,
    updates: Dict[str, Any],
    label: str,
    ordered: bool = False
) -> Dict[str, Any]:
    """Merge updates into an existing item."""
    index, item = find_item(items, item_id, label)
    merged = dict(item)
    merged.update({k: v for k, v in updates.items() if k not in ("_id", "createdAt")})
    merged["updatedAt"] = utc_now()
    for key, value in list(merged.items()):
        if isinstance(value, list):
            merged[key] = [stamp_nested(v) for v in value]
    items[index] = merged
    if ordered and updates.get("order") is not None:
        del items[index]
        items.insert(_clamp_position(updates["order"], len(items)), merged)
        renumber(items)
    return merged


def remove_item(items: List[Dict[str, Any]], item_id: str, label: str, ordered: bool = False) -> Dict[str, Any]:
    """Remove an item and return it."""
    index, item = find_item(items, item_id, label)
    del items[index]
    if ordered:
        renumber(items)
    return item


def reorder_items(items: List[Dict[str, Any]], ordered_ids: List[str], label: str) -> List[Dict[str, Any]]:
    """
    Reorder items to match a full list of their ids.

    Raises:
        ValidationError: If the ids are not exactly the current item ids
    """
    current_ids = [item.get("_id") for item in items]
    if sorted(current_ids) != sorted(ordered_ids) or len(set(ordered_ids)) != len(ordered_ids):
        raise ValidationError(
            f"Order must list every {label.lower()} exactly once",
            details={"expected": current_ids, "received": ordered_ids}
        )
    by_id = {item["_id"]: item for item in items}
    items[:] = renumber([by_id[item_id] for item_id in ordered_ids])
    return items
