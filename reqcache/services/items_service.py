from __future__ import annotations

import itertools
import json
import logging
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Item:
    id: int
    name: str
    description: str | None = None


# Source of truth for the demo resource; the cache only ever mirrors it
_ITEMS: dict[int, Item] = {}

# Never reused, even after a delete
_ids = itertools.count(1)


class ItemValidationError(ValueError):
    pass


def get_item(item_id: int) -> Item | None:
    return _ITEMS.get(item_id)


def create_item(name: str, description: str | None = None) -> Item:
    name = name.strip()
    if not name:
        logger.warning("Rejected blank item name")
        raise ItemValidationError("name must be non-empty")

    item = Item(id=next(_ids), name=name, description=description)
    _ITEMS[item.id] = item
    logger.info("Created item id=%d name=%s", item.id, item.name)
    return item


def delete_item(item_id: int) -> bool:
    item = _ITEMS.pop(item_id, None)
    if item is None:
        return False
    logger.info("Deleted item id=%d", item_id)
    return True


def serialize_item(item: Item) -> str:
    """The JSON string stored in the cache and returned as ``data``."""
    return json.dumps(asdict(item), separators=(",", ":"))
