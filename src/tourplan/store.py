"""
In-memory itinerary store with ordered items, and the optimize-and-persist flow.
"""

import datetime
import logging
import uuid
from typing import Any, Dict, List, Optional

from tourplan.solver import NEAREST_NEIGHBOR, optimize_route

logger = logging.getLogger(__name__)


class ItineraryNotFoundError(ValueError):
    def __init__(self, itinerary_id: str):
        super().__init__(f"Itinerary not found: {itinerary_id!r}")
        self.itinerary_id = itinerary_id


class ItineraryExistsError(ValueError):
    def __init__(self, itinerary_id: str):
        super().__init__(f"Itinerary already exists: {itinerary_id!r}")
        self.itinerary_id = itinerary_id


class ItemMismatchError(ValueError):
    """Raised when a reorder list does not match the itinerary's items exactly."""

    def __init__(self, itinerary_id: str, missing: List[str], unexpected: List[str]):
        parts = []
        if missing:
            parts.append(f"missing {missing}")
        if unexpected:
            parts.append(f"unexpected {unexpected}")
        if not parts:
            parts.append("duplicate ids")
        super().__init__(f"Item ids do not match itinerary {itinerary_id!r}: " + ", ".join(parts))
        self.itinerary_id = itinerary_id
        self.missing = missing
        self.unexpected = unexpected


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class ItineraryStore:
    """
    Itineraries keyed by id, each holding items with an integer "order".
    """

    def __init__(self) -> None:
        self._itineraries: Dict[str, Dict[str, Any]] = {}

    def create_itinerary(
        self,
        name: str,
        itinerary_id: Optional[str] = None,
        items: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Create an itinerary, optionally with initial items in the given order.

        Items are checked before anything is stored, so a rejected call
        leaves the store untouched.
        """
        itinerary_id = itinerary_id or uuid.uuid4().hex
        if itinerary_id in self._itineraries:
            raise ItineraryExistsError(itinerary_id)
        items = items or []
        seen: set[str] = set()
        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValueError(f"Item at position {position} is not an object")
            item_id = item.get("id")
            if item_id is None:
                raise ValueError(f"Item at position {position} has no id")
            if item_id in seen:
                raise ValueError(f"Item {item_id!r} listed twice")
            seen.add(item_id)

        now = _now()
        self._itineraries[itinerary_id] = {
            "id": itinerary_id,
            "name": name,
            "items": {},
            "created_at": now,
            "updated_at": now,
        }
        for item in items:
            self.add_item(itinerary_id, item)
        return self.get_itinerary(itinerary_id)

    def _get(self, itinerary_id: str) -> Dict[str, Any]:
        try:
            return self._itineraries[itinerary_id]
        except KeyError:
            raise ItineraryNotFoundError(itinerary_id) from None

    def add_item(self, itinerary_id: str, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append an item (must carry "id") at the end of the itinerary.
        """
        itinerary = self._get(itinerary_id)
        item_id = item.get("id")
        if item_id is None:
            raise ValueError("Item has no id")
        if item_id in itinerary["items"]:
            raise ValueError(f"Item {item_id!r} already in itinerary {itinerary_id!r}")
        stored = {**item, "order": len(itinerary["items"]), "added_at": _now()}
        itinerary["items"][item_id] = stored
        itinerary["updated_at"] = _now()
        return dict(stored)

    def get_items(self, itinerary_id: str) -> List[Dict[str, Any]]:
        itinerary = self._get(itinerary_id)
        items = sorted(itinerary["items"].values(), key=lambda it: it["order"])
        return [dict(it) for it in items]

    def get_itinerary(self, itinerary_id: str) -> Dict[str, Any]:
        itinerary = self._get(itinerary_id)
        return {
            "id": itinerary["id"],
            "name": itinerary["name"],
            "items": self.get_items(itinerary_id),
            "created_at": itinerary["created_at"],
            "updated_at": itinerary["updated_at"],
        }

    def reorder_items(self, itinerary_id: str, item_ids: List[str]) -> None:
        """
        Persist a new order: item_ids[i] gets order i.

        item_ids must be exactly the itinerary's current items, each once.
        """
        itinerary = self._get(itinerary_id)
        current = set(itinerary["items"])
        requested = set(item_ids)
        if requested != current or len(item_ids) != len(requested):
            raise ItemMismatchError(
                itinerary_id,
                missing=sorted(current - requested),
                unexpected=sorted(requested - current),
            )
        for position, item_id in enumerate(item_ids):
            itinerary["items"][item_id]["order"] = position
        itinerary["updated_at"] = _now()
        logger.info("Reordered %d items in itinerary %s", len(item_ids), itinerary_id)


def optimize_itinerary(
    store: ItineraryStore,
    itinerary_id: str,
    strategy: str = NEAREST_NEIGHBOR,
    max_solve_seconds: int = 5,
) -> Dict[str, Any]:
    """
    Optimize an itinerary's current items and persist the resulting order.
    """
    items = store.get_items(itinerary_id)
    result = optimize_route(items, strategy=strategy, max_solve_seconds=max_solve_seconds)
    store.reorder_items(itinerary_id, result["ordered_ids"])
    return {**result, "itinerary_id": itinerary_id}
