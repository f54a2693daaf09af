"""Room catalog filtering and sorting, applied in memory to a fetched list"""
from decimal import Decimal
from typing import Dict, List, Optional

from domain.entities import Room
from domain.enums import RoomSortOrder, RoomStatus


def filter_rooms(
    rooms: List[Room],
    status: Optional[RoomStatus] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort_by: RoomSortOrder = RoomSortOrder.FEATURED,
    search: Optional[str] = None,
    limit: Optional[int] = None
) -> List[Room]:
    """Return a new list; the input list is never reordered.

    Price bounds are inclusive. All sorts are stable, so rooms with equal
    keys keep their fetched order.
    """
    filtered = list(rooms)

    if status:
        filtered = [r for r in filtered if r.status == RoomStatus(status)]

    if search:
        term = search.strip().lower()
        filtered = [r for r in filtered if term in r.name.lower()]

    if min_price is not None:
        filtered = [r for r in filtered if r.price >= min_price]
    if max_price is not None:
        filtered = [r for r in filtered if r.price <= max_price]

    sort_by = RoomSortOrder(sort_by)
    if sort_by == RoomSortOrder.PRICE_LOW:
        filtered = sorted(filtered, key=lambda r: r.price)
    elif sort_by == RoomSortOrder.PRICE_HIGH:
        filtered = sorted(filtered, key=lambda r: r.price, reverse=True)
    elif sort_by == RoomSortOrder.RATING:
        filtered = sorted(filtered, key=lambda r: r.rating, reverse=True)

    if limit is not None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        filtered = filtered[:limit]

    return filtered


def count_by_status(rooms: List[Room]) -> Dict[str, int]:
    """Room counts per status for the admin room list"""
    counts = {status.value: 0 for status in RoomStatus}
    for room in rooms:
        counts[room.status.value] += 1
    return counts
