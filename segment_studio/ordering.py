"""Gap-filling order assignment for chapters and parts."""

import logging
from typing import Awaitable, Callable, Iterable

from segment_studio.constants import FIRST_ORDER
from segment_studio.models import OrderedUnit

logger = logging.getLogger(__name__)


def next_order(existing_orders: Iterable[int]) -> int:
    """Return the smallest free position, filling the first gap.

    [] → 1, [1, 2, 3] → 4, [1, 3] → 2. Duplicates and non-positive values
    are ignored so the result never collides with an existing order.
    """
    orders = sorted({o for o in existing_orders if o >= FIRST_ORDER})
    for i, order in enumerate(orders):
        if order != i + FIRST_ORDER:
            return i + FIRST_ORDER
    return len(orders) + FIRST_ORDER


async def propose_order(
    fetch_siblings: Callable[[], Awaitable[list[OrderedUnit]]],
) -> int:
    """Fetch the sibling listing and propose the next order.

    Any failure to list siblings falls back to the first position; the
    server has the final say when the unit is persisted.
    """
    try:
        siblings = await fetch_siblings()
    except Exception as e:
        logger.warning("Could not list siblings for order assignment: %s", e)
        return FIRST_ORDER
    return next_order(unit.order for unit in siblings)
