"""Shape economy: counting and spending the shapes in a player's shape zone."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .state import empty_used_shapes
from .types import WILDCARD_SHAPE, CreatureCard, Shape, ShapeCard


def count_shapes(zone: Sequence[ShapeCard]) -> dict[Shape, int]:
    counts = empty_used_shapes()
    for s in zone:
        counts[s.shape] += 1
    return counts


def available_count(zone: Sequence[ShapeCard], shape: Shape, used: Mapping[Shape, int]) -> int:
    """Unspent shapes that can pay for `shape`, wildcards included.

    A wildcard cost can only be paid from the wildcard pool itself.
    """
    counts = count_shapes(zone)
    specific_left = max(0, counts[shape] - used.get(shape, 0))
    if shape == WILDCARD_SHAPE:
        return specific_left
    wild_left = max(0, counts[WILDCARD_SHAPE] - used.get(WILDCARD_SHAPE, 0))
    return specific_left + wild_left


def can_afford(creature: CreatureCard, zone: Sequence[ShapeCard], used: Mapping[Shape, int]) -> bool:
    return available_count(zone, creature.shape, used) >= creature.cost


def spend_shapes(
    zone: Sequence[ShapeCard],
    used: Mapping[Shape, int],
    shape: Shape,
    cost: int,
) -> dict[Shape, int]:
    """Return a new usage map after paying `cost` of `shape`.

    The specific pool is drained first, the wildcard pool covers the rest.
    Callers check `can_afford` beforehand; anything left unpaid is dropped.
    """
    updated: dict[Shape, int] = {**empty_used_shapes(), **used}
    counts = count_shapes(zone)
    remaining = cost

    specific_available = max(0, counts[shape] - updated[shape])
    from_specific = min(remaining, specific_available)
    updated[shape] += from_specific
    remaining -= from_specific

    if remaining > 0 and shape != WILDCARD_SHAPE:
        wild_available = max(0, counts[WILDCARD_SHAPE] - updated[WILDCARD_SHAPE])
        updated[WILDCARD_SHAPE] += min(remaining, wild_available)

    return updated
