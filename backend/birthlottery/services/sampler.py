"""
Weighted Sampler
────────────────
Inverse-CDF draws over a Distribution. Draws are independent and with
replacement; the random source is injectable so tests and seeded requests
are reproducible.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from birthlottery.core.errors import EmptyDistributionError, UnknownCountryError
from birthlottery.services.distribution import Distribution, DistributionEntry

# Zero-argument callable returning a uniform float in [0, 1)
RandomSource = Callable[[], float]

TEN_DRAW = 10


@dataclass(frozen=True)
class DrawResult:
    entry: DistributionEntry
    rank: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.entry.to_dict()
        if self.rank is not None:
            data["rank"] = self.rank
        return data


def random_source(seed: Optional[int] = None) -> RandomSource:
    """Seeded source when ``seed`` is given, the module generator otherwise."""
    if seed is None:
        return random.random
    return random.Random(seed).random


def draw_one(distribution: Distribution, rand: Optional[RandomSource] = None) -> DistributionEntry:
    """
    Pick one eligible entry with probability weight / total_weight.

    Walks the eligible entries in their fixed order, subtracting each weight
    from r ∈ [0, total_weight). If float drift leaves r positive after the
    last entry, the last entry is returned.
    """
    eligible = distribution.eligible
    if not eligible:
        raise EmptyDistributionError("No eligible countries to draw from")

    rand = rand or random.random
    remaining = rand() * distribution.total_weight

    for entry in eligible:
        remaining -= entry.weight
        if remaining <= 0:
            return entry

    return eligible[-1]


def draw_many(
    distribution: Distribution,
    count: int = TEN_DRAW,
    rand: Optional[RandomSource] = None,
) -> List[DrawResult]:
    """``count`` independent draws, ranked 1..count in draw order."""
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    rand = rand or random.random
    return [DrawResult(entry=draw_one(distribution, rand), rank=i + 1) for i in range(count)]


def lookup(distribution: Distribution, code: str) -> DistributionEntry:
    """Find an entry by ISO3 or ISO2 code, case-insensitive."""
    needle = (code or "").strip().upper()
    for entry in distribution.entries:
        if needle and needle in (entry.id.upper(), entry.iso2.upper()):
            return entry
    raise UnknownCountryError(code)
