"""
Distribution Builder
────────────────────
Turns merged country records into the probability distribution the sampler
draws from. Eligibility is decided by ``is_eligible`` alone; the total weight
and every probability are computed over exactly the entries the sampler may
return.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from birthlottery.core.errors import EmptyDistributionError
from birthlottery.services.merger import MergedCountryRecord

logger = logging.getLogger("birthlottery.distribution")

AGGREGATES_REGION = "Aggregates"
PROBABILITY_DIGITS = 6

_ISO2_PATTERN = re.compile(r"[A-Z]{2}")


def is_eligible(record: MergedCountryRecord) -> bool:
    """Real-country predicate: not an aggregate, and a proper ISO2 code."""
    return record.region != AGGREGATES_REGION and bool(_ISO2_PATTERN.fullmatch(record.iso2 or ""))


@dataclass(frozen=True)
class DistributionEntry:
    record: MergedCountryRecord
    probability: float          # percent, 0 for excluded entries
    eligible: bool

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def iso2(self) -> str:
        return self.record.iso2

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def weight(self) -> float:
        return self.record.weight

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["probability"] = self.probability
        data["eligible"] = self.eligible
        return data


@dataclass(frozen=True)
class Distribution:
    entries: Tuple[DistributionEntry, ...]    # every record, input order
    eligible: Tuple[DistributionEntry, ...]   # selectable subset, same order
    total_weight: float

    @property
    def total_countries(self) -> int:
        return len(self.entries)

    @property
    def excluded_count(self) -> int:
        return len(self.entries) - len(self.eligible)

    @property
    def max_probability(self) -> float:
        return max((e.probability for e in self.eligible), default=0.0)


def build_distribution(records: Iterable[MergedCountryRecord]) -> Distribution:
    """
    Assign each eligible record ``probability = weight / total_weight × 100``
    rounded to 6 digits. Excluded records stay in ``entries`` with probability
    0 so they can still be displayed. A record that passes ``is_eligible``
    but carries no weight is excluded as well.

    Raises EmptyDistributionError when no eligible record carries weight or
    the total weight is not finite.
    """
    records = list(records)
    flags = [is_eligible(r) and r.weight > 0 for r in records]
    try:
        total_weight = math.fsum(r.weight for r, ok in zip(records, flags) if ok)
    except OverflowError:
        total_weight = math.inf

    if not math.isfinite(total_weight):
        raise EmptyDistributionError(
            f"Total weight over {len(records)} records is not finite"
        )
    if total_weight <= 0:
        raise EmptyDistributionError(
            f"No eligible countries with positive weight among {len(records)} records"
        )

    entries = tuple(
        DistributionEntry(
            record=r,
            probability=round(r.weight / total_weight * 100, PROBABILITY_DIGITS) if ok else 0.0,
            eligible=ok,
        )
        for r, ok in zip(records, flags)
    )
    eligible = tuple(e for e in entries if e.eligible)

    logger.info(
        f"Distribution built: {len(eligible)} eligible, "
        f"{len(entries) - len(eligible)} excluded, total weight {total_weight:,.0f}"
    )
    return Distribution(entries=entries, eligible=eligible, total_weight=total_weight)
