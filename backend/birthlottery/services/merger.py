"""
Indicator Merger
────────────────
Joins the birth-rate, population and GDP-per-capita indicator tables with
the World Bank country metadata into one record per country, carrying the
derived annual birth count used as the sampling weight.

    births = birth_rate_per_mille × population / 1000
    weight = births   (unrounded, never fed back from the display value)
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger("birthlottery.merger")


@dataclass(frozen=True)
class RawIndicatorRecord:
    """One indicator value for one country and year, as fetched."""
    country_code: str          # ISO 3166-1 alpha-3
    value: Optional[float]     # None when upstream has no figure
    year: int


@dataclass(frozen=True)
class CountryMetadata:
    """Country (or aggregate) descriptor from the World Bank country list."""
    country_code: str
    display_name: str
    iso2_code: str             # empty or pseudo-code for aggregates
    region: str
    income_level: str
    capital: str
    longitude: Optional[float] = None
    latitude: Optional[float] = None


@dataclass(frozen=True)
class MergedCountryRecord:
    id: str
    name: str
    iso2: str
    region: str
    income_level: str
    capital: str
    longitude: Optional[float]
    latitude: Optional[float]
    birth_rate_per_mille: float
    population: float
    gdp_per_capita: float
    births: float
    weight: float

    def __post_init__(self):
        for value in (self.births, self.weight, self.population):
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{self.id}: births, weight and population must be finite and non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "iso2": self.iso2,
            "region": self.region,
            "incomeLevel": self.income_level,
            "capital": self.capital,
            "longitude": self.longitude,
            "latitude": self.latitude,
            "birthRate": round(self.birth_rate_per_mille, 2),
            "population": self.population,
            "gdpPerCapita": round(self.gdp_per_capita, 2),
            "births": round(self.births),
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MergedCountryRecord":
        """Rebuild a record from its ``to_dict`` form (e.g. a cached payload)."""
        weight = float(data["weight"])
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            iso2=data.get("iso2") or "",
            region=data.get("region") or "",
            income_level=data.get("incomeLevel") or "",
            capital=data.get("capital") or "",
            longitude=data.get("longitude"),
            latitude=data.get("latitude"),
            birth_rate_per_mille=float(data.get("birthRate") or 0),
            population=float(data.get("population") or 0),
            gdp_per_capita=float(data.get("gdpPerCapita") or 0),
            births=weight,
            weight=weight,
        )


def index_indicator(records: Iterable[RawIndicatorRecord], year: Optional[int] = None) -> Dict[str, float]:
    """
    Index an indicator series by ISO3 code.

    Records without a finite value are dropped, not zero-filled. When
    ``year`` is given, records for other years are ignored.
    """
    index: Dict[str, float] = {}
    for record in records:
        if not record.country_code or record.value is None:
            continue
        if not math.isfinite(record.value):
            continue
        if year is not None and record.year != year:
            continue
        index[record.country_code] = float(record.value)
    return index


def index_metadata(countries: Iterable[CountryMetadata]) -> Dict[str, CountryMetadata]:
    return {c.country_code: c for c in countries if c.country_code}


def merge(
    birth_rate_table: Mapping[str, Optional[float]],
    population_table: Mapping[str, Optional[float]],
    gdp_table: Mapping[str, Optional[float]],
    metadata_table: Mapping[str, CountryMetadata],
) -> List[MergedCountryRecord]:
    """
    Merge the indicator tables into per-country records.

    A country needs a birth rate, a population and a metadata row; GDP per
    capita is best-effort and defaults to 0. Metadata with an empty ISO2 code
    or one longer than two characters is an aggregate and is skipped.
    Result is sorted by births, largest first.
    """
    merged: List[MergedCountryRecord] = []
    skipped = {"population": 0, "metadata": 0, "iso2": 0, "empty": 0}

    for code, birth_rate in birth_rate_table.items():
        if birth_rate is None:
            continue

        population = population_table.get(code)
        if population is None:
            skipped["population"] += 1
            continue

        meta = metadata_table.get(code)
        if meta is None:
            skipped["metadata"] += 1
            continue

        iso2 = meta.iso2_code or ""
        if not iso2 or len(iso2) > 2:
            skipped["iso2"] += 1
            continue

        births = (birth_rate * population) / 1000
        if not math.isfinite(births) or births <= 0 or population <= 0:
            skipped["empty"] += 1
            continue

        gdp = gdp_table.get(code)

        merged.append(MergedCountryRecord(
            id=code,
            name=meta.display_name,
            iso2=iso2,
            region=meta.region,
            income_level=meta.income_level,
            capital=meta.capital,
            longitude=meta.longitude,
            latitude=meta.latitude,
            birth_rate_per_mille=birth_rate,
            population=population,
            gdp_per_capita=gdp if gdp is not None and math.isfinite(gdp) else 0.0,
            births=births,
            weight=births,
        ))

    merged.sort(key=lambda r: (-r.births, r.id))
    logger.info(f"Merged {len(merged)} countries (skipped: {skipped})")
    return merged
