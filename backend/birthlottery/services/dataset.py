"""
Dataset service: World Bank tables → merged records → distribution → the
JSON payload served to clients, with the cache gate in front.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from birthlottery.core.config import settings
from birthlottery.core.errors import MalformedResponseError
from birthlottery.ingestion.worldbank import RawTables, fetch_raw_tables
from birthlottery.services import cache_gate
from birthlottery.services.distribution import Distribution, build_distribution
from birthlottery.services.merger import MergedCountryRecord, index_indicator, index_metadata, merge

logger = logging.getLogger("birthlottery.dataset")


def build_from_tables(tables: RawTables) -> Distribution:
    records = merge(
        index_indicator(tables.birth_rate),
        index_indicator(tables.population),
        index_indicator(tables.gdp_per_capita),
        index_metadata(tables.countries),
    )
    return build_distribution(records)


def render_payload(
    distribution: Distribution,
    data_year: Optional[Dict[str, int]] = None,
    timestamp: Optional[int] = None,
) -> dict:
    return {
        "success": True,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
        "dataYear": data_year or {},
        "totalCountries": distribution.total_countries,
        "eligibleCountries": len(distribution.eligible),
        "excludedCountries": distribution.excluded_count,
        "totalBirths": round(distribution.total_weight),
        "countries": [e.to_dict() for e in distribution.entries],
    }


def failure_payload(error: Exception) -> dict:
    return {"success": False, "error": str(error)}


def build_payload(tables: RawTables) -> dict:
    return render_payload(build_from_tables(tables), data_year=dict(tables.years))


def distribution_from_payload(payload: dict) -> Distribution:
    """Rebuild the distribution from a stored payload's ``countries`` rows."""
    if not payload.get("success"):
        raise MalformedResponseError(payload.get("error") or "Dataset payload is a failure result")
    try:
        records = [MergedCountryRecord.from_dict(row) for row in payload["countries"]]
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedResponseError(f"Stored dataset payload is corrupt: {e}") from e
    return build_distribution(records)


def load_dataset(
    db: Session,
    force: bool = False,
    fetcher: Optional[Callable[[], RawTables]] = None,
    ttl_seconds: Optional[int] = None,
) -> dict:
    """
    Current dataset payload. Served from the snapshot while it is fresh;
    otherwise fetched, merged and distributed again, then stored.
    """
    fetcher = fetcher or fetch_raw_tables
    ttl = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
    payload, cached = cache_gate.resolve(
        db,
        rebuild=lambda: build_payload(fetcher()),
        ttl_seconds=ttl,
        force=force,
    )
    if not cached:
        logger.info(
            f"Dataset rebuilt: {payload['eligibleCountries']} eligible countries, "
            f"{payload['totalBirths']:,} births/year"
        )
    return payload
