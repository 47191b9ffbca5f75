"""
World Bank API Data Ingestion
Fetches birth rate, population and GDP per capita for all countries, plus
the country metadata list used to tell real countries from aggregates.
Free API, no key required.

Run: python -m birthlottery.ingestion.worldbank [--force]
"""
import argparse
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from birthlottery.core.config import settings
from birthlottery.core.errors import MalformedResponseError, UpstreamFetchError
from birthlottery.services.merger import CountryMetadata, RawIndicatorRecord

logger = logging.getLogger("birthlottery.worldbank")

# World Bank indicator codes
INDICATORS = {
    "birth_rate": "SP.DYN.CBRT.IN",      # Birth rate, crude (per 1,000 people)
    "population": "SP.POP.TOTL",         # Population, total
    "gdp_per_capita": "NY.GDP.PCAP.CD",  # GDP per capita (current US$)
}

COUNTRY_PAGE_SIZE = 400


@dataclass(frozen=True)
class RawTables:
    """Everything the merger needs, exactly as fetched."""
    birth_rate: List[RawIndicatorRecord]
    population: List[RawIndicatorRecord]
    gdp_per_capita: List[RawIndicatorRecord]
    countries: List[CountryMetadata]
    years: Dict[str, int]


def _new_client() -> httpx.Client:
    return httpx.Client(
        timeout=settings.http_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


def parse_envelope(data: Any) -> tuple:
    """
    Split a World Bank reply into (metadata, records).

    The API answers ``[metadata, records]``; ``records`` is null when the
    query matched nothing. Error replies come back as a one-element list
    holding a ``message`` object.
    """
    if not isinstance(data, list) or len(data) < 2:
        detail = ""
        if isinstance(data, list) and data and isinstance(data[0], dict) and "message" in data[0]:
            detail = f": {data[0]['message']}"
        raise MalformedResponseError(f"Invalid API response format{detail}")

    metadata, records = data[0], data[1]
    if records is None:
        records = []
    if not isinstance(metadata, dict) or not isinstance(records, list):
        raise MalformedResponseError("Invalid API response format: expected [metadata, records]")
    return metadata, records


def _get_page(client: httpx.Client, url: str, params: Dict[str, Any]) -> tuple:
    try:
        response = client.get(url, params=params)
    except httpx.HTTPError as e:
        raise UpstreamFetchError(f"Request to {url} failed: {e}", url=url) from e

    if response.status_code != 200:
        raise UpstreamFetchError(
            f"HTTP Error: {response.status_code} from {url}",
            url=url,
            http_status=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise MalformedResponseError(f"Response from {url} is not JSON") from e

    return parse_envelope(data)


def _get_all(client: httpx.Client, url: str, params: Dict[str, Any]) -> List[dict]:
    """Follow World Bank pagination until every page has been read."""
    metadata, records = _get_page(client, url, params)
    records = list(records)

    pages = int(metadata.get("pages") or 1)
    for page in range(2, pages + 1):
        _, more = _get_page(client, url, {**params, "page": page})
        records.extend(more)

    return records


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_year(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def fetch_indicator(indicator_code: str, year: int, client: Optional[httpx.Client] = None) -> List[RawIndicatorRecord]:
    """
    Fetch a single indicator for all countries and aggregates.
    """
    url = f"{settings.world_bank_base_url}/country/all/indicator/{indicator_code}"
    params = {
        "format": "json",
        "date": f"{year}:{year}",
        "per_page": settings.world_bank_per_page,
    }

    if client is None:
        with _new_client() as own_client:
            return fetch_indicator(indicator_code, year, own_client)

    raw = _get_all(client, url, params)
    records = []
    for item in raw:
        if not isinstance(item, dict):
            raise MalformedResponseError(f"Unexpected record in {indicator_code} response")
        iso = item.get("countryiso3code") or ""
        if not iso:
            continue
        records.append(RawIndicatorRecord(
            country_code=iso,
            value=_to_float(item.get("value")),
            year=_to_year(item.get("date"), year),
        ))

    logger.info(f"Fetched {len(records)} records for {indicator_code}/{year}")
    return records


def fetch_country_metadata(client: Optional[httpx.Client] = None) -> List[CountryMetadata]:
    """
    Fetch the World Bank country list (countries and aggregates).
    """
    if client is None:
        with _new_client() as own_client:
            return fetch_country_metadata(own_client)

    url = f"{settings.world_bank_base_url}/country"
    raw = _get_all(client, url, {"format": "json", "per_page": COUNTRY_PAGE_SIZE})

    countries = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        countries.append(CountryMetadata(
            country_code=item["id"],
            display_name=item.get("name") or "",
            iso2_code=item.get("iso2Code") or "",
            region=(item.get("region") or {}).get("value") or "",
            income_level=(item.get("incomeLevel") or {}).get("value") or "",
            capital=item.get("capitalCity") or "",
            longitude=_to_float(item.get("longitude")),
            latitude=_to_float(item.get("latitude")),
        ))

    logger.info(f"Fetched metadata for {len(countries)} countries and aggregates")
    return countries


def fetch_raw_tables(client: Optional[httpx.Client] = None) -> RawTables:
    """
    Fetch all three indicators and the country list. Any failure aborts the
    whole fetch; nothing partial is returned.
    """
    if client is None:
        with _new_client() as own_client:
            return fetch_raw_tables(own_client)

    years = {
        "birthRate": settings.birth_rate_year,
        "population": settings.population_year,
        "gdp": settings.gdp_year,
    }

    logger.info("Fetching birth rate, population and GDP per capita from World Bank...")
    return RawTables(
        birth_rate=fetch_indicator(INDICATORS["birth_rate"], years["birthRate"], client),
        population=fetch_indicator(INDICATORS["population"], years["population"], client),
        gdp_per_capita=fetch_indicator(INDICATORS["gdp_per_capita"], years["gdp"], client),
        countries=fetch_country_metadata(client),
        years=years,
    )


def main(argv: Optional[List[str]] = None) -> int:
    from birthlottery.core.database import SessionLocal
    from birthlottery.ingestion.init_db import init_db
    from birthlottery.services.dataset import load_dataset

    parser = argparse.ArgumentParser(description="Refresh the birth lottery dataset snapshot")
    parser.add_argument("--force", action="store_true",
                        help="Ignore a fresh snapshot and refetch from World Bank")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    init_db()
    db = SessionLocal()
    try:
        payload = load_dataset(db, force=args.force)
    finally:
        db.close()

    logger.info(
        f"Dataset ready: {payload['totalCountries']} countries "
        f"({payload['eligibleCountries']} eligible), {payload['totalBirths']:,} births/year"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
