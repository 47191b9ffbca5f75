"""
Shared fixtures: record factories, World Bank style raw tables and an
in-memory SQLite session for the snapshot table.
"""
from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from birthlottery.core.database import Base
from birthlottery.ingestion.worldbank import RawTables
from birthlottery.models.snapshot import DatasetSnapshot  # noqa: F401
from birthlottery.services.distribution import build_distribution
from birthlottery.services.merger import CountryMetadata, MergedCountryRecord, RawIndicatorRecord


def _record(
    id: str,
    births: float,
    iso2: str | None = None,
    region: str = "Test Region",
    gdp: float = 0.0,
    name: str | None = None,
) -> MergedCountryRecord:
    return MergedCountryRecord(
        id=id,
        name=name or id,
        iso2=id[:2] if iso2 is None else iso2,
        region=region,
        income_level="",
        capital="",
        longitude=None,
        latitude=None,
        birth_rate_per_mille=10.0,
        population=births * 100,
        gdp_per_capita=gdp,
        births=births,
        weight=births,
    )


@pytest.fixture
def make_record():
    return _record


@pytest.fixture
def three_country_distribution():
    """Weights 50 / 30 / 20 over AAA, BBB, CCC."""
    return build_distribution([
        _record("AAA", 50, iso2="AA"),
        _record("BBB", 30, iso2="BB"),
        _record("CCC", 20, iso2="CC"),
    ])


def _meta(code, name, iso2, region, income="High income", capital="", lon=None, lat=None):
    return CountryMetadata(
        country_code=code,
        display_name=name,
        iso2_code=iso2,
        region=region,
        income_level=income,
        capital=capital,
        longitude=lon,
        latitude=lat,
    )


@pytest.fixture
def raw_tables() -> RawTables:
    """
    USA, CHN and NRU are real countries (NRU has no GDP figure), WLD is the
    World aggregate with its "1W" pseudo-code, EUU has a null birth rate and
    XKX has no metadata row.
    """
    def ind(code, value, year=2023):
        return RawIndicatorRecord(country_code=code, value=value, year=year)

    return RawTables(
        birth_rate=[ind("USA", 10.0), ind("CHN", 6.0), ind("NRU", 20.0),
                    ind("WLD", 17.0), ind("EUU", None), ind("XKX", 12.0)],
        population=[ind("USA", 360_000_000), ind("CHN", 1_500_000_000), ind("NRU", 12_000),
                    ind("WLD", 8_000_000_000), ind("EUU", 450_000_000), ind("XKX", 1_700_000)],
        gdp_per_capita=[ind("USA", 85000.123, 2024), ind("CHN", 13000.0, 2024),
                        ind("WLD", 13500.0, 2024), ind("NRU", None, 2024)],
        countries=[
            _meta("USA", "United States", "US", "North America", capital="Washington D.C.",
                  lon=-77.032, lat=38.8895),
            _meta("CHN", "China", "CN", "East Asia & Pacific", income="Upper middle income",
                  capital="Beijing", lon=116.286, lat=40.0495),
            _meta("NRU", "Nauru", "NR", "East Asia & Pacific", capital="Yaren District"),
            _meta("WLD", "World", "1W", "Aggregates", income="Aggregates"),
            _meta("EUU", "European Union", "EU", "Aggregates", income="Aggregates"),
        ],
        years={"birthRate": 2023, "population": 2023, "gdp": 2024},
    )


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
