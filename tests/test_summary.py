import pytest

from birthlottery.services.dataset import build_from_tables
from birthlottery.services.distribution import build_distribution
from birthlottery.services.summary import (
    WHITE_FLAG,
    comment_for,
    flag_emoji,
    share_text,
    summarize,
)


@pytest.mark.parametrize("iso2,expected", [
    ("US", "\U0001F1FA\U0001F1F8"),
    ("cn", "\U0001F1E8\U0001F1F3"),
    ("", WHITE_FLAG),
    (None, WHITE_FLAG),
    ("1W", WHITE_FLAG),
    ("USA", WHITE_FLAG),
])
def test_flag_emoji(iso2, expected):
    assert flag_emoji(iso2) == expected


@pytest.mark.parametrize("gdp,starts_with", [
    (85000, "Congratulations!"),
    (45000, "Not bad!"),
    (12000, "A developing economy"),
    (0, "A tough start"),
])
def test_comment_follows_gdp_tiers(gdp, starts_with):
    assert comment_for(gdp, 0.5).startswith(starts_with)


def test_comment_mentions_population_size():
    assert "populous" in comment_for(1000, 18.0)
    assert "small country" in comment_for(1000, 0.001)
    assert "populous" not in comment_for(1000, 0.5)


def test_share_text_and_relative_probability(make_record):
    dist = build_distribution([
        make_record("USA", 3_600_000, iso2="US", gdp=85000, name="United States"),
        make_record("CHN", 9_000_000, iso2="CN", gdp=13000, name="China"),
    ])
    usa = dist.entries[0]

    text = share_text(usa)
    assert "United States" in text
    assert "28.5714%" in text
    assert "$85,000" in text

    summary = summarize(usa, dist)
    assert summary["flag"] == "\U0001F1FA\U0001F1F8"
    assert summary["relativeProbability"] == pytest.approx(40.0, abs=0.01)
    assert summarize(dist.entries[1], dist)["relativeProbability"] == 100.0


def test_stat_bars(raw_tables):
    dist = build_from_tables(raw_tables)
    by_id = {e.id: e for e in dist.entries}

    usa = summarize(by_id["USA"], dist)
    assert usa["gdpPercent"] == pytest.approx(70.83)
    assert usa["birthRatePercent"] == 50.0

    nauru = summarize(by_id["NRU"], dist)
    assert nauru["gdpPercent"] == 0.0
    assert nauru["birthRatePercent"] == 100.0


def test_gdp_bar_is_capped(make_record):
    dist = build_distribution([make_record("LUX", 6_000, iso2="LU", gdp=150_000)])
    assert summarize(dist.entries[0], dist)["gdpPercent"] == 100.0
