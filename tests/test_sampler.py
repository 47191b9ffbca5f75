"""Tests for the weighted sampler."""
import dataclasses
from collections import Counter

import pytest

from birthlottery.core.errors import EmptyDistributionError, UnknownCountryError
from birthlottery.services.distribution import Distribution, build_distribution
from birthlottery.services.sampler import (
    DrawResult,
    draw_many,
    draw_one,
    lookup,
    random_source,
)


def fixed(*values):
    """Random source replaying ``values`` in order."""
    return iter(values).__next__


@pytest.mark.parametrize("r,expected", [
    (0.0, "AAA"),
    (0.25, "AAA"),
    (0.5, "AAA"),          # remainder hits exactly 0 on the first entry
    (0.5000001, "BBB"),
    (0.79, "BBB"),
    (0.81, "CCC"),
    (0.9999999, "CCC"),
])
def test_inverse_cdf_walk(three_country_distribution, r, expected):
    assert draw_one(three_country_distribution, fixed(r)).id == expected


def test_float_drift_falls_back_to_last_eligible(three_country_distribution):
    # total weight larger than the sum of the entries: the walk ends with
    # a positive remainder
    drifted = dataclasses.replace(
        three_country_distribution,
        total_weight=three_country_distribution.total_weight * 2,
    )
    assert draw_one(drifted, fixed(0.99)).id == "CCC"


def test_empty_distribution_raises():
    with pytest.raises(EmptyDistributionError):
        draw_one(Distribution(entries=(), eligible=(), total_weight=0.0))


def test_observed_frequencies_match_weights(three_country_distribution):
    n = 100_000
    rand = random_source(12345)
    counts = Counter(draw_one(three_country_distribution, rand).id for _ in range(n))

    for code, expected in (("AAA", 0.50), ("BBB", 0.30), ("CCC", 0.20)):
        assert counts[code] / n == pytest.approx(expected, abs=0.01)


def test_excluded_entries_are_never_drawn(make_record):
    dist = build_distribution([
        make_record("WLD", 1_000_000, iso2="1W", region="Aggregates"),
        make_record("AAA", 1, iso2="AA"),
        make_record("BBB", 1, iso2="BB"),
    ])
    rand = random_source(3)
    for _ in range(500):
        assert draw_one(dist, rand).eligible


def test_ten_draw_ranks(three_country_distribution):
    results = draw_many(three_country_distribution, 10, random_source(1))

    assert len(results) == 10
    assert [r.rank for r in results] == list(range(1, 11))
    assert all(isinstance(r, DrawResult) for r in results)
    assert all(r.entry in three_country_distribution.eligible for r in results)


def test_batch_draws_repeat(make_record):
    dist = build_distribution([make_record("AAA", 5, iso2="AA")])
    results = draw_many(dist, 10)
    assert {r.entry.id for r in results} == {"AAA"}


def test_batch_consumes_one_sample_per_draw(three_country_distribution):
    results = draw_many(three_country_distribution, 3, fixed(0.9, 0.1, 0.6))
    assert [r.entry.id for r in results] == ["CCC", "AAA", "BBB"]


def test_draw_result_dict_carries_rank(three_country_distribution):
    data = draw_many(three_country_distribution, 1, fixed(0.1))[0].to_dict()
    assert data["rank"] == 1
    assert data["id"] == "AAA"
    assert data["probability"] == 50.0


@pytest.mark.parametrize("count", [0, -3])
def test_batch_count_must_be_positive(three_country_distribution, count):
    with pytest.raises(ValueError):
        draw_many(three_country_distribution, count)


def test_same_seed_same_draws(three_country_distribution):
    first = [r.entry.id for r in draw_many(three_country_distribution, 10, random_source(42))]
    second = [r.entry.id for r in draw_many(three_country_distribution, 10, random_source(42))]
    assert first == second


@pytest.mark.parametrize("code", ["AAA", "aaa", "AA", " aa "])
def test_lookup_by_iso3_or_iso2(three_country_distribution, code):
    assert lookup(three_country_distribution, code).id == "AAA"


def test_lookup_unknown_raises(three_country_distribution):
    with pytest.raises(UnknownCountryError) as exc_info:
        lookup(three_country_distribution, "ZZZ")
    assert exc_info.value.code == "ZZZ"


def test_float_drift_fallback_skips_zero_weight_tail(make_record):
    dist = build_distribution([
        make_record("AAA", 50, iso2="AA"),
        make_record("BBB", 30, iso2="BB"),
        make_record("ZZZ", 0, iso2="ZZ"),
    ])
    drifted = dataclasses.replace(dist, total_weight=dist.total_weight * 2)
    assert draw_one(drifted, fixed(0.99)).id == "BBB"
