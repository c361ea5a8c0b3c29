import pytest

from task_mining_engine import stats


def test_median_odd_and_even():
    assert stats.median([30, 10, 20]) == 20
    assert stats.median([10, 20, 30, 40]) == 25
    assert stats.median([]) == 0.0


def test_variability_ratio_zero_durations():
    assert stats.variability_ratio([0, 0, 0]) == 0.0
    assert stats.variability_ratio([]) == 0.0


def test_variability_ratio_scale_invariant():
    base = [60, 120, 180]
    scaled = [value * 7.5 for value in base]
    assert stats.variability_ratio(scaled) == pytest.approx(stats.variability_ratio(base))


def test_variability_ratio_example():
    assert round(stats.population_std([60, 120, 180]), 2) == 48.99
    assert round(stats.variability_ratio([60, 120, 180]), 2) == 0.41


def test_unit_conversion_rounds_to_two_decimals():
    assert stats.to_minutes(60) == 1.0
    assert stats.to_minutes(100) == 1.67
    assert stats.to_hours(5400) == 1.5
    assert stats.to_hours(1000) == 0.28


def test_percentage():
    assert stats.percentage(1, 4) == 25.0
    assert stats.percentage(3, 0) == 0.0
