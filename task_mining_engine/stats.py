"""Descriptive statistics over duration samples."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(list(values), dtype=float)


def mean(values: Sequence[float]) -> float:
    data = _as_array(values)
    if data.size == 0:
        return 0.0
    return float(data.mean())


def median(values: Sequence[float]) -> float:
    """Midpoint of the sorted sample, averaging the two central values for even sizes."""

    data = _as_array(values)
    if data.size == 0:
        return 0.0
    return float(np.median(data))


def population_std(values: Sequence[float]) -> float:
    data = _as_array(values)
    if data.size == 0:
        return 0.0
    return float(np.std(data))


def variability_ratio(values: Sequence[float]) -> float:
    """Population standard deviation divided by the mean, 0 when the mean is 0."""

    avg = mean(values)
    if avg <= 0:
        return 0.0
    return population_std(values) / avg


def to_minutes(seconds: float) -> float:
    return round(seconds / 60.0, 2)


def to_hours(seconds: float) -> float:
    return round(seconds / 3600.0, 2)


def percentage(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return (part / whole) * 100.0
