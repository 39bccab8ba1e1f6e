from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


Interval = Literal["hourly", "daily", "weekly"]
Cadence = Literal["hour", "day"]

INTERVALS: tuple[str, ...] = ("hourly", "daily", "weekly")


@dataclass(frozen=True)
class PriceSample:
    timestamp_ms: int
    close: float


@dataclass(frozen=True)
class RatioPoint:
    timestamp_ms: int
    ratio: float
    price_a: float
    price_b: float
