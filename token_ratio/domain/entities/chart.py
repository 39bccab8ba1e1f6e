from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AxisTick:
    value: float
    label: str


@dataclass(frozen=True)
class XAxisLabel:
    index: int
    text: str
