from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolCandidate:
    address: str
    name: str
    liquidity_usd: float
    history_depth: int = 0


@dataclass(frozen=True)
class SkippedCandidate:
    candidate: PoolCandidate
    reason: str


@dataclass(frozen=True)
class ProbeOutcome:
    accepted: list[PoolCandidate]
    skipped: list[SkippedCandidate]
