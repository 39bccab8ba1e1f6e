from __future__ import annotations

from dataclasses import dataclass

from token_ratio.domain.entities.pool import PoolCandidate, SkippedCandidate


@dataclass(frozen=True)
class SelectPoolInput:
    token_address: str
    limit: int = 5
    max_candles: int = 1000


@dataclass(frozen=True)
class SelectPoolOutput:
    token_address: str
    pool: PoolCandidate
    switched_for_history: bool
    probed: list[PoolCandidate]
    skipped: list[SkippedCandidate]
