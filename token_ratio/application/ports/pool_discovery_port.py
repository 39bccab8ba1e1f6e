from __future__ import annotations

from typing import Protocol

from token_ratio.domain.entities.pool import PoolCandidate


class PoolDiscoveryPort(Protocol):
    def fetch_pool_candidates(self, *, token_address: str) -> list[PoolCandidate]:
        ...
