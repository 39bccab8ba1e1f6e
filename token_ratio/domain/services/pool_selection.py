from __future__ import annotations

from typing import Callable, Sequence

from token_ratio.domain.entities.pool import PoolCandidate, ProbeOutcome, SkippedCandidate
from token_ratio.domain.exceptions import DomainError, InvalidInputError, NoUsableCandidatesError


DEFAULT_CANDIDATE_LIMIT = 5
# Liquidity leader is kept while its history covers this share of the deepest one.
MIN_HISTORY_SHARE = 0.5
# A deeper-history pool must hold at least this share of the leader's liquidity.
MIN_LIQUIDITY_SHARE = 0.1


def truncate_candidates(
    candidates: Sequence[PoolCandidate],
    limit: int = DEFAULT_CANDIDATE_LIMIT,
) -> list[PoolCandidate]:
    if limit < 1:
        raise InvalidInputError("limit must be a positive integer.")
    return list(candidates[:limit])


def probe_candidates(
    candidates: Sequence[PoolCandidate],
    measure: Callable[[PoolCandidate], int],
) -> ProbeOutcome:
    accepted: list[PoolCandidate] = []
    skipped: list[SkippedCandidate] = []
    for candidate in candidates:
        try:
            depth = measure(candidate)
        except DomainError as exc:
            skipped.append(SkippedCandidate(candidate=candidate, reason=str(exc) or type(exc).__name__))
            continue
        if depth <= 0:
            skipped.append(SkippedCandidate(candidate=candidate, reason="no historical data"))
            continue
        accepted.append(
            PoolCandidate(
                address=candidate.address,
                name=candidate.name,
                liquidity_usd=candidate.liquidity_usd,
                history_depth=int(depth),
            )
        )
    return ProbeOutcome(accepted=accepted, skipped=skipped)


def select_pool(
    candidates: Sequence[PoolCandidate],
    *,
    limit: int = DEFAULT_CANDIDATE_LIMIT,
) -> PoolCandidate:
    """Pick the liquidity leader unless its history is shallow and a relevant deeper pool exists.

    ``candidates`` must be ranked by liquidity, highest first.
    """
    pools = truncate_candidates(candidates, limit)
    if not pools:
        raise NoUsableCandidatesError("No pools with historical data found.")

    max_history = max(pool.history_depth for pool in pools)
    top = pools[0]
    if top.history_depth >= MIN_HISTORY_SHARE * max_history:
        return top

    min_liquidity = MIN_LIQUIDITY_SHARE * top.liquidity_usd
    alternatives = [
        pool
        for pool in pools
        if pool.history_depth == max_history and pool.liquidity_usd >= min_liquidity
    ]
    if alternatives:
        return max(alternatives, key=lambda pool: pool.liquidity_usd)
    return top
