from __future__ import annotations

import logging

from token_ratio.application.dto.select_pool import SelectPoolInput, SelectPoolOutput
from token_ratio.application.ports.pool_discovery_port import PoolDiscoveryPort
from token_ratio.application.ports.price_history_port import PriceHistoryPort
from token_ratio.domain.entities.pool import PoolCandidate
from token_ratio.domain.exceptions import InvalidInputError, NoUsableCandidatesError
from token_ratio.domain.services.pool_selection import (
    probe_candidates,
    select_pool,
    truncate_candidates,
)


logger = logging.getLogger(__name__)


class SelectPoolUseCase:
    def __init__(
        self,
        *,
        pool_discovery_port: PoolDiscoveryPort,
        price_history_port: PriceHistoryPort,
    ):
        self._pool_discovery_port = pool_discovery_port
        self._price_history_port = price_history_port

    def execute(self, command: SelectPoolInput) -> SelectPoolOutput:
        if command.limit < 1:
            raise InvalidInputError("limit must be a positive integer.")
        if command.max_candles < 1:
            raise InvalidInputError("max_candles must be a positive integer.")

        candidates = self._pool_discovery_port.fetch_pool_candidates(
            token_address=command.token_address,
        )
        if not candidates:
            raise NoUsableCandidatesError(f"No pools found for token {command.token_address}.")

        def measure_history(candidate: PoolCandidate) -> int:
            samples = self._price_history_port.fetch_price_history(
                pool_address=candidate.address,
                cadence="day",
                limit=command.max_candles,
            )
            return len(samples)

        # Truncate before probing: one history request per remaining candidate.
        outcome = probe_candidates(truncate_candidates(candidates, command.limit), measure_history)
        for skipped in outcome.skipped:
            logger.warning(
                "select_pool: probe_skipped token=%s pool=%s reason=%s",
                command.token_address,
                skipped.candidate.address,
                skipped.reason,
            )
        for candidate in outcome.accepted:
            logger.info(
                "select_pool: probed token=%s pool=%s name=%s liquidity_usd=%.2f history_depth=%s",
                command.token_address,
                candidate.address,
                candidate.name,
                candidate.liquidity_usd,
                candidate.history_depth,
            )
        if not outcome.accepted:
            raise NoUsableCandidatesError(
                f"No pools with historical data found for token {command.token_address}."
            )

        pool = select_pool(outcome.accepted, limit=command.limit)
        switched = pool.address != outcome.accepted[0].address
        logger.info(
            "select_pool: selected token=%s pool=%s name=%s history_depth=%s reason=%s",
            command.token_address,
            pool.address,
            pool.name,
            pool.history_depth,
            "deeper_history" if switched else "top_liquidity",
        )
        return SelectPoolOutput(
            token_address=command.token_address,
            pool=pool,
            switched_for_history=switched,
            probed=outcome.accepted,
            skipped=outcome.skipped,
        )
