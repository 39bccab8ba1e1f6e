from __future__ import annotations

from typing import Sequence

from token_ratio.domain.entities.price_series import PriceSample, RatioPoint
from token_ratio.domain.exceptions import EmptyResultError, InvalidInputError


MS_PER_DAY = 86_400_000


def align_ratios(
    series_a: Sequence[PriceSample],
    series_b: Sequence[PriceSample],
) -> list[RatioPoint]:
    """Divide the two series index by index.

    Alignment is positional: samples are paired by index, not by timestamp, so
    a missing candle on one side shifts every later pair. Timestamps come from
    ``series_a``.
    """
    points = [
        RatioPoint(
            timestamp_ms=sample_a.timestamp_ms,
            ratio=sample_a.close / sample_b.close,
            price_a=sample_a.close,
            price_b=sample_b.close,
        )
        for sample_a, sample_b in zip(series_a, series_b)
        if sample_a.close > 0 and sample_b.close > 0
    ]
    if not points:
        raise EmptyResultError("No valid ratio data could be computed.")
    return points


def resample_to_buckets(samples: Sequence[PriceSample], bucket_days: int) -> list[PriceSample]:
    """Fold samples into buckets keyed by their first timestamp, keeping the last close seen."""
    if bucket_days <= 0:
        raise InvalidInputError("bucket_days must be a positive integer.")
    if not samples:
        return []

    bucket_ms = bucket_days * MS_PER_DAY
    buckets: list[PriceSample] = []
    bucket_start = samples[0].timestamp_ms
    bucket_close = samples[0].close
    for sample in samples[1:]:
        if sample.timestamp_ms - bucket_start >= bucket_ms:
            buckets.append(PriceSample(timestamp_ms=bucket_start, close=bucket_close))
            bucket_start = sample.timestamp_ms
        bucket_close = sample.close
    buckets.append(PriceSample(timestamp_ms=bucket_start, close=bucket_close))
    return buckets
