from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from token_ratio.domain.entities.price_series import RatioPoint


FIELDNAMES = ["date", "price_tokenA", "price_tokenB", "ratio"]


def ratio_rows(points: Sequence[RatioPoint]) -> list[dict[str, str]]:
    return [
        {
            "date": datetime.fromtimestamp(point.timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d"),
            "price_tokenA": f"{point.price_a:.12f}",
            "price_tokenB": f"{point.price_b:.12f}",
            "ratio": f"{point.ratio:.12f}",
        }
        for point in points
    ]


def write_ratio_csv(path: str | Path, points: Sequence[RatioPoint]) -> Path:
    target = Path(path)
    with target.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=FIELDNAMES, lineterminator="\n")
        writer.writeheader()
        writer.writerows(ratio_rows(points))
    return target
