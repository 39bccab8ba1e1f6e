from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable, Sequence

from token_ratio.domain.entities.chart import AxisTick, XAxisLabel
from token_ratio.domain.entities.price_series import INTERVALS, Interval
from token_ratio.domain.exceptions import InvalidInputError
from token_ratio.domain.services.nice_ticks import DEFAULT_TICK_COUNT, generate_nice_ticks


DEFAULT_CHART_HEIGHT = 30
MIN_X_LABELS = 4
MAX_X_LABELS = 10
SAMPLES_PER_X_LABEL = 30

SCIENTIFIC_RANGE = 0.00001
DEFAULT_DECIMALS = 6
# (exclusive upper bound of the value range, decimals), tightest bound first.
RANGE_DECIMALS = (
    (0.0001, 12),
    (0.001, 10),
    (0.01, 8),
)

AXIS = "┤"
FIRST_POINT = "┼"
FLAT = "─"
DOWN_END = "╰"
UP_END = "╭"
DOWN_START = "╮"
UP_START = "╯"
VERTICAL = "│"

SINGLE_POINT_NOTICE = (
    "(Single data point - no historical chart available)\n"
    "Note: This often occurs with new or low-volume pools. Try a shorter interval."
)


def format_y_label(value: float, value_range: float) -> str:
    if value_range < SCIENTIFIC_RANGE:
        mantissa, exponent = f"{value:.4e}".split("e")
        return f"{mantissa}e{int(exponent):+d}"

    decimals = DEFAULT_DECIMALS
    for bound, bound_decimals in RANGE_DECIMALS:
        if value_range < bound:
            decimals = bound_decimals
            break
    formatted = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    return formatted or "0"


def build_y_axis_ticks(
    minimum: float,
    maximum: float,
    tick_count: int = DEFAULT_TICK_COUNT,
) -> list[AxisTick]:
    value_range = maximum - minimum
    return [
        AxisTick(value=value, label=format_y_label(value, value_range))
        for value in generate_nice_ticks(minimum, maximum, tick_count)
    ]


def plot_series(
    series: Sequence[float],
    *,
    height: int,
    minimum: float,
    maximum: float,
    format_label: Callable[[float], str],
    label_width: int = 0,
) -> tuple[list[str], int]:
    """Draw ``series`` as box-drawing rows under a left gutter of value labels.

    Returns the rows, top first, and the character column of sample 0. Sample
    ``i`` is drawn in column ``origin + i``; the gutter labels are padded to a
    common width so every row starts its plot area in the same column.
    """
    if height < 1:
        raise InvalidInputError("height must be a positive integer.")

    interval = maximum - minimum
    ratio = height / interval if interval > 0 else 1
    min_scaled = math.floor(minimum * ratio)
    max_scaled = math.ceil(maximum * ratio)
    rows = max_scaled - min_scaled

    def scaled(value: float) -> int:
        clamped = min(max(value, minimum), maximum)
        return int(round(clamped * ratio)) - min_scaled

    grid = [[AXIS] + [" "] * (len(series) - 1) for _ in range(rows + 1)]
    grid[rows - scaled(series[0])][0] = FIRST_POINT
    for x in range(len(series) - 1):
        y0 = scaled(series[x])
        y1 = scaled(series[x + 1])
        column = x + 1
        if y0 == y1:
            grid[rows - y0][column] = FLAT
            continue
        grid[rows - y1][column] = DOWN_END if y0 > y1 else UP_END
        grid[rows - y0][column] = DOWN_START if y0 > y1 else UP_START
        for y in range(min(y0, y1) + 1, max(y0, y1)):
            grid[rows - y][column] = VERTICAL

    row_labels = [format_label(maximum - row * interval / (rows or 1)) for row in range(rows + 1)]
    width = max([label_width, *(len(label) for label in row_labels)])
    lines = [f"{label.ljust(width)} {''.join(cells)}" for label, cells in zip(row_labels, grid)]
    return lines, width + 1


def format_time_label(timestamp_ms: int, interval: Interval) -> str:
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    if interval == "hourly":
        return moment.strftime("%Y-%m-%d %H:%M")
    return moment.strftime("%Y-%m-%d")


def x_label_indices(sample_count: int) -> list[int]:
    label_count = min(MAX_X_LABELS, max(MIN_X_LABELS, math.ceil(sample_count / SAMPLES_PER_X_LABEL)))
    stride = (sample_count - 1) // (label_count - 1)
    indices = [index * stride for index in range(label_count - 1)]
    indices.append(sample_count - 1)
    return sorted(set(indices))


def build_x_axis_labels(timestamps: Sequence[int], interval: Interval) -> list[XAxisLabel]:
    """Pick sparse time labels; a label that would touch its predecessor is dropped.

    The last sample always keeps its label, evicting earlier ones if needed.
    """
    last_index = len(timestamps) - 1
    placed: list[XAxisLabel] = []
    for index in x_label_indices(len(timestamps)):
        label = XAxisLabel(index=index, text=format_time_label(timestamps[index], interval))
        if placed and _overlaps(placed[-1], label):
            if index != last_index:
                continue
            while placed and _overlaps(placed[-1], label):
                placed.pop()
        placed.append(label)
    return placed


def render_x_axis(labels: Sequence[XAxisLabel], origin: int) -> str:
    line = ""
    for label in labels:
        line += " " * (origin + label.index - len(line)) + label.text
    return line


def render(
    ratios: Sequence[float],
    timestamps: Sequence[int],
    interval: Interval,
    *,
    height: int = DEFAULT_CHART_HEIGHT,
) -> str:
    if not ratios:
        raise InvalidInputError("ratios must not be empty.")
    if len(ratios) != len(timestamps):
        raise InvalidInputError("ratios and timestamps must have the same length.")
    if interval not in INTERVALS:
        raise InvalidInputError(f"Unsupported interval: {interval}")
    if len(ratios) == 1:
        return SINGLE_POINT_NOTICE

    minimum = min(ratios)
    maximum = max(ratios)
    value_range = maximum - minimum
    ticks = build_y_axis_ticks(minimum, maximum)
    label_width = max(len(tick.label) for tick in ticks)

    lines, origin = plot_series(
        ratios,
        height=height,
        minimum=minimum,
        maximum=maximum,
        format_label=lambda value: format_y_label(value, value_range),
        label_width=label_width,
    )
    lines.append(render_x_axis(build_x_axis_labels(timestamps, interval), origin))
    return "\n".join(lines)


def _overlaps(left: XAxisLabel, right: XAxisLabel) -> bool:
    return left.index + len(left.text) >= right.index
