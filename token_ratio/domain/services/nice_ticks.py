from __future__ import annotations

import math

from token_ratio.domain.exceptions import InvalidRangeError


DEFAULT_TICK_COUNT = 10
SIGNIFICANT_DIGITS = 15


def generate_nice_ticks(
    minimum: float,
    maximum: float,
    tick_count: int = DEFAULT_TICK_COUNT,
) -> list[float]:
    """Return distinct, ascending axis values from the 1-2-5 ladder covering [minimum, maximum].

    The result holds at most ``tick_count + 2`` values: when the ladder step is
    too fine for the range, the step moves up one rung until it fits.
    """
    if not (math.isfinite(minimum) and math.isfinite(maximum)):
        raise InvalidRangeError("min and max must be finite numbers.")
    if minimum > maximum:
        raise InvalidRangeError("min must be lower than or equal to max.")
    if minimum == maximum:
        return [minimum]
    if tick_count < 2:
        raise InvalidRangeError("tick_count must be at least 2.")

    value_range = maximum - minimum
    step = max(ladder_step(value_range / (tick_count - 1)), value_range / 1000)

    while True:
        ticks = _ticks_for_step(minimum, maximum, step, max_iterations=tick_count * 4)
        if len(ticks) <= tick_count + 2:
            return ticks
        step = _next_ladder_step(step)


def ladder_step(rough_step: float) -> float:
    magnitude = 10 ** math.floor(math.log10(rough_step))
    scale = rough_step / magnitude
    if scale > 5:
        return magnitude * 5
    if scale > 2:
        return magnitude * 2
    return magnitude


def round_significant(value: float, digits: int = SIGNIFICANT_DIGITS) -> float:
    return float(f"{value:.{digits}g}")


def _next_ladder_step(step: float) -> float:
    magnitude = 10 ** math.floor(math.log10(step))
    scale = step / magnitude
    # Midpoint thresholds keep float noise on 2x/5x from stalling the ladder.
    if scale < 1.5:
        return magnitude * 2
    if scale < 3.5:
        return magnitude * 5
    return magnitude * 10


def _ticks_for_step(
    minimum: float,
    maximum: float,
    step: float,
    *,
    max_iterations: int,
) -> list[float]:
    start = math.floor(minimum / step) * step
    if start < minimum:
        start += step

    ticks: list[float] = []
    for index in range(max_iterations):
        value = start + index * step
        if value > maximum + step / 2:
            break
        if value >= minimum - step / 10:
            ticks.append(value)

    if not ticks or abs(ticks[0] - minimum) > step / 10:
        ticks.insert(0, minimum)
    if abs(ticks[-1] - maximum) > step / 10:
        ticks.append(maximum)

    return sorted({round_significant(value) for value in ticks})
