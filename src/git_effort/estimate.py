from __future__ import annotations

import math

from .models import CostParameters, EffortEstimate


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def estimate_minutes(change_count: int, params: CostParameters) -> float:
    """
    Setup cost plus a geometric series: the first change costs
    `per_change_minutes`, every further change `decay_factor` times the
    previous one.
    """
    if isinstance(change_count, bool) or not isinstance(change_count, int):
        raise ValueError(f"change_count must be an int, got {change_count!r}")
    if change_count < 0:
        raise ValueError(f"change_count must be >= 0, got {change_count}")
    d = params.decay_factor
    if d == 1:
        series = params.per_change_minutes * change_count
    else:
        series = params.per_change_minutes * (1 - d**change_count) / (1 - d)
    total = params.setup_minutes + series
    if not math.isfinite(total):
        raise ValueError(f"Estimate for {change_count} changes overflows; lower --minutes-first-change or --setup-minutes")
    return total


def estimate(change_count: int, params: CostParameters) -> EffortEstimate:
    return split_minutes(estimate_minutes(change_count, params))


def split_minutes(minutes: float) -> EffortEstimate:
    hours = int(math.floor(minutes / 60))
    # The remainder is rounded on its own, so 119.6 minutes reads as 1h 60m.
    rest = _round_half_up(minutes % 60)
    return EffortEstimate(total_minutes=minutes, hours_part=hours, minutes_part=rest)


def max_minutes(params: CostParameters) -> float:
    """Upper bound of `estimate_minutes` for any change count (inf when decay is 1)."""
    if params.decay_factor == 1:
        return math.inf
    return params.setup_minutes + params.per_change_minutes / (1 - params.decay_factor)
