"""
Skip pricing.

A skip costs the trail's per-step value times the number of steps skipped,
rounded once (half up) at the end.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def skip_cost(
    trail_value: Optional[float],
    step_count: int,
    from_index: int,
    to_index: int,
) -> int:
    """
    Price a skip from `from_index` to `to_index`.

    Args:
        trail_value: Total trail value (missing or 0 makes every skip free)
        step_count: Number of steps in the trail
        from_index: Index the skip starts from (frontier or current step)
        to_index: Target index, strictly greater than from_index

    Returns:
        Whole-unit cost of the skip

    Raises:
        ValueError: If to_index is not ahead of from_index
    """
    if to_index <= from_index:
        raise ValueError(
            f"Skip target {to_index} must be ahead of {from_index}; moving back is free navigation"
        )
    if not trail_value or step_count <= 0:
        return 0

    per_step = Decimal(str(trail_value)) / Decimal(step_count)
    cost = per_step * (to_index - from_index)
    return int(cost.quantize(Decimal(1), rounding=ROUND_HALF_UP))
