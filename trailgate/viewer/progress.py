"""
Progress renderer - HTML for the learner's trail view.

Provides:
- Step list with lock / current / complete indicators
- Watch progress ring (fills at the completion threshold)
- Skip quote and tip prompt text
"""

import html
import math
from typing import Optional

from trailgate.config import DEFAULT_COMPLETION_THRESHOLD
from trailgate.engine import ProgressController, SkipQuote
from trailgate.schemas import StepKind, StepStatus, Trail


STATUS_INDICATORS = {
    StepStatus.UNLOCKED_COMPLETE: "✓",
    StepStatus.UNLOCKED_INCOMPLETE: "○",
    StepStatus.LOCKED: "🔒",
}
CURRENT_INDICATOR = "→"

CURRENCY_SYMBOLS = {"usd": "$"}


def get_progress_css() -> str:
    """Get CSS styles for the trail view."""
    return """
    <style>
    .trail-steps {
        list-style: none;
        padding: 0;
        margin: 0;
    }
    .trail-step {
        display: flex;
        align-items: center;
        gap: 0.6em;
        padding: 0.5em 0.8em;
        border-radius: 8px;
        margin-bottom: 0.3em;
    }
    .trail-step-current {
        background: #e3f2fd;
        font-weight: 600;
    }
    .trail-step-locked {
        color: #999;
    }
    .trail-step-complete {
        color: #388E3C;
    }
    .trail-step-price {
        margin-left: auto;
        font-size: 0.85em;
        color: #F57C00;
    }
    .watch-ring {
        font-size: 0.9em;
        color: #555;
    }
    .watch-ring-bar {
        height: 8px;
        border-radius: 4px;
        background: #eee;
        overflow: hidden;
    }
    .watch-ring-fill {
        height: 100%;
    }
    </style>
    """


def format_amount(amount: float, currency: str = "usd") -> str:
    """Format a monetary amount, dropping cents for whole values."""
    symbol = CURRENCY_SYMBOLS.get(currency.lower())
    value = f"{amount:.0f}" if float(amount).is_integer() else f"{amount:.2f}"
    return f"{symbol}{value}" if symbol else f"{value} {currency.upper()}"


def watch_color(percentage: float, threshold: float = DEFAULT_COMPLETION_THRESHOLD) -> str:
    """Red below 25%, orange below the threshold, green after."""
    if percentage < 25:
        return "#ef4444"
    if percentage < threshold:
        return "#f97316"
    return "#10b981"


def gate_fill(percentage: float, threshold: float = DEFAULT_COMPLETION_THRESHOLD) -> float:
    """Fraction of the watch gate satisfied, 0.0 to 1.0."""
    return max(0.0, min(percentage / threshold, 1.0))


def minutes_left(duration_minutes: Optional[float], percentage: float) -> Optional[int]:
    """Whole minutes of video still unwatched, if the duration is known."""
    if not duration_minutes:
        return None
    watched = math.ceil(percentage / 100 * duration_minutes)
    return max(int(math.ceil(duration_minutes)) - watched, 0)


def get_status_indicator(controller: ProgressController, index: int) -> str:
    """
    Get status indicator for the step list.

    Returns:
        → for the current step
        ✓ for completed
        ○ for unlocked
        🔒 for locked
    """
    if index == controller.current_index:
        return CURRENT_INDICATOR
    return STATUS_INDICATORS[controller.step_status(index)]


def render_watch_progress(percentage: float, threshold: float = DEFAULT_COMPLETION_THRESHOLD) -> str:
    """
    Render watch progress for a video step.

    The bar fills completely at the threshold; the label shows the actual
    watched percentage.
    """
    fill = gate_fill(percentage, threshold) * 100
    parts = ['<div class="watch-ring">']
    parts.append(f'<div>{percentage:.0f}% watched (need {threshold:.0f}%)</div>')
    parts.append('<div class="watch-ring-bar">')
    parts.append(
        f'<div class="watch-ring-fill" style="width: {fill:.0f}%; '
        f'background: {watch_color(percentage, threshold)};"></div>'
    )
    parts.append('</div></div>')
    return ''.join(parts)


def render_step_list(controller: ProgressController) -> str:
    """
    Render the trail's steps with status and skip prices for locked steps.

    Args:
        controller: ProgressController for the learner

    Returns:
        HTML string for the step list
    """
    trail = controller.trail
    parts = ['<ul class="trail-steps">']
    for index, step in enumerate(trail.steps):
        status = controller.step_status(index)
        classes = ["trail-step"]
        if index == controller.current_index:
            classes.append("trail-step-current")
        if status == StepStatus.LOCKED:
            classes.append("trail-step-locked")
        elif status == StepStatus.UNLOCKED_COMPLETE:
            classes.append("trail-step-complete")

        label = "Reward" if step.kind == StepKind.REWARD else f"Step {index + 1}"
        parts.append(f'<li class="{" ".join(classes)}">')
        parts.append(f'<span>{get_status_indicator(controller, index)}</span>')
        parts.append(f'<span>{label}: {html.escape(step.title)}</span>')
        if status == StepStatus.LOCKED:
            price = format_amount(controller.quote_skip(index), trail.currency)
            parts.append(f'<span class="trail-step-price">Skip for {price}</span>')
        parts.append('</li>')
    parts.append('</ul>')
    return ''.join(parts)


def describe_skip(quote: SkipQuote, trail: Trail) -> str:
    """Confirmation text for a skip quote."""
    price = format_amount(quote.amount, trail.currency)
    target = trail.steps[quote.to_index]
    if target.kind == StepKind.REWARD:
        return f"Skip to this reward for {price}. Skipping will unlock this reward and all steps in between."
    if quote.steps_skipped == 1:
        return f"Skip to step {quote.to_index + 1} for {price}."
    return f"Skip to step {quote.to_index + 1} for {price}. Skipping will unlock this step and all steps in between."


def describe_tip(controller: ProgressController) -> str:
    """Prompt shown on the completion screen."""
    trail = controller.trail
    amount = controller.tip_flow.default_amount
    text = f"Enjoyed {trail.title}? Tip {format_amount(amount, trail.currency)}"
    if trail.creator:
        text += f" to {trail.creator}"
    if trail.trail_value:
        text += f" ({amount / trail.trail_value * 100:.0f}% of the trail's value)"
    return text
