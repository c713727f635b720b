"""
Skip request sub-state machine.

Models the skip confirmation and payment sequence as explicit phases:

    IDLE -> CONFIRM_PENDING -> PAYMENT_IN_FLIGHT -> RESOLVED

At most one quote is pending per trail. A duplicate request for the same
target returns the pending quote; a success callback is honoured once.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from trailgate.errors import InvalidTransition, SkipAlreadyPending


logger = logging.getLogger(__name__)


class SkipKind(str, Enum):
    THIS_STEP = "this_step"  # pay to bypass the current step's watch gate
    TO_STEP = "to_step"      # pay to jump past several locked steps


class SkipPhase(str, Enum):
    IDLE = "idle"
    CONFIRM_PENDING = "confirm_pending"
    PAYMENT_IN_FLIGHT = "payment_in_flight"
    RESOLVED = "resolved"


class PaymentOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PaymentGate(Protocol):
    """External collaborator that collects skip payments."""

    def initiate_skip_payment(self, amount: int) -> PaymentOutcome: ...


@dataclass(frozen=True)
class SkipQuote:
    """Pending-payment descriptor."""
    amount: int
    from_index: int
    to_index: int
    kind: SkipKind = SkipKind.TO_STEP

    @property
    def steps_skipped(self) -> int:
        return self.to_index - self.from_index


class SkipFlow:
    """Holds the single pending skip quote and its phase."""

    def __init__(self):
        self.phase = SkipPhase.IDLE
        self.pending: Optional[SkipQuote] = None
        self.last_resolved: Optional[SkipQuote] = None

    @property
    def has_pending(self) -> bool:
        return self.pending is not None

    def open(self, quote: SkipQuote) -> SkipQuote:
        """Register a quote, coalescing a duplicate request for the same target."""
        if self.pending is not None:
            if self.pending.to_index == quote.to_index:
                logger.info(f"Skip to step {quote.to_index} already pending; reusing quote")
                return self.pending
            raise SkipAlreadyPending(self.pending.to_index, quote.to_index)
        self.pending = quote
        self.phase = SkipPhase.CONFIRM_PENDING
        return quote

    def begin_payment(self) -> SkipQuote:
        if self.pending is None:
            raise InvalidTransition("No skip is pending")
        if self.phase == SkipPhase.PAYMENT_IN_FLIGHT:
            raise InvalidTransition(f"Payment for skip to step {self.pending.to_index} is already in flight")
        self.phase = SkipPhase.PAYMENT_IN_FLIGHT
        return self.pending

    def matches(self, to_index: int) -> bool:
        return self.pending is not None and self.pending.to_index == to_index

    def was_resolved(self, to_index: int) -> bool:
        """True if the most recently closed quote targeted `to_index`."""
        return self.last_resolved is not None and self.last_resolved.to_index == to_index

    def reprice(self, quote: SkipQuote) -> SkipQuote:
        """Replace a quote that is still waiting for confirmation."""
        if self.pending is None or self.phase != SkipPhase.CONFIRM_PENDING:
            raise InvalidTransition("Only a quote awaiting confirmation can be repriced")
        self.pending = quote
        return quote

    def discard(self) -> Optional[SkipQuote]:
        """Drop a quote that no longer applies. Nothing was charged for it."""
        quote = self.pending
        self.pending = None
        self.phase = SkipPhase.IDLE
        return quote

    def resolve(self) -> Optional[SkipQuote]:
        """Close the pending quote. Returns it, or None if nothing was pending."""
        quote = self.pending
        self.pending = None
        if quote is not None:
            self.last_resolved = quote
            self.phase = SkipPhase.RESOLVED
        return quote

    def reset(self):
        self.phase = SkipPhase.IDLE
        self.pending = None
        self.last_resolved = None
