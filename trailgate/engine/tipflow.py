"""
TipFlow - Post-completion tip decision.

Opened when a trail is completed. Resolves exactly once, either with a tip
amount or an explicit skip; later resolutions are ignored until reset.
"""

import logging
import math
from decimal import Decimal
from enum import Enum
from typing import Optional

from trailgate.errors import InvalidTipAmount, InvalidTransition

from .events import EventEmitter


logger = logging.getLogger(__name__)


class TipResolution(str, Enum):
    TIPPED = "tipped"
    SKIPPED = "skipped"


def parse_tip_amount(amount) -> float:
    """
    Validate a tip amount.

    Accepts ints, floats, Decimals and numeric strings. Booleans, negative,
    NaN and infinite values are rejected.

    Raises:
        InvalidTipAmount: If the amount is not a finite, non-negative number
    """
    if isinstance(amount, bool):
        raise InvalidTipAmount(amount)
    if isinstance(amount, (int, float, Decimal)):
        value = float(amount)
    elif isinstance(amount, str):
        try:
            value = float(amount.strip())
        except ValueError:
            raise InvalidTipAmount(amount) from None
    else:
        raise InvalidTipAmount(amount)
    if not math.isfinite(value) or value < 0:
        raise InvalidTipAmount(amount)
    return value


class TipFlow:
    """Tip decision for one completed trail."""

    def __init__(self, suggested_tip: float, emitter: Optional[EventEmitter] = None):
        self.suggested_tip = suggested_tip
        self.emitter = emitter
        self.is_open = False
        self.resolution: Optional[TipResolution] = None
        self.amount: Optional[float] = None

    @property
    def default_amount(self) -> float:
        return self.suggested_tip

    @property
    def is_resolved(self) -> bool:
        return self.resolution is not None

    def open(self):
        if not self.is_resolved:
            self.is_open = True

    def tipped(self, amount) -> TipResolution:
        """Resolve with a tip. Idempotent; ignored if already resolved."""
        value = parse_tip_amount(amount)
        if self._already_resolved(TipResolution.TIPPED):
            return self.resolution
        self.resolution = TipResolution.TIPPED
        self.amount = value
        self.is_open = False
        logger.info(f"Tip of {value:.2f} recorded")
        if self.emitter:
            self.emitter.tip_donated(value)
        return self.resolution

    def skipped_tip(self) -> TipResolution:
        """Resolve without tipping. Idempotent; ignored if already resolved."""
        if self._already_resolved(TipResolution.SKIPPED):
            return self.resolution
        self.resolution = TipResolution.SKIPPED
        self.is_open = False
        logger.info("Tip skipped")
        return self.resolution

    def reset(self):
        self.is_open = False
        self.resolution = None
        self.amount = None

    def _already_resolved(self, requested: TipResolution) -> bool:
        if self.is_resolved:
            if self.resolution != requested:
                logger.warning(f"Tip already resolved as {self.resolution.value}; ignoring {requested.value}")
            return True
        if not self.is_open:
            raise InvalidTransition("Tip decision is only available after the trail is completed")
        return False
