"""
ProgressController - Navigation, unlock frontier and paid skips for one trail.

Combines the WatchTimeTracker (watch gate), skip pricing and the payment
gate outcome to drive the learner through a trail:
- Step status (locked / unlocked incomplete / unlocked complete)
- Honest advancement through the watch gate
- Paid skips priced from the frontier
- Completion and the post-completion tip decision
"""

import logging
from typing import Optional, Protocol

from trailgate.config import DEFAULT_SUGGESTED_TIP
from trailgate.errors import (
    GateNotSatisfied,
    InvalidTransition,
    PaymentCancelled,
    PaymentFailed,
)
from trailgate.schemas import ProgressState, StepStatus, Trail, TrailState

from .events import EventEmitter
from .pricing import skip_cost
from .skip import PaymentGate, PaymentOutcome, SkipFlow, SkipKind, SkipPhase, SkipQuote
from .tipflow import TipFlow, TipResolution
from .watch import WatchTimeTracker


logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """External save/load interface for progression state."""

    def save_progress(self, trail_id: str, state: ProgressState) -> None: ...

    def load_progress(self, trail_id: str) -> Optional[ProgressState]: ...


class ProgressController:
    """
    Own the ProgressState of one learner on one trail.

    The frontier never moves backwards except on restart, and completed
    steps are always at or behind the frontier. All payment callbacks go
    through confirm_skip / cancel_skip.
    """

    def __init__(
        self,
        trail: Trail,
        tracker: WatchTimeTracker,
        emitter: Optional[EventEmitter] = None,
        store: Optional[ProgressStore] = None,
        default_suggested_tip: float = DEFAULT_SUGGESTED_TIP,
    ):
        """
        Initialize controller.

        Args:
            trail: Trail being followed (read only)
            tracker: Watch-time tracker for the trail's video steps
            emitter: Analytics emitter (defaults to one without sinks)
            store: Optional progress store; every transition is saved to it
            default_suggested_tip: Tip default when the trail has none
        """
        self.trail = trail
        self.tracker = tracker
        self.emitter = emitter or EventEmitter(trail.id)
        self.store = store
        self.state = TrailState.IN_PROGRESS
        self.skip_flow = SkipFlow()
        suggested = trail.suggested_tip if trail.suggested_tip is not None else default_suggested_tip
        self.tip_flow = TipFlow(suggested, self.emitter)
        self._progress = ProgressState()

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def current_index(self) -> int:
        return self._progress.current_index

    @property
    def frontier_index(self) -> int:
        return self._progress.frontier_index

    @property
    def completed(self) -> frozenset[int]:
        return frozenset(self._progress.completed)

    @property
    def progress(self) -> ProgressState:
        """Snapshot of the progression state."""
        return self._progress.model_copy(deep=True)

    @property
    def pending_skip(self) -> Optional[SkipQuote]:
        return self.skip_flow.pending

    @property
    def is_last_step(self) -> bool:
        return self.current_index == self.trail.last_index

    def is_locked(self, index: int) -> bool:
        return index > self.frontier_index

    def can_proceed(self, index: Optional[int] = None) -> bool:
        """Whether the gate of a step (default: current) is satisfied."""
        index = self.current_index if index is None else index
        self._check_index(index)
        if self.is_locked(index):
            return False
        if index in self._progress.completed or not self.trail.steps[index].is_video:
            return True
        return self.tracker.is_video_complete(index)

    def step_status(self, index: int) -> StepStatus:
        self._check_index(index)
        if self.is_locked(index):
            return StepStatus.LOCKED
        if index in self._progress.completed:
            return StepStatus.UNLOCKED_COMPLETE
        return StepStatus.UNLOCKED_INCOMPLETE

    def quote_skip(self, to_index: int) -> int:
        """Price a skip from the frontier to `to_index` without side effects."""
        return skip_cost(self.trail.trail_value, self.trail.step_count, self.frontier_index, to_index)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> ProgressState:
        """Start viewing the trail: restore saved progress and emit trail_view."""
        if self.store is not None:
            saved = self.store.load_progress(self.trail.id)
            if saved is not None:
                self._progress = saved.clamp(self.trail.step_count)
                logger.info(
                    f"Restored progress for {self.trail.id}: "
                    f"current={self.current_index}, frontier={self.frontier_index}"
                )
        self.emitter.trail_view(self.trail.title)
        return self.progress

    def close(self):
        """Leave the trail: stop every sampler and persist."""
        self.tracker.stop_all()
        self._save()

    def restart(self):
        """Reset progression, watch state, pending skip and tip decision."""
        self.tracker.reset()
        self.skip_flow.reset()
        self.tip_flow.reset()
        self._progress = ProgressState()
        self.state = TrailState.IN_PROGRESS
        logger.info(f"Trail {self.trail.id} restarted")
        self._save()

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def navigate(self, target_index: int) -> Optional[SkipQuote]:
        """
        Move the navigation pointer.

        Unlocked targets are entered directly and None is returned. A locked
        target leaves the pointer in place and returns a skip quote instead.
        """
        self._check_index(target_index)
        if self.is_locked(target_index):
            return self.request_skip(target_index)
        if target_index != self.current_index:
            self.tracker.stop(self.current_index)
            self._progress.current_index = target_index
            self._save()
        return None

    def previous(self):
        if self.current_index > 0:
            self.navigate(self.current_index - 1)

    def advance(self) -> TrailState:
        """
        Complete the current step honestly and move on.

        Raises:
            GateNotSatisfied: If the current step's gate is not met
            InvalidTransition: If the tip decision has already been made
        """
        if self.state == TrailState.TIP_RESOLVED:
            raise InvalidTransition("Trail is finished; restart to go through it again")

        index = self.current_index
        if self.state == TrailState.COMPLETED:
            # reached by skipping to a terminal reward
            self._mark_completed(index)
            self._save()
            return self.state

        if not self.can_proceed(index):
            raise GateNotSatisfied(index, self.tracker.watched_percentage(index))

        step = self.trail.steps[index]
        self.tracker.stop(index)
        if step.is_video and index not in self._progress.completed:
            self.emitter.video_watch(index, self.tracker.watched_percentage(index))
        self._mark_completed(index)

        if index == self.trail.last_index:
            self._complete_trail()
        else:
            if index == self.frontier_index:
                self._progress.frontier_index += 1
            self._progress.current_index = index + 1
            logger.info(f"Advanced to step {self.current_index} (frontier {self.frontier_index})")
        self._refresh_pending_skip()
        self._save()
        return self.state

    # -------------------------------------------------------------------------
    # Skips
    # -------------------------------------------------------------------------

    def request_skip(self, target_index: int) -> Optional[SkipQuote]:
        """
        Quote a paid skip from the frontier to a locked step.

        A target already unlocked (stale UI) is entered directly and None is
        returned. Re-requesting the pending target returns the same quote.

        Raises:
            SkipAlreadyPending: If a skip to another target is pending
        """
        self._require_in_progress()
        self._check_index(target_index)
        if not self.is_locked(target_index):
            logger.info(f"Step {target_index} already unlocked; navigating instead of skipping")
            self.navigate(target_index)
            return None
        quote = SkipQuote(
            amount=self.quote_skip(target_index),
            from_index=self.frontier_index,
            to_index=target_index,
            kind=SkipKind.TO_STEP,
        )
        return self.skip_flow.open(quote)

    def request_skip_this_step(self) -> Optional[SkipQuote]:
        """Quote a paid bypass of the current step's watch gate."""
        self._require_in_progress()
        target_index = self.current_index + 1
        if target_index > self.trail.last_index:
            raise InvalidTransition("The last step cannot be skipped")
        if not self.is_locked(target_index):
            logger.info(f"Step {target_index} already unlocked; navigating instead of skipping")
            self.navigate(target_index)
            return None
        quote = SkipQuote(
            amount=skip_cost(self.trail.trail_value, self.trail.step_count, self.current_index, target_index),
            from_index=self.current_index,
            to_index=target_index,
            kind=SkipKind.THIS_STEP,
        )
        return self.skip_flow.open(quote)

    def begin_payment(self) -> SkipQuote:
        """
        Learner confirmed the quote; payment is now in flight.

        The quote is checked against the current frontier first, so the
        amount handed to the payment gate never covers unlocked steps.

        Raises:
            InvalidTransition: If no skip is pending (or it no longer applies)
        """
        self._refresh_pending_skip()
        return self.skip_flow.begin_payment()

    def confirm_skip(self, target_index: int) -> bool:
        """
        Payment success callback.

        Returns True if the skip was applied (or was already satisfied by
        the frontier), False for a duplicate or unknown callback.
        """
        if not self.skip_flow.matches(target_index):
            if self.skip_flow.was_resolved(target_index):
                logger.warning(f"Duplicate skip confirmation for step {target_index} ignored")
            else:
                logger.warning(f"Ignoring skip confirmation for step {target_index}: no matching pending skip")
            return False
        quote = self.skip_flow.resolve()

        if not self.is_locked(target_index):
            # frontier passed the target while the payment was in flight
            logger.warning(
                f"Payment of {quote.amount} collected for step {target_index}, which was already unlocked"
            )
            self.emitter.step_skip(quote.from_index, target_index, quote.amount)
            self.navigate(target_index)
            return True

        self.tracker.stop(self.current_index)
        self._progress.completed.update(range(self.frontier_index, target_index))
        self._progress.frontier_index = target_index
        self._progress.current_index = target_index
        self.emitter.step_skip(quote.from_index, target_index, quote.amount)
        logger.info(f"Skipped to step {target_index} for {quote.amount}")

        if self.trail.is_terminal_reward(target_index):
            self._mark_completed(target_index)
            self._complete_trail()
        self._save()
        return True

    def cancel_skip(self) -> Optional[SkipQuote]:
        """Discard the pending quote (declined, failed or cancelled payment)."""
        quote = self.skip_flow.resolve()
        if quote is not None:
            logger.info(f"Skip to step {quote.to_index} cancelled")
        return quote

    def resolve_payment(self, outcome: PaymentOutcome) -> bool:
        """Route a payment gate outcome for the pending quote."""
        outcome = PaymentOutcome(outcome)
        quote = self.skip_flow.pending
        if quote is None:
            logger.warning(f"Payment outcome {outcome.value} received with no pending skip")
            return False
        if outcome == PaymentOutcome.SUCCESS:
            return self.confirm_skip(quote.to_index)
        self.cancel_skip()
        return False

    def pay_for_skip(self, gate: PaymentGate) -> SkipQuote:
        """
        Collect payment for the pending quote and apply it.

        Raises:
            PaymentFailed: If the gate reports (or raises) a failure
            PaymentCancelled: If the learner cancels the payment
        """
        if self.skip_flow.phase == SkipPhase.PAYMENT_IN_FLIGHT:
            raise InvalidTransition("A skip payment is already in flight")
        quote = self.begin_payment()
        try:
            outcome = PaymentOutcome(gate.initiate_skip_payment(quote.amount))
        except (PaymentFailed, PaymentCancelled):
            self.cancel_skip()
            raise
        if outcome == PaymentOutcome.SUCCESS:
            self.confirm_skip(quote.to_index)
            return quote
        self.cancel_skip()
        if outcome == PaymentOutcome.CANCELLED:
            raise PaymentCancelled(f"Payment for skip to step {quote.to_index} was cancelled")
        raise PaymentFailed(f"Payment of {quote.amount} for skip to step {quote.to_index} failed")

    # -------------------------------------------------------------------------
    # Completion / tip
    # -------------------------------------------------------------------------

    def tip(self, amount) -> TipResolution:
        resolution = self.tip_flow.tipped(amount)
        self._finish_tip()
        return resolution

    def skip_tip(self) -> TipResolution:
        resolution = self.tip_flow.skipped_tip()
        self._finish_tip()
        return resolution

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(self) -> dict:
        """Get progress summary for display."""
        total = self.trail.step_count
        return {
            "trail_id": self.trail.id,
            "total_steps": total,
            "completed": len(self._progress.completed),
            "current_index": self.current_index,
            "frontier_index": self.frontier_index,
            "progress_percent": round(self.frontier_index / total * 100) if total > 0 else 0,
            "state": self.state.value,
            "pending_skip": self.pending_skip.to_index if self.pending_skip else None,
        }

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _check_index(self, index: int):
        if not 0 <= index <= self.trail.last_index:
            raise InvalidTransition(f"Step index {index} is outside 0..{self.trail.last_index}")

    def _require_in_progress(self):
        if self.state != TrailState.IN_PROGRESS:
            raise InvalidTransition(f"Cannot skip while the trail is {self.state.value}")

    def _refresh_pending_skip(self) -> Optional[SkipQuote]:
        """
        Reprice or drop a quote that is still awaiting confirmation.

        A target that became unlocked drops the quote. Otherwise the quote is
        repriced from the current frontier. Quotes already in payment are
        left alone.
        """
        quote = self.skip_flow.pending
        if quote is None or self.skip_flow.phase != SkipPhase.CONFIRM_PENDING:
            return quote
        if not self.is_locked(quote.to_index):
            self.skip_flow.discard()
            logger.info(f"Step {quote.to_index} was unlocked while its skip was pending; quote dropped")
            return None
        if quote.from_index == self.frontier_index:
            return quote
        repriced = SkipQuote(
            amount=self.quote_skip(quote.to_index),
            from_index=self.frontier_index,
            to_index=quote.to_index,
            kind=quote.kind,
        )
        logger.info(f"Skip to step {quote.to_index} repriced from {quote.amount} to {repriced.amount}")
        return self.skip_flow.reprice(repriced)

    def _mark_completed(self, index: int):
        if index in self._progress.completed:
            return
        self._progress.completed.add(index)
        self.emitter.step_complete(index, self.trail.steps[index].title)

    def _complete_trail(self):
        self.state = TrailState.COMPLETED
        self.tracker.stop_all()
        self.tip_flow.open()
        self.emitter.trail_complete()
        logger.info(f"Trail {self.trail.id} completed")

    def _finish_tip(self):
        if self.tip_flow.is_resolved:
            self.state = TrailState.TIP_RESOLVED

    def _save(self):
        if self.store is not None:
            self.store.save_progress(self.trail.id, self.progress)
