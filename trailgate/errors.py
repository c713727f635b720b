"""
Error taxonomy for the progression engine.

None of these conditions is fatal: each is recoverable by a user retry or
an explicit restart of the trail.
"""


class TrailGateError(Exception):
    """Base class for all engine errors."""


class GateNotSatisfied(TrailGateError):
    """advance() was called before the current step's watch/ack threshold."""

    def __init__(self, step_index: int, watched_percentage: float = 0.0):
        self.step_index = step_index
        self.watched_percentage = watched_percentage
        super().__init__(
            f"Step {step_index} is not complete yet "
            f"({watched_percentage:.0f}% watched)"
        )


class SkipAlreadyPending(TrailGateError):
    """A different skip is already waiting for payment."""

    def __init__(self, pending_to_index: int, requested_to_index: int):
        self.pending_to_index = pending_to_index
        self.requested_to_index = requested_to_index
        super().__init__(
            f"A skip to step {pending_to_index} is already pending; "
            f"cannot request a skip to step {requested_to_index}"
        )


class InvalidTipAmount(TrailGateError):
    """Tip amount is negative, non-finite or not a number."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Tip amount must be a non-negative number, got {amount!r}")


class PaymentFailed(TrailGateError):
    """The payment gate reported a failed skip payment."""


class PaymentCancelled(TrailGateError):
    """The learner cancelled the skip payment."""


class PlayerUnavailable(TrailGateError):
    """The video player cannot report a usable duration."""


class InvalidTransition(TrailGateError):
    """Operation not allowed in the current trail state."""


class TrailNotFound(TrailGateError):
    """No trail document exists for the requested id."""
