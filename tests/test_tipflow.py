"""Tests for the post-completion tip decision."""

from decimal import Decimal

import pytest

from trailgate.engine import EventEmitter, InMemoryEventLog, TipFlow, TipResolution, parse_tip_amount
from trailgate.errors import InvalidTipAmount, InvalidTransition
from trailgate.schemas import EventType


@pytest.fixture
def log():
    return InMemoryEventLog()


@pytest.fixture
def flow(log):
    tip_flow = TipFlow(25.0, EventEmitter("trail-1", [log]))
    tip_flow.open()
    return tip_flow


class TestParseTipAmount:

    @pytest.mark.parametrize("amount,expected", [
        (10, 10.0),
        (2.5, 2.5),
        (0, 0.0),
        ("12.50", 12.5),
        (" 7 ", 7.0),
        (Decimal("3.25"), 3.25),
    ])
    def test_valid(self, amount, expected):
        assert parse_tip_amount(amount) == expected

    @pytest.mark.parametrize("amount", [
        -1,
        "-0.5",
        "abc",
        "",
        float("nan"),
        float("inf"),
        True,
        None,
        [5],
    ])
    def test_invalid(self, amount):
        with pytest.raises(InvalidTipAmount):
            parse_tip_amount(amount)


class TestTipFlow:

    def test_default_amount(self, flow):
        assert flow.default_amount == 25.0

    def test_not_open_before_completion(self, log):
        flow = TipFlow(25.0, EventEmitter("trail-1", [log]))
        with pytest.raises(InvalidTransition):
            flow.tipped(5)
        with pytest.raises(InvalidTransition):
            flow.skipped_tip()

    def test_tipped(self, flow, log):
        assert flow.tipped("10") == TipResolution.TIPPED
        assert flow.amount == 10.0
        assert not flow.is_open
        events = log.by_type(EventType.TIP_DONATED)
        assert [e.data for e in events] == [{"amount": 10.0}]

    def test_tipped_is_idempotent(self, flow, log):
        flow.tipped(10)
        flow.tipped(10)
        assert len(log.by_type(EventType.TIP_DONATED)) == 1

    def test_skip_after_tip_is_ignored(self, flow):
        flow.tipped(10)
        assert flow.skipped_tip() == TipResolution.TIPPED
        assert flow.amount == 10.0

    def test_tip_after_skip_is_ignored(self, flow, log):
        flow.skipped_tip()
        assert flow.tipped(10) == TipResolution.SKIPPED
        assert flow.amount is None
        assert log.events == []

    def test_invalid_amount_leaves_flow_open(self, flow, log):
        with pytest.raises(InvalidTipAmount):
            flow.tipped(-3)
        assert flow.is_open
        assert not flow.is_resolved
        assert log.events == []

    def test_reset(self, flow):
        flow.tipped(1)
        flow.reset()
        assert not flow.is_resolved
        assert not flow.is_open
        flow.open()
        assert flow.skipped_tip() == TipResolution.SKIPPED

    def test_open_after_resolution_is_noop(self, flow):
        flow.skipped_tip()
        flow.open()
        assert not flow.is_open

    def test_without_emitter(self):
        flow = TipFlow(5.0)
        flow.open()
        assert flow.tipped(5) == TipResolution.TIPPED
