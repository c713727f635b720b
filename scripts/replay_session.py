#!/usr/bin/env python3
"""
replay_session.py - Replay a scripted learner session against a trail.

Runs a YAML list of learner actions (player signals, waits, navigation,
skips, tips) through the progression engine on a simulated clock and
prints the analytics events and final progress.

Actions:
  - {action: play|pause|ended, step: 0, duration: 300}
  - {action: wait, seconds: 120}
  - {action: navigate, step: 1}
  - {action: advance}
  - {action: skip, to: 2, payment: success|failed|cancelled}
  - {action: skip_this_step, payment: success}
  - {action: tip, amount: 10}
  - {action: skip_tip}
  - {action: restart}

Usage:
  python scripts/replay_session.py --trail web-basics --actions session.yaml
  python scripts/replay_session.py --trail web-basics --actions session.yaml --events-out data/events.jsonl
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import yaml
from dotenv import load_dotenv
load_dotenv(PROJECT_ROOT / ".env")

from trailgate.config import get_settings
from trailgate.engine import (
    JsonlEventSink,
    ManualClock,
    PaymentOutcome,
    PlayerEvent,
    PollingScheduler,
)
from trailgate.errors import TrailGateError
from trailgate.learner import InMemoryProgressStore, LearnerSession, TrailLoader, start_session

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class ScriptedPaymentGate:
    """Payment gate returning a fixed outcome."""

    def __init__(self, outcome: str):
        self.outcome = PaymentOutcome(outcome)

    def initiate_skip_payment(self, amount: int) -> PaymentOutcome:
        return self.outcome


def run_action(session: LearnerSession, clock: ManualClock, action: dict):
    """Apply one scripted action."""
    controller = session.controller
    kind = action["action"]

    if kind in ("play", "pause", "ended"):
        session.tracker.on_player_event(action["step"], PlayerEvent(kind), action.get("duration"))
    elif kind == "wait":
        remaining = float(action["seconds"])
        # step the clock one sampler interval at a time so samples land in order
        interval = session.tracker.sample_interval
        while remaining > 0:
            delta = min(interval, remaining)
            clock.advance(delta)
            session.tick()
            remaining -= delta
    elif kind == "navigate":
        quote = controller.navigate(action["step"])
        if quote:
            logger.info(f"Step {action['step']} is locked; skip costs {quote.amount}")
    elif kind == "advance":
        controller.advance()
    elif kind in ("skip", "skip_this_step"):
        quote = controller.request_skip(action["to"]) if kind == "skip" else controller.request_skip_this_step()
        if quote is not None:
            controller.pay_for_skip(ScriptedPaymentGate(action.get("payment", "success")))
    elif kind == "tip":
        controller.tip(action["amount"])
    elif kind == "skip_tip":
        controller.skip_tip()
    elif kind == "restart":
        controller.restart()
    else:
        raise ValueError(f"Unknown action: {kind}")


def main():
    parser = argparse.ArgumentParser(description="Replay a scripted learner session")
    parser.add_argument("--trail", required=True, help="Trail ID")
    parser.add_argument("--actions", type=Path, required=True, help="YAML file with the action list")
    parser.add_argument("--trails-dir", type=Path, default=None, help="Directory of trail documents")
    parser.add_argument("--events-out", type=Path, default=None, help="Append events as JSON lines here")
    args = parser.parse_args()

    settings = get_settings()
    loader = TrailLoader(args.trails_dir or settings.trails_dir)

    with open(args.actions, "r", encoding="utf-8") as f:
        actions = yaml.safe_load(f) or []

    clock = ManualClock()
    sinks = [JsonlEventSink(args.events_out)] if args.events_out else []
    session = start_session(
        loader,
        args.trail,
        store=InMemoryProgressStore(),
        scheduler=PollingScheduler(clock),
        sinks=sinks,
        settings=settings,
    )

    failures = 0
    for number, action in enumerate(actions, 1):
        try:
            run_action(session, clock, action)
        except TrailGateError as e:
            failures += 1
            logger.warning(f"Action {number} ({action.get('action')}) rejected: {e}")

    session.controller.close()

    for event in session.event_log.events:
        print(json.dumps(event.to_record(), ensure_ascii=False))
    print(json.dumps(session.controller.summary(), ensure_ascii=False))

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
