"""
TrailGate - Learner view for creator trails

Streamlit application for following a trail: watch video steps to unlock
the next one, pay to skip ahead, and tip the creator at the end.
Video playback is simulated with Play / Pause / Ended controls.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st

from trailgate.config import get_settings
from trailgate.engine import PaymentOutcome, PlayerEvent
from trailgate.errors import (
    GateNotSatisfied,
    InvalidTipAmount,
    PaymentCancelled,
    PaymentFailed,
    TrailGateError,
)
from trailgate.learner import CachedTrailProvider, SQLiteProgressStore, TrailLoader, start_session
from trailgate.schemas import StepKind, TrailState
from trailgate.utils import StaleCache
from trailgate.viewer import (
    describe_skip,
    describe_tip,
    format_amount,
    get_progress_css,
    minutes_left,
    render_step_list,
    render_watch_progress,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="TrailGate",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)


class DemoPaymentGate:
    """Payment gate whose outcome is chosen in the sidebar."""

    def __init__(self, outcome: PaymentOutcome):
        self.outcome = outcome

    def initiate_skip_payment(self, amount: int) -> PaymentOutcome:
        logger.info(f"Demo payment of {amount}: {self.outcome.value}")
        return self.outcome


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "provider" not in st.session_state:
        loader = TrailLoader(settings.trails_dir)
        st.session_state.loader = loader
        st.session_state.provider = CachedTrailProvider(
            loader, StaleCache(ttl_fresh=10, ttl_stale=300)
        )

    if "store" not in st.session_state:
        st.session_state.store = SQLiteProgressStore(settings.progress_db)

    if "session" not in st.session_state:
        st.session_state.session = None


def open_trail(trail_id: str):
    """Open a trail, closing the previous one."""
    previous = st.session_state.session
    if previous is not None:
        previous.controller.close()
    st.session_state.session = start_session(
        st.session_state.provider,
        trail_id,
        store=st.session_state.store,
        settings=settings,
    )


# -----------------------------------------------------------------------------
# Sidebar
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render trail picker, progress and step list."""
    st.sidebar.title("🧭 TrailGate")

    trail_ids = st.session_state.loader.list_trail_ids()
    if not trail_ids:
        st.sidebar.error(f"No trails found in {settings.trails_dir}")
        return

    session = st.session_state.session
    current_id = session.trail.id if session else trail_ids[0]
    trail_id = st.sidebar.selectbox(
        "Trail", trail_ids, index=trail_ids.index(current_id) if current_id in trail_ids else 0
    )
    if session is None or trail_id != session.trail.id:
        open_trail(trail_id)
        session = st.session_state.session

    controller = session.controller
    stats = controller.summary()
    st.sidebar.markdown(f"**Progress:** {stats['completed']}/{stats['total_steps']} steps")
    st.sidebar.progress(stats["progress_percent"] / 100)

    st.sidebar.divider()
    st.sidebar.markdown(get_progress_css(), unsafe_allow_html=True)
    st.sidebar.markdown(render_step_list(controller), unsafe_allow_html=True)

    for index, step in enumerate(controller.trail.steps):
        if st.sidebar.button(f"Go to {index + 1}. {step.title}", key=f"goto_{index}", use_container_width=True):
            try:
                controller.navigate(index)
            except TrailGateError as e:
                st.sidebar.warning(str(e))
            st.rerun()

    st.sidebar.divider()
    st.sidebar.subheader("Payment simulation")
    st.session_state.payment_outcome = st.sidebar.radio(
        "Skip payments will",
        [o.value for o in PaymentOutcome],
        horizontal=True,
    )

    if st.sidebar.button("Restart trail"):
        controller.restart()
        st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Step View
# -----------------------------------------------------------------------------

def render_step_view():
    """Render the current step with its gate and navigation."""
    session = st.session_state.session
    if session is None:
        st.info("Select a trail from the sidebar to begin.")
        return

    session.tick()
    controller = session.controller
    trail = controller.trail
    index = controller.current_index
    step = trail.steps[index]

    st.title(trail.title)
    st.caption(f"by {trail.creator}" if trail.creator else "")

    render_skip_section()

    st.subheader(f"Step {index + 1} of {trail.step_count}: {step.title}")
    if step.content:
        st.markdown(step.content)

    if step.kind == StepKind.VIDEO:
        render_player_controls(index, step)

    render_navigation_bar()


def render_player_controls(index: int, step):
    """Simulated player: buttons send play/pause/ended signals."""
    session = st.session_state.session
    tracker = session.tracker
    duration = (step.duration_hint or 0) * 60 or None

    if step.source:
        st.video(step.source)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        if st.button("▶ Play", use_container_width=True):
            tracker.on_player_event(index, PlayerEvent.PLAY, duration)
            st.rerun()
    with col2:
        if st.button("⏸ Pause", use_container_width=True):
            tracker.on_player_event(index, PlayerEvent.PAUSE, duration)
            st.rerun()
    with col3:
        if st.button("⏹ Ended", use_container_width=True):
            tracker.on_player_event(index, PlayerEvent.ENDED, duration)
            st.rerun()
    with col4:
        if st.button("↻ Refresh", use_container_width=True):
            st.rerun()

    percentage = tracker.watched_percentage(index)
    st.markdown(render_watch_progress(percentage, tracker.threshold), unsafe_allow_html=True)
    left = minutes_left(step.duration_hint, percentage)
    if left and not tracker.is_video_complete(index):
        st.caption(f"About {left} min left to watch")


def render_navigation_bar():
    """Render prev / next / skip buttons."""
    controller = st.session_state.session.controller
    col1, col2, col3 = st.columns([1, 1, 1])

    with col1:
        if controller.current_index > 0:
            if st.button("← Previous", use_container_width=True):
                controller.previous()
                st.rerun()

    with col2:
        if not controller.is_last_step and controller.is_locked(controller.current_index + 1):
            if st.button("Skip this step", use_container_width=True):
                try:
                    controller.request_skip_this_step()
                except TrailGateError as e:
                    st.warning(str(e))
                st.rerun()

    with col3:
        label = "Claim Reward" if controller.is_last_step else "Next →"
        if st.button(label, type="primary", disabled=not controller.can_proceed(), use_container_width=True):
            try:
                controller.advance()
            except GateNotSatisfied as e:
                st.warning(str(e))
            st.rerun()


def render_skip_section():
    """Confirmation panel for the pending skip quote."""
    controller = st.session_state.session.controller
    quote = controller.pending_skip
    if quote is None:
        return

    with st.container(border=True):
        st.markdown(f"**{describe_skip(quote, controller.trail)}**")
        col1, col2 = st.columns(2)
        with col1:
            if st.button(f"Pay {format_amount(quote.amount, controller.trail.currency)}", type="primary"):
                gate = DemoPaymentGate(PaymentOutcome(st.session_state.payment_outcome))
                try:
                    controller.pay_for_skip(gate)
                    st.success(f"Unlocked step {quote.to_index + 1}")
                except (PaymentFailed, PaymentCancelled) as e:
                    st.error(str(e))
                st.rerun()
        with col2:
            if st.button("Cancel"):
                controller.cancel_skip()
                st.rerun()


# -----------------------------------------------------------------------------
# Completion View
# -----------------------------------------------------------------------------

def render_completion_view():
    """Render the tip decision and the final screen."""
    controller = st.session_state.session.controller

    if controller.state == TrailState.TIP_RESOLVED:
        st.balloons()
        st.title("Thanks for learning!")
        if controller.tip_flow.amount:
            st.success(f"You tipped {format_amount(controller.tip_flow.amount, controller.trail.currency)}.")
        if st.button("Start over"):
            controller.restart()
            st.rerun()
        return

    st.title("🎉 Trail completed!")
    st.markdown(describe_tip(controller))
    amount = st.text_input("Tip amount", value=f"{controller.tip_flow.default_amount:g}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Tip", type="primary", use_container_width=True):
            try:
                controller.tip(amount)
                st.rerun()
            except InvalidTipAmount as e:
                st.error(str(e))
    with col2:
        if st.button("Skip for now", use_container_width=True):
            controller.skip_tip()
            st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()

    session = st.session_state.session
    if session is not None and session.controller.state != TrailState.IN_PROGRESS:
        render_completion_view()
    else:
        render_step_view()


if __name__ == "__main__":
    main()
