"""Pre-Mortem Engine — Streamlit UI for failure roadmaps and strategic inversion."""

import sys
from pathlib import Path

# Add project root to path so 'premortem' package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

import asyncio

import streamlit as st

from premortem import controller
from premortem.graph import resolve
from premortem.state import CATEGORY_ANNOTATIONS, InteractionState, Screen, initial_state
from premortem.utils.formatter import render_session_markdown

st.set_page_config(page_title="The Pre-Mortem Engine", layout="wide")


# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------


def _state() -> InteractionState:
    if "pme_state" not in st.session_state:
        st.session_state["pme_state"] = initial_state()
    return st.session_state["pme_state"]


def _commit(state: InteractionState) -> None:
    st.session_state["pme_state"] = state
    st.rerun()


def _render_error_banner(state: InteractionState) -> None:
    if not state["error"]:
        return
    col_msg, col_btn = st.columns([5, 1])
    col_msg.error(f"ERROR: {state['error']}")
    if col_btn.button("Dismiss", key="dismiss_error"):
        _commit(controller.dismiss_error(state))


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------


def _render_landing(state: InteractionState) -> None:
    st.title("The Pre-Mortem Engine")
    st.caption("Identify critical failure paths through strategic inversion.")

    idea = st.text_input(
        "Target concept",
        value=state["idea"],
        placeholder="e.g. Artisanal ice cube subscription...",
    )
    doom_level = st.slider("Doom magnitude", min_value=1, max_value=10, value=state["doom_level"])
    st.caption(controller.doom_label(doom_level))

    if st.button("Execute Simulation", type="primary", disabled=not idea.strip()):
        # Checkbox keys from a previous roadmap would otherwise re-select items
        for key in [k for k in st.session_state if str(k).startswith("select_")]:
            del st.session_state[key]
        _commit(controller.submit_idea(state, idea, doom_level))


def _render_transient(state: InteractionState, label: str) -> None:
    with st.spinner(label):
        state = asyncio.run(resolve(state))
    _commit(state)


def _render_simulating(state: InteractionState) -> None:
    _render_transient(state, "Running failure scenarios... calculating burn rates, simulating collapse.")


def _render_inverting(state: InteractionState) -> None:
    _render_transient(state, "Inverting chaos into strategy...")


_COLUMNS = [
    ("market_risk", "01. Market Void"),
    ("financial_risk", "02. Cash Bonfire"),
    ("operational_risk", "03. Operational Hell"),
]


def _render_roadmap(state: InteractionState) -> None:
    roadmap = state["roadmap"]

    header, score, autopsy = st.columns([4, 1, 1])
    header.subheader("The Failure Roadmap")
    header.markdown(f"### {state['idea']}")
    score.metric("Doom score", f"{roadmap['doom_score']}%")
    if autopsy.button("View Autopsy"):
        _commit(controller.view_autopsy(state))

    for column, (category, title) in zip(st.columns(3), _COLUMNS):
        with column:
            st.markdown(f"#### {title}")
            annotation_field = CATEGORY_ANNOTATIONS[category]
            for item in roadmap["categories"].get(category, []):
                with st.container(border=True):
                    checked = st.checkbox(
                        f"**{item['title']}**",
                        value=item["id"] in state["selected_ids"],
                        key=f"select_{item['id']}",
                    )
                    st.caption(item["description"])
                    if item.get(annotation_field):
                        st.caption(f"*{item[annotation_field]}*")
                if checked != (item["id"] in state["selected_ids"]):
                    _commit(controller.toggle_selection(state, item["id"]))

    st.divider()
    st.markdown("**Critical phase: selection required.** "
                "Select the decisions that tempt you most to see the path to inversion.")
    if st.button("Invert the Problem", type="primary", disabled=not controller.working_set(state)):
        _commit(controller.invert_selections(state))


def _render_autopsy(state: InteractionState) -> None:
    obituary = state["roadmap"]["obituary"]
    st.caption("Post-Mortem Result")
    st.title(f"“{obituary['headline']}”")

    left, right = st.columns(2)
    with left:
        st.metric("Burn rate", "100%")
        st.caption("All capital depleted. Zero product-market fit. Logistical entropy achieved.")
    with right:
        st.markdown("**Viral Recap** — @techfuneral")
        st.info(obituary["short_form_summary"])

    if st.button("← Back to the Roadmap"):
        _commit(controller.return_to_roadmap(state))


def _render_inversion(state: InteractionState) -> None:
    st.title("The Anti-Fragile Blueprint")
    st.caption("We turned your destruction into your defense.")

    for pair in state["inversion"]:
        with st.container(border=True):
            temptation, rule = st.columns(2)
            temptation.caption("The Temptation")
            temptation.markdown(f"~~{pair['bad_decision']}~~")
            rule.caption("The Strategic Rule")
            rule.markdown(f"**{pair['strategic_rule']}**")

    st.success("Mission ready. These rules are now your guardrails.")
    st.download_button(
        label="Download blueprint.md",
        data=render_session_markdown(state),
        file_name="blueprint.md",
        mime="text/markdown",
    )
    if st.button("Start New Simulation", type="primary"):
        _commit(controller.restart(state))


_SCREENS = {
    Screen.LANDING: _render_landing,
    Screen.SIMULATING: _render_simulating,
    Screen.ROADMAP: _render_roadmap,
    Screen.AUTOPSY: _render_autopsy,
    Screen.INVERTING: _render_inverting,
    Screen.INVERSION: _render_inversion,
}


# ---------------------------------------------------------------------------
# Page logic — driven by the interaction state's screen
# ---------------------------------------------------------------------------

state = _state()
if not state["is_inverted"]:
    st.caption("PRE-MORTEM · CHAOS CONSULTANT ACTIVE")
_render_error_banner(state)
_SCREENS[state["screen"]](state)
