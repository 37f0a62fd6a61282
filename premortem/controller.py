"""Interaction Controller — pure transitions over the six-screen session state.

Every public function takes the current InteractionState and returns a new
one; the input record is never mutated. Which action is legal on which screen
lives in TRANSITIONS, so the flow can be tested without any rendering:

    LANDING    --submit_idea-------> SIMULATING
    SIMULATING --roadmap_ready-----> ROADMAP
    SIMULATING --roadmap_failed----> LANDING
    ROADMAP    --toggle_selection--> ROADMAP
    ROADMAP    --view_autopsy------> AUTOPSY
    AUTOPSY    --return_to_roadmap-> ROADMAP
    ROADMAP    --invert_selections-> INVERTING
    INVERTING  --inversion_ready---> INVERSION
    INVERTING  --inversion_failed--> ROADMAP

restart() and dismiss_error() are accepted on every screen.
"""

from premortem.config import get_config
from premortem.errors import InvalidTransition
from premortem.state import (
    FailureItem,
    InteractionState,
    InversionPair,
    RoadmapResult,
    Screen,
    all_items,
    initial_state,
)
from premortem.utils.validator import validate_doom_level, validate_input

ROADMAP_FAILED_MESSAGE = "Analysis corrupted. The chaos was too great."
INVERSION_FAILED_MESSAGE = "Failed to invert chaos. Darkness prevails."

TRANSITIONS: dict[tuple[Screen, str], Screen] = {
    (Screen.LANDING, "submit_idea"): Screen.SIMULATING,
    (Screen.SIMULATING, "roadmap_ready"): Screen.ROADMAP,
    (Screen.SIMULATING, "roadmap_failed"): Screen.LANDING,
    (Screen.ROADMAP, "toggle_selection"): Screen.ROADMAP,
    (Screen.ROADMAP, "view_autopsy"): Screen.AUTOPSY,
    (Screen.AUTOPSY, "return_to_roadmap"): Screen.ROADMAP,
    (Screen.ROADMAP, "invert_selections"): Screen.INVERTING,
    (Screen.INVERTING, "inversion_ready"): Screen.INVERSION,
    (Screen.INVERTING, "inversion_failed"): Screen.ROADMAP,
}

# Screens that are only left by a collaborator resolving
TRANSIENT_SCREENS = frozenset({Screen.SIMULATING, Screen.INVERTING})


def next_screen(screen: Screen, action: str) -> Screen:
    """Look up the screen an action leads to, or raise InvalidTransition."""
    try:
        return TRANSITIONS[(screen, action)]
    except KeyError:
        raise InvalidTransition(
            f"Action '{action}' is not allowed on screen '{screen.value}'."
        ) from None


def _apply(state: InteractionState, action: str, **updates) -> InteractionState:
    """Return a copy of state moved along the edge for action, with updates merged in."""
    screen = next_screen(state["screen"], action)
    return {**state, **updates, "screen": screen}


def doom_label(doom_level: int) -> str:
    """Human label for a doom level, as shown next to the slider."""
    if doom_level <= 3:
        return "Annoying Flop"
    if doom_level <= 7:
        return "Financial Ruin"
    return "Federal Indictment"


def is_transient(state: InteractionState) -> bool:
    """True while a remote call is outstanding."""
    return state["screen"] in TRANSIENT_SCREENS


# --- Roadmap round trip ---


def submit_idea(state: InteractionState, text: str, doom_level: int) -> InteractionState:
    """Landing → Simulating. The resolver then calls the roadmap generator."""
    # Screen check first so a second submit while Simulating is rejected as a transition
    next_screen(state["screen"], "submit_idea")
    idea = validate_input(text)
    doom_level = validate_doom_level(doom_level)
    return _apply(
        state,
        "submit_idea",
        idea=idea,
        doom_level=doom_level,
        roadmap=None,
        selected_ids=frozenset(),
        inversion=None,
        error=None,
    )


def roadmap_ready(state: InteractionState, roadmap: RoadmapResult) -> InteractionState:
    """Simulating → Roadmap with the generated roadmap stored."""
    return _apply(state, "roadmap_ready", roadmap=roadmap, selected_ids=frozenset())


def roadmap_failed(
    state: InteractionState, message: str = ROADMAP_FAILED_MESSAGE
) -> InteractionState:
    """Simulating → Landing. Partial results are discarded; idea and doom level are kept."""
    return _apply(
        state,
        "roadmap_failed",
        roadmap=None,
        selected_ids=frozenset(),
        inversion=None,
        error=message,
    )


# --- Roadmap screen ---


def toggle_selection(state: InteractionState, item_id: str) -> InteractionState:
    """Flip membership of item_id in the selection. Unknown ids are ignored."""
    selected = state["selected_ids"]
    known_ids = {item["id"] for item in all_items(state["roadmap"])}
    if item_id not in known_ids:
        return _apply(state, "toggle_selection")
    if item_id in selected:
        selected = selected - {item_id}
    else:
        selected = selected | {item_id}
    return _apply(state, "toggle_selection", selected_ids=selected)


def view_autopsy(state: InteractionState) -> InteractionState:
    return _apply(state, "view_autopsy")


def return_to_roadmap(state: InteractionState) -> InteractionState:
    return _apply(state, "return_to_roadmap")


# --- Inversion round trip ---


def working_set(state: InteractionState) -> list[FailureItem]:
    """Items an inversion would use.

    Selected items in category order (market, financial, operational), each
    category keeping its original order. With nothing selected, the first
    fallback_selection_size items in that order; fewer if the roadmap is short.
    """
    items = all_items(state["roadmap"])
    selected = state["selected_ids"]
    if selected:
        return [item for item in items if item["id"] in selected]
    fallback_size = get_config().get("fallback_selection_size", 3)
    return items[:fallback_size]


def invert_selections(state: InteractionState) -> InteractionState:
    """Roadmap → Inverting. The resolver then calls the inverter with working_set()."""
    next_screen(state["screen"], "invert_selections")
    if not working_set(state):
        raise InvalidTransition("The roadmap has no failure items to invert.")
    return _apply(state, "invert_selections", error=None)


def inversion_ready(state: InteractionState, pairs: list[InversionPair]) -> InteractionState:
    """Inverting → Inversion. Inverted mode is switched on for the rest of the session."""
    return _apply(state, "inversion_ready", inversion=list(pairs), is_inverted=True)


def inversion_failed(
    state: InteractionState, message: str = INVERSION_FAILED_MESSAGE
) -> InteractionState:
    """Inverting → Roadmap. Roadmap and selection are left as they were."""
    return _apply(state, "inversion_failed", inversion=None, error=message)


# --- Any screen ---


def restart(state: InteractionState) -> InteractionState:
    """Discard the session and start over from Landing."""
    return initial_state()


def dismiss_error(state: InteractionState) -> InteractionState:
    return {**state, "error": None}
