"""LangGraph StateGraph that resolves the two transient screens.

Simulating and Inverting are left only when a collaborator call finishes.
The graph routes on the current screen, awaits the matching collaborator and
returns the state produced by the controller's *_ready / *_failed transition.
Stable screens pass straight through to END.
"""

import sys

from langgraph.graph import END, StateGraph

from premortem import controller
from premortem.agents.inverter import invert_decisions
from premortem.agents.roadmap import generate_roadmap
from premortem.errors import GenerationFailure
from premortem.state import InteractionState, Screen


def _route_on_screen(state: InteractionState) -> str:
    """Conditional entry: pick the node that resolves the current screen."""
    if state["screen"] == Screen.SIMULATING:
        return "generate_roadmap"
    if state["screen"] == Screen.INVERTING:
        return "invert_decisions"
    return "end"


def _make_roadmap_node(roadmap_fn):
    async def roadmap_node(state: InteractionState) -> dict:
        # doom_level goes through untouched
        try:
            roadmap = await roadmap_fn(state["idea"], state["doom_level"])
        except GenerationFailure as exc:
            print(f"[PME] {exc}", file=sys.stderr)
            return controller.roadmap_failed(state)
        return controller.roadmap_ready(state, roadmap)

    return roadmap_node


def _make_inversion_node(inversion_fn):
    async def inversion_node(state: InteractionState) -> dict:
        items = [
            {"title": item["title"], "description": item["description"]}
            for item in controller.working_set(state)
        ]
        try:
            pairs = await inversion_fn(items)
        except GenerationFailure as exc:
            print(f"[PME] {exc}", file=sys.stderr)
            return controller.inversion_failed(state)
        return controller.inversion_ready(state, pairs)

    return inversion_node


def build_graph(roadmap_fn=generate_roadmap, inversion_fn=invert_decisions):
    """Compile a resolver graph around the given collaborators."""
    workflow = StateGraph(InteractionState)

    workflow.add_node("generate_roadmap", _make_roadmap_node(roadmap_fn))
    workflow.add_node("invert_decisions", _make_inversion_node(inversion_fn))

    workflow.set_conditional_entry_point(
        _route_on_screen,
        {
            "generate_roadmap": "generate_roadmap",
            "invert_decisions": "invert_decisions",
            "end": END,
        },
    )

    workflow.add_edge("generate_roadmap", END)
    workflow.add_edge("invert_decisions", END)

    return workflow.compile()


graph = build_graph()


async def resolve(state: InteractionState, resolver=None) -> InteractionState:
    """Settle a transient screen by running the resolver graph.

    Stable screens are returned unchanged without touching the graph.
    """
    if not controller.is_transient(state):
        return state
    resolver = resolver or graph
    result = await resolver.ainvoke(state)
    return {**state, **result}
