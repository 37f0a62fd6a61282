"""Entry point: collects the idea, drives the controller, prints roadmap and blueprint."""

import asyncio
import sys

from premortem import controller
from premortem.graph import resolve
from premortem.state import InteractionState, all_items, initial_state
from premortem.utils.formatter import (
    render_blueprint_markdown,
    render_roadmap_markdown,
    write_blueprint,
)


def _collect_doom_level(default: int) -> int:
    """Prompt for a doom level until a number in [1, 10] is given."""
    while True:
        choice = input(f"Doom level 1-10 [{default}]: ").strip()
        if not choice:
            return default
        try:
            level = int(choice)
        except ValueError:
            print("Please enter a number.")
            continue
        if 1 <= level <= 10:
            return level
        print("Please enter a number between 1 and 10.")


def _collect_selection(state: InteractionState) -> InteractionState:
    """Let the user toggle items by id until they submit an empty line."""
    known = {item["id"] for item in all_items(state["roadmap"])}
    print("\nToggle the decisions that tempt you most (ids separated by spaces).")
    print("Press Enter on an empty line to invert. Nothing selected uses the first three.\n")

    while True:
        chosen = sorted(state["selected_ids"])
        line = input(f"Selected {chosen or 'none'} > ").strip()
        if not line:
            return state
        for item_id in line.split():
            if item_id not in known:
                print(f"Unknown id '{item_id}' — ignored.")
            state = controller.toggle_selection(state, item_id)


async def _run_session(idea: str, doom_level: int, interactive: bool) -> InteractionState:
    state = initial_state()

    state = controller.submit_idea(state, idea, doom_level)
    print(f"[PME] Running failure scenarios ({controller.doom_label(doom_level)})...")
    state = await resolve(state)
    if state["error"]:
        print(f"ERROR: {state['error']}", file=sys.stderr)
        return state

    print()
    print(render_roadmap_markdown(state))

    if interactive:
        state = _collect_selection(state)

    state = controller.invert_selections(state)
    print("[PME] Inverting chaos into strategy...")
    state = await resolve(state)
    if state["error"]:
        print(f"ERROR: {state['error']}", file=sys.stderr)
        return state

    print()
    print(render_blueprint_markdown(state))
    return state


def run(idea: str, doom_level: int | None = None, interactive: bool = True) -> InteractionState:
    """Run one full Pre-Mortem session on an idea string.

    Args:
        idea: The business idea to tear apart.
        doom_level: 1-10. None prompts for it (or uses the default when not interactive).
        interactive: When False, no selection prompt; the fallback items are inverted.
    """
    default = initial_state()["doom_level"]
    if doom_level is None:
        doom_level = _collect_doom_level(default) if interactive else default

    state = asyncio.run(_run_session(idea, doom_level, interactive))

    if state["roadmap"]:
        output_path = write_blueprint(state)
        print(f"[PME] Output written to: {output_path}")
    return state


def main() -> None:
    """CLI entry point — accepts the idea as argument or from stdin."""
    args = sys.argv[1:]
    doom_level = None
    interactive = True

    if "--no-interactive" in args:
        interactive = False
        args.remove("--no-interactive")

    if "--doom" in args:
        idx = args.index("--doom")
        try:
            doom_level = int(args[idx + 1])
        except (IndexError, ValueError):
            print("--doom needs a number between 1 and 10.", file=sys.stderr)
            sys.exit(2)
        del args[idx:idx + 2]

    if args:
        idea = " ".join(args)
    else:
        print("Enter your business idea (Ctrl+D / Ctrl+Z to submit):")
        idea = sys.stdin.read()

    try:
        state = run(idea, doom_level=doom_level, interactive=interactive)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(2)

    if state["error"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
