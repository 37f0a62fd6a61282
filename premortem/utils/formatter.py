"""Output Formatter — renders a session's roadmap and guardrail blueprint as Markdown."""

import re
from pathlib import Path

from premortem.config import get_config
from premortem.controller import doom_label
from premortem.state import CATEGORY_ANNOTATIONS, InteractionState

# category -> (section title, label for its annotation)
_SECTIONS = {
    "market_risk": ("Market Void", "Severity"),
    "financial_risk": ("Cash Bonfire", "Estimated burn"),
    "operational_risk": ("Operational Hell", "Time wasted"),
}


def render_roadmap_markdown(state: InteractionState) -> str:
    """Render the failure roadmap and obituary. Empty string if there is no roadmap."""
    roadmap = state.get("roadmap")
    if not roadmap:
        return ""

    selected = state.get("selected_ids", frozenset())
    idea = state.get("idea", "") or "Untitled Idea"
    lines = [f"# {idea} — Failure Roadmap", ""]

    if roadmap.get("concept_summary"):
        lines.append(roadmap["concept_summary"])
        lines.append("")

    doom_level = state.get("doom_level", 5)
    lines.append(f"- **Doom level:** {doom_level}/10 ({doom_label(doom_level)})")
    lines.append(f"- **Doom score:** {roadmap.get('doom_score', 0)}%")
    lines.append("")

    for number, (category, (title, annotation_label)) in enumerate(_SECTIONS.items(), 1):
        items = roadmap.get("categories", {}).get(category, [])
        if not items:
            continue
        lines.append(f"## {number:02d}. {title}")
        lines.append("")
        for item in items:
            marker = "[x]" if item["id"] in selected else "[ ]"
            lines.append(f"- {marker} **{item['title']}** (`{item['id']}`)")
            lines.append(f"  {item['description']}")
            annotation = item.get(CATEGORY_ANNOTATIONS[category])
            if annotation:
                lines.append(f"  *{annotation_label}: {annotation}*")
        lines.append("")

    obituary = roadmap.get("obituary", {})
    if obituary:
        lines.append("## The Obituary")
        lines.append("")
        lines.append(f"> **\"{obituary.get('headline', '')}\"**")
        lines.append(">")
        lines.append(f"> {obituary.get('short_form_summary', '')}")
        lines.append("")

    return "\n".join(lines)


def render_blueprint_markdown(state: InteractionState) -> str:
    """Render the inversion pairs as a table. Empty string before an inversion."""
    pairs = state.get("inversion")
    if not pairs:
        return ""

    lines = [
        "# The Anti-Fragile Blueprint",
        "",
        "| # | The Temptation | The Strategic Rule |",
        "|---|----------------|--------------------|",
    ]
    for i, pair in enumerate(pairs, 1):
        bad = pair["bad_decision"].replace("|", "\\|")
        rule = pair["strategic_rule"].replace("|", "\\|")
        lines.append(f"| {i} | ~~{bad}~~ | **{rule}** |")
    lines.append("")
    return "\n".join(lines)


def render_session_markdown(state: InteractionState) -> str:
    """Roadmap followed by the blueprint, whichever exist."""
    parts = [render_roadmap_markdown(state), render_blueprint_markdown(state)]
    return "\n---\n\n".join(part for part in parts if part)


def _slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:60].rstrip("-")


def write_blueprint(state: InteractionState) -> Path:
    """Write the session Markdown to the configured output directory.

    The filename is derived from the idea; an existing file is never overwritten.
    Returns the Path to the written file.
    """
    config = get_config()
    base_path = Path(__file__).resolve().parent.parent.parent / config["output_path"]
    output_dir = base_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = _slugify(state.get("idea", "")) or base_path.stem

    # Find a non-conflicting filename
    output_path = output_dir / f"{stem}.md"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).md"

    output_path.write_text(render_session_markdown(state), encoding="utf-8")
    return output_path
