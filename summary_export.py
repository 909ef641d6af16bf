"""
Session summary - per-scene projection and export files.
"""
import html
import json
from pathlib import Path

import fitz  # PyMuPDF

from models import LootEntry, RevealEntry, Scene, SceneProjection, SessionSummary

EMPTY_SCENE_NOTE = "No reveals or loot notes recorded for this scene."

# Letter paper, 0.5in margins
PDF_MEDIABOX = fitz.paper_rect("letter")
PDF_WHERE = PDF_MEDIABOX + (36, 36, -36, -36)

PDF_CSS = """
h1 { font-size: 18px; }
h3 { font-size: 14px; margin-top: 12px; }
.muted { color: #666666; font-size: 10px; }
.item { margin-bottom: 6px; font-size: 11px; }
"""


def project_summary(scenes: list[Scene], summary: SessionSummary) -> list[SceneProjection]:
    """
    Group the summary by scene, in scene order.

    Every scene appears exactly once, even with nothing recorded. Entries
    are matched to scenes by title and keep the order they were added in.

    Args:
        scenes: Scenes in document order
        summary: Accumulated reveals and loot

    Returns:
        One SceneProjection per scene
    """
    reveals_by_scene: dict[str, list[RevealEntry]] = {}
    for reveal in summary.reveals:
        reveals_by_scene.setdefault(reveal.scene_title, []).append(reveal)

    loot_by_scene: dict[str, list[LootEntry]] = {}
    for loot in summary.loot:
        loot_by_scene.setdefault(loot.scene_title, []).append(loot)

    return [
        SceneProjection(
            title=scene.title,
            start_page=scene.start_page,
            end_page=scene.end_page,
            reveals=list(reveals_by_scene.get(scene.title, [])),
            loot=list(loot_by_scene.get(scene.title, []))
        )
        for scene in scenes
    ]


def projection_to_dict(projection: list[SceneProjection], file_name: str = "") -> dict:
    """Plain-data form of the projection, for JSON or other exporters."""
    return {
        "source": file_name,
        "scenes": [
            {
                "title": scene.title,
                "start_page": scene.start_page,
                "end_page": scene.end_page,
                "empty": scene.is_empty,
                "reveals": [
                    {"roll": r.roll_text, "reveal": r.reveal_text}
                    for r in scene.reveals
                ],
                "loot": [l.loot_text for l in scene.loot],
            }
            for scene in projection
        ]
    }


def write_summary(
    projection: list[SceneProjection],
    output_dir: str,
    source_pdf: str
) -> str:
    """
    Write a human-readable summary file.

    Args:
        projection: Result of project_summary()
        output_dir: Directory for output
        source_pdf: Original PDF path

    Returns:
        Path to summary file
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    summary_path = Path(output_dir) / "session_summary.txt"

    lines = [
        "Session Summary",
        "=" * 50,
        f"Source: {source_pdf}",
        f"Scenes: {len(projection)}",
        f"Reveals: {sum(len(s.reveals) for s in projection)}",
        f"Loot notes: {sum(len(s.loot) for s in projection)}",
        "",
    ]

    for scene in projection:
        lines.append(f"\n{scene.title} (pages {scene.start_page}-{scene.end_page})")
        lines.append("-" * 50)
        if scene.is_empty:
            lines.append(f"  {EMPTY_SCENE_NOTE}")
            continue
        if scene.reveals:
            lines.append("  Reveals (successful checks):")
            for r in scene.reveals:
                lines.append(f"    - {r.roll_text}")
                lines.append(f"      {r.reveal_text}")
        if scene.loot:
            lines.append("  Loot notes:")
            for l in scene.loot:
                lines.append(f"    - {l.loot_text}")

    with open(summary_path, 'w', encoding='utf-8') as f:
        f.write('\n'.join(lines))

    return str(summary_path)


def write_summary_markdown(
    projection: list[SceneProjection],
    output_dir: str,
    source_pdf: str
) -> str:
    """Write the summary as Markdown. Returns the file path."""
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    output_path = Path(output_dir) / "session_summary.md"

    lines = [
        f"# Session Summary: {Path(source_pdf).name}",
        "",
    ]

    for scene in projection:
        lines.append(f"## {scene.title}")
        lines.append("")
        lines.append(f"_Pages {scene.start_page}-{scene.end_page}_")
        lines.append("")
        if scene.is_empty:
            lines.append(EMPTY_SCENE_NOTE)
            lines.append("")
            continue
        if scene.reveals:
            lines.append("### Reveals (successful checks)")
            lines.append("")
            for r in scene.reveals:
                lines.append(f"- **{r.roll_text}**  ")
                lines.append(f"  {r.reveal_text}")
            lines.append("")
        if scene.loot:
            lines.append("### Loot notes")
            lines.append("")
            for l in scene.loot:
                lines.append(f"- {l.loot_text}")
            lines.append("")

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write('\n'.join(lines))

    return str(output_path)


def write_summary_json(
    projection: list[SceneProjection],
    output_dir: str,
    source_pdf: str
) -> str:
    """Write projection_to_dict() as JSON. Returns the file path."""
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    output_path = Path(output_dir) / "session_summary.json"

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(projection_to_dict(projection, Path(source_pdf).name), f, indent=2)

    return str(output_path)


def summary_html(projection: list[SceneProjection], title: str) -> str:
    """HTML body used for the PDF export."""
    parts = [f"<h1>{html.escape(title)}</h1>"]

    for scene in projection:
        parts.append(f"<h3>{html.escape(scene.title)}</h3>")
        if scene.is_empty:
            parts.append(f'<p class="muted">{EMPTY_SCENE_NOTE}</p>')
            continue
        if scene.reveals:
            parts.append('<p class="muted"><b>Reveals (successful checks)</b></p>')
            for r in scene.reveals:
                parts.append(
                    f'<p class="item"><b>{html.escape(r.roll_text)}</b><br/>'
                    f'{html.escape(r.reveal_text)}</p>'
                )
        if scene.loot:
            parts.append('<p class="muted"><b>Loot notes</b></p>')
            for l in scene.loot:
                parts.append(f'<p class="item">{html.escape(l.loot_text)}</p>')

    return "\n".join(parts)


def write_summary_pdf(
    projection: list[SceneProjection],
    output_dir: str,
    source_pdf: str
) -> str:
    """
    Render the summary into a PDF.

    Args:
        projection: Result of project_summary()
        output_dir: Directory for output
        source_pdf: Original PDF path, names the output "<stem>-summary.pdf"

    Returns:
        Path to the PDF
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    stem = Path(source_pdf).stem or "session"
    output_path = str(Path(output_dir) / f"{stem}-summary.pdf")

    story = fitz.Story(
        html=summary_html(projection, f"Session Summary: {stem}"),
        user_css=PDF_CSS
    )
    writer = fitz.DocumentWriter(output_path)

    more = 1
    while more:
        device = writer.begin_page(PDF_MEDIABOX)
        more, _ = story.place(PDF_WHERE)
        story.draw(device)
        writer.end_page()

    writer.close()
    return output_path
