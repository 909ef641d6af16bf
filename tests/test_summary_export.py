"""
Tests for summary_export.py - projection and summary files.
"""
import json
from pathlib import Path

import fitz
import pytest

from models import LootEntry, RevealEntry, Scene, SessionSummary
from summary_export import (
    EMPTY_SCENE_NOTE,
    project_summary,
    projection_to_dict,
    write_summary,
    write_summary_json,
    write_summary_markdown,
    write_summary_pdf,
)


@pytest.fixture
def scenes():
    return [
        Scene(title="Scene 1", start_page=1, end_page=2),
        Scene(title="Scene 2", start_page=3, end_page=3),
        Scene(title="Scene 3", start_page=4, end_page=6),
    ]


@pytest.fixture
def summary():
    # Accumulated out of scene order on purpose
    return SessionSummary(
        reveals=[
            RevealEntry("Scene 3", "Roll Arcana check (DC 16)", "The runes glow."),
            RevealEntry("Scene 1", "Roll Persuasion check (DC 12)", "The guard looks away."),
            RevealEntry("Scene 3", "Roll Insight check (DC 10)", "Zeta is lying."),
        ],
        loot=[
            LootEntry("Scene 1", "3 gold coins"),
            LootEntry("Scene 3", "<Ring> & amulet"),
        ],
    )


class TestProjectSummary:

    def test_every_scene_once_in_scene_order(self, scenes, summary):
        projection = project_summary(scenes, summary)

        assert [p.title for p in projection] == ["Scene 1", "Scene 2", "Scene 3"]
        assert [(p.start_page, p.end_page) for p in projection] == [(1, 2), (3, 3), (4, 6)]

    def test_entries_keep_insertion_order(self, scenes, summary):
        projection = project_summary(scenes, summary)

        assert [r.reveal_text for r in projection[2].reveals] == ["The runes glow.", "Zeta is lying."]
        assert [r.roll_text for r in projection[0].reveals] == ["Roll Persuasion check (DC 12)"]
        assert [l.loot_text for l in projection[0].loot] == ["3 gold coins"]

    def test_empty_scene_is_marked(self, scenes, summary):
        projection = project_summary(scenes, summary)

        assert projection[1].is_empty
        assert projection[1].reveals == []
        assert projection[1].loot == []
        assert not projection[0].is_empty

    def test_scene_with_only_loot_is_not_empty(self, scenes):
        projection = project_summary(scenes, SessionSummary(loot=[LootEntry("Scene 2", "rope")]))
        assert not projection[1].is_empty

    def test_pure_and_repeatable(self, scenes, summary):
        first = project_summary(scenes, summary)
        second = project_summary(scenes, summary)

        assert first == second
        assert len(summary.reveals) == 3
        assert len(summary.loot) == 2

    def test_nothing_recorded(self, scenes):
        projection = project_summary(scenes, SessionSummary())
        assert all(p.is_empty for p in projection)


class TestProjectionToDict:

    def test_serializable(self, scenes, summary):
        data = projection_to_dict(project_summary(scenes, summary), "notes.pdf")

        assert data["source"] == "notes.pdf"
        assert [s["title"] for s in data["scenes"]] == ["Scene 1", "Scene 2", "Scene 3"]
        assert data["scenes"][1]["empty"] is True
        assert data["scenes"][0]["reveals"] == [
            {"roll": "Roll Persuasion check (DC 12)", "reveal": "The guard looks away."}
        ]
        assert data["scenes"][2]["loot"] == ["<Ring> & amulet"]
        assert json.loads(json.dumps(data)) == data


class TestSummaryFiles:

    def test_text_summary(self, scenes, summary, tmp_path):
        path = write_summary(project_summary(scenes, summary), str(tmp_path / "out"), "notes.pdf")

        text = Path(path).read_text(encoding="utf-8")
        assert Path(path).name == "session_summary.txt"
        assert "Reveals: 3" in text
        assert "Loot notes: 2" in text
        assert EMPTY_SCENE_NOTE in text
        assert text.index("Scene 1 (pages 1-2)") < text.index("Scene 2 (pages 3-3)") < text.index("Scene 3 (pages 4-6)")

    def test_markdown_summary(self, scenes, summary, tmp_path):
        path = write_summary_markdown(project_summary(scenes, summary), str(tmp_path), "/data/notes.pdf")

        text = Path(path).read_text(encoding="utf-8")
        assert text.startswith("# Session Summary: notes.pdf")
        assert "## Scene 2" in text
        assert "- **Roll Arcana check (DC 16)**" in text
        assert "- 3 gold coins" in text

    def test_json_summary(self, scenes, summary, tmp_path):
        path = write_summary_json(project_summary(scenes, summary), str(tmp_path), "notes.pdf")

        data = json.loads(Path(path).read_text(encoding="utf-8"))
        assert data["source"] == "notes.pdf"
        assert len(data["scenes"]) == 3

    def test_pdf_summary(self, scenes, summary, tmp_path):
        path = write_summary_pdf(project_summary(scenes, summary), str(tmp_path), "/data/notes.pdf")

        assert Path(path).name == "notes-summary.pdf"
        doc = fitz.open(path)
        text = "".join(page.get_text() for page in doc)
        doc.close()

        assert "Scene 1" in text
        assert "The guard looks away." in text
        assert "<Ring> & amulet" in text
        assert EMPTY_SCENE_NOTE in text
