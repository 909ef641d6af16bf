"""
Shared pytest fixtures for the DM session hub tests.
"""
from __future__ import annotations

from typing import Any, Optional

import fitz
import pytest

from models import OutlineItem


class FakeDocument:
    """In-memory document service. Destinations are plain page numbers."""

    def __init__(self, pages: list[list[str]], outline: Optional[list[OutlineItem]] = None):
        self.pages = pages
        self.outline = outline or []
        self.fragment_calls: list[int] = []

    async def get_page_count(self) -> int:
        return len(self.pages)

    async def get_outline(self) -> list[OutlineItem]:
        return self.outline

    async def resolve_destination(self, destination: Any) -> Optional[int]:
        if isinstance(destination, int) and 1 <= destination <= len(self.pages):
            return destination
        return None

    async def get_page_fragments(self, page_number: int) -> list[str]:
        self.fragment_calls.append(page_number)
        return self.pages[page_number - 1]


class BrokenDocument(FakeDocument):
    """Fails while reading page text."""

    async def get_page_fragments(self, page_number: int) -> list[str]:
        raise RuntimeError("page stream is corrupt")


def bookmark(title: str, page: Any, *children: OutlineItem) -> OutlineItem:
    return OutlineItem(title=title, destination=page, children=list(children))


@pytest.fixture
def session_pages() -> list[list[str]]:
    """Four pages of session notes: two scenes, two rolls."""
    return [
        [
            "The party reaches the gate.",
            "  ",
            "Roll Persuasion check (DC 12)",
            "REVEAL: The guard looks away.",
        ],
        ["The courtyard is quiet."],
        [
            "A dusty vault.",
            "Roll Perception check (DC 15)",
            "Nothing else stands out.",
        ],
        ["A chest sits in the corner."],
    ]


@pytest.fixture
def session_document(session_pages: list[list[str]]) -> FakeDocument:
    outline = [
        bookmark("Chapter 1", 1,
                 bookmark("Scene 1 - The Gate", 1),
                 bookmark("Scene 2 - The Vault", 3)),
        bookmark("Appendix", 4),
    ]
    return FakeDocument(session_pages, outline)


@pytest.fixture
def notes_pdf(tmp_path) -> str:
    """
    A real PDF with nested bookmarks:
        Chapter 1 -> Scene 1 (p1), Scene 2 (p3)
    """
    pdf_path = tmp_path / "notes.pdf"
    doc = fitz.open()
    page_texts = [
        ["The party reaches the gate.", "Roll Persuasion check (DC 12)", "REVEAL: The guard looks away."],
        ["The courtyard is quiet."],
        ["A dusty vault.", "Roll Perception check (DC 15)"],
    ]
    for lines in page_texts:
        page = doc.new_page()
        for n, line in enumerate(lines):
            page.insert_text((72, 72 + n * 40), line, fontsize=11)
    doc.set_toc([
        [1, "Chapter 1", 1],
        [2, "Scene 1", 1],
        [2, "Scene 2", 3],
    ])
    doc.save(str(pdf_path))
    doc.close()
    return str(pdf_path)
