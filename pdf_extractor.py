"""
PDF access and per-page line extraction.
"""
import re
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import fitz  # PyMuPDF

from models import OutlineItem

# Three or more line breaks mark a large vertical gap; keep one blank line
BLANK_RUN_PATTERN = re.compile(r'\n{3,}')

PAGE_SEPARATOR = ""


class DocumentService(Protocol):
    """What the session needs from an opened document."""

    async def get_page_count(self) -> int: ...

    async def get_outline(self) -> list[OutlineItem]: ...

    async def resolve_destination(self, destination: Any) -> Optional[int]: ...

    async def get_page_fragments(self, page_number: int) -> list[str]: ...


class PdfDocument:
    """
    Document service backed by PyMuPDF.

    Usage:
        with PdfDocument("session.pdf") as doc:
            session = Session()
            await session.load_document(doc, file_name=doc.file_name)
    """

    def __init__(self, pdf_path: str):
        self.pdf_path = pdf_path
        self._doc = fitz.open(pdf_path)
        self._named: Optional[dict] = None

    @property
    def file_name(self) -> str:
        return Path(self.pdf_path).name

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def get_page_count(self) -> int:
        return len(self._doc)

    async def get_outline(self) -> list[OutlineItem]:
        return build_outline_tree(self._doc.get_toc(simple=False))

    async def resolve_destination(self, destination: Any) -> Optional[int]:
        """
        Resolve a bookmark destination to a 1-indexed page.

        Returns:
            Page number, or None if the bookmark points nowhere in this file
        """
        if not isinstance(destination, dict):
            return None

        page = destination.get("toc_page", -1)
        if page < 1:
            name = destination.get("nameddest") or destination.get("name")
            if name:
                target = self._named_destinations().get(name)
                if target:
                    page = target.get("page", -1) + 1

        if 1 <= page <= len(self._doc):
            return page
        return None

    async def get_page_fragments(self, page_number: int) -> list[str]:
        """
        Text fragments of one page, in document order.

        Each fragment is one text line as PyMuPDF groups it; spans on the
        same line are joined so bold skill names stay with their roll.
        """
        page = self._doc[page_number - 1]
        fragments = []
        for block in page.get_text("dict")["blocks"]:
            if block.get("type") != 0:
                continue  # image
            for line in block["lines"]:
                fragments.append("".join(span["text"] for span in line["spans"]))
        return fragments

    def _named_destinations(self) -> dict:
        if self._named is None:
            self._named = self._doc.resolve_names()
        return self._named


def build_outline_tree(toc: list) -> list[OutlineItem]:
    """
    Rebuild the bookmark tree from a flat PyMuPDF TOC.

    Args:
        toc: Entries of [level, title, page, dest] (or [level, title, page])

    Returns:
        Top-level OutlineItems with their children attached
    """
    roots: list[OutlineItem] = []
    stack: list[tuple[int, OutlineItem]] = []

    for entry in toc:
        level, title, page = entry[0], entry[1], entry[2]
        dest = dict(entry[3]) if len(entry) > 3 and isinstance(entry[3], dict) else {}
        dest["toc_page"] = page
        item = OutlineItem(title=title, destination=dest)

        while stack and stack[-1][0] >= level:
            stack.pop()
        if stack:
            stack[-1][1].children.append(item)
        else:
            roots.append(item)
        stack.append((level, item))

    return roots


def page_lines(fragments: list[str]) -> list[str]:
    """
    Turn one page's raw text fragments into trimmed, non-empty lines.

    Best effort: PDFs with odd extraction order may merge or split lines.
    """
    strings = [f.strip() for f in fragments if f and f.strip()]
    joined = BLANK_RUN_PATTERN.sub('\n\n', '\n'.join(strings))
    return [line.strip() for line in joined.split('\n') if line.strip()]


async def scene_lines(
    service: DocumentService,
    start_page: int,
    end_page: int,
    on_page: Optional[Callable[[int], None]] = None
) -> list[str]:
    """
    Collect the lines of a page range, one blank line between pages.

    The blank separator keeps the pages apart while still letting a roll
    near the bottom of a page find its reveal at the top of the next.

    Args:
        service: Document to read from
        start_page: First page (1-indexed)
        end_page: Last page (inclusive)
        on_page: Called with each page number once it has been read

    Returns:
        Ordered lines for the whole range
    """
    lines: list[str] = []
    for page_num in range(start_page, end_page + 1):
        if page_num > start_page:
            lines.append(PAGE_SEPARATOR)
        lines.extend(page_lines(await service.get_page_fragments(page_num)))
        if on_page is not None:
            on_page(page_num)
    return lines
