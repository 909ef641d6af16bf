"""
Maps scene bookmarks to page ranges.
"""
import re
from typing import Optional

from models import OutlineItem, Scene, SegmentationResult
from pdf_extractor import DocumentService

# "Scene 1", "scene12", "SCENE 3 - The Gate" ...
SCENE_BOOKMARK_PATTERN = re.compile(r'^scene\s*\d+', re.IGNORECASE)

FALLBACK_SCENE_TITLE = "Scene 1"


def flatten_outline(
    items: Optional[list[OutlineItem]],
    out: Optional[list[OutlineItem]] = None
) -> list[OutlineItem]:
    """Flatten the bookmark tree, parents before their children."""
    if out is None:
        out = []
    for item in items or []:
        out.append(item)
        if item.children:
            flatten_outline(item.children, out)
    return out


def is_scene_bookmark(title: Optional[str]) -> bool:
    return bool(SCENE_BOOKMARK_PATTERN.match((title or "").strip()))


def build_scenes(
    marks: list[tuple[str, int]],
    total_pages: int
) -> list[Scene]:
    """
    Convert scene bookmarks to scenes with page ranges.

    Args:
        marks: (title, start page) pairs in outline order
        total_pages: Total pages in document

    Returns:
        Scenes sorted by start page
    """
    if not marks:
        # No scene bookmarks - treat entire doc as one scene
        return [Scene(title=FALLBACK_SCENE_TITLE, start_page=1, end_page=total_pages)]

    # sorted() is stable: bookmarks on the same page keep outline order
    ordered = sorted(marks, key=lambda mark: mark[1])

    scenes = []
    for i, (title, start_page) in enumerate(ordered):
        if i + 1 < len(ordered):
            # Two bookmarks on one page would otherwise give end < start
            end_page = max(start_page, ordered[i + 1][1] - 1)
        else:
            end_page = total_pages
        scenes.append(Scene(title=title, start_page=start_page, end_page=end_page))

    return scenes


async def segment_outline(service: DocumentService) -> SegmentationResult:
    """
    Build the scene list for a document from its bookmarks.

    Only bookmarks titled like "Scene <n>" count. Bookmarks whose
    destination cannot be resolved are skipped rather than failing the
    whole document.

    Args:
        service: Opened document

    Returns:
        SegmentationResult with scenes and warnings

    Raises:
        ValueError: If the document has no pages
    """
    warnings: list[str] = []
    total_pages = await service.get_page_count()
    if total_pages < 1:
        raise ValueError("Document has no pages")
    outline = await service.get_outline()

    candidates = [
        item for item in flatten_outline(outline)
        if is_scene_bookmark(item.title)
    ]

    marks: list[tuple[str, int]] = []
    for item in candidates:
        title = item.title.strip()
        page = await service.resolve_destination(item.destination)
        if page is None:
            warnings.append(f"Bookmark '{title}' has no resolvable destination; skipped")
            continue
        marks.append((title, page))

    if not candidates:
        warnings.append("No scene bookmarks found; using the whole document as one scene")
    elif not marks:
        warnings.append("No scene bookmark could be resolved; using the whole document as one scene")

    return SegmentationResult(
        scenes=build_scenes(marks, total_pages),
        page_count=total_pages,
        warnings=warnings,
        used_fallback=not marks
    )
