"""
Scene-by-scene session state.

A Session walks the game master through the scenes of one document and
records what happened: reveals from successful rolls and loot notes from
completed scenes.
"""
from typing import Callable, Literal, Optional

from models import LootEntry, RevealEntry, Scene, SceneProjection, SessionSummary
from outline_segmenter import segment_outline
from pdf_extractor import DocumentService, scene_lines
from roll_parser import parse_scene_lines
from summary_export import project_summary

MISSING_REVEAL_PLACEHOLDER = "(No REVEAL/SUCCESS line found after this roll in your notes.)"

Phase = Literal["idle", "viewing", "summarized"]


class DocumentLoadError(Exception):
    """The document could not be turned into scenes."""


class SessionStateError(Exception):
    """A transition was requested that the current phase does not allow."""


class Session:
    """
    Owns the scenes, the current position, loot drafts and the summary.

    Phases:
        idle       - no document loaded
        viewing    - showing scenes[current_index]
        summarized - last scene completed, summary is final

    Callers must not start a second load_document() while one is running,
    and must call mark_roll_success() at most once per roll block.
    """

    def __init__(self):
        self.document: Optional[DocumentService] = None
        self.file_name = ""
        self.phase: Phase = "idle"
        self.scenes: list[Scene] = []
        self.current_index = 0
        self.loot_drafts: dict[int, str] = {}
        self.looted_scenes: set[int] = set()
        self.summary = SessionSummary()
        self.warnings: list[str] = []

    async def load_document(
        self,
        service: Optional[DocumentService],
        file_name: str = "",
        on_page: Optional[Callable[[int], None]] = None
    ) -> list[Scene]:
        """
        Build and hydrate the scenes of a document, then start viewing it.

        Nothing on the session changes unless the whole load succeeds.

        Args:
            service: Opened document
            file_name: Name shown in summaries
            on_page: Progress callback, called with each page number read

        Returns:
            The loaded scenes

        Raises:
            DocumentLoadError: If the document is missing or cannot be read
        """
        if service is None:
            raise DocumentLoadError("No document to load")

        try:
            segmentation = await segment_outline(service)
            for scene in segmentation.scenes:
                lines = await scene_lines(service, scene.start_page, scene.end_page, on_page)
                scene.blocks, scene.rolls = parse_scene_lines(lines)
        except Exception as e:
            raise DocumentLoadError(f"Could not load {file_name or 'document'}: {e}") from e

        self.document = service
        self.file_name = file_name
        self.scenes = segmentation.scenes
        self.warnings = segmentation.warnings
        self.current_index = 0
        self.loot_drafts = {}
        self.looted_scenes = set()
        self.summary = SessionSummary()
        self.phase = "viewing"
        return self.scenes

    @property
    def current_scene(self) -> Optional[Scene]:
        if self.phase != "viewing":
            return None
        return self.scenes[self.current_index]

    @property
    def current_loot_draft(self) -> str:
        return self.loot_drafts.get(self.current_index, "")

    @property
    def is_final_scene(self) -> bool:
        return self.current_index == len(self.scenes) - 1

    def navigate_prev(self, loot_draft: Optional[str] = None) -> None:
        """Go back one scene, keeping the draft of the scene being left."""
        self._require_viewing("navigate")
        if self.current_index == 0:
            return
        self._stash_loot_draft(loot_draft)
        self.current_index -= 1

    def go_to_scene(self, index: int, loot_draft: Optional[str] = None) -> None:
        """Jump straight to a scene without completing the current one."""
        self._require_viewing("navigate")
        if not 0 <= index < len(self.scenes):
            raise IndexError(f"No scene at index {index}")
        self._stash_loot_draft(loot_draft)
        self.current_index = index

    def complete_scene(self, loot_draft: Optional[str] = None) -> Optional[LootEntry]:
        """
        Finish the current scene and move on.

        A non-blank loot draft is added to the summary, trimmed, the first
        time the scene is completed. Completing the last scene ends the
        session.

        Args:
            loot_draft: Loot notes as typed; None keeps the stored draft

        Returns:
            The LootEntry added, if any
        """
        self._require_viewing("complete a scene")
        scene = self.scenes[self.current_index]
        self._stash_loot_draft(loot_draft)

        # One loot entry per scene, even if it is completed again later
        entry = None
        loot = self.current_loot_draft.strip()
        if loot and self.current_index not in self.looted_scenes:
            entry = LootEntry(scene_title=scene.title, loot_text=loot)
            self.summary.loot.append(entry)
            self.looted_scenes.add(self.current_index)

        if self.is_final_scene:
            self.phase = "summarized"
        else:
            self.current_index += 1
        return entry

    navigate_next = complete_scene

    def mark_roll_success(self, roll_text: str, reveal_text: str) -> RevealEntry:
        """
        Record a successful roll on the current scene.

        Repeated calls for the same roll are all recorded.

        Returns:
            The RevealEntry added
        """
        scene = self._require_roll(roll_text, "mark a roll")
        reveal = reveal_text if reveal_text and reveal_text.strip() else MISSING_REVEAL_PLACEHOLDER
        entry = RevealEntry(scene_title=scene.title, roll_text=roll_text, reveal_text=reveal)
        self.summary.reveals.append(entry)
        return entry

    def mark_roll_fail(self, roll_text: str, reveal_text: str = "") -> None:
        """A failed roll reveals nothing; only the roll itself is checked."""
        self._require_roll(roll_text, "mark a roll")

    def reset(self) -> None:
        """Forget the document and everything recorded for it."""
        self.document = None
        self.file_name = ""
        self.phase = "idle"
        self.scenes = []
        self.current_index = 0
        self.loot_drafts = {}
        self.looted_scenes = set()
        self.summary = SessionSummary()
        self.warnings = []

    def projection(self) -> list[SceneProjection]:
        return project_summary(self.scenes, self.summary)

    def _stash_loot_draft(self, loot_draft: Optional[str]) -> None:
        if loot_draft is None:
            loot_draft = self.current_loot_draft
        self.loot_drafts[self.current_index] = loot_draft

    def _require_viewing(self, action: str) -> None:
        if self.phase != "viewing":
            raise SessionStateError(f"Cannot {action} while session is {self.phase}")

    def _require_roll(self, roll_text: str, action: str) -> Scene:
        self._require_viewing(action)
        scene = self.scenes[self.current_index]
        if not any(roll.roll_text == roll_text for roll in scene.rolls):
            raise SessionStateError(f"Roll not found in {scene.title}: {roll_text}")
        return scene
