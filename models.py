"""
Data models for the DM session hub.
"""
from dataclasses import dataclass, field
from typing import Any, Literal, Union


@dataclass
class OutlineItem:
    """One bookmark in a document's outline tree."""
    title: str
    destination: Any          # Opaque, resolved by the document service
    children: list["OutlineItem"] = field(default_factory=list)


@dataclass
class Prose:
    """A plain line of scene text."""
    text: str
    kind: Literal["prose"] = field(default="prose", init=False)


@dataclass
class RollPrompt:
    """A roll line and the reveal text found after it."""
    roll_text: str
    reveal_text: str = ""     # Empty when no reveal was found
    kind: Literal["roll"] = field(default="roll", init=False)

    @property
    def has_reveal(self) -> bool:
        return bool(self.reveal_text)


ContentBlock = Union[Prose, RollPrompt]


@dataclass(frozen=True)
class RollMatch:
    """A line recognised as a roll prompt."""
    skill: str
    kind: str                 # check, save or test
    dc: int


@dataclass(frozen=True)
class RevealMatch:
    """A line recognised as reveal text."""
    label: str
    text: str


@dataclass
class Scene:
    """A named, contiguous page range of the session document."""
    title: str
    start_page: int           # First page of scene (1-indexed)
    end_page: int             # Last page of scene (inclusive)
    blocks: list[ContentBlock] = field(default_factory=list)
    rolls: list[RollPrompt] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return self.end_page - self.start_page + 1


@dataclass
class SegmentationResult:
    """Scenes built from an outline, plus anything worth telling the user."""
    scenes: list[Scene]
    page_count: int
    warnings: list[str] = field(default_factory=list)
    used_fallback: bool = False


@dataclass(frozen=True)
class RevealEntry:
    scene_title: str
    roll_text: str
    reveal_text: str


@dataclass(frozen=True)
class LootEntry:
    scene_title: str
    loot_text: str


@dataclass
class SessionSummary:
    """Everything collected during a pass through the scenes."""
    reveals: list[RevealEntry] = field(default_factory=list)
    loot: list[LootEntry] = field(default_factory=list)


@dataclass
class SceneProjection:
    """Summary view of one scene."""
    title: str
    start_page: int
    end_page: int
    reveals: list[RevealEntry]
    loot: list[LootEntry]

    @property
    def is_empty(self) -> bool:
        return not self.reveals and not self.loot
