"""
Roll prompt and reveal detection for scene text.

Session notes mark checks like "Roll Persuasion check (DC 12)" and put the
outcome on a following line starting with REVEAL:, SUCCESS: or ON SUCCESS:.
"""
import re
from typing import Optional

from models import ContentBlock, Prose, RevealMatch, RollMatch, RollPrompt

# Matches: "Roll Persuasion check (DC 12)", "roll Dexterity save(DC 15)" ...
ROLL_PATTERN = re.compile(
    r'Roll\s+([A-Za-z ]+?)\s*(check|save|test)\s*\(DC\s*(\d+)\)',
    re.IGNORECASE
)

REVEAL_PATTERN = re.compile(
    r'^(REVEAL|SUCCESS|ON SUCCESS)\s*:\s*(.+)$',
    re.IGNORECASE
)

# Lines after a roll that are searched for its reveal
REVEAL_LOOKAHEAD = 7


def classify_roll(line: str) -> Optional[RollMatch]:
    """Return the roll found anywhere in the line, or None."""
    match = ROLL_PATTERN.search(line)
    if not match:
        return None
    return RollMatch(
        skill=match.group(1).strip(),
        kind=match.group(2).lower(),
        dc=int(match.group(3))
    )


def classify_reveal(line: str) -> Optional[RevealMatch]:
    """Return the reveal if the line starts with a reveal label, or None."""
    match = REVEAL_PATTERN.match(line)
    if not match:
        return None
    return RevealMatch(label=match.group(1).upper(), text=match.group(2).strip())


def find_reveal(
    lines: list[str],
    roll_index: int,
    window: int = REVEAL_LOOKAHEAD
) -> str:
    """
    Find the reveal text for the roll at roll_index.

    Only the next `window` lines are searched and the first reveal wins.
    A reveal is not claimed by the roll that finds it, so two rolls close
    together can both pick up the same line.

    Returns:
        Reveal text, or "" if none is in range
    """
    for line in lines[roll_index + 1:roll_index + 1 + window]:
        reveal = classify_reveal(line)
        if reveal:
            return reveal.text
    return ""


def parse_scene_lines(lines: list[str]) -> tuple[list[ContentBlock], list[RollPrompt]]:
    """
    Split scene lines into content blocks.

    Every line becomes exactly one block, in order. Reveal lines stay in
    the text as prose even after a roll has picked them up.

    Args:
        lines: All lines of the scene

    Returns:
        Tuple of (blocks, rolls) where rolls are the RollPrompt blocks in order
    """
    blocks: list[ContentBlock] = []
    rolls: list[RollPrompt] = []

    for i, line in enumerate(lines):
        if classify_roll(line):
            roll = RollPrompt(roll_text=line, reveal_text=find_reveal(lines, i))
            rolls.append(roll)
            blocks.append(roll)
            continue

        blocks.append(Prose(text=line))

    return blocks, rolls
