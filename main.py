"""
DM Session Hub - CLI Interface

Walk through a session PDF scene by scene, mark roll outcomes and loot,
and write a session summary at the end.

Scenes come from PDF bookmarks named "Scene 1", "Scene 2", ... and rolls
from lines like "Roll Persuasion check (DC 12)" followed by a
"REVEAL: ..." line.

Usage:
    python main.py notes.pdf [--preview] [-o OUTPUT_DIR] [--json] [--no-pdf]
"""
import argparse
import asyncio
import sys
from pathlib import Path

from tqdm import tqdm

from models import Prose
from pdf_extractor import PdfDocument
from session import DocumentLoadError, Session
from summary_export import write_summary, write_summary_json, write_summary_markdown, write_summary_pdf

COMMAND_HELP = """Commands:
  s N       roll N succeeded (adds its reveal to the summary)
  f N       roll N failed
  l TEXT    set loot notes for this scene (l alone shows them, l - clears)
  p         previous scene
  g N       go to scene N
  c         complete scene and continue
  q         stop here and write the summary"""


def main():
    parser = argparse.ArgumentParser(
        description="Run a tabletop session from bookmarked PDF notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py session.pdf                  # Play through the session
    python main.py session.pdf --preview        # List scenes and rolls only
    python main.py session.pdf -o summaries/    # Custom output directory
    python main.py session.pdf --json --no-pdf  # JSON summary, skip the PDF
        """
    )
    parser.add_argument(
        "input",
        help="Session notes PDF"
    )
    parser.add_argument(
        "-o", "--output-dir",
        help="Output directory (default: <input>_session/)"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show scenes and rolls without starting a session"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also write the summary as JSON"
    )
    parser.add_argument(
        "--no-pdf",
        action="store_true",
        help="Do not render the summary PDF"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output"
    )

    args = parser.parse_args()

    # Validate input file
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: File not found: {args.input}")
        sys.exit(1)
    if not input_path.suffix.lower() == '.pdf':
        print(f"Error: Not a PDF file: {args.input}")
        sys.exit(1)

    # Determine output directory
    if args.output_dir:
        output_dir = args.output_dir
    else:
        output_dir = str(input_path.parent / f"{input_path.stem}_session")

    try:
        doc = PdfDocument(str(input_path))
    except Exception as e:
        print(f"Error: Could not open {input_path.name}: {e}")
        sys.exit(1)
    print(f"\nLoading: {input_path.name} ({doc.page_count} pages)")

    session = Session()
    with doc:
        # Pages read depends on the scene ranges, so no fixed total
        with tqdm(desc="Extracting scene text", unit="page",
                  disable=not sys.stdout.isatty()) as pbar:
            try:
                asyncio.run(session.load_document(
                    doc,
                    file_name=input_path.name,
                    on_page=lambda _page: pbar.update(1)
                ))
            except DocumentLoadError as e:
                pbar.close()
                print(f"Error: {e}")
                sys.exit(1)

    if session.warnings and args.verbose:
        print("\nWarnings:")
        for w in session.warnings:
            print(f"  - {w}")

    print(f"\n{'='*50}")
    print(f"Scenes: {len(session.scenes)}")
    print(f"Rolls detected: {sum(len(s.rolls) for s in session.scenes)}")
    print(f"{'='*50}")

    if args.preview:
        print_preview(session)
        print(f"\nTo play the session, run without --preview flag")
        return

    print(f"\n{COMMAND_HELP}")
    run_session(session, verbose=args.verbose)

    projection = session.projection()
    print(f"\nWriting summary to: {output_dir}")
    files = [
        write_summary(projection, output_dir, str(input_path)),
        write_summary_markdown(projection, output_dir, str(input_path)),
    ]
    if args.json:
        files.append(write_summary_json(projection, output_dir, str(input_path)))
    if not args.no_pdf:
        files.append(write_summary_pdf(projection, output_dir, str(input_path)))

    for f in files:
        print(f"  - {Path(f).name}")
    print("\nDone!")


def print_preview(session: Session) -> None:
    print("\nPreview - Scenes:")
    for idx, scene in enumerate(session.scenes, 1):
        print(f"\n  {idx}. {scene.title}: pages {scene.start_page}-{scene.end_page} ({scene.page_count} pages)")
        for roll in scene.rolls[:5]:
            marker = "+" if roll.has_reveal else "?"
            roll_preview = roll.roll_text[:55] + "..." if len(roll.roll_text) > 55 else roll.roll_text
            print(f"    [{marker}] {roll_preview}")
        if len(scene.rolls) > 5:
            print(f"    ... and {len(scene.rolls) - 5} more rolls")


def print_scene(session: Session, decided: dict, verbose: bool = False) -> None:
    scene = session.current_scene
    idx = session.current_index
    print(f"\n{'-'*50}")
    print(f"{scene.title}  (scene {idx + 1}/{len(session.scenes)}, pages {scene.start_page}-{scene.end_page})")
    print(f"{'-'*50}")

    roll_num = 0
    for block in scene.blocks:
        if isinstance(block, Prose):
            if block.text:
                print(block.text)
            continue
        roll_num += 1
        outcome = decided.get((idx, roll_num))
        status = f" [{outcome.upper()}]" if outcome else ""
        print(f"\n  >> ROLL {roll_num}: {block.roll_text}{status}")
        if block.reveal_text and verbose:
            print(f"     Reveal if success: {block.reveal_text}")

    draft = session.current_loot_draft
    if draft:
        print(f"\nLoot notes: {draft}")
    label = "c = complete session" if session.is_final_scene else "c = complete scene, next"
    print(f"\n({label}; ? for help)")


def run_session(session: Session, verbose: bool = False) -> None:
    """
    Interactive loop over the session's scenes.

    Each roll may be decided once; that rule lives here, the session
    itself records every success it is given.
    """
    decided: dict[tuple[int, int], str] = {}
    shown = None
    draft = ""

    while session.phase == "viewing":
        if shown != session.current_index:
            print_scene(session, decided, verbose)
            shown = session.current_index
            draft = session.current_loot_draft

        try:
            command = input("> ").strip()
        except EOFError:
            print()
            return

        if not command:
            continue
        action, _, rest = command.partition(" ")
        action = action.lower()
        rest = rest.strip()
        scene = session.current_scene

        if action in ("s", "f"):
            if not rest.isdigit() or not 1 <= int(rest) <= len(scene.rolls):
                print(f"  No roll '{rest}' in this scene")
                continue
            key = (session.current_index, int(rest))
            if key in decided:
                print(f"  Roll {rest} already marked {decided[key]}")
                continue
            roll = scene.rolls[int(rest) - 1]
            if action == "s":
                entry = session.mark_roll_success(roll.roll_text, roll.reveal_text)
                decided[key] = "success"
                print(f"  Reveal: {entry.reveal_text}")
            else:
                session.mark_roll_fail(roll.roll_text, roll.reveal_text)
                decided[key] = "fail"
                print("  Marked as failed")
        elif action == "l":
            if rest == "-":
                draft = ""
            elif rest:
                draft = rest
            print(f"  Loot notes: {draft or '(none)'}")
        elif action == "p":
            if session.current_index == 0:
                print("  Already at the first scene")
            session.navigate_prev(loot_draft=draft)
        elif action == "g":
            if not rest.isdigit() or not 1 <= int(rest) <= len(session.scenes):
                print(f"  No scene '{rest}'")
                continue
            session.go_to_scene(int(rest) - 1, loot_draft=draft)
            shown = None
        elif action in ("c", "n"):
            entry = session.complete_scene(loot_draft=draft)
            if entry:
                print(f"  Loot recorded: {entry.loot_text}")
        elif action == "q":
            return
        else:
            print(COMMAND_HELP)


if __name__ == "__main__":
    main()
