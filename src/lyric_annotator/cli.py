"""
Terminal annotation client.

Usage:
    python -m src.lyric_annotator.cli --server http://127.0.0.1:3000
    python -m src.lyric_annotator.cli --seed 42 --fresh

Commands (facets are numbered 1-4, tags as listed under each facet):
    t F N [N ...]   toggle tags N in facet F
    / F text        search facet F (empty text resets the list)
    c               clear all selections
    s               save and go to the next track
    k               skip the track (shown again after the queue)
    a               show the stored annotation for this track
    + / - / 0       larger / smaller / reset text
    e               export this session's annotations
    q               quit
"""

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from .client import DEFAULT_BASE_URL, AnnotatorClient
from .config import AnnotatorConfig
from .controller import Notice, SessionController
from .models import FACETS
from .render import project, render_text
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)

HELP = __doc__.split("Commands", 1)[1]


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.icon}] {notice.message}")


def _facet_from_arg(arg: str) -> Optional[str]:
    try:
        number = int(arg)
    except ValueError:
        return None
    if 1 <= number <= len(FACETS):
        return FACETS[number - 1].value
    return None


def _toggle(controller: SessionController, args: List[str]) -> None:
    facet = _facet_from_arg(args[0]) if args else None
    if facet is None or len(args) < 2:
        print("Usage: t <facet 1-4> <tag number> [...]")
        return
    shown = controller.session.filtered.get(facet, [])
    for arg in args[1:]:
        if not arg.isdigit() or not 1 <= int(arg) <= len(shown):
            print(f"No tag {arg} in {facet}")
            continue
        controller.toggle(facet, shown[int(arg) - 1])


async def run_command(controller: SessionController, line: str, export_dir: Path) -> bool:
    """
    Execute one command line.

    Returns:
        False when the user asked to quit
    """
    parts = line.strip().split(maxsplit=2)
    if not parts:
        return True

    command, args = parts[0], parts[1:]

    if command == "q":
        return False
    elif command == "t":
        _toggle(controller, line.split()[1:])
    elif command == "/":
        facet = _facet_from_arg(args[0]) if args else None
        if facet is None:
            print("Usage: / <facet 1-4> <query>")
        else:
            controller.search(facet, args[1] if len(args) > 1 else "")
    elif command == "c":
        controller.clear()
    elif command == "s":
        await controller.confirm()
    elif command == "k":
        controller.skip()
    elif command == "a":
        record = await controller.stored_annotation()
        print(record if record is not None else "No annotation yet")
    elif command == "+":
        controller.increase_text_size()
    elif command == "-":
        controller.decrease_text_size()
    elif command == "0":
        controller.reset_text_size()
    elif command == "e":
        path = controller.export(export_dir)
        if path is not None:
            print(f"Wrote {path}")
    else:
        print(HELP)
    return True


async def run(args: argparse.Namespace) -> int:
    config = AnnotatorConfig.from_env()
    if args.queue_size is not None:
        config.queue_size = args.queue_size

    snapshots = SnapshotStore(
        Path(args.snapshot_dir),
        session_max_age_hours=config.session_snapshot_max_age_hours,
        font_scale_max_age_days=config.font_scale_max_age_days,
    )

    async with AnnotatorClient(base_url=args.server) as client:
        controller = SessionController(
            client,
            config=config,
            snapshots=snapshots,
            rng=random.Random(args.seed),
        )
        controller.on_notice(_print_notice)

        if not await controller.initialize(restore=not args.fresh):
            return 1

        controller.start_autosave()
        try:
            while True:
                view = project(controller.session, controller.font_scale, controller.export_enabled)
                print(render_text(view))
                line = await asyncio.to_thread(input, "> ")
                if not await run_command(controller, line, Path(args.export_dir)):
                    break
        except (EOFError, KeyboardInterrupt):
            print()
        finally:
            await controller.close()

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Lyric Annotator - terminal client for tagging lyrics"
    )
    parser.add_argument(
        "--server",
        default=DEFAULT_BASE_URL,
        help=f"Annotator server URL (default: {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible track assignment"
    )
    parser.add_argument(
        "--queue-size",
        type=int,
        default=None,
        help="Tracks assigned per session (default: 50)"
    )
    parser.add_argument(
        "--snapshot-dir",
        default=".annotator",
        help="Directory for local session snapshots (default: .annotator)"
    )
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Ignore any saved session snapshot and assign a new queue"
    )
    parser.add_argument(
        "--export-dir",
        default="exports",
        help="Directory for session exports (default: exports)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
