"""
Inspect dossier records from the terminal.

Usage:
    python -m dossier.interface tags --data-dir dossier_data
    python -m dossier.interface tags --search guild
    python -m dossier.interface show <character-id> --reveal
"""

import argparse
import logging
import sys

from rich.console import Console

from ..state import JsonDossierStore, load_config
from ..systems.reveal import RevealGate
from ..systems.tags import grouped_tags, search_tags
from .panels import render_character_card, render_tag_library

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect campaign dossier records")
    parser.add_argument("--data-dir", default="dossier_data", help="Dossier data directory")
    sub = parser.add_subparsers(dest="command", required=True)

    tags = sub.add_parser("tags", help="Show the grouped tag library")
    tags.add_argument("--search", default="", help="Filter tag names")

    show = sub.add_parser("show", help="Show one character card")
    show.add_argument("character_id")
    show.add_argument("--reveal", action="store_true", help="Reveal the secret layer")
    show.add_argument("--reveal-name", action="store_true", help="Unblur the true name")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console()
    store = JsonDossierStore(args.data_dir)
    config = load_config(args.data_dir)

    if args.command == "tags":
        groups = grouped_tags(
            store.list_characters(),
            store.list_campaigns(),
            universal_label=config["universal_label"],
        )
        console.print(render_tag_library(search_tags(groups, args.search)))
        return 0

    character = store.load_character(args.character_id)
    if character is None:
        logger.warning("No character with id %s", args.character_id)
        return 1

    gate = RevealGate()
    gate.set_global(args.reveal)
    if args.reveal_name:
        gate.reveal_name(character.id)
    console.print(render_character_card(character, gate))
    return 0


if __name__ == "__main__":
    sys.exit(main())
