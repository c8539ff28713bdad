"""Command line host for LightCull.

Drives the same view-model a GUI would, one folder per invocation:

    lightcull scan ~/Pictures/2024-rome
    lightcull tag ~/Pictures/2024-rome DSCF0100.JPG
    lightcull delete ~/Pictures/2024-rome DSCF0101.JPG DSCF0102.JPG
    lightcull rename ~/Pictures/2024-rome Rome DSCF0100.JPG
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
import sys

from loguru import logger

from lightcull.app.viewmodels.main_vm import MainVM
from lightcull.app.viewmodels.pair_vm import PairVM
from lightcull.core.constants import THUMBNAIL_QUALITY, THUMBNAIL_SIZE
from lightcull.core.errors import SettingsError
from lightcull.core.models import ImagePair
from lightcull.infrastructure.logging import init_logging
from lightcull.infrastructure.settings import JsonSettings
from lightcull.infrastructure.tag_service import TagStore
from lightcull.infrastructure.thumbnail_service import ThumbnailCache
from lightcull.infrastructure.trash_service import TrashService

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="lightcull",
        description="Cull JPEG/RAW photo pairs: tag, move, rename and undo.",
    )
    parser.add_argument("--settings", metavar="PATH", help="settings.json to read")
    parser.add_argument("--verbose", "-v", action="store_true", help="log debug output to stderr")

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    p = sub.add_parser("scan", help="list the pairs in a folder")
    p.add_argument("folder")

    p = sub.add_parser("stats", help="show folder statistics")
    p.add_argument("folder")

    p = sub.add_parser("tag", help="toggle the TOP tag on pairs")
    p.add_argument("folder")
    p.add_argument("names", nargs="+", metavar="NAME", help="JPEG file name")

    for name, help_text in (
        ("delete", "move pairs to _toDelete"),
        ("archive", "move pairs to _Archive"),
        ("outtake", "move pairs to _Outtakes"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("folder")
        p.add_argument("names", nargs="+", metavar="NAME", help="JPEG file name")

    p = sub.add_parser("rename", help="prefix pair file names")
    p.add_argument("folder")
    p.add_argument("prefix")
    p.add_argument("names", nargs="+", metavar="NAME", help="JPEG file name")

    p = sub.add_parser("thumbs", help="generate thumbnails for a folder")
    p.add_argument("folder")

    p = sub.add_parser("purge", help="send _toDelete to the system trash")
    p.add_argument("folder")

    sub.add_parser("clear-cache", help="remove all cached thumbnails")
    return parser


def build_vm(settings: JsonSettings) -> MainVM:
    """Wire the view-model and its services from settings."""
    thumbs = ThumbnailCache(
        cache_root=settings.get("cache.root"),
        size=settings.get_int("thumbnails.size", THUMBNAIL_SIZE),
        quality=settings.get_int("thumbnails.quality", THUMBNAIL_QUALITY),
        max_workers=settings.get_int("thumbnails.max_workers", 0) or None,
    )
    trash = TrashService(settings.get("logging.delete_dir"))
    return MainVM(TagStore(), thumbs, trash=trash)


def _open(vm: MainVM, folder: str) -> bool:
    if vm.open_folder(folder):
        return True
    print(f"Cannot read folder: {vm.last_error}", file=sys.stderr)
    return False


def _for_each_name(vm: MainVM, names: Sequence[str], action: Callable[[ImagePair], bool]) -> int:
    failed = 0
    for name in names:
        pair = vm.select_by_name(name)
        if pair is None:
            print(f"No such pair: {name}", file=sys.stderr)
            failed += 1
            continue
        if not action(pair):
            print(f"Failed: {name}", file=sys.stderr)
            failed += 1
    return EXIT_FAILED if failed else EXIT_OK


def handle_scan(vm: MainVM, args: argparse.Namespace) -> int:
    """Print one line per pair."""
    for pair in vm.pairs:
        line = PairVM(pair).row()
        if pair.has_top_tag:
            line += " [TOP]"
        print(line)
    return EXIT_OK


def handle_stats(vm: MainVM, args: argparse.Namespace) -> int:
    """Print folder statistics."""
    s = vm.statistics
    print(f"Files:            {s.total_files}")
    print(f"Pairs:            {s.total_pairs}")
    print(f"JPEG with RAW:    {s.jpeg_with_raw}")
    print(f"JPEG without RAW: {s.jpeg_without_raw}")
    print(f"RAW files:        {s.raw_files}")
    print(f"Tagged TOP:       {s.tagged_pairs}")
    print(f"In _toDelete:     {s.deleted_files}")
    return EXIT_OK


def handle_tag(vm: MainVM, args: argparse.Namespace) -> int:
    """Toggle TOP on each named pair."""

    def toggle(pair: ImagePair) -> bool:
        updated = vm.toggle_top_tag(pair)
        if updated is None or updated.has_top_tag == pair.has_top_tag:
            return False
        print(f"{pair.file_name}: {'TOP' if updated.has_top_tag else 'untagged'}")
        return True

    return _for_each_name(vm, args.names, toggle)


def handle_move(vm: MainVM, args: argparse.Namespace) -> int:
    """Move each named pair to the folder matching the subcommand."""
    actions = {
        "delete": vm.delete_selected,
        "archive": vm.archive_selected,
        "outtake": vm.outtake_selected,
    }
    return _for_each_name(vm, args.names, lambda _pair: actions[args.command]())


def handle_rename(vm: MainVM, args: argparse.Namespace) -> int:
    """Prefix each named pair."""
    pairs = []
    missing = 0
    for name in args.names:
        pair = vm.select_by_name(name)
        if pair is None:
            print(f"No such pair: {name}", file=sys.stderr)
            missing += 1
        else:
            pairs.append(pair)
    result = vm.rename_selected(args.prefix, pairs)
    for pair in result.renamed:
        print(pair.file_name)
    for pair in result.failed:
        print(f"Failed: {pair.file_name}", file=sys.stderr)
    return EXIT_FAILED if missing or result.failed else EXIT_OK


def handle_thumbs(vm: MainVM, args: argparse.Namespace) -> int:
    """Generate thumbnails, reporting progress on stderr."""

    def progress(done: int, total: int) -> None:
        print(f"\r{done}/{total}", end="", file=sys.stderr, flush=True)

    pairs = vm.generate_thumbnails(progress)
    if pairs:
        print(file=sys.stderr)
    missing = [p for p in pairs if p.thumbnail_path is None]
    for pair in missing:
        print(f"No thumbnail: {pair.file_name}", file=sys.stderr)
    return EXIT_FAILED if missing else EXIT_OK


def handle_purge(vm: MainVM, args: argparse.Namespace) -> int:
    """Send the delete folder to the trash."""
    result = vm.purge_deleted()
    print(f"Sent to trash: {len(result.success_paths)}")
    for path, reason in result.failed:
        print(f"Failed: {path}: {reason}", file=sys.stderr)
    if result.log_path:
        print(f"Log: {result.log_path}")
    return EXIT_FAILED if result.failed else EXIT_OK


HANDLERS: dict[str, Callable[[MainVM, argparse.Namespace], int]] = {
    "scan": handle_scan,
    "stats": handle_stats,
    "tag": handle_tag,
    "delete": handle_move,
    "archive": handle_move,
    "outtake": handle_move,
    "rename": handle_rename,
    "thumbs": handle_thumbs,
    "purge": handle_purge,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point; returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    try:
        settings = JsonSettings(args.settings)
    except (FileNotFoundError, SettingsError) as ex:
        print(f"Settings error: {ex}", file=sys.stderr)
        return EXIT_USAGE

    level = "DEBUG" if args.verbose else settings.get("logging.level", "INFO")
    init_logging(settings.get("logging.dir"), level=level, console=args.verbose)

    vm = build_vm(settings)
    if args.command == "clear-cache":
        vm.clear_thumbnail_cache()
        return EXIT_OK

    if not _open(vm, args.folder):
        return EXIT_USAGE
    logger.debug("Running {} on {}", args.command, args.folder)
    return HANDLERS[args.command](vm, args)


if __name__ == "__main__":
    raise SystemExit(main())
