#!/usr/bin/env python3
"""
Anime Library Inspector

Keeps a list of anime titles and their folders, inspects each folder into a
catalog of episodes (with subtitles and audio tracks) and music albums, and
saves the result as JSON.
"""

import argparse
import json
import logging
import os
import threading
from typing import Callable

from .config import Config, configure_logging
from .exceptions import AnimeShelfError, InspectionCancelled
from .extractors.cuesheet import CueParser
from .extractors.probe import MediaProber
from .extractors.tags import AudioTagReader
from .extractors.walker import DirectoryWalker
from .models.inspection import InspectResult, InspectStatus
from .models.library import LibraryEntry
from .processors.catalog import CatalogBuilder
from .services.library import LibraryIndex
from .services.store import EntryStore
from .utils.formatting import format_bytes, format_duration

logger = logging.getLogger(__name__)


class LibraryInspector:
    """Orchestrates the library list, inspection passes and entry edits."""

    def __init__(self, config: Config, builder: CatalogBuilder | None = None) -> None:
        self._config = config
        self._index = LibraryIndex(config.paths.index_file)
        self._store = EntryStore(config.paths.entries_dir)
        self._builder = builder or CatalogBuilder(
            walker=DirectoryWalker(),
            prober=MediaProber(
                ffprobe_path=config.inspector.ffprobe_path,
                timeout=config.inspector.probe_timeout,
            ),
            tag_reader=AudioTagReader(),
            cue_parser=CueParser(),
            config=config.inspector,
        )

    @property
    def index(self) -> LibraryIndex:
        return self._index

    @property
    def store(self) -> EntryStore:
        return self._store

    def add(self, title: str, path: str) -> None:
        """Register a folder under a title. Inspection happens on first open."""
        self._index.add(title, os.path.abspath(path))
        self._index.save()
        logger.info(f"Added '{title}' -> {path}")

    def open(self, title: str, force: bool = False) -> InspectResult:
        """Return the saved entry, inspecting the folder if there is none yet."""
        entry = self._store.load(title)
        if entry is not None:
            return InspectResult(status=InspectStatus.OK, entry=entry)
        return self.inspect(title, force=force)

    def inspect(
        self,
        title: str,
        full: bool = False,
        force: bool = False,
        cancel: threading.Event | None = None,
    ) -> InspectResult:
        """Run an inspection pass and save the entry on success.

        An incremental pass (the default) keeps episode overlays and section
        names from the saved entry; a full pass starts clean. A cancelled
        pass leaves the saved entry untouched and re-raises.
        """
        root = self._index.get_path(title)
        try:
            result = self._builder.build(title, root, force=force, cancel=cancel)
        except InspectionCancelled:
            logger.info(f"Inspection of '{title}' cancelled; nothing saved")
            raise

        if not result.ok:
            return result

        if not full:
            previous = self._store.load(title)
            if previous is not None:
                result.entry.carry_overlays_from(previous)

        self._store.save(result.entry)
        return result

    def remove(self, title: str, delete_data: bool = False) -> None:
        self._index.remove(title)
        self._index.save()
        if delete_data:
            self._store.delete(title)
        logger.info(f"Removed '{title}'")

    def rename(self, old_title: str, new_title: str) -> None:
        self._index.rename(old_title, new_title)
        entry = self._store.load(old_title)
        if entry is not None:
            entry.title = new_title
            self._store.rename(old_title, entry)
        self._index.save()

    def move(self, source_idx: int, destination_idx: int) -> None:
        self._index.move(source_idx, destination_idx)
        self._index.save()

    def sort(self) -> list[str]:
        self._index.sort_by_title()
        self._index.save()
        return self._index.titles()

    def edit(self, title: str, change: Callable[[LibraryEntry], object]) -> LibraryEntry:
        """Apply change to the saved entry and save it again."""
        entry = self._store.load(title)
        if entry is None:
            raise AnimeShelfError(f"'{title}' has not been inspected yet")
        change(entry)
        self._store.save(entry)
        return entry


def print_entry(entry: LibraryEntry) -> None:
    """Print an entry in a readable layout."""
    print(f"{entry.title}  ({entry.root_path})")
    for section in entry.video_sections:
        label = section.display_name or section.directory_key or "."
        print(f"\n[{label}] {len(section.episodes)} episodes")
        for episode in section.episodes:
            heading = episode.basename
            if episode.title:
                heading += f"  - {episode.title}"
            print(
                f"  {heading}  {format_duration(episode.duration_seconds)}  "
                f"{format_bytes(episode.size_bytes)}  {episode.resolution}"
            )
            for track in episode.audio_tracks:
                print(f"    audio: {track}")
            if episode.subtitle_tracks:
                print(f"    subtitles: {', '.join(episode.subtitle_tracks)}")

    for album, tracks in entry.albums.items():
        print(f"\n<{album}> {len(tracks)} tracks")
        for track in tracks:
            number = f"{track.track_number:02d}" if track.track_number is not None else "--"
            artist = f" / {track.artist}" if track.artist else ""
            print(f"  {number}. {track.title}{artist}  {format_duration(track.duration_seconds)}")


def print_result(title: str, result: InspectResult) -> None:
    if result.status is InspectStatus.NEEDS_CONFIRMATION:
        print(
            f"'{title}' folder holds {result.file_count} files. "
            "Check the folder is right and re-run with --force to inspect it anyway."
        )
        return
    if result.status is InspectStatus.FAILED:
        print(f"Inspection of '{title}' failed: {result.error}")
        print(f"Check the folder, or remove the entry with: animeshelf remove \"{title}\"")
        return

    entry = result.entry
    print("\nInspection complete!")
    print(f"  Episodes: {entry.episode_count} in {len(entry.video_sections)} sections")
    print(f"  Music tracks: {entry.track_count} in {len(entry.albums)} albums")
    if result.diagnostics:
        print(f"  Problems ({len(result.diagnostics)}):")
        for diagnostic in result.diagnostics:
            print(f"    {diagnostic}")


def parse_order(value: str) -> list[int]:
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected comma-separated indexes, got '{value}'")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Inspect and catalog local anime folders")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel probe workers (default: from environment or 4)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add a title and its folder")
    p.add_argument("title")
    p.add_argument("path")

    sub.add_parser("list", help="List titles")

    p = sub.add_parser("inspect", help="Inspect (or re-inspect) a title's folder")
    p.add_argument("title")
    p.add_argument("--force", action="store_true", help="Inspect even very large folders")
    p.add_argument("--full", action="store_true", help="Discard episode overlays and section names")

    p = sub.add_parser("show", help="Show a title's catalog (inspects it if needed)")
    p.add_argument("title")
    p.add_argument("--force", action="store_true", help="Inspect even very large folders")
    p.add_argument("--json", action="store_true", help="Print the raw JSON entry")

    p = sub.add_parser("remove", help="Remove a title")
    p.add_argument("title")
    p.add_argument("--delete-data", action="store_true", help="Also delete the saved catalog")

    p = sub.add_parser("rename", help="Rename a title")
    p.add_argument("old_title")
    p.add_argument("new_title")

    p = sub.add_parser("move", help="Move a title to another position")
    p.add_argument("source", type=int)
    p.add_argument("destination", type=int)

    sub.add_parser("sort", help="Sort titles by name")

    p = sub.add_parser("section-name", help="Set a display name for a video section")
    p.add_argument("title")
    p.add_argument("directory", help='Directory key ("" for the root folder)')
    p.add_argument("name", nargs="?", default=None, help="Omit to clear the name")

    p = sub.add_parser("reorder", help="Reorder a section's episodes")
    p.add_argument("title")
    p.add_argument("directory")
    p.add_argument("order", type=parse_order, help="Old indexes in new order, e.g. 2,0,1")

    p = sub.add_parser("episode", help="Set an episode's title, second_title, airdate or description")
    p.add_argument("title")
    p.add_argument("video_path", help="Absolute path of the video file")
    p.add_argument("field", choices=["title", "second_title", "airdate", "description"])
    p.add_argument("value")

    p = sub.add_parser("episode-data", help="Apply a JSON list of episode overlays to a section")
    p.add_argument("title")
    p.add_argument("directory")
    p.add_argument("data_file")

    return parser.parse_args(argv)


def run_command(inspector: LibraryInspector, args: argparse.Namespace) -> None:
    command = args.command

    if command == "add":
        inspector.add(args.title, args.path)
        print(f"Added '{args.title}'")
    elif command == "list":
        for position, title in enumerate(inspector.index.titles()):
            print(f"{position:3d}  {title}")
    elif command == "inspect":
        result = inspector.inspect(args.title, full=args.full, force=args.force)
        print_result(args.title, result)
    elif command == "show":
        result = inspector.open(args.title, force=args.force)
        if not result.ok:
            print_result(args.title, result)
        elif args.json:
            print(json.dumps(result.entry.to_dict(), indent=2, ensure_ascii=False))
        else:
            print_entry(result.entry)
    elif command == "remove":
        inspector.remove(args.title, delete_data=args.delete_data)
        print(f"Removed '{args.title}'")
    elif command == "rename":
        inspector.rename(args.old_title, args.new_title)
        print(f"Renamed '{args.old_title}' to '{args.new_title}'")
    elif command == "move":
        inspector.move(args.source, args.destination)
    elif command == "sort":
        for title in inspector.sort():
            print(title)
    elif command == "section-name":
        inspector.edit(args.title, lambda e: e.rename_section(args.directory, args.name))
    elif command == "reorder":
        inspector.edit(args.title, lambda e: e.reorder_section(args.directory, args.order))
    elif command == "episode":
        inspector.edit(
            args.title,
            lambda e: e.update_episode_field(args.video_path, args.field, args.value),
        )
    elif command == "episode-data":
        with open(args.data_file, encoding="utf-8") as f:
            rows = json.load(f)
        entry = inspector.edit(args.title, lambda e: e.apply_episode_data(args.directory, rows))
        print(f"Updated {min(len(rows), len(entry.section(args.directory).episodes))} episodes")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    configure_logging(verbose=args.verbose)

    try:
        config = Config.from_environment()
        if args.workers is not None:
            config.inspector.max_workers = args.workers
        config.validate()
        config.paths.ensure()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    inspector = LibraryInspector(config)
    try:
        run_command(inspector, args)
    except InspectionCancelled:
        print("Inspection cancelled.")
        return 130
    except (AnimeShelfError, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
