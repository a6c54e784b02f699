"""
pioneer-pdb - inspect a rekordbox USB export and reorder its playlists
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .cursor import ByteCursor
from .database import Database, PlaylistTreeItem, parse
from .editor import PlaylistEditor
from .header import parse_header
from .log import setup_logging
from .volume import VolumeError, find_export_pdb
from .writer import save_with_backup, write_playlist_order


def resolve_pdb_path(path: str) -> Path:
    """Accept the .pdb itself, the volume root, or the PIONEER folder"""
    p = Path(path)
    if p.is_file():
        return p
    return find_export_pdb(p)


def format_duration(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


def print_file_info(path: Path, data: bytes, db: Database):
    header = parse_header(ByteCursor(data))

    print(f"\n{'='*60}")
    print(f"FILE: {path}")
    print(f"{'='*60}")
    print(f"Size: {len(data)} bytes")
    print(f"Page size: {header.page_size}")
    print(f"Num tables: {header.num_tables}")
    print(f"Next unused page: {header.next_unused_page}")
    print(f"Sequence: {header.sequence}")

    print(f"\n--- Table Pointers ---")
    for t in header.tables.values():
        print(f"  {t.name:20s}: type={t.type_id:2d}, first={t.first_page:4d}, last={t.last_page:4d}")

    print(f"\n--- Contents ---")
    for name, count in db.summary().items():
        print(f"  {name:20s}: {count}")


def print_tree(items: List[PlaylistTreeItem], depth: int = 0):
    for item in items:
        indent = '  ' * depth
        if item.node.is_folder:
            print(f"{indent}[{item.node.name}]")
            print_tree(item.children, depth + 1)
        else:
            print(f"{indent}{item.node.name} (id={item.node.id}, {len(item.entries)} tracks)")


def print_playlist(db: Database, playlist_id: int, tracks=None):
    node = db.playlist_tree.get(playlist_id)
    name = node.name if node else f"#{playlist_id}"
    tracks = db.tracks_for_playlist(playlist_id) if tracks is None else tracks

    print(f"\n--- {name} ({len(tracks)} tracks) ---")
    for i, track in enumerate(tracks):
        print(
            f"  {i:3d}. [{track.id}] {track.artist} - {track.title}"
            f"  {track.bpm:.2f} BPM  {format_duration(track.duration)}  {track.key}"
        )


def save_edits(pdb_path: Path, data: bytes, db: Database, editor: PlaylistEditor, dry_run: bool) -> int:
    result = write_playlist_order(data, db.playlist_entries, editor.all_entries())
    print(f"Modified {result.modified_count} entries, {result.not_found_count} not found")
    if result.not_found_count:
        logger.warning(f"{result.not_found_count} entries could not be located in the file")

    if dry_run:
        print("Dry run - nothing written")
        return 0
    if result.modified_count == 0:
        print("No changes to write")
        return 0

    backup = save_with_backup(pdb_path, result.data)
    editor.mark_saved()
    print(f"Saved {pdb_path} (backup: {backup.name})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pioneer-pdb', description=__doc__.strip())
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('info', help='header, tables and row counts')
    p.add_argument('path')

    p = sub.add_parser('playlists', help='print the playlist tree')
    p.add_argument('path')

    p = sub.add_parser('show', help='list the tracks of a playlist')
    p.add_argument('path')
    p.add_argument('playlist_id', type=int)

    p = sub.add_parser('move', help='move a track within a playlist')
    p.add_argument('path')
    p.add_argument('playlist_id', type=int)
    p.add_argument('from_index', type=int)
    p.add_argument('to_index', type=int)
    p.add_argument('--dry-run', action='store_true')

    p = sub.add_parser('remove', help='drop a track from a playlist order')
    p.add_argument('path')
    p.add_argument('playlist_id', type=int)
    p.add_argument('track_id', type=int)
    p.add_argument('--dry-run', action='store_true')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging('DEBUG' if args.verbose else None)

    try:
        pdb_path = resolve_pdb_path(args.path)
        data = pdb_path.read_bytes()
    except (VolumeError, OSError) as e:
        print(f"ERROR: {e}")
        return 1

    db = parse(data)

    if args.command == 'info':
        print_file_info(pdb_path, data, db)
        return 0

    if args.command == 'playlists':
        print_tree(db.build_playlist_tree())
        return 0

    if args.command == 'show':
        print_playlist(db, args.playlist_id)
        return 0

    editor = PlaylistEditor(db)
    if args.command == 'move':
        editor.reorder(args.playlist_id, args.from_index, args.to_index)
    elif args.command == 'remove':
        editor.remove_track(args.playlist_id, args.track_id)

    print_playlist(db, args.playlist_id, editor.tracks(args.playlist_id))
    try:
        return save_edits(pdb_path, data, db, editor, args.dry_run)
    except OSError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
