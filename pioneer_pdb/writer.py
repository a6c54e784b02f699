"""
Rewrite playlist order inside an existing export.pdb.

Rows are never added, removed or moved. Each playlist entry row is found by
its content (entry_index, track_id, playlist_id) and only its entry_index is
overwritten, so the file keeps its exact size and structure.
"""

import shutil
import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from loguru import logger

from .config import ROW_ALIGNMENT
from .cursor import U32, write_u32
from .models import PlaylistEntry

ENTRY_TRIPLE = struct.Struct('<III')  # entry_index, track_id, playlist_id

BACKUP_PREFIX = 'export.pdb.backup-'


@dataclass
class PlaylistWriteResult:
    data: bytes
    modified_count: int = 0
    not_found_count: int = 0


def locate_playlist_entries(data: bytes, entries: Iterable[PlaylistEntry]) -> Dict[PlaylistEntry, int]:
    """
    Find the file offset of each entry's row in a single pass.

    Every even offset is read as a (entry_index, track_id, playlist_id)
    triple. The first offset matching an entry wins and the scan stops once
    everything has been found.
    """
    pending = {(e.entry_index, e.track_id, e.playlist_id) for e in entries}
    locations: Dict[PlaylistEntry, int] = {}
    if not pending:
        return locations

    unpack_from = ENTRY_TRIPLE.unpack_from
    for offset in range(0, len(data) - ENTRY_TRIPLE.size + 1, ROW_ALIGNMENT):
        triple = unpack_from(data, offset)
        if triple not in pending:
            continue
        entry_index, track_id, playlist_id = triple
        locations[PlaylistEntry(playlist_id, track_id, entry_index)] = offset
        pending.discard(triple)
        if not pending:
            break

    return locations


def _group_by_track(entries: Iterable[PlaylistEntry]) -> Dict[Tuple[int, int], List[PlaylistEntry]]:
    groups: Dict[Tuple[int, int], List[PlaylistEntry]] = {}
    for entry in entries:
        groups.setdefault((entry.playlist_id, entry.track_id), []).append(entry)
    for group in groups.values():
        group.sort(key=lambda e: e.entry_index)
    return groups


def write_playlist_order(
    original: bytes,
    original_entries: Sequence[PlaylistEntry],
    edited_entries: Sequence[PlaylistEntry],
) -> PlaylistWriteResult:
    """
    Apply edited playlist ordering to a copy of the original file.

    A track placed several times in one playlist is matched by instance:
    the n-th original placement (by entry_index) takes the entry_index of
    the n-th edited placement. Placements with no edited counterpart, and
    entries of playlists that no longer exist, are left as they are.
    """
    buffer = bytearray(original)

    logger.info(
        f"Finding playlist entry locations: {len(original_entries)} original, "
        f"{len(edited_entries)} edited"
    )
    locations = locate_playlist_entries(buffer, original_entries)
    logger.info(f"Found {len(locations)} entry locations")

    edited_playlists = {e.playlist_id for e in edited_entries}
    original_groups = _group_by_track(original_entries)
    edited_groups = _group_by_track(edited_entries)

    modified = 0
    not_found = 0

    for entry in original_entries:
        offset = locations.get(entry)
        if offset is None:
            not_found += 1
            logger.warning(
                f"Location not found for entry: playlist {entry.playlist_id}, "
                f"track {entry.track_id}, index {entry.entry_index}"
            )
            continue

        if entry.playlist_id not in edited_playlists:
            continue

        key = (entry.playlist_id, entry.track_id)
        edited_same_track = edited_groups.get(key)
        if not edited_same_track:
            continue

        instance = next(
            i for i, e in enumerate(original_groups[key])
            if e.entry_index == entry.entry_index
        )
        if instance >= len(edited_same_track):
            continue

        new_index = edited_same_track[instance].entry_index
        if U32.unpack_from(buffer, offset)[0] != new_index:
            write_u32(buffer, offset, new_index)
            modified += 1

    logger.info(f"Modified {modified} entries, {not_found} not found")
    return PlaylistWriteResult(bytes(buffer), modified, not_found)


def apply_playlist_modifications(
    original: bytes,
    original_entries: Sequence[PlaylistEntry],
    edited_entries: Sequence[PlaylistEntry],
) -> bytes:
    return write_playlist_order(original, original_entries, edited_entries).data


def backup_filename(now: Optional[datetime] = None) -> str:
    """export.pdb.backup-2024-01-31T12-00-00 (UTC)"""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return BACKUP_PREFIX + now.strftime('%Y-%m-%dT%H-%M-%S')


def save_with_backup(
    pdb_path: Union[str, Path],
    new_data: bytes,
    now: Optional[datetime] = None,
) -> Path:
    """Copy the current file aside, then overwrite it. Returns the backup path."""
    pdb_path = Path(pdb_path)
    backup_path = pdb_path.with_name(backup_filename(now))
    shutil.copy2(pdb_path, backup_path)
    logger.info(f"Backup written to {backup_path}")

    pdb_path.write_bytes(new_data)
    logger.info(f"Wrote {len(new_data)} bytes to {pdb_path}")
    return backup_path
