"""
In-memory playlist edits on top of a parsed Database.

The editor never touches bytes. all_entries() gives the flat entry list
that write_playlist_order() compares against the entries read from the file.
"""

from dataclasses import replace
from typing import Dict, List

from loguru import logger

from .database import Database
from .models import PlaylistEntry, Track


def reindex(entries: List[PlaylistEntry]) -> List[PlaylistEntry]:
    return [replace(e, entry_index=i) for i, e in enumerate(entries)]


class PlaylistEditor:
    def __init__(self, database: Database):
        self.database = database
        self.modified: Dict[int, List[PlaylistEntry]] = {}
        self.has_unsaved_changes = False

    def entries(self, playlist_id: int) -> List[PlaylistEntry]:
        """Current entries of a playlist, edited if it has been touched"""
        if playlist_id in self.modified:
            return list(self.modified[playlist_id])
        return self.database.entries_for_playlist(playlist_id)

    def all_entries(self) -> List[PlaylistEntry]:
        by_playlist: Dict[int, List[PlaylistEntry]] = {}
        for entry in self.database.playlist_entries:
            by_playlist.setdefault(entry.playlist_id, []).append(entry)
        by_playlist.update(self.modified)
        return [e for entries in by_playlist.values() for e in entries]

    def tracks(self, playlist_id: int) -> List[Track]:
        tracks = self.database.tracks
        return [tracks[e.track_id] for e in self.entries(playlist_id) if e.track_id in tracks]

    def _set(self, playlist_id: int, entries: List[PlaylistEntry]):
        self.modified[playlist_id] = entries
        self.has_unsaved_changes = True

    def remove_track(self, playlist_id: int, track_id: int):
        """Remove every placement of a track and close the gaps"""
        remaining = [e for e in self.entries(playlist_id) if e.track_id != track_id]
        self._set(playlist_id, reindex(remaining))

    def reorder(self, playlist_id: int, from_index: int, to_index: int):
        entries = self.entries(playlist_id)
        if not 0 <= from_index < len(entries) or not 0 <= to_index < len(entries):
            logger.debug(f"Reorder {from_index} -> {to_index} out of range for playlist {playlist_id}")
            return
        entries.insert(to_index, entries.pop(from_index))
        self._set(playlist_id, reindex(entries))

    def add_track(self, playlist_id: int, track_id: int) -> bool:
        """Append a track. Refused (False) if it is already in the playlist."""
        entries = self.entries(playlist_id)
        if any(e.track_id == track_id for e in entries):
            return False
        entries.append(PlaylistEntry(playlist_id, track_id, len(entries)))
        self._set(playlist_id, entries)
        return True

    def _position(self, playlist_id: int, track_id: int) -> int:
        for i, entry in enumerate(self.entries(playlist_id)):
            if entry.track_id == track_id:
                return i
        return -1

    def move_up(self, playlist_id: int, track_id: int):
        index = self._position(playlist_id, track_id)
        if index > 0:
            self.reorder(playlist_id, index, index - 1)

    def move_down(self, playlist_id: int, track_id: int):
        index = self._position(playlist_id, track_id)
        if 0 <= index < len(self.entries(playlist_id)) - 1:
            self.reorder(playlist_id, index, index + 1)

    def discard_changes(self):
        self.modified = {}
        self.has_unsaved_changes = False

    def mark_saved(self):
        self.has_unsaved_changes = False
