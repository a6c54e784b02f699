"""
Assemble a Database from a raw export.pdb buffer.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from loguru import logger

from . import config
from .cursor import ByteCursor
from .header import FileHeader, TableType, parse_header
from .models import (
    Album,
    Artist,
    Artwork,
    Color,
    Genre,
    Key,
    PlaylistEntry,
    PlaylistTreeNode,
    Track,
)
from .pages import walk_table
from .rows import (
    decode_album,
    decode_artist,
    decode_artwork,
    decode_color,
    decode_genre,
    decode_key,
    decode_playlist_entry,
    decode_playlist_tree_node,
    decode_rows,
    decode_track,
)


@dataclass
class PlaylistTreeItem:
    node: PlaylistTreeNode
    children: List['PlaylistTreeItem'] = field(default_factory=list)
    entries: List[PlaylistEntry] = field(default_factory=list)


@dataclass
class Database:
    tracks: Dict[int, Track] = field(default_factory=dict)
    artists: Dict[int, Artist] = field(default_factory=dict)
    albums: Dict[int, Album] = field(default_factory=dict)
    genres: Dict[int, Genre] = field(default_factory=dict)
    keys: Dict[int, Key] = field(default_factory=dict)
    colors: Dict[int, Color] = field(default_factory=dict)
    artworks: Dict[int, Artwork] = field(default_factory=dict)
    playlist_tree: Dict[int, PlaylistTreeNode] = field(default_factory=dict)
    playlist_entries: List[PlaylistEntry] = field(default_factory=list)

    def entries_for_playlist(self, playlist_id: int) -> List[PlaylistEntry]:
        return sorted(
            (e for e in self.playlist_entries if e.playlist_id == playlist_id),
            key=lambda e: e.entry_index,
        )

    def tracks_for_playlist(self, playlist_id: int) -> List[Track]:
        return [
            self.tracks[e.track_id]
            for e in self.entries_for_playlist(playlist_id)
            if e.track_id in self.tracks
        ]

    def summary(self) -> Dict[str, int]:
        return {
            'tracks': len(self.tracks),
            'artists': len(self.artists),
            'albums': len(self.albums),
            'genres': len(self.genres),
            'keys': len(self.keys),
            'colors': len(self.colors),
            'artworks': len(self.artworks),
            'playlists': len(self.playlist_tree),
            'playlist_entries': len(self.playlist_entries),
        }

    def build_playlist_tree(self, max_depth: Optional[int] = None) -> List[PlaylistTreeItem]:
        """
        Arrange playlist nodes into a forest ordered by sort order.

        Nodes whose parent does not exist become roots. Nodes deeper than
        max_depth are dropped, which also bounds parent cycles.
        """
        if max_depth is None:
            max_depth = config.MAX_TREE_DEPTH

        children: Dict[int, List[PlaylistTreeNode]] = {}
        for node in self.playlist_tree.values():
            parent = node.parent_id if node.parent_id in self.playlist_tree else 0
            if parent == node.id:
                parent = 0
            children.setdefault(parent, []).append(node)

        entries: Dict[int, List[PlaylistEntry]] = {}
        for entry in self.playlist_entries:
            entries.setdefault(entry.playlist_id, []).append(entry)

        def build(parent_id: int, depth: int) -> List[PlaylistTreeItem]:
            if depth > max_depth:
                logger.warning(f"Playlist tree deeper than {max_depth} under node {parent_id}, truncated")
                return []
            nodes = sorted(children.get(parent_id, []), key=lambda n: (n.sort_order, n.id))
            return [
                PlaylistTreeItem(
                    node=node,
                    children=build(node.id, depth + 1) if node.is_folder else [],
                    entries=sorted(entries.get(node.id, []), key=lambda e: e.entry_index),
                )
                for node in nodes
            ]

        return build(0, 1)


def _load_table(
    label: str,
    cursor: ByteCursor,
    header: FileHeader,
    table_type: TableType,
    decoder: Callable,
) -> List:
    """Decode every row of one table; any failure leaves the table empty"""
    if table_type not in header.tables:
        logger.debug(f"No {label} table in directory")
        return []
    try:
        return list(decode_rows(cursor, walk_table(cursor, header, table_type), decoder))
    except Exception:
        logger.exception(f"Error parsing {label}")
        return []


def parse(data: bytes) -> Database:
    """Parse a complete export.pdb buffer. Never raises on malformed input."""
    logger.info(f"File size: {len(data)} bytes")

    db = Database()
    cursor = ByteCursor(data)
    try:
        header = parse_header(cursor)
    except Exception:
        logger.exception("Error parsing file header")
        return db
    logger.info(f"Found {len(header.tables)} tables, page size {header.page_size}")

    def load(label, table_type, decoder):
        records = _load_table(label, cursor, header, table_type, decoder)
        logger.info(f"Parsed {len(records)} {label}")
        return records

    db.artists = {a.id: a for a in load('artists', TableType.ARTISTS, decode_artist)}
    db.albums = {a.id: a for a in load('albums', TableType.ALBUMS, decode_album)}
    db.genres = {g.id: g for g in load('genres', TableType.GENRES, decode_genre)}
    db.keys = {k.id: k for k in load('keys', TableType.KEYS, decode_key)}
    db.colors = {c.id: c for c in load('colors', TableType.COLORS, decode_color)}
    db.artworks = {a.id: a for a in load('artwork', TableType.ARTWORK, decode_artwork)}

    for track in load('tracks', TableType.TRACKS, decode_track):
        db.tracks[track.id] = resolve_track(db, track)

    db.playlist_tree = {
        n.id: n for n in load('playlist nodes', TableType.PLAYLIST_TREE, decode_playlist_tree_node)
    }
    db.playlist_entries = list(load('playlist entries', TableType.PLAYLIST_ENTRIES, decode_playlist_entry))

    logger.info(
        f"Complete: {len(db.tracks)} tracks, {len(db.artists)} artists, "
        f"{len(db.playlist_tree)} playlists"
    )
    return db


def resolve_track(db: Database, track: Track) -> Track:
    """Fill in artist, album, genre and key names from the dimension tables"""

    def name_of(table: Dict, item_id: int) -> str:
        if not item_id or item_id not in table:
            return ''
        return table[item_id].name

    return replace(
        track,
        artist=name_of(db.artists, track.artist_id),
        album=name_of(db.albums, track.album_id),
        genre=name_of(db.genres, track.genre_id),
        key=name_of(db.keys, track.key_id),
    )


def parse_file(path: Union[str, Path]) -> Database:
    return parse(Path(path).read_bytes())
