"""
Records decoded from export.pdb.

Numeric fields default to 0 and strings to "" so consumers never have to
deal with missing values.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Artist:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Album:
    id: int
    name: str = ""
    artist_id: int = 0


@dataclass(frozen=True)
class Genre:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Key:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Color:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Artwork:
    id: int
    path: str = ""


@dataclass(frozen=True)
class Track:
    id: int
    title: str = ""
    artist: str = ""
    artist_id: int = 0
    album: str = ""
    album_id: int = 0
    genre: str = ""
    genre_id: int = 0
    key: str = ""
    key_id: int = 0
    tempo: int = 0  # BPM * 100
    duration: int = 0  # seconds
    rating: int = 0
    color_id: int = 0
    bitrate: int = 0
    sample_rate: int = 0
    file_size: int = 0
    file_path: str = ""
    file_name: str = ""
    track_number: int = 0
    disc_number: int = 0
    year: int = 0
    comment: str = ""
    date_added: str = ""
    artwork_id: int = 0

    @property
    def bpm(self) -> float:
        return self.tempo / 100


@dataclass(frozen=True)
class PlaylistTreeNode:
    id: int
    parent_id: int = 0
    name: str = ""
    is_folder: bool = False
    sort_order: int = 0


@dataclass(frozen=True)
class PlaylistEntry:
    playlist_id: int
    track_id: int
    entry_index: int = 0
