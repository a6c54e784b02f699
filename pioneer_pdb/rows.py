"""
Row decoders, one per table.

Each decoder takes the absolute offset of a row and returns a record, or
None when the row's fixed part does not fit in the file. String pointers
are relative to the row start and resolved through the DeviceSQL string
decoder.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterable, Iterator, Optional, Tuple, TypeVar

from loguru import logger

from .cursor import ByteCursor
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
from .pages import RowLocation

T = TypeVar('T')

# Subtype bit that selects the wide string pointer layout
FAR_OFFSETS_FLAG = 0x04


@dataclass(frozen=True)
class StringTableLayout:
    """Where a row keeps its string pointers and how wide they are"""
    name: str
    base: int
    count: int
    width: int = 2

    @property
    def end(self) -> int:
        return self.base + self.count * self.width

    def read_offsets(self, cursor: ByteCursor, row_offset: int) -> Tuple[int, ...]:
        read = cursor.u16_at if self.width == 2 else cursor.u8_at
        return tuple(
            read(row_offset + self.base + slot * self.width)
            for slot in range(self.count)
        )


# Track rows: the short layout has one leading near-offset byte at 0x5e
TRACK_STRINGS_LONG = StringTableLayout('long', 0x5e, 21)
TRACK_STRINGS_SHORT = StringTableLayout('short', 0x5f, 21)

ARTIST_NAME_NEAR = StringTableLayout('near', 0x09, 1, width=1)
ARTIST_NAME_FAR = StringTableLayout('far', 0x0a, 1)

ALBUM_NAME_NEAR = StringTableLayout('near', 0x15, 1, width=1)
ALBUM_NAME_FAR = StringTableLayout('far', 0x16, 1)


def select_layout(subtype: int, near: StringTableLayout, far: StringTableLayout) -> StringTableLayout:
    return far if subtype & FAR_OFFSETS_FLAG else near


def select_track_layout(subtype: int) -> StringTableLayout:
    return select_layout(subtype, TRACK_STRINGS_SHORT, TRACK_STRINGS_LONG)


class TrackString(IntEnum):
    """Slots of the track string table"""
    ISRC = 0
    LYRICIST = 1
    UNKNOWN_2 = 2
    UNKNOWN_3 = 3
    UNKNOWN_4 = 4
    MESSAGE = 5
    KUVO_PUBLIC = 6
    AUTOLOAD_HOTCUES = 7
    UNKNOWN_8 = 8
    UNKNOWN_9 = 9
    DATE_ADDED = 10
    RELEASE_DATE = 11
    MIX_NAME = 12
    UNKNOWN_13 = 13
    ANALYZE_PATH = 14
    ANALYZE_DATE = 15
    COMMENT = 16
    TITLE = 17
    UNKNOWN_18 = 18
    FILENAME = 19
    FILE_PATH = 20


# (offset, size) of the fixed track fields
TRACK_FIELDS = {
    'subtype': (0x00, 2),
    'sample_rate': (0x08, 4),
    'file_size': (0x10, 4),
    'artwork_id': (0x1c, 4),
    'key_id': (0x20, 4),
    'bitrate': (0x30, 4),
    'track_number': (0x34, 4),
    'tempo': (0x38, 4),
    'genre_id': (0x3c, 4),
    'album_id': (0x40, 4),
    'artist_id': (0x44, 4),
    'id': (0x48, 4),
    'disc_number': (0x4c, 2),
    'year': (0x50, 2),
    'duration': (0x54, 2),
    'color_id': (0x58, 1),
    'rating': (0x59, 1),
}


def _read_field(cursor: ByteCursor, offset: int, size: int) -> int:
    if size == 1:
        return cursor.u8_at(offset)
    if size == 2:
        return cursor.u16_at(offset)
    return cursor.u32_at(offset)


def decode_track(cursor: ByteCursor, row_offset: int) -> Optional[Track]:
    """
    Decode a track row. Artist, album, genre and key names are left empty;
    the assembler fills them in from the dimension tables.
    """
    subtype = cursor.u16_at(row_offset)
    layout = select_track_layout(subtype)
    if not cursor.fits(row_offset, layout.end):
        return None

    fields = {
        name: _read_field(cursor, row_offset + offset, size)
        for name, (offset, size) in TRACK_FIELDS.items()
    }
    del fields['subtype']

    # All pointers are read, only the ones we model are followed
    strings = layout.read_offsets(cursor, row_offset)

    def text(slot: TrackString) -> str:
        return cursor.read_device_sql_string(row_offset, strings[slot])

    return Track(
        title=text(TrackString.TITLE),
        file_path=text(TrackString.FILE_PATH),
        file_name=text(TrackString.FILENAME),
        comment=text(TrackString.COMMENT),
        date_added=text(TrackString.DATE_ADDED),
        **fields,
    )


def decode_artist(cursor: ByteCursor, row_offset: int) -> Optional[Artist]:
    subtype = cursor.u16_at(row_offset)
    layout = select_layout(subtype, ARTIST_NAME_NEAR, ARTIST_NAME_FAR)
    if not cursor.fits(row_offset, layout.end):
        return None
    name_offset, = layout.read_offsets(cursor, row_offset)
    return Artist(
        id=cursor.u32_at(row_offset + 0x04),
        name=cursor.read_device_sql_string(row_offset, name_offset),
    )


def decode_album(cursor: ByteCursor, row_offset: int) -> Optional[Album]:
    subtype = cursor.u16_at(row_offset)
    layout = select_layout(subtype, ALBUM_NAME_NEAR, ALBUM_NAME_FAR)
    if not cursor.fits(row_offset, layout.end):
        return None
    name_offset, = layout.read_offsets(cursor, row_offset)
    return Album(
        id=cursor.u32_at(row_offset + 0x0c),
        artist_id=cursor.u32_at(row_offset + 0x08),
        name=cursor.read_device_sql_string(row_offset, name_offset),
    )


def decode_genre(cursor: ByteCursor, row_offset: int) -> Optional[Genre]:
    if not cursor.fits(row_offset, 5):
        return None
    return Genre(
        id=cursor.u32_at(row_offset),
        name=cursor.read_device_sql_string(row_offset, 0x04),
    )


def decode_key(cursor: ByteCursor, row_offset: int) -> Optional[Key]:
    if not cursor.fits(row_offset, 9):
        return None
    return Key(
        id=cursor.u32_at(row_offset),
        name=cursor.read_device_sql_string(row_offset, 0x08),
    )


def decode_color(cursor: ByteCursor, row_offset: int) -> Optional[Color]:
    # u32 unknown, u8 unknown, u8 color index, u16 unknown, name
    if not cursor.fits(row_offset, 9):
        return None
    return Color(
        id=cursor.u8_at(row_offset + 0x05),
        name=cursor.read_device_sql_string(row_offset, 0x08),
    )


def decode_artwork(cursor: ByteCursor, row_offset: int) -> Optional[Artwork]:
    if not cursor.fits(row_offset, 5):
        return None
    return Artwork(
        id=cursor.u32_at(row_offset),
        path=cursor.read_device_sql_string(row_offset, 0x04),
    )


def decode_playlist_tree_node(cursor: ByteCursor, row_offset: int) -> Optional[PlaylistTreeNode]:
    if not cursor.fits(row_offset, 21):
        return None
    return PlaylistTreeNode(
        parent_id=cursor.u32_at(row_offset),
        sort_order=cursor.u32_at(row_offset + 0x08),
        id=cursor.u32_at(row_offset + 0x0c),
        is_folder=cursor.u32_at(row_offset + 0x10) != 0,
        name=cursor.read_device_sql_string(row_offset, 0x14),
    )


def decode_playlist_entry(cursor: ByteCursor, row_offset: int) -> Optional[PlaylistEntry]:
    if not cursor.fits(row_offset, 12):
        return None
    return PlaylistEntry(
        entry_index=cursor.u32_at(row_offset),
        track_id=cursor.u32_at(row_offset + 0x04),
        playlist_id=cursor.u32_at(row_offset + 0x08),
    )


def decode_rows(
    cursor: ByteCursor,
    locations: Iterable[RowLocation],
    decoder: Callable[[ByteCursor, int], Optional[T]],
) -> Iterator[T]:
    """Run a decoder over rows, dropping the ones that do not decode"""
    for location in locations:
        try:
            record = decoder(cursor, location.row_offset)
        except (ValueError, IndexError, TypeError) as e:
            logger.debug(f"{decoder.__name__}: row at {location.row_offset:#x} failed: {e}")
            continue
        if record is None:
            logger.debug(f"{decoder.__name__}: row at {location.row_offset:#x} truncated")
            continue
        yield record
