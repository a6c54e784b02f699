"""
File header (page 0) and the table directory.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict

from .config import (
    HEADER_NEXT_UNUSED_OFFSET,
    HEADER_NUM_TABLES_OFFSET,
    HEADER_PAGE_SIZE_OFFSET,
    HEADER_SEQUENCE_OFFSET,
    TABLE_DIRECTORY_OFFSET,
    TABLE_POINTER_SIZE,
)
from .cursor import ByteCursor


class TableType(IntEnum):
    TRACKS = 0
    GENRES = 1
    ARTISTS = 2
    ALBUMS = 3
    LABELS = 4
    KEYS = 5
    COLORS = 6
    PLAYLIST_TREE = 7
    PLAYLIST_ENTRIES = 8
    HISTORY_PLAYLISTS = 11
    HISTORY_ENTRIES = 12
    ARTWORK = 13
    COLUMNS = 16
    HISTORY = 19


def table_name(type_id: int) -> str:
    try:
        return TableType(type_id).name
    except ValueError:
        return f"Unknown({type_id})"


@dataclass
class TablePointer:
    type_id: int
    empty_candidate: int
    first_page: int
    last_page: int

    @property
    def name(self) -> str:
        return table_name(self.type_id)


@dataclass
class FileHeader:
    page_size: int
    num_tables: int
    next_unused_page: int
    sequence: int
    tables: Dict[int, TablePointer] = field(default_factory=dict)


def parse_header(cursor: ByteCursor) -> FileHeader:
    """Parse the file header and the table directory that follows it"""
    page_size = cursor.u32_at(HEADER_PAGE_SIZE_OFFSET)
    num_tables = cursor.u32_at(HEADER_NUM_TABLES_OFFSET)
    next_unused = cursor.u32_at(HEADER_NEXT_UNUSED_OFFSET)
    sequence = cursor.u32_at(HEADER_SEQUENCE_OFFSET)

    room = max(cursor.length - TABLE_DIRECTORY_OFFSET, 0) // TABLE_POINTER_SIZE
    tables: Dict[int, TablePointer] = {}

    cursor.seek(TABLE_DIRECTORY_OFFSET)
    for _ in range(min(num_tables, room)):
        table_type = cursor.read_u32()
        empty_candidate = cursor.read_u32()
        first_page = cursor.read_u32()
        last_page = cursor.read_u32()

        # Both pages zero means the table is not present in this export
        if first_page == 0 and last_page == 0:
            continue
        if table_type in tables:
            continue
        tables[table_type] = TablePointer(
            type_id=table_type,
            empty_candidate=empty_candidate,
            first_page=first_page,
            last_page=last_page,
        )

    return FileHeader(
        page_size=page_size,
        num_tables=num_tables,
        next_unused_page=next_unused,
        sequence=sequence,
        tables=tables,
    )
