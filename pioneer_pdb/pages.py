"""
Page walker: follows a table's page chain and yields the offsets of live rows.

Page layout (offsets from page start):

    0x00  40-byte page header
    0x28  row presence bitmap, ceil(rows / 8) bytes padded to even length
    ....  u16 row offset per slot (relative to page start)
    ....  row heap
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional

from loguru import logger

from . import config
from .config import (
    PAGE_FIRST_ROW_OFFSET,
    PAGE_FREE_SIZE_OFFSET,
    PAGE_HEADER_SIZE,
    PAGE_INDEX_OFFSET,
    PAGE_NEXT_OFFSET,
    PAGE_ROWS_LARGE_OFFSET,
    PAGE_ROWS_SMALL_OFFSET,
    PAGE_TYPE_OFFSET,
    PAGE_USED_SIZE_OFFSET,
)
from .cursor import ByteCursor
from .header import FileHeader, table_name


class RowLocation(NamedTuple):
    row_offset: int  # absolute offset of the row in the file
    page_offset: int  # absolute offset of the page holding it


@dataclass
class PageHeader:
    page_index: int
    page_type: int
    next_page: int
    num_rows_small: int
    free_size: int
    used_size: int
    num_rows_large: int
    first_row_offset: int

    @property
    def row_count(self) -> int:
        return max(self.num_rows_small, self.num_rows_large)


def read_page_header(cursor: ByteCursor, page_start: int) -> PageHeader:
    return PageHeader(
        page_index=cursor.u32_at(page_start + PAGE_INDEX_OFFSET),
        page_type=cursor.u32_at(page_start + PAGE_TYPE_OFFSET),
        next_page=cursor.u32_at(page_start + PAGE_NEXT_OFFSET),
        num_rows_small=cursor.u8_at(page_start + PAGE_ROWS_SMALL_OFFSET),
        free_size=cursor.u16_at(page_start + PAGE_FREE_SIZE_OFFSET),
        used_size=cursor.u16_at(page_start + PAGE_USED_SIZE_OFFSET),
        num_rows_large=cursor.u16_at(page_start + PAGE_ROWS_LARGE_OFFSET),
        first_row_offset=cursor.u16_at(page_start + PAGE_FIRST_ROW_OFFSET),
    )


def bitmap_size(row_count: int) -> int:
    size = (row_count + 7) // 8
    return size + (size & 1)


def iter_page_rows(cursor: ByteCursor, page_start: int, row_count: int) -> Iterator[RowLocation]:
    """Yield the present rows of one page"""
    bitmap_start = page_start + PAGE_HEADER_SIZE
    offsets_start = bitmap_start + bitmap_size(row_count)

    for slot in range(row_count):
        if not cursor.fits(bitmap_start + slot // 8, 1):
            break
        flags = cursor.u8_at(bitmap_start + slot // 8)
        if not flags & (1 << (slot % 8)):
            continue
        row_offset = cursor.u16_at(offsets_start + slot * 2)
        if row_offset == 0:
            continue
        absolute = page_start + row_offset
        if 0 < absolute < cursor.length:
            yield RowLocation(absolute, page_start)


def walk_table(
    cursor: ByteCursor,
    header: FileHeader,
    table_type: int,
    max_pages: Optional[int] = None,
    max_rows: Optional[int] = None,
) -> Iterator[RowLocation]:
    """
    Yield RowLocation for every live row of a table, page by page.

    The chain ends at next_page == 0, at a page already visited, at a page
    that does not fit in the buffer, or after max_pages pages. Pages claiming
    more than max_rows rows are skipped.
    """
    if max_pages is None:
        max_pages = config.MAX_PAGES
    if max_rows is None:
        max_rows = config.MAX_ROWS_PER_PAGE

    pointer = header.tables.get(table_type)
    if pointer is None or header.page_size == 0:
        return

    name = table_name(table_type)
    page_index = pointer.first_page
    visited = set()

    while page_index and len(visited) < max_pages:
        if page_index in visited:
            logger.debug(f"{name}: page {page_index} already visited, stopping")
            break
        visited.add(page_index)

        page_start = page_index * header.page_size
        if not cursor.fits(page_start, PAGE_HEADER_SIZE):
            logger.debug(f"{name}: page {page_index} lies beyond end of file")
            break

        page = read_page_header(cursor, page_start)
        row_count = page.row_count
        if row_count > max_rows:
            logger.debug(f"{name}: page {page_index} claims {row_count} rows, skipped")
        else:
            yield from iter_page_rows(cursor, page_start, row_count)

        page_index = page.next_page
