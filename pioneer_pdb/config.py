"""
Format constants and safety limits for the DeviceSQL reader.

Limits can be overridden through the environment (or a .env / settings.ini
file), e.g. PIONEER_PDB_MAX_PAGES=50000.
"""

from decouple import config

# File header
HEADER_PAGE_SIZE_OFFSET = 0x04
HEADER_NUM_TABLES_OFFSET = 0x08
HEADER_NEXT_UNUSED_OFFSET = 0x0c
HEADER_SEQUENCE_OFFSET = 0x14
TABLE_DIRECTORY_OFFSET = 0x1c  # 28
TABLE_POINTER_SIZE = 16

# Page header (relative to page start)
PAGE_HEADER_SIZE = 0x28  # 40 bytes, row data starts here
PAGE_INDEX_OFFSET = 0x04
PAGE_TYPE_OFFSET = 0x08
PAGE_NEXT_OFFSET = 0x0c
PAGE_ROWS_SMALL_OFFSET = 0x14
PAGE_FREE_SIZE_OFFSET = 0x18
PAGE_USED_SIZE_OFFSET = 0x1a
PAGE_ROWS_LARGE_OFFSET = 0x1e
PAGE_FIRST_ROW_OFFSET = 0x24

# Playlist entry rows are located by scanning every even offset
ROW_ALIGNMENT = 2

MAX_PAGES = config('PIONEER_PDB_MAX_PAGES', default=10000, cast=int)
MAX_ROWS_PER_PAGE = config('PIONEER_PDB_MAX_ROWS', default=10000, cast=int)
MAX_TREE_DEPTH = config('PIONEER_PDB_MAX_TREE_DEPTH', default=64, cast=int)
LOG_LEVEL = config('PIONEER_PDB_LOG_LEVEL', default='WARNING')

EXPORT_DIR = ('PIONEER', 'rekordbox')
EXPORT_FILENAME = 'export.pdb'
