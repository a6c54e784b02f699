"""
Reader for Pioneer export.pdb (DeviceSQL) databases and in-place playlist
order writer.
"""

from loguru import logger

from .database import Database, PlaylistTreeItem, parse, parse_file
from .editor import PlaylistEditor
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
from .writer import (
    PlaylistWriteResult,
    apply_playlist_modifications,
    save_with_backup,
    write_playlist_order,
)

logger.disable(__name__)

__version__ = "0.1.0"

__all__ = [
    'Album',
    'Artist',
    'Artwork',
    'Color',
    'Database',
    'Genre',
    'Key',
    'PlaylistEditor',
    'PlaylistEntry',
    'PlaylistTreeItem',
    'PlaylistTreeNode',
    'PlaylistWriteResult',
    'Track',
    'apply_playlist_modifications',
    'parse',
    'parse_file',
    'save_with_backup',
    'write_playlist_order',
]
