"""
Finding export.pdb and track files on a mounted Pioneer USB volume.
"""

from pathlib import Path
from typing import Union

from .config import EXPORT_DIR, EXPORT_FILENAME


class VolumeError(Exception):
    """The selected folder is not a usable rekordbox export"""


class PioneerFolderNotFound(VolumeError):
    pass


class RekordboxFolderNotFound(VolumeError):
    pass


class ExportNotFound(VolumeError):
    pass


def find_pioneer_dir(root: Union[str, Path]) -> Path:
    root = Path(root)
    pioneer_name = EXPORT_DIR[0]
    if root.name == pioneer_name and root.is_dir():
        return root
    candidate = root / pioneer_name
    if not candidate.is_dir():
        raise PioneerFolderNotFound(
            f"No {pioneer_name} folder found in {root}. "
            f"Select the USB drive or the {pioneer_name} folder directly."
        )
    return candidate


def find_export_pdb(root: Union[str, Path]) -> Path:
    """Path of export.pdb given the volume root or its PIONEER folder"""
    pioneer = find_pioneer_dir(root)

    rekordbox = pioneer / EXPORT_DIR[1]
    if not rekordbox.is_dir():
        raise RekordboxFolderNotFound(
            f"No {EXPORT_DIR[1]} folder found inside {pioneer}. Is this a valid rekordbox USB?"
        )

    pdb_path = rekordbox / EXPORT_FILENAME
    if not pdb_path.is_file():
        raise ExportNotFound(
            f"No {EXPORT_FILENAME} found in {rekordbox}. Export your library from rekordbox first."
        )
    return pdb_path


def resolve_track_path(root: Union[str, Path], file_path: str) -> Path:
    """
    Map a stored track path such as /Contents/Artist/Album/track.mp3 onto
    the volume. The volume root is the folder that holds PIONEER.
    """
    root = Path(root)
    if root.name == EXPORT_DIR[0]:
        root = root.parent
    parts = [p for p in file_path.split('/') if p and p not in ('.', '..')]
    return root.joinpath(*parts)
