"""Tests for locating the export on a USB volume."""

import pytest

from pioneer_pdb.volume import (
    ExportNotFound,
    PioneerFolderNotFound,
    RekordboxFolderNotFound,
    VolumeError,
    find_export_pdb,
    resolve_track_path,
)


@pytest.fixture
def volume(tmp_path):
    rekordbox = tmp_path / 'PIONEER' / 'rekordbox'
    rekordbox.mkdir(parents=True)
    (rekordbox / 'export.pdb').write_bytes(b'pdb')
    return tmp_path


def test_find_from_volume_root(volume):
    assert find_export_pdb(volume) == volume / 'PIONEER' / 'rekordbox' / 'export.pdb'


def test_find_from_pioneer_folder(volume):
    assert find_export_pdb(volume / 'PIONEER') == volume / 'PIONEER' / 'rekordbox' / 'export.pdb'


def test_no_pioneer_folder(tmp_path):
    with pytest.raises(PioneerFolderNotFound, match='PIONEER'):
        find_export_pdb(tmp_path)


def test_no_rekordbox_folder(tmp_path):
    (tmp_path / 'PIONEER').mkdir()
    with pytest.raises(RekordboxFolderNotFound):
        find_export_pdb(tmp_path)


def test_no_export(tmp_path):
    (tmp_path / 'PIONEER' / 'rekordbox').mkdir(parents=True)
    with pytest.raises(ExportNotFound, match='export.pdb'):
        find_export_pdb(tmp_path)


def test_errors_share_a_base():
    assert issubclass(ExportNotFound, VolumeError)
    assert issubclass(PioneerFolderNotFound, VolumeError)


def test_resolve_track_path(volume):
    path = resolve_track_path(volume, '/Contents/Artist/Album/track.mp3')
    assert path == volume / 'Contents' / 'Artist' / 'Album' / 'track.mp3'


def test_resolve_track_path_from_pioneer_folder(volume):
    path = resolve_track_path(volume / 'PIONEER', '/Contents/a.mp3')
    assert path == volume / 'Contents' / 'a.mp3'


def test_resolve_track_path_stays_on_volume(volume):
    path = resolve_track_path(volume, '/../../etc/passwd')
    assert path == volume / 'etc' / 'passwd'
