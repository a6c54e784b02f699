"""Tests for the row decoders."""

import struct

import pytest

from pdb_builder import (
    album_row,
    artist_row,
    artwork_row,
    color_row,
    encode_string,
    genre_row,
    key_row,
    playlist_entry_row,
    playlist_tree_row,
    track_row,
)
from pioneer_pdb.cursor import ByteCursor
from pioneer_pdb.models import PlaylistEntry
from pioneer_pdb.pages import RowLocation
from pioneer_pdb.rows import (
    TRACK_STRINGS_LONG,
    TRACK_STRINGS_SHORT,
    TrackString,
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
    select_track_layout,
)

PAD = 6


def at_offset(row: bytes):
    """Cursor over the row placed at a nonzero offset"""
    return ByteCursor(bytes(PAD) + row + bytes(4)), PAD


class TestTrackLayout:
    def test_subtype_bit_selects_layout(self):
        assert select_track_layout(0x24) is TRACK_STRINGS_LONG
        assert select_track_layout(0x04) is TRACK_STRINGS_LONG
        assert select_track_layout(0x20) is TRACK_STRINGS_SHORT
        assert select_track_layout(0x00) is TRACK_STRINGS_SHORT

    def test_both_layouts_have_21_slots(self):
        assert TRACK_STRINGS_LONG.count == TRACK_STRINGS_SHORT.count == 21
        assert TRACK_STRINGS_SHORT.base == TRACK_STRINGS_LONG.base + 1

    def test_read_offsets(self):
        row = bytearray(0x5e + 42)
        for slot in range(21):
            struct.pack_into('<H', row, 0x5e + slot * 2, 1000 + slot)
        offsets = TRACK_STRINGS_LONG.read_offsets(ByteCursor(bytes(row)), 0)
        assert offsets == tuple(range(1000, 1021))


class TestDecodeTrack:
    @pytest.mark.parametrize('subtype', [0x24, 0x20])
    def test_fields_and_strings(self, subtype):
        cursor, offset = at_offset(track_row(
            77,
            title='Around the World',
            artist_id=3,
            album_id=4,
            genre_id=5,
            key_id=6,
            tempo=12105,
            duration=429,
            rating=4,
            color_id=2,
            bitrate=1411,
            sample_rate=44100,
            file_size=75000000,
            file_path='/Contents/Daft Punk/Homework/Around the World.wav',
            file_name='Around the World.wav',
            track_number=7,
            disc_number=1,
            year=1997,
            comment='peak time',
            date_added='2023-12-31',
            artwork_id=9,
            subtype=subtype,
        ))
        track = decode_track(cursor, offset)

        assert track.id == 77
        assert track.title == 'Around the World'
        assert (track.artist_id, track.album_id, track.genre_id, track.key_id) == (3, 4, 5, 6)
        assert track.tempo == 12105
        assert track.bpm == pytest.approx(121.05)
        assert track.duration == 429
        assert track.rating == 4
        assert track.color_id == 2
        assert track.bitrate == 1411
        assert track.sample_rate == 44100
        assert track.file_size == 75000000
        assert track.file_path == '/Contents/Daft Punk/Homework/Around the World.wav'
        assert track.file_name == 'Around the World.wav'
        assert track.track_number == 7
        assert track.disc_number == 1
        assert track.year == 1997
        assert track.comment == 'peak time'
        assert track.date_added == '2023-12-31'
        assert track.artwork_id == 9
        # Names are resolved later by the assembler
        assert track.artist == track.album == track.genre == track.key == ''

    def test_missing_strings_default_empty(self):
        cursor, offset = at_offset(track_row(5))
        track = decode_track(cursor, offset)
        assert track.id == 5
        assert track.title == track.comment == track.file_path == ''

    def test_wrong_layout_misreads_strings_only(self):
        row = bytearray(track_row(8, title='Title', subtype=0x24))
        struct.pack_into('<H', row, 0, 0x20)
        cursor, offset = at_offset(bytes(row))
        track = decode_track(cursor, offset)
        assert track.id == 8
        assert track.title != 'Title'

    def test_truncated_row(self):
        row = track_row(5, title='x')
        cursor = ByteCursor(row[:0x80])
        assert decode_track(cursor, 0) is None

    def test_title_slot_index(self):
        assert TrackString.TITLE == 17
        assert TrackString.FILE_PATH == 20


class TestDimensionRows:
    @pytest.mark.parametrize('subtype', [0x60, 0x64])
    def test_artist(self, subtype):
        cursor, offset = at_offset(artist_row(12, 'Justice', subtype=subtype))
        artist = decode_artist(cursor, offset)
        assert (artist.id, artist.name) == (12, 'Justice')

    def test_artist_utf16_name(self):
        cursor, offset = at_offset(artist_row(2, 'Sigur Rós', subtype=0x64))
        assert decode_artist(cursor, offset).name == 'Sigur Rós'

    @pytest.mark.parametrize('subtype', [0x80, 0x84])
    def test_album(self, subtype):
        cursor, offset = at_offset(album_row(40, 'Cross', artist_id=12, subtype=subtype))
        album = decode_album(cursor, offset)
        assert (album.id, album.name, album.artist_id) == (40, 'Cross', 12)

    def test_genre(self):
        cursor, offset = at_offset(genre_row(3, 'Techno'))
        genre = decode_genre(cursor, offset)
        assert (genre.id, genre.name) == (3, 'Techno')

    def test_key(self):
        cursor, offset = at_offset(key_row(24, '12A'))
        key = decode_key(cursor, offset)
        assert (key.id, key.name) == (24, '12A')

    def test_color(self):
        cursor, offset = at_offset(color_row(6, 'Blue'))
        color = decode_color(cursor, offset)
        assert (color.id, color.name) == (6, 'Blue')

    def test_artwork(self):
        cursor, offset = at_offset(artwork_row(8, '/PIONEER/Artwork/00001/a8.jpg'))
        artwork = decode_artwork(cursor, offset)
        assert (artwork.id, artwork.path) == (8, '/PIONEER/Artwork/00001/a8.jpg')

    def test_long_name(self):
        name = 'A' * 80
        cursor, offset = at_offset(genre_row(1, name))
        assert decode_genre(cursor, offset).name == name

    def test_truncated_rows(self):
        assert decode_artist(ByteCursor(artist_row(1, 'x')[:9]), 0) is None
        assert decode_album(ByteCursor(album_row(1, 'x')[:20]), 0) is None
        assert decode_genre(ByteCursor(struct.pack('<I', 1)), 0) is None
        assert decode_key(ByteCursor(struct.pack('<II', 1, 1)), 0) is None
        assert decode_color(ByteCursor(bytes(8)), 0) is None
        assert decode_artwork(ByteCursor(bytes(4)), 0) is None


class TestPlaylistRows:
    def test_tree_node(self):
        cursor, offset = at_offset(playlist_tree_row(5, 'Peak', parent_id=2, is_folder=False, sort_order=3))
        node = decode_playlist_tree_node(cursor, offset)
        assert node.id == 5
        assert node.parent_id == 2
        assert node.name == 'Peak'
        assert node.is_folder is False
        assert node.sort_order == 3

    def test_folder_flag(self):
        cursor, offset = at_offset(playlist_tree_row(1, 'Folder', is_folder=True))
        assert decode_playlist_tree_node(cursor, offset).is_folder is True

    def test_entry(self):
        cursor, offset = at_offset(playlist_entry_row(3, 44, 9))
        assert decode_playlist_entry(cursor, offset) == PlaylistEntry(3, 44, 9)

    def test_truncated(self):
        assert decode_playlist_entry(ByteCursor(bytes(11)), 0) is None
        assert decode_playlist_tree_node(ByteCursor(bytes(20)), 0) is None


class TestDecodeRows:
    def test_skips_bad_rows_and_keeps_the_rest(self):
        rows = [genre_row(1, 'A'), genre_row(2, 'B')]
        data = rows[0] + rows[1] + struct.pack('<I', 3)
        locations = [
            RowLocation(0, 0),
            RowLocation(len(rows[0]), 0),
            RowLocation(len(data) - 4, 0),
        ]
        genres = list(decode_rows(ByteCursor(data), locations, decode_genre))
        assert [g.id for g in genres] == [1, 2]

    def test_decoder_exception_is_contained(self):
        def flaky(cursor, offset):
            if offset == 1:
                raise ValueError('bad row')
            return offset

        locations = [RowLocation(o, 0) for o in (0, 1, 2)]
        assert list(decode_rows(ByteCursor(b''), locations, flaky)) == [0, 2]

    def test_garbage_string_does_not_lose_row(self):
        row = struct.pack('<I', 9) + bytes([0x90, 0xff, 0xff]) + encode_string('x')
        cursor, offset = at_offset(row)
        genre = decode_genre(cursor, offset)
        assert (genre.id, genre.name) == (9, '')
