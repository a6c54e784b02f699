"""Tests for loguru setup."""

from loguru import logger

from pioneer_pdb import parse
from pioneer_pdb.log import setup_logging


def test_setup_logging_writes_file(tmp_path, sample_pdb):
    log_file = tmp_path / 'pioneer_pdb.log'
    try:
        setup_logging('INFO', log_file=log_file)
        parse(sample_pdb)
    finally:
        logger.remove()
        logger.disable('pioneer_pdb')

    text = log_file.read_text()
    assert 'Parsed 3 tracks' in text
    assert 'Complete: 3 tracks, 2 artists, 4 playlists' in text


def test_library_is_silent_by_default(tmp_path, sample_pdb):
    log_file = tmp_path / 'silent.log'
    handler = logger.add(log_file, level='DEBUG')
    try:
        parse(sample_pdb)
    finally:
        logger.remove(handler)
    assert log_file.read_text() == ''
