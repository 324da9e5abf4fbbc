"""Tests for the SQLite track table."""

import sqlite3

import pytest

from trackart.core import database
from trackart.domain.library.exceptions import TrackNotFoundError
from trackart.domain.library.models import Track


@pytest.fixture
def db_path(tmp_path):
    """Initialised temporary database."""
    path = tmp_path / "trackart.db"
    database.init_database(path)
    return path


def _track(file_path="song.mp3", **kwargs):
    defaults = {"title": "Song", "artist": "Artist"}
    defaults.update(kwargs)
    return Track(file_path=file_path, **defaults)


class TestInitDatabase:
    """Schema creation."""

    def test_idempotent(self, db_path):
        database.init_database(db_path)
        with database.get_db_connection(db_path) as conn:
            version = conn.execute("SELECT MAX(version) AS v FROM schema_version").fetchone()["v"]
        assert version == database.SCHEMA_VERSION

    def test_default_path_from_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert database.get_database_path() == tmp_path / "trackart" / "trackart.db"


class TestSaveTrack:
    """Insert and update through save_track."""

    def test_insert_assigns_id(self, db_path):
        saved = database.save_track(_track(), db_path)
        assert saved.id is not None
        assert database.get_track_by_id(saved.id, db_path) == saved

    def test_duplicate_path_rejected(self, db_path):
        database.save_track(_track(), db_path)
        with pytest.raises(sqlite3.IntegrityError):
            database.save_track(_track(), db_path)

    def test_update_cover_url(self, db_path):
        saved = database.save_track(_track(), db_path)
        database.save_track(saved._replace(cover_url="/covers/1_song.mp3.jpg"), db_path)
        assert database.get_track_by_path("song.mp3", db_path).cover_url == "/covers/1_song.mp3.jpg"

    def test_update_unknown_id(self, db_path):
        with pytest.raises(TrackNotFoundError):
            database.save_track(_track()._replace(id=999), db_path)

    def test_stale_snapshot_keeps_play_count(self, db_path):
        saved = database.save_track(_track(), db_path)
        database.increment_play_count(saved.id, db_path)
        database.save_track(saved._replace(cover_url="/covers/x.jpg"), db_path)
        assert database.get_track_by_id(saved.id, db_path).play_count == 1


class TestQueries:
    """Lookup, search and stats."""

    def test_get_all_tracks_ordered(self, db_path):
        database.save_track(_track("b.mp3"), db_path)
        database.save_track(_track("a.mp3"), db_path)
        assert [t.file_path for t in database.get_all_tracks(db_path)] == ["b.mp3", "a.mp3"]

    def test_get_track_by_path_missing(self, db_path):
        assert database.get_track_by_path("missing.mp3", db_path) is None

    def test_search_case_insensitive(self, db_path):
        database.save_track(_track("a.mp3", title="Blue Monday", artist="New Order"), db_path)
        database.save_track(_track("b.mp3", title="Other", artist="Someone", album="Blue Lines"), db_path)
        database.save_track(_track("c.mp3", title="Nothing", artist="Nobody"), db_path)
        results = database.search_tracks("BLUE", db_path)
        assert [t.file_path for t in results] == ["a.mp3", "b.mp3"]

    def test_cover_stats(self, db_path):
        database.save_track(_track("a.mp3", cover_url="/covers/a.jpg"), db_path)
        database.save_track(_track("b.mp3"), db_path)
        assert database.get_cover_stats(db_path) == {"total": 2, "with_cover": 1, "missing": 1}


class TestIncrementPlayCount:
    """Play counts."""

    def test_increments(self, db_path):
        saved = database.save_track(_track(), db_path)
        assert database.increment_play_count(saved.id, db_path) == 1
        assert database.increment_play_count(saved.id, db_path) == 2

    def test_unknown_track(self, db_path):
        with pytest.raises(TrackNotFoundError) as exc_info:
            database.increment_play_count(42, db_path)
        assert exc_info.value.track_id == 42
        assert str(exc_info.value) == "Track #42 not found"
