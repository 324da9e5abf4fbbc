"""Tests for cover artifact naming and storage."""

import pytest

from trackart.domain.covers.exceptions import CoverStorageError
from trackart.domain.covers.storage import (
    cover_filename,
    cover_url,
    ensure_covers_dir,
    filename_from_url,
    list_cover_files,
    match_existing_cover,
    sanitize_path_token,
    write_cover,
)


class TestNaming:
    """Filename and reference construction."""

    def test_sanitize_keeps_safe_characters(self):
        assert sanitize_path_token("song.mp3") == "song.mp3"
        assert sanitize_path_token("Rock/My Song (live)-2.mp3") == "Rock_My_Song__live_-2.mp3"

    def test_sanitize_non_ascii(self):
        assert sanitize_path_token("café.mp3") == "caf_.mp3"

    def test_cover_filename(self):
        assert cover_filename("album/song.mp3", 1700000000123) == "1700000000123_album_song.mp3.jpg"

    def test_cover_url(self):
        assert cover_url("/covers", "1_song.mp3.jpg") == "/covers/1_song.mp3.jpg"
        assert cover_url("/api/covers/", "1_song.mp3.jpg") == "/api/covers/1_song.mp3.jpg"

    def test_filename_from_url(self):
        assert filename_from_url("/covers/1_song.mp3.jpg") == "1_song.mp3.jpg"
        assert filename_from_url(None) is None
        assert filename_from_url("/covers/") is None


class TestMatchExistingCover:
    """Substring matching of existing artifacts."""

    def test_no_match(self):
        assert match_existing_cover(["1_other.mp3.jpg"], "song.mp3") is None

    def test_first_sorted_match(self):
        files = ["200_song.mp3.jpg", "100_song.mp3.jpg"]
        assert match_existing_cover(files, "song.mp3") == "100_song.mp3.jpg"

    def test_current_reference_preferred(self):
        files = ["100_my_song.mp3.jpg", "200_song.mp3.jpg"]
        assert match_existing_cover(files, "song.mp3", "200_song.mp3.jpg") == "200_song.mp3.jpg"

    def test_stale_reference_ignored(self):
        files = ["100_song.mp3.jpg"]
        assert match_existing_cover(files, "song.mp3", "999_song.mp3.jpg") == "100_song.mp3.jpg"

    def test_other_tracks_artifact_not_adopted(self):
        files = ["1000_my_song.mp3.jpg"]
        assert match_existing_cover(files, "song.mp3") is None

    def test_exact_artifact_before_loose_name(self):
        files = ["000_legacy_song.mp3.png", "500_song.mp3.jpg"]
        assert match_existing_cover(files, "song.mp3") == "500_song.mp3.jpg"

    def test_loose_name_matched_by_substring(self):
        files = ["cover-for-song.mp3.png"]
        assert match_existing_cover(files, "song.mp3") == "cover-for-song.mp3.png"


class TestDirectory:
    """Covers directory handling."""

    def test_ensure_creates(self, tmp_path):
        covers = tmp_path / "a" / "covers"
        ensure_covers_dir(covers)
        assert covers.is_dir()

    def test_ensure_fails_on_file(self, tmp_path):
        blocker = tmp_path / "covers"
        blocker.write_bytes(b"")
        with pytest.raises(CoverStorageError):
            ensure_covers_dir(blocker)

    def test_list_sorted_without_hidden(self, tmp_path):
        for name in ["2_b.mp3.jpg", "1_a.mp3.jpg", ".3_c.mp3.jpg.tmp"]:
            (tmp_path / name).write_bytes(b"x")
        (tmp_path / "subdir").mkdir()
        assert list_cover_files(tmp_path) == ["1_a.mp3.jpg", "2_b.mp3.jpg"]

    def test_list_missing_directory(self, tmp_path):
        with pytest.raises(CoverStorageError):
            list_cover_files(tmp_path / "missing")

    def test_write_cover(self, tmp_path):
        path = write_cover(tmp_path, "1_song.mp3.jpg", b"jpeg")
        assert path.read_bytes() == b"jpeg"
        assert list(p.name for p in tmp_path.iterdir()) == ["1_song.mp3.jpg"]

    def test_write_cover_missing_directory(self, tmp_path):
        with pytest.raises(OSError):
            write_cover(tmp_path / "missing", "1_song.mp3.jpg", b"jpeg")
