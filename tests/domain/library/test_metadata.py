"""Tests for tag and embedded artwork reading."""

import base64
from types import SimpleNamespace

from mutagen.flac import Picture
from mutagen.id3 import ID3, TIT2, TLEN
from mutagen.wave import WAVE

from trackart.domain.library.metadata import (
    TagInfo,
    extract_embedded_artwork,
    get_tag_value,
    read_tags,
)


class TestGetTagValue:
    """Tests for get_tag_value."""

    def test_first_matching_name_wins(self):
        tags = {"TITLE": ["Vorbis Title"], "title": ["lower"]}
        assert get_tag_value(tags, ["TIT2", "TITLE", "title"]) == "Vorbis Title"

    def test_frame_text_attribute(self):
        tags = {"TIT2": SimpleNamespace(text=["Frame Title"])}
        assert get_tag_value(tags, ["TIT2"]) == "Frame Title"

    def test_blank_values_skipped(self):
        tags = {"TIT2": SimpleNamespace(text=["   "]), "title": ["Fallback"]}
        assert get_tag_value(tags, ["TIT2", "title"]) == "Fallback"

    def test_none_tags(self):
        assert get_tag_value(None, ["TIT2"]) is None


class TestReadTags:
    """Tests for read_tags."""

    def test_id3_frames(self, tmp_path, tagged_mp3):
        path = tagged_mp3(tmp_path / "song.mp3", title="Song", artist="Band", album="LP")
        tags = read_tags(path)
        assert tags.title == "Song"
        assert tags.artist == "Band"
        assert tags.album == "LP"

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "unknown.flac"
        path.write_bytes(b"definitely not audio")
        assert read_tags(path) == TagInfo()

    def test_missing_file(self, tmp_path):
        assert read_tags(tmp_path / "gone.mp3") == TagInfo()

    def test_duration_from_audio_header(self, tmp_path, wav_file):
        path = wav_file(tmp_path / "tone.wav", seconds=2.5)
        assert read_tags(path).duration == 2

    def test_length_tag_ignored(self, tmp_path, wav_file):
        path = wav_file(tmp_path / "tone.wav", seconds=2.5)
        audio = WAVE(path)
        audio.add_tags()
        audio.tags.add(TLEN(encoding=3, text="999000"))
        audio.tags.add(TIT2(encoding=3, text="Tone"))
        audio.save()

        tags = read_tags(path)
        assert tags.title == "Tone"
        assert tags.duration == 2

    def test_no_audio_stream_means_no_duration(self, tmp_path, tagged_mp3):
        path = tagged_mp3(tmp_path / "song.mp3", title="Song")
        id3 = ID3(path)
        id3.add(TLEN(encoding=3, text="215000"))
        id3.save(path)

        assert read_tags(path).duration is None


class TestExtractEmbeddedArtwork:
    """Tests for extract_embedded_artwork."""

    def test_id3_picture(self, tmp_path, tagged_mp3, image_bytes):
        picture = image_bytes(50, 50)
        path = tagged_mp3(tmp_path / "song.mp3", title="Song", picture=picture)
        artwork = extract_embedded_artwork(path)
        assert artwork is not None
        assert artwork.data == picture
        assert artwork.mime == "image/png"

    def test_no_picture(self, tmp_path, tagged_mp3):
        path = tagged_mp3(tmp_path / "song.mp3", title="Song")
        assert extract_embedded_artwork(path) is None

    def test_missing_file(self, tmp_path):
        assert extract_embedded_artwork(tmp_path / "gone.mp3") is None

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "broken.ogg"
        path.write_bytes(b"\x00" * 64)
        assert extract_embedded_artwork(path) is None


class TestPictureContainers:
    """Picture lookup in the different tag containers."""

    def test_vorbis_picture_block(self, image_bytes):
        from trackart.domain.library.metadata import _picture_from_vorbis

        picture = Picture()
        picture.data = image_bytes(10, 10)
        picture.mime = "image/png"
        picture.width = 10
        picture.height = 10
        block = base64.b64encode(picture.write()).decode("ascii")

        artwork = _picture_from_vorbis({"metadata_block_picture": [block]})
        assert artwork.data == picture.data
        assert (artwork.width, artwork.height) == (10, 10)

    def test_vorbis_bad_block_skipped(self):
        from trackart.domain.library.metadata import _picture_from_vorbis

        assert _picture_from_vorbis({"metadata_block_picture": ["!!!"]}) is None

    def test_mp4_cover(self):
        from mutagen.mp4 import MP4Cover

        from trackart.domain.library.metadata import _picture_from_mp4

        cover = MP4Cover(b"\xff\xd8jpeg", imageformat=MP4Cover.FORMAT_JPEG)
        artwork = _picture_from_mp4({"covr": [cover]})
        assert artwork.data == b"\xff\xd8jpeg"
        assert artwork.mime == "image/jpeg"
