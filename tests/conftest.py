"""Shared fixtures: an in-memory track store, image bytes and tagged audio files."""

import io
import threading
import wave
from pathlib import Path
from typing import Optional

import pytest
from loguru import logger
from mutagen.id3 import APIC, ID3, TALB, TIT2, TPE1
from PIL import Image

from trackart.core.config import Config
from trackart.domain.library.models import Track


class InMemoryTrackStore:
    """TrackStore kept in a dict; records every save for assertions."""

    def __init__(self, tracks=()):
        self._lock = threading.Lock()
        self._tracks: dict[int, Track] = {}
        self._next_id = 1
        self.saves: list[Track] = []
        for track in tracks:
            self.save(track)
        self.saves.clear()

    def find_all(self) -> list[Track]:
        with self._lock:
            return sorted(self._tracks.values(), key=lambda t: t.id)

    def find_by_file_path(self, file_path: str) -> Optional[Track]:
        with self._lock:
            for track in self._tracks.values():
                if track.file_path == file_path:
                    return track
        return None

    def save(self, track: Track) -> Track:
        with self._lock:
            if track.id is None:
                track = track._replace(id=self._next_id)
                self._next_id += 1
            self._tracks[track.id] = track
            self.saves.append(track)
            return track


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep loguru records out of pytest output."""
    logger.remove()
    yield


@pytest.fixture
def store_factory():
    """Factory: InMemoryTrackStore preloaded with tracks."""
    return InMemoryTrackStore


@pytest.fixture
def store():
    return InMemoryTrackStore()


@pytest.fixture
def image_bytes():
    """Factory: encoded solid-colour image of the given size."""

    def _make(width: int, height: int, color=(255, 0, 0), fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        mode = "RGBA" if len(color) == 4 else "RGB"
        Image.new(mode, (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def tagged_mp3():
    """Factory: write an ID3-only .mp3 with optional text frames and picture."""

    def _make(
        path: Path,
        title: Optional[str] = None,
        artist: Optional[str] = None,
        album: Optional[str] = None,
        picture: Optional[bytes] = None,
        mime: str = "image/png",
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
        tags = ID3()
        if title:
            tags.add(TIT2(encoding=3, text=title))
        if artist:
            tags.add(TPE1(encoding=3, text=artist))
        if album:
            tags.add(TALB(encoding=3, text=album))
        if picture:
            tags.add(APIC(encoding=3, mime=mime, type=3, desc="Cover", data=picture))
        tags.save(path)
        return path

    return _make


@pytest.fixture
def wav_file():
    """Factory: write a silent PCM .wav with a real audio header."""

    def _make(path: Path, seconds: float, rate: int = 8000) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with wave.open(str(path), "wb") as out:
            out.setnchannels(1)
            out.setsampwidth(2)
            out.setframerate(rate)
            out.writeframes(b"\x00\x00" * int(seconds * rate))
        return path

    return _make


@pytest.fixture
def config(tmp_path):
    """Config pointing at a temporary library and covers directory, lookup off."""
    cfg = Config()
    cfg.library.storage_path = str(tmp_path / "music")
    cfg.library.covers_path = str(tmp_path / "covers")
    cfg.covers.external_lookup = False
    cfg.covers.max_workers = 1
    cfg.covers.seed = 7
    return cfg
