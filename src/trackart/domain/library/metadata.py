"""
Audio tag reading.

Reads title/artist/album, the audio header duration and embedded artwork
from audio files using Mutagen. Every failure degrades to "field absent":
callers never see a parsing exception.
"""

import base64
import struct
from pathlib import Path
from typing import Any, NamedTuple, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import Picture
from mutagen.id3 import ID3


class TagInfo(NamedTuple):
    """Best-effort metadata read from an audio file. Absent fields are None."""
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[int] = None  # whole seconds, from the audio header


class EmbeddedArtwork(NamedTuple):
    """First picture stored in an audio file's tag container."""
    data: bytes
    mime: Optional[str] = None
    width: Optional[int] = None  # declared by the container, when it records it
    height: Optional[int] = None


# ID3 (MP3), MP4, Vorbis/FLAC (upper and lower case)
TITLE_TAGS = ["TIT2", "\xa9nam", "TITLE", "title"]
ARTIST_TAGS = ["TPE1", "\xa9ART", "ARTIST", "artist"]
ALBUM_TAGS = ["TALB", "\xa9alb", "ALBUM", "album"]


def get_tag_value(tags: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    if tags is None:
        return None
    for tag_name in tag_names:
        try:
            value = tags.get(tag_name)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
        if not value:
            continue
        # ID3 frames expose .text, MP4/Vorbis give plain lists
        if hasattr(value, "text"):
            value = value.text
        if isinstance(value, list):
            value = value[0] if value else None
        text = str(value).strip() if value is not None else ""
        if text:
            return text
    return None


def _open_audio(local_path: Path) -> Any:
    """Open a file with Mutagen, returning None when it cannot be parsed."""
    try:
        return MutagenFile(local_path)
    except (MutagenError, OSError, ValueError) as e:
        logger.debug(f"Mutagen could not parse {local_path}: {e}")
        return None


def _open_bare_id3(local_path: Path) -> Optional[ID3]:
    """Read a standalone ID3 tag (e.g. an MP3 whose audio frames are damaged)."""
    try:
        return ID3(local_path)
    except (MutagenError, OSError, ValueError):
        return None


def read_tags(local_path: Path | str) -> TagInfo:
    """Read title, artist, album and duration from an audio file.

    Duration comes from the container's audio header (info.length), never
    from a free-text tag.

    Args:
        local_path: Path to the audio file

    Returns:
        TagInfo with None for anything that could not be read
    """
    local_path = Path(local_path)
    audio = _open_audio(local_path)

    tags = getattr(audio, "tags", None) if audio is not None else None
    if tags is None:
        tags = _open_bare_id3(local_path)

    duration = None
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    if length is not None:
        try:
            if length >= 0:
                duration = int(length)
        except (TypeError, ValueError):
            logger.warning(f"Unusable audio length {length!r} in {local_path}")

    try:
        return TagInfo(
            title=get_tag_value(tags, TITLE_TAGS),
            artist=get_tag_value(tags, ARTIST_TAGS),
            album=get_tag_value(tags, ALBUM_TAGS),
            duration=duration,
        )
    except Exception as e:
        # Partially corrupt frames can fail on access rather than on load
        logger.warning(f"Could not read tags from {local_path}: {e}")
        return TagInfo(duration=duration)


def _picture_from_id3(tags: Any) -> Optional[EmbeddedArtwork]:
    getall = getattr(tags, "getall", None)
    if getall is None:
        return None
    for frame in getall("APIC"):
        if frame.data:
            return EmbeddedArtwork(data=bytes(frame.data), mime=frame.mime or None)
    return None


def _picture_from_flac(audio: Any) -> Optional[EmbeddedArtwork]:
    for picture in getattr(audio, "pictures", None) or []:
        if picture.data:
            return EmbeddedArtwork(
                data=bytes(picture.data),
                mime=picture.mime or None,
                width=picture.width or None,
                height=picture.height or None,
            )
    return None


def _picture_from_mp4(tags: Any) -> Optional[EmbeddedArtwork]:
    try:
        covers = tags.get("covr")
    except (KeyError, ValueError):
        return None
    for cover in covers or []:
        if cover:
            # MP4Cover.imageformat: 13 = JPEG, 14 = PNG
            mime = {13: "image/jpeg", 14: "image/png"}.get(
                getattr(cover, "imageformat", None)
            )
            return EmbeddedArtwork(data=bytes(cover), mime=mime)
    return None


def _picture_from_vorbis(tags: Any) -> Optional[EmbeddedArtwork]:
    try:
        blocks = tags.get("metadata_block_picture")
    except (KeyError, ValueError):
        return None
    for block in blocks or []:
        try:
            picture = Picture(base64.b64decode(block))
        except (ValueError, struct.error, MutagenError) as e:
            logger.debug(f"Skipping undecodable picture block: {e}")
            continue
        if picture.data:
            return EmbeddedArtwork(
                data=bytes(picture.data),
                mime=picture.mime or None,
                width=picture.width or None,
                height=picture.height or None,
            )
    return None


def extract_embedded_artwork(local_path: Path | str) -> Optional[EmbeddedArtwork]:
    """Return the first embedded picture of an audio file.

    Supports ID3 APIC frames, FLAC picture blocks, MP4 covr atoms and
    Vorbis/Opus METADATA_BLOCK_PICTURE comments.

    Returns:
        EmbeddedArtwork, or None when there is no picture, the picture is
        empty, or the file cannot be parsed
    """
    local_path = Path(local_path)
    if not local_path.is_file():
        logger.info(f"Audio file not found for artwork extraction: {local_path}")
        return None

    audio = _open_audio(local_path)
    tags = getattr(audio, "tags", None) if audio is not None else None

    try:
        artwork = _picture_from_flac(audio) if audio is not None else None
        if artwork is None and tags is not None:
            artwork = (
                _picture_from_id3(tags)
                or _picture_from_mp4(tags)
                or _picture_from_vorbis(tags)
            )
        if artwork is None and tags is None:
            artwork = _picture_from_id3(_open_bare_id3(local_path))
    except Exception as e:
        logger.warning(f"Exception during artwork extraction for {local_path}: {e}")
        return None

    if artwork is None:
        logger.debug(f"No embedded artwork present in {local_path}")
    return artwork
