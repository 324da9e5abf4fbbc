"""Tests for cover image composition."""

import io
import random

import pytest
from PIL import Image

from trackart.domain.covers.compositor import (
    GRADIENT_PALETTE,
    fit_dimensions,
    generate_gradient_cover,
    linear_gradient,
    resize_and_letterbox,
    truncate_text,
)
from trackart.domain.covers.exceptions import ImageDecodeError

# JPEG is lossy; solid regions stay within a few levels of the source colour
TOLERANCE = 12


def _decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    assert image.format == "JPEG"
    return image.convert("RGB")


def _close(pixel, expected, tolerance=TOLERANCE) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


class TestTruncateText:
    """Tests for truncate_text."""

    def test_long_title(self):
        title = "A" * 30
        result = truncate_text(title, 20)
        assert len(result) == 20
        assert result == "A" * 17 + "..."

    def test_exact_limit_unchanged(self):
        assert truncate_text("B" * 25, 25) == "B" * 25

    def test_none(self):
        assert truncate_text(None, 20) == ""


class TestFitDimensions:
    """Aspect-preserving scaling."""

    @pytest.mark.parametrize(
        "width, height, expected",
        [
            (800, 400, (400, 200)),
            (400, 800, (200, 400)),
            (500, 500, (400, 400)),
            (100, 50, (400, 200)),
        ],
    )
    def test_longer_side_fills_target(self, width, height, expected):
        assert fit_dimensions(width, height, 400) == expected

    def test_invalid(self):
        with pytest.raises(ImageDecodeError):
            fit_dimensions(0, 10, 400)


class TestResizeAndLetterbox:
    """Tests for resize_and_letterbox."""

    def test_landscape_gets_horizontal_bars(self, image_bytes):
        result = _decode(resize_and_letterbox(image_bytes(800, 400, (255, 0, 0)), size=400))

        assert result.size == (400, 400)
        assert _close(result.getpixel((200, 200)), (255, 0, 0))
        # Content spans the full width, bars above and below
        assert _close(result.getpixel((5, 200)), (255, 0, 0))
        assert _close(result.getpixel((200, 20)), (0, 0, 0))
        assert _close(result.getpixel((200, 380)), (0, 0, 0))

    def test_portrait_gets_vertical_bars(self, image_bytes):
        result = _decode(resize_and_letterbox(image_bytes(100, 200, (0, 0, 255)), size=400))

        assert _close(result.getpixel((200, 200)), (0, 0, 255))
        assert _close(result.getpixel((200, 5)), (0, 0, 255))
        assert _close(result.getpixel((20, 200)), (0, 0, 0))
        assert _close(result.getpixel((380, 200)), (0, 0, 0))

    def test_custom_size(self, image_bytes):
        result = _decode(resize_and_letterbox(image_bytes(64, 64), size=128))
        assert result.size == (128, 128)

    def test_transparency_becomes_black(self, image_bytes):
        result = _decode(resize_and_letterbox(image_bytes(50, 50, (0, 255, 0, 0)), size=100))
        assert _close(result.getpixel((50, 50)), (0, 0, 0))

    def test_accepts_jpeg_input(self, image_bytes):
        result = _decode(resize_and_letterbox(image_bytes(300, 300, (0, 128, 0), fmt="JPEG")))
        assert result.size == (400, 400)

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n" + b"\x00" * 20])
    def test_undecodable(self, data):
        with pytest.raises(ImageDecodeError):
            resize_and_letterbox(data)


class TestLinearGradient:
    """Diagonal gradient painting."""

    def test_corners(self):
        image = linear_gradient(50, (0, 0, 0), (200, 100, 50))
        assert image.size == (50, 50)
        assert image.getpixel((0, 0)) == (0, 0, 0)
        assert image.getpixel((49, 49)) == (200, 100, 50)
        # Anti-diagonal corners sit halfway
        assert _close(image.getpixel((49, 0)), (100, 50, 25), tolerance=2)


class TestGenerateGradientCover:
    """Tests for generate_gradient_cover."""

    def test_palette_has_ten_pairs(self):
        assert len(GRADIENT_PALETTE) == 10

    def test_seeded_colours(self):
        start, end = random.Random(3).choice(GRADIENT_PALETTE)
        result = _decode(generate_gradient_cover("Title", "Artist", rng=random.Random(3)))

        assert result.size == (400, 400)
        assert _close(result.getpixel((0, 0)), start)
        assert _close(result.getpixel((399, 399)), end)

    def test_same_seed_same_bytes(self):
        first = generate_gradient_cover("Title", "Artist", rng=random.Random(11))
        second = generate_gradient_cover("Title", "Artist", rng=random.Random(11))
        assert first == second

    def test_custom_size(self):
        result = _decode(generate_gradient_cover("T", "A", size=200, rng=random.Random(1)))
        assert result.size == (200, 200)

    def test_long_and_missing_labels(self):
        data = generate_gradient_cover("x" * 80, None, rng=random.Random(0))
        assert _decode(data).size == (400, 400)

    def test_glyph_drawn_over_centre(self):
        start, end = random.Random(5).choice(GRADIENT_PALETTE)
        result = _decode(generate_gradient_cover("", "", rng=random.Random(5)))
        # The white glyph stem lightens the pixels it covers
        stem = result.getpixel((194, 150))
        assert sum(stem) > sum(start) and sum(stem) > sum(end)
