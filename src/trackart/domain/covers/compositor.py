"""
Cover image composition.

Two pure operations over byte buffers, both producing a square JPEG:

- resize_and_letterbox: fit arbitrary artwork onto a black square canvas
- generate_gradient_cover: synthesize a labelled gradient placeholder

Neither touches the network or the disk; callers decide where bytes go.
"""

import io
import random
from functools import lru_cache
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from .exceptions import ImageDecodeError

RGB = tuple[int, int, int]

DEFAULT_SIZE = 400
DEFAULT_QUALITY = 85

TITLE_LIMIT = 20
ARTIST_LIMIT = 25
ELLIPSIS = "..."

# Curated start/end colour pairs for placeholder gradients
GRADIENT_PALETTE: tuple[tuple[RGB, RGB], ...] = (
    ((138, 43, 226), (75, 0, 130)),
    ((255, 20, 147), (220, 20, 60)),
    ((30, 144, 255), (0, 191, 255)),
    ((255, 69, 0), (255, 140, 0)),
    ((148, 0, 211), (72, 61, 139)),
    ((0, 128, 128), (0, 191, 191)),
    ((255, 0, 127), (127, 0, 255)),
    ((220, 20, 60), (255, 105, 180)),
    ((0, 100, 200), (100, 150, 255)),
    ((255, 127, 0), (255, 69, 0)),
)

BOLD_FONTS = ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")
REGULAR_FONTS = ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "arial.ttf")

GLYPH_FILL = (255, 255, 255, 180)
SHADOW_FILL = (0, 0, 0, 100)
TITLE_FILL = (255, 255, 255, 255)
ARTIST_FILL = (255, 255, 255, 200)


def truncate_text(text: Optional[str], limit: int) -> str:
    """Shorten text to at most limit characters, ending in an ellipsis when cut.

    >>> truncate_text("A" * 30, 20)
    'AAAAAAAAAAAAAAAAA...'
    """
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def fit_dimensions(width: int, height: int, size: int) -> tuple[int, int]:
    """Scale (width, height) so the longer side equals size, keeping aspect ratio."""
    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Invalid image dimensions {width}x{height}")
    ratio = width / height
    if ratio > 1:
        return size, max(1, int(size / ratio))
    return max(1, int(size * ratio)), size


def decode_image(data: bytes) -> Image.Image:
    """Decode raster image bytes.

    Raises:
        ImageDecodeError: If the bytes are empty or not a valid image
    """
    if not data:
        raise ImageDecodeError("Could not read image data: empty buffer")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Could not read image data: {e}") from e
    return image


def encode_jpeg(image: Image.Image, quality: int = DEFAULT_QUALITY) -> bytes:
    """Encode an image as RGB JPEG bytes."""
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def resize_and_letterbox(
    data: bytes, size: int = DEFAULT_SIZE, quality: int = DEFAULT_QUALITY
) -> bytes:
    """Fit artwork onto a size x size black canvas without distorting it.

    The longer side of the source is scaled to exactly size; the shorter side
    is centred and padded with black. Transparent pixels become black.

    Args:
        data: Encoded source image (JPEG, PNG, GIF, ...)
        size: Edge length of the output square
        quality: JPEG quality of the output

    Returns:
        JPEG bytes of the letterboxed cover

    Raises:
        ImageDecodeError: If data is not a decodable image
    """
    source = decode_image(data).convert("RGBA")
    new_width, new_height = fit_dimensions(source.width, source.height, size)
    resized = source.resize((new_width, new_height), Image.Resampling.LANCZOS)

    canvas = Image.new("RGB", (size, size), (0, 0, 0))
    offset = ((size - new_width) // 2, (size - new_height) // 2)
    canvas.paste(resized, offset, resized)
    return encode_jpeg(canvas, quality)


def choose_gradient(rng: random.Random) -> tuple[RGB, RGB]:
    """Pick one colour pair from the palette using the given generator."""
    return rng.choice(GRADIENT_PALETTE)


def linear_gradient(size: int, start: RGB, end: RGB) -> Image.Image:
    """Paint a square gradient running from the top-left to the bottom-right corner."""
    axis = np.arange(size, dtype=np.float32)
    # Projection of each pixel onto the main diagonal, 0.0 at (0, 0) and 1.0 at the far corner
    t = (axis[np.newaxis, :] + axis[:, np.newaxis]) / max(2 * (size - 1), 1)
    start_rgb = np.array(start, dtype=np.float32)
    end_rgb = np.array(end, dtype=np.float32)
    pixels = start_rgb + (end_rgb - start_rgb) * t[..., np.newaxis]
    return Image.fromarray(np.clip(np.rint(pixels), 0, 255).astype(np.uint8))


@lru_cache(maxsize=16)
def load_font(bold: bool, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """Load a TrueType font of the requested weight, or Pillow's default font."""
    for name in BOLD_FONTS if bold else REGULAR_FONTS:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _layer(size: int) -> tuple[Image.Image, ImageDraw.ImageDraw]:
    layer = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    return layer, ImageDraw.Draw(layer)


def _draw_note_glyph(base: Image.Image, scale: float) -> None:
    """Overlay a translucent eighth-note motif slightly above centre."""
    size = base.width
    layer, draw = _layer(size)

    def box(x: float, y: float, w: float, h: float) -> tuple[int, int, int, int]:
        return (round(x * scale), round(y * scale), round((x + w) * scale), round((y + h) * scale))

    icon = 120
    left = (size / scale - icon) / 2
    top = (size / scale - icon) / 2 - 30

    draw.rounded_rectangle(box(left + 30, top + 70, 25, 50), radius=round(7 * scale), fill=GLYPH_FILL)
    draw.ellipse(box(left + 15, top + 100, 40, 40), fill=GLYPH_FILL)
    draw.rectangle(box(left + 50, top + 20, 8, 90), fill=GLYPH_FILL)
    draw.ellipse(box(left + 35, top + 90, 40, 40), fill=GLYPH_FILL)

    base.alpha_composite(layer)


def _draw_label(
    base: Image.Image,
    text: str,
    font: ImageFont.ImageFont | ImageFont.FreeTypeFont,
    baseline: float,
    fill: tuple[int, int, int, int],
    shadow_offset: int,
) -> None:
    """Draw text horizontally centred with its bottom edge on baseline, over a drop shadow."""
    if not text:
        return
    size = base.width
    probe = ImageDraw.Draw(base)
    left, _top, right, bottom = probe.textbbox((0, 0), text, font=font)
    x = (size - (right - left)) / 2 - left
    y = baseline - bottom

    shadow, draw = _layer(size)
    draw.text((x + shadow_offset, y + shadow_offset), text, font=font, fill=SHADOW_FILL)
    base.alpha_composite(shadow)

    label, draw = _layer(size)
    draw.text((x, y), text, font=font, fill=fill)
    base.alpha_composite(label)


def generate_gradient_cover(
    title: Optional[str],
    artist: Optional[str],
    size: int = DEFAULT_SIZE,
    quality: int = DEFAULT_QUALITY,
    rng: Optional[random.Random] = None,
) -> bytes:
    """Synthesize a placeholder cover: gradient, note glyph, title and artist.

    Args:
        title: Track title (bold, cut to 20 characters)
        artist: Track artist (regular weight, cut to 25 characters)
        size: Edge length of the output square
        quality: JPEG quality of the output
        rng: Source of the palette choice; pass a seeded Random to pin it

    Returns:
        JPEG bytes of the placeholder cover
    """
    rng = rng or random.Random()
    scale = size / DEFAULT_SIZE
    start, end = choose_gradient(rng)

    base = linear_gradient(size, start, end).convert("RGBA")
    _draw_note_glyph(base, scale)

    shadow_offset = max(1, round(2 * scale))
    _draw_label(
        base,
        truncate_text(title, TITLE_LIMIT),
        load_font(True, max(1, round(24 * scale))),
        size - 80 * scale,
        TITLE_FILL,
        shadow_offset,
    )
    _draw_label(
        base,
        truncate_text(artist, ARTIST_LIMIT),
        load_font(False, max(1, round(18 * scale))),
        size - 50 * scale,
        ARTIST_FILL,
        shadow_offset,
    )

    return encode_jpeg(base, quality)
