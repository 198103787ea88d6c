"""Image loading, saving, and comparison-grid generation.

Images cross this boundary as gamma-encoded float64 (H, W, 3) arrays in
[0, 1]; everything else about files (formats, 8-bit storage, alpha) stays
in here.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from palette_dither.color_utils import to_gamma
from palette_dither.errors import DecodeError, EncodeError, ImageNotFoundError, WriteError

if TYPE_CHECKING:
    from palette_dither.palette import Palette

_BACKGROUND = (30, 30, 30)


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int,
) -> tuple[int, int]:
    """Compute downscaled (w, h) preserving aspect ratio.

    The longest side becomes *max_side*; the other is scaled
    proportionally (rounded to the nearest integer, minimum 1).
    """
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


def load_image(path: str | Path, max_side: int | None = None) -> np.ndarray:
    """Load an image as gamma-encoded RGB floats.

    Alpha is discarded. If *max_side* is given and the image is larger, it
    is downscaled (LANCZOS) so its longest side equals *max_side*.

    Returns:
        (H, W, 3) float64 array in [0, 1].

    Raises:
        ImageNotFoundError: *path* is not an existing file.
        DecodeError: Pillow cannot read the file, or it is too large to open
            safely.
    """
    p = Path(path)
    if not p.is_file():
        msg = f"Image not found: {p}"
        raise ImageNotFoundError(msg)
    try:
        with Image.open(p) as im:
            img = im.convert("RGB")
    except (OSError, Image.DecompressionBombError) as exc:
        msg = f"Cannot decode image {p}: {exc}"
        raise DecodeError(msg) from exc

    if max_side is not None and max(img.width, img.height) > max_side:
        w, h = compute_target_size(img.width, img.height, max_side)
        img = img.resize((w, h), Image.LANCZOS)
    return np.asarray(img, dtype=np.float64) / 255.0


def to_uint8(buffer: np.ndarray) -> np.ndarray:
    """Clip a [0, 1] float image and round it to 8-bit."""
    return np.rint(np.clip(buffer, 0.0, 1.0) * 255.0).astype(np.uint8)


def save_image(
    buffer: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 1,
) -> None:
    """Save a gamma-encoded float image; the format follows the extension.

    Each pixel becomes a *pixel_upscale* x *pixel_upscale* block.

    Raises:
        EncodeError: Unknown extension or data Pillow cannot encode.
        WriteError: The file cannot be written.
    """
    img = Image.fromarray(to_uint8(buffer))
    if pixel_upscale > 1:
        h, w = buffer.shape[:2]
        img = img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)
    try:
        img.save(path)
    except (KeyError, ValueError) as exc:
        msg = f"Cannot encode image as {Path(path).suffix or '<no extension>'}: {exc}"
        raise EncodeError(msg) from exc
    except OSError as exc:
        msg = f"Cannot write {path}: {exc}"
        raise WriteError(msg) from exc


def palette_swatch(palette: Palette) -> np.ndarray:
    """Lay the palette out as a near-square, gamma-encoded image.

    Cells left over after the last colour are filled with the background.
    """
    colors = to_gamma(palette.entries.copy())
    n = len(colors)
    cols = max(1, math.ceil(math.sqrt(n)))
    rows = max(1, math.ceil(n / cols))
    swatch = np.empty((rows * cols, 3), dtype=np.float64)
    swatch[:] = np.array(_BACKGROUND) / 255.0
    swatch[:n] = colors
    return swatch.reshape(rows, cols, 3)


def make_comparison_grid(
    source: np.ndarray,
    palette: Palette,
    nearest: np.ndarray,
    dithered: np.ndarray,
    output_path: str | Path,
    pixel_upscale: int = 4,
) -> None:
    """Create a 4-panel comparison: Source | Palette | Nearest | Dithered.

    All images are gamma-encoded (H, W, 3) floats; every panel is scaled
    to the source dimensions times *pixel_upscale*.
    """
    th, tw = source.shape[:2]
    panel_w = tw * pixel_upscale
    panel_h = th * pixel_upscale
    label_height = 36

    panels = [
        Image.fromarray(to_uint8(img)).resize((panel_w, panel_h), Image.NEAREST)
        for img in (source, palette_swatch(palette), nearest, dithered)
    ]
    labels = [
        f"Source {tw}x{th}",
        f"Palette ({len(palette)})",
        "Nearest",
        "Dithered",
    ]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), _BACKGROUND)
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=True)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    try:
        canvas.save(output_path)
    except (KeyError, ValueError) as exc:
        msg = f"Cannot encode comparison grid {output_path}: {exc}"
        raise EncodeError(msg) from exc
    except OSError as exc:
        msg = f"Cannot write {output_path}: {exc}"
        raise WriteError(msg) from exc
