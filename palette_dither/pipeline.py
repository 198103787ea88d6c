"""End-to-end runs: gamma-encoded image in, gamma-encoded image out."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from palette_dither.color_utils import mean_color_error, psnr, to_gamma, to_linear, tone_error
from palette_dither.config import DitherConfig
from palette_dither.dithering import quantize, run_passes
from palette_dither.errors import ConfigError
from palette_dither.image_io import load_image, make_comparison_grid, save_image
from palette_dither.palette import Palette, extract_palette_from_image, palette_from_hex

logger = logging.getLogger(__name__)


@dataclass
class DitherResult:
    """Images (gamma-encoded) and scores from one run.

    Attributes:
        source:      The input as dithered (after any downscale).
        nearest:     Plain nearest-colour mapping, for comparison.
        dithered:    The dithered output.
        tone_error:  Blurred-tone deviation of *dithered*, measured in linear light.
        color_error: Mean per-pixel RGB distance of *dithered* from *source*.
        psnr:        PSNR of *dithered* against *source*, in dB.
        elapsed:     Seconds spent in the dithering passes.
    """

    source: np.ndarray
    nearest: np.ndarray
    dithered: np.ndarray
    tone_error: float
    color_error: float
    psnr: float
    elapsed: float


def load_palette(
    palette_path: str | Path | None = None,
    colors: Sequence[str] | None = None,
) -> Palette:
    """Build the run's palette from exactly one of an image or hex colours."""
    if (palette_path is None) == (not colors):
        msg = "Give exactly one of a palette image or a list of hex colours"
        raise ConfigError(msg)
    if palette_path is not None:
        return extract_palette_from_image(palette_path)
    palette = palette_from_hex(colors)
    logger.info("Palette: %d colours from hex list", len(palette))
    return palette


def dither_array(
    image: np.ndarray,
    palette: Palette,
    config: DitherConfig | None = None,
) -> DitherResult:
    """Dither a gamma-encoded (H, W, 3) float image. *image* is left untouched."""
    cfg = config or DitherConfig()

    linear = to_linear(np.array(image, dtype=np.float64, copy=True))

    t0 = time.perf_counter()
    dithered = run_passes(linear, palette, cfg.pass_plan())
    elapsed = time.perf_counter() - t0
    nearest = quantize(linear, palette)
    tone = tone_error(linear, dithered)

    to_gamma(dithered)
    to_gamma(nearest)
    return DitherResult(
        source=np.asarray(image, dtype=np.float64),
        nearest=nearest,
        dithered=dithered,
        tone_error=tone,
        color_error=mean_color_error(image, dithered),
        psnr=psnr(image, dithered),
        elapsed=elapsed,
    )


def dither_file(
    input_path: str | Path,
    output_path: str | Path,
    palette: Palette,
    config: DitherConfig | None = None,
    comparison_path: str | Path | None = None,
) -> DitherResult:
    """Load, dither and save one image; optionally write a comparison grid."""
    cfg = config or DitherConfig()

    source = load_image(input_path, cfg.max_side)
    h, w = source.shape[:2]
    logger.info("Source: %s  %dx%d", input_path, w, h)

    result = dither_array(source, palette, cfg)
    save_image(result.dithered, output_path, cfg.pixel_upscale)
    logger.info("Saved %s", output_path)

    if comparison_path is not None:
        make_comparison_grid(
            result.source, palette, result.nearest, result.dithered,
            comparison_path, cfg.pixel_upscale,
        )
        logger.info("Comparison grid saved: %s", comparison_path)
    return result
