"""Palette-constrained error-diffusion dithering.

The engine works on two buffers it owns for the whole run:

- a **working** copy of the source, into which quantisation error is
  diffused as the scan advances, and
- the **output**, which receives the chosen palette colour of every pixel.

A run is an ordered :data:`PassPlan`. Each pass scans row-major, overwrites
the whole output, and leaves its diffused error in the working buffer, so
later passes start from the residue of earlier ones. Only the last pass's
output is returned.

All arithmetic happens in linear light; callers linearise inputs and
re-encode the result (see :mod:`palette_dither.color_utils`).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from palette_dither.errors import PaletteEmptyError
from palette_dither.kernels import DiffusionKernel, Formula, get_kernel
from palette_dither.palette import Palette

logger = logging.getLogger(__name__)

DEFAULT_STRENGTH = 0.75

# Fixed multipass sequence; the single-formula choice never changes it.
MULTIPASS_ORDER = (Formula.INTERLACE, Formula.ATKINSON, Formula.FLOYD_STEINBERG)


@dataclass(frozen=True)
class PassStep:
    """One traversal: which kernel diffuses, and how much of the error."""

    kernel: DiffusionKernel
    strength: float = DEFAULT_STRENGTH


PassPlan = tuple[PassStep, ...]


def build_pass_plan(
    formula: Formula | str = Formula.FLOYD_STEINBERG,
    strength: float = DEFAULT_STRENGTH,
    multipass: bool = False,
) -> PassPlan:
    """Single-formula plan, or the fixed three-pass plan when *multipass*."""
    if multipass:
        return tuple(PassStep(get_kernel(f), strength) for f in MULTIPASS_ORDER)
    return (PassStep(get_kernel(formula), strength),)


def _check_source(source: np.ndarray) -> None:
    if source.ndim != 3 or source.shape[2] != 3:
        msg = f"source must have shape (H, W, 3), got {source.shape}"
        raise ValueError(msg)


def run_passes(
    source: np.ndarray,
    palette: Palette,
    plan: PassPlan,
) -> np.ndarray:
    """Dither *source* to *palette* by executing every step of *plan*.

    Args:
        source:  (H, W, 3) linear-light image. Not modified.
        palette: Linear-light palette with at least one colour.
        plan:    Non-empty sequence of :class:`PassStep`.

    Returns:
        (H, W, 3) float64 image whose every pixel is a palette entry.

    Raises:
        PaletteEmptyError: *palette* has no entries.
        ValueError: *plan* is empty or *source* has the wrong shape.
    """
    _check_source(source)
    if not plan:
        msg = "Pass plan must contain at least one step"
        raise ValueError(msg)
    if not len(palette):
        msg = "Cannot dither against an empty palette"
        raise PaletteEmptyError(msg)

    working = np.array(source, dtype=np.float64, copy=True)
    output = np.empty_like(working)
    h, w = working.shape[:2]

    for n, step in enumerate(plan, 1):
        logger.info(
            "Pass %d/%d: %s (strength=%.2f) ...",
            n, len(plan), step.kernel.name, step.strength,
        )
        t0 = time.perf_counter()
        for y in range(h):
            for x in range(w):
                old = working[y, x]
                new = palette.nearest(old)
                output[y, x] = new
                error = (old - new) * step.strength
                step.kernel.diffuse(working, x, y, error)
        logger.debug("Pass %d done  (%.2f s)", n, time.perf_counter() - t0)

    return output


def apply_dithering(
    source: np.ndarray,
    palette: Palette,
    formula: Formula | str = Formula.FLOYD_STEINBERG,
    strength: float = DEFAULT_STRENGTH,
    multipass: bool = False,
) -> np.ndarray:
    """Build the pass plan for the given options and run it."""
    return run_passes(source, palette, build_pass_plan(formula, strength, multipass))


def quantize(source: np.ndarray, palette: Palette) -> np.ndarray:
    """Map every pixel to its nearest palette colour, with no diffusion."""
    _check_source(source)
    return palette.entries[palette.nearest_indices(source)]
