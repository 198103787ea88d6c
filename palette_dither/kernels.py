"""Error-diffusion kernels.

Each kernel pushes a share of a pixel's quantisation error onto neighbours
that the row-major scan has not reached yet::

    Floyd-Steinberg           Atkinson                Interlace (even rows)
          *  7                      *  1  1                 *
       3  5  1   / 16            1  1  1      / 8           1      / 2
                                    1

Taps that fall outside the image are dropped; nothing wraps around and
nothing is clamped onto the border.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from palette_dither.errors import ConfigError


class Formula(str, Enum):
    """The available dithering formulas."""

    FLOYD_STEINBERG = "floyd-steinberg"
    ATKINSON = "atkinson"
    INTERLACE = "interlace"


@dataclass(frozen=True)
class DiffusionKernel:
    """A fixed set of ``(dx, dy, weight)`` taps relative to the current pixel.

    Attributes:
        name:            Human-readable kernel name (used in logs).
        taps:            Offsets and weights; every offset points forward in scan order.
        even_rows_only:  Diffuse only from rows with an even ``y``.
    """

    name: str
    taps: tuple[tuple[int, int, float], ...]
    even_rows_only: bool = False

    @property
    def total_weight(self) -> float:
        return sum(weight for _, _, weight in self.taps)

    def diffuse(self, buffer: np.ndarray, x: int, y: int, error: np.ndarray) -> None:
        """Add ``error * weight`` to every in-bounds tap around (x, y).

        *error* is the already-damped ``(working - chosen) * strength`` vector.
        """
        if self.even_rows_only and y % 2:
            return
        h, w = buffer.shape[:2]
        for dx, dy, weight in self.taps:
            nx, ny = x + dx, y + dy
            if 0 <= nx < w and 0 <= ny < h:
                buffer[ny, nx] += error * weight


FLOYD_STEINBERG = DiffusionKernel(
    name="Floyd-Steinberg",
    taps=(
        (1, 0, 7 / 16),
        (-1, 1, 3 / 16),
        (0, 1, 5 / 16),
        (1, 1, 1 / 16),
    ),
)

# Six taps of 1/8: a quarter of the error is deliberately dropped.
ATKINSON = DiffusionKernel(
    name="Atkinson",
    taps=(
        (1, 0, 1 / 8),
        (2, 0, 1 / 8),
        (-1, 1, 1 / 8),
        (0, 1, 1 / 8),
        (1, 1, 1 / 8),
        (0, 2, 1 / 8),
    ),
)

INTERLACE = DiffusionKernel(
    name="Interlace",
    taps=((0, 1, 1 / 2),),
    even_rows_only=True,
)

KERNELS: dict[Formula, DiffusionKernel] = {
    Formula.FLOYD_STEINBERG: FLOYD_STEINBERG,
    Formula.ATKINSON: ATKINSON,
    Formula.INTERLACE: INTERLACE,
}


def get_kernel(formula: Formula | str) -> DiffusionKernel:
    """Look up the kernel for a :class:`Formula` or its string value."""
    try:
        return KERNELS[Formula(formula)]
    except ValueError as exc:
        available = ", ".join(f.value for f in Formula)
        msg = f"Unknown formula '{formula}'. Available: {available}"
        raise ConfigError(msg) from exc
