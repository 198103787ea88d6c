"""Palettes: distinct-colour extraction and nearest-colour lookup.

All colours held by a :class:`Palette` are in **linear light**. Images and
hex strings are gamma-encoded, so the constructors here linearise first.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
from scipy.spatial.distance import cdist

from palette_dither.color_utils import to_linear
from palette_dither.errors import ConfigError, PaletteEmptyError
from palette_dither.image_io import load_image

logger = logging.getLogger(__name__)


def _unique_in_order(pixels: np.ndarray) -> np.ndarray:
    """Distinct rows of an (N, 3) array, in first-seen order.

    Comparison is exact floating-point equality, scanned linearly against
    the colours kept so far.
    """
    found = np.empty_like(pixels)
    count = 0
    for pixel in pixels:
        if count and (found[:count] == pixel).all(axis=1).any():
            continue
        found[count] = pixel
        count += 1
    return found[:count].copy()


class Palette:
    """Ordered, immutable set of distinct RGB colours.

    Entry order is significant: when two entries are equally close to a
    query, the one that comes first wins.
    """

    def __init__(self, entries: np.ndarray | Sequence[Sequence[float]]) -> None:
        arr = np.array(entries, dtype=np.float64).reshape(-1, 3)
        if len(_unique_in_order(arr)) != len(arr):
            msg = "Palette entries must be distinct"
            raise ValueError(msg)
        arr.setflags(write=False)
        self._entries = arr

    @classmethod
    def _from_distinct(cls, entries: np.ndarray) -> Palette:
        """Wrap an (N, 3) float64 array already known to hold distinct rows."""
        palette = cls.__new__(cls)
        entries.setflags(write=False)
        palette._entries = entries
        return palette

    @classmethod
    def from_buffer(cls, reference: np.ndarray) -> Palette:
        """Collect every distinct pixel of *reference* in row-major order.

        Args:
            reference: (H, W, 3) float image, already linearised.

        Returns:
            A palette with one entry per distinct pixel value. An empty
            image yields an empty palette.
        """
        pixels = np.asarray(reference, dtype=np.float64).reshape(-1, 3)
        palette = cls._from_distinct(_unique_in_order(pixels))
        logger.debug("Palette built: %d colours from %d pixels", len(palette), len(pixels))
        return palette

    @property
    def entries(self) -> np.ndarray:
        """(N, 3) read-only array of the palette colours."""
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Palette({len(self)} colours)"

    def _require_entries(self) -> None:
        if not len(self._entries):
            msg = "Palette has no entries; nothing to match against"
            raise PaletteEmptyError(msg)

    def nearest_index(self, pixel: np.ndarray) -> int:
        """Index of the entry with the smallest Euclidean RGB distance.

        Ties go to the earliest entry: ``argmin`` returns the first minimum,
        which is exactly a strict less-than scan starting with no candidate.
        """
        self._require_entries()
        diff = self._entries - pixel
        distances = np.sqrt(np.sum(diff * diff, axis=1))
        return int(np.argmin(distances))

    def nearest(self, pixel: np.ndarray) -> np.ndarray:
        """The palette colour closest to *pixel* (see :meth:`nearest_index`)."""
        return self._entries[self.nearest_index(pixel)]

    def nearest_indices(self, pixels: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`nearest_index` for an (..., 3) array of pixels."""
        self._require_entries()
        pixels = np.asarray(pixels, dtype=np.float64)
        flat = pixels.reshape(-1, 3)
        distances = cdist(flat, self._entries)
        return np.argmin(distances, axis=1).reshape(pixels.shape[:-1])


# -- Hex colours -------------------------------------------------------


def _hex_to_rgb(hex_str: str) -> tuple[int, int, int]:
    """Parse '#RRGGBB' to an 8-bit (r, g, b) tuple."""
    h = hex_str.strip().lstrip("#")
    if len(h) != 6:
        msg = f"Invalid hex colour '{hex_str}' (expected #RRGGBB)"
        raise ConfigError(msg)
    try:
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError as exc:
        msg = f"Invalid hex colour '{hex_str}' (expected #RRGGBB)"
        raise ConfigError(msg) from exc


def palette_from_hex(hex_colors: Sequence[str]) -> Palette:
    """Build a linear-light palette from gamma-encoded hex strings.

    Repeated colours are dropped, keeping the first occurrence.
    """
    rgb = np.array([_hex_to_rgb(h) for h in hex_colors], dtype=np.float64)
    rgb = rgb.reshape(-1, 3) / 255.0
    to_linear(rgb)
    return Palette.from_buffer(rgb)


# -- Extract from image ------------------------------------------------


def extract_palette_from_image(path: str | Path) -> Palette:
    """Load a reference image and collect its distinct colours.

    Raises:
        PaletteEmptyError: The image contains no pixels.
    """
    reference = load_image(path)
    to_linear(reference)
    palette = Palette.from_buffer(reference)
    if not len(palette):
        msg = f"Palette image {path} contains no colours"
        raise PaletteEmptyError(msg)
    logger.info("Palette: %d colours from %s", len(palette), path)
    return palette
