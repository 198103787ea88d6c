"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

from palette_dither.dithering import DEFAULT_STRENGTH, PassPlan, build_pass_plan
from palette_dither.errors import ConfigError
from palette_dither.kernels import Formula


@dataclass(frozen=True)
class DitherConfig:
    """All tuneable parameters for a dithering run.

    Attributes:
        strength:        Error damping factor applied before diffusion.
        formula:         Diffusion kernel for single-pass mode.
        multipass:       Run Interlace, Atkinson, then Floyd-Steinberg (ignores *formula*).
        max_side:        Downscale sources so the longest side is at most this (None = keep).
        pixel_upscale:   Each output pixel becomes n x n in the saved image.
        output_format:   Image format for batch outputs.
        save_comparison: Write a Source | Palette | Nearest | Dithered grid.
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
    """

    # Dithering
    strength: float = DEFAULT_STRENGTH
    formula: Formula = Formula.FLOYD_STEINBERG
    multipass: bool = False

    # Scaling
    max_side: int | None = None
    pixel_upscale: int = 1

    # Output
    output_format: str = "png"
    save_comparison: bool = False

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "formula", Formula(self.formula))
        except ValueError as exc:
            available = ", ".join(f.value for f in Formula)
            msg = f"Unknown formula '{self.formula}'. Available: {available}"
            raise ConfigError(msg) from exc
        if not math.isfinite(self.strength) or self.strength < 0:
            msg = f"strength must be a finite number >= 0, got {self.strength}"
            raise ConfigError(msg)
        if self.max_side is not None and self.max_side < 1:
            msg = f"max_side must be >= 1, got {self.max_side}"
            raise ConfigError(msg)
        if self.pixel_upscale < 1:
            msg = f"pixel_upscale must be >= 1, got {self.pixel_upscale}"
            raise ConfigError(msg)

    def pass_plan(self) -> PassPlan:
        """The pass plan these settings describe."""
        return build_pass_plan(self.formula, self.strength, self.multipass)
