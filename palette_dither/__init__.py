"""
Palette Dither
==============

Convert an image so it uses only the colours found in a reference palette
image. Quantisation error is diffused in linear light with one of three
kernels:

- **Floyd-Steinberg** (default)
- **Atkinson** (lighter, drops a quarter of the error)
- **Interlace** (even rows push half their error straight down)

or all three chained as a fixed multipass run.
"""

__version__ = "1.0.0"

from palette_dither.color_utils import to_gamma, to_linear
from palette_dither.config import DitherConfig
from palette_dither.dithering import (
    PassStep,
    apply_dithering,
    build_pass_plan,
    quantize,
    run_passes,
)
from palette_dither.errors import (
    ConfigError,
    DecodeError,
    DitherError,
    EncodeError,
    ImageNotFoundError,
    PaletteEmptyError,
    WriteError,
)
from palette_dither.image_io import load_image, make_comparison_grid, save_image
from palette_dither.kernels import DiffusionKernel, Formula, get_kernel
from palette_dither.palette import Palette, extract_palette_from_image, palette_from_hex
from palette_dither.pipeline import DitherResult, dither_array, dither_file, load_palette

__all__ = [
    "ConfigError",
    "DecodeError",
    "DiffusionKernel",
    "DitherConfig",
    "DitherError",
    "DitherResult",
    "EncodeError",
    "Formula",
    "ImageNotFoundError",
    "Palette",
    "PaletteEmptyError",
    "PassStep",
    "WriteError",
    "apply_dithering",
    "build_pass_plan",
    "dither_array",
    "dither_file",
    "extract_palette_from_image",
    "get_kernel",
    "load_image",
    "load_palette",
    "make_comparison_grid",
    "palette_from_hex",
    "quantize",
    "run_passes",
    "save_image",
    "to_gamma",
    "to_linear",
]
