"""Exception hierarchy shared by the library, the CLI and the app."""

from __future__ import annotations


class DitherError(Exception):
    """Base class for every failure raised by palette_dither."""


class ConfigError(DitherError, ValueError):
    """Bad or missing options. Reported, never silently defaulted."""


class ImageNotFoundError(DitherError, FileNotFoundError):
    """An input image path does not point at a file."""


class DecodeError(DitherError):
    """An input image exists but cannot be decoded."""


class PaletteEmptyError(DitherError, ValueError):
    """A nearest-colour query was made against a palette with no entries."""


class EncodeError(DitherError):
    """The output image cannot be encoded (e.g. unknown extension)."""


class WriteError(DitherError, OSError):
    """The encoded output cannot be written to disk."""
