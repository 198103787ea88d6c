#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop images into ``images/`` and run:

    python main.py batch --palette palette.png

Or use the full CLI:

    python -m palette_dither.cli batch --help
    python -m palette_dither.cli single photo.jpg -p palette.png --multipass
"""

from palette_dither.cli import app

if __name__ == "__main__":
    app()
