"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from palette_dither.config import DitherConfig
from palette_dither.errors import ConfigError, DitherError, WriteError
from palette_dither.kernels import Formula
from palette_dither.pipeline import DitherResult, dither_file, load_palette

app = typer.Typer(
    name="palette-dither",
    help="Dither images down to the colours of a reference palette.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _split_colors(colors: str | None) -> list[str] | None:
    if not colors:
        return None
    return [c.strip() for c in colors.split(",") if c.strip()]


def _ensure_dir(folder: Path) -> None:
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Cannot write to {folder}: {exc}"
        raise WriteError(msg) from exc


def _fail(exc: DitherError) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    code = 2 if isinstance(exc, ConfigError) else 1
    raise typer.Exit(code) from exc


def _summary(result: DitherResult) -> str:
    h, w = result.dithered.shape[:2]
    return (
        f"[dim]{w}x{h}  error={result.color_error:.3f}  tone error={result.tone_error:.4f}"
        f"  psnr={result.psnr:.1f} dB  time={result.elapsed:.1f}s[/dim]"
    )


# Defaults come from DitherConfig - single source of truth
_DEFAULTS = DitherConfig()


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    palette_path: Path | None = typer.Option(
        None, "--palette", "-p", help="Reference image whose colours form the palette",
    ),
    colors: str | None = typer.Option(
        None, "--colors", "-c",
        help="Comma-separated hex colours, e.g. '#000000,#FFFFFF'",
    ),
    strength: float = typer.Option(
        _DEFAULTS.strength, "--strength", "-s", help="Error damping factor",
    ),
    formula: Formula = typer.Option(
        _DEFAULTS.formula, "--formula", "-f", case_sensitive=False,
        help="Diffusion kernel for single-pass mode",
    ),
    multipass: bool = typer.Option(
        _DEFAULTS.multipass, "--multipass/--single-pass",
        help="Interlace, then Atkinson, then Floyd-Steinberg (ignores --formula)",
    ),
    max_side: int | None = typer.Option(
        _DEFAULTS.max_side, "--max-side", "-m",
        help="Downscale so the longest side is at most this",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Pixel upscale factor",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Also save a Source | Palette | Nearest | Dithered grid",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("palette_dither")

    try:
        cfg = DitherConfig(
            strength=strength,
            formula=formula,
            multipass=multipass,
            max_side=max_side,
            pixel_upscale=upscale,
            save_comparison=comparison,
            input_dir=input_dir,
            output_dir=output_dir,
        )
        palette = load_palette(palette_path, _split_colors(colors))
        _ensure_dir(output_dir)
    except DitherError as exc:
        _fail(exc)

    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if palette_path is not None:
        images = [p for p in images if p.resolve() != palette_path.resolve()]
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    mode = "multipass" if cfg.multipass else cfg.formula.value
    console.print(Panel.fit(
        f"[bold]PALETTE DITHER[/bold]\n"
        f"Palette: {len(palette)} colours  |  Mode: {mode}\n"
        f"Strength: {cfg.strength}  |  Images: {len(images)}",
        border_style="cyan",
    ))

    for idx, img_path in enumerate(images, 1):
        stem = img_path.stem
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t_total = time.perf_counter()

        out_path = output_dir / f"{stem}_dithered.{cfg.output_format}"
        comp_path = (
            output_dir / f"{stem}_comparison.{cfg.output_format}"
            if cfg.save_comparison else None
        )
        try:
            result = dither_file(img_path, out_path, palette, cfg, comp_path)
        except DitherError as exc:
            _fail(exc)

        logger.debug("Total for %s: %.2f s", img_path.name, time.perf_counter() - t_total)
        console.print(f"  [green]✓[/green] {out_path.name}  {_summary(result)}")

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


# -- single-image command ----------------------------------------------

@app.command()
def single(
    source: Path = typer.Argument(..., help="Path to the image to dither"),
    output: Path = typer.Option(Path("output/dithered.png"), "--output", "-o"),
    palette_path: Path | None = typer.Option(None, "--palette", "-p"),
    colors: str | None = typer.Option(None, "--colors", "-c"),
    strength: float = typer.Option(_DEFAULTS.strength, "--strength", "-s"),
    formula: Formula = typer.Option(
        _DEFAULTS.formula, "--formula", "-f", case_sensitive=False,
    ),
    multipass: bool = typer.Option(_DEFAULTS.multipass, "--multipass/--single-pass"),
    max_side: int | None = typer.Option(_DEFAULTS.max_side, "--max-side", "-m"),
    upscale: int = typer.Option(_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Dither a single image."""
    _setup_logging(verbose)

    try:
        cfg = DitherConfig(
            strength=strength,
            formula=formula,
            multipass=multipass,
            max_side=max_side,
            pixel_upscale=upscale,
            save_comparison=comparison,
        )
        palette = load_palette(palette_path, _split_colors(colors))
        _ensure_dir(output.parent)
        comp_path = (
            output.with_name(f"{output.stem}_comparison{output.suffix}")
            if cfg.save_comparison else None
        )
        result = dither_file(source, output, palette, cfg, comp_path)
    except DitherError as exc:
        _fail(exc)

    console.print(f"[green]✓[/green] Saved to {output}  {_summary(result)}")


if __name__ == "__main__":
    app()
