"""CLI entry point for the apz command: load a file, then hand it to the TUI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from apz import __version__
from apz.audio_file import supported_formats_text
from apz.config import CONFIG_PATH, init_config_if_missing, load_config
from apz.logging_setup import setup_logging

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

logger = logging.getLogger(__name__)


def _print_usage(prog: str) -> None:
    err_console.print(f"Usage: {prog} [--visualizer|-v] [--mirror|-m] <audio_file>")
    err_console.print()
    err_console.print(f"Supported formats: {supported_formats_text()}")
    err_console.print()
    err_console.print("Options:")
    err_console.print("  --visualizer, -v    Live spectrum analyzer")
    err_console.print("  --mirror, -m        Two-sided waveform view")
    err_console.print("  --device DEVICE     Output device name or index")
    err_console.print("  --list-devices      List audio output devices")
    err_console.print("  --setup             Create the config file and check dependencies")


def _show_config() -> None:
    cfg = load_config()
    console.print(f"  Config file: [dim]{CONFIG_PATH}[/dim]")
    for key, val in cfg.items():
        console.print(f"  [bold]{key}:[/bold] {val}")


def _run_setup() -> bool:
    """Create the config file if needed and report platform checks."""
    from pyfiglet import Figlet

    from apz.platform_setup import run_all_checks

    console.print(Figlet(font="small").renderText("apz").rstrip(), markup=False, style="bold cyan")
    console.print()
    if init_config_if_missing():
        console.print(f"  Created default config at [dim]{CONFIG_PATH}[/dim]")
    else:
        console.print(f"  Config already exists at [dim]{CONFIG_PATH}[/dim]")

    console.print()
    cfg = load_config()
    all_ok = True
    for name, ok, msg in run_all_checks(ffmpeg_binary=cfg.get("ffmpeg_binary", "ffmpeg")):
        icon = "[green]OK[/green]" if ok else "[red]MISSING[/red]"
        console.print(f"  [{icon}] {name}: {msg}")
        all_ok = all_ok and ok

    console.print()
    if all_ok:
        console.print("  [green]All checks passed.[/green]")
    else:
        console.print("  [yellow]Some checks failed.[/yellow] See above for install instructions.")
    return all_ok


def _list_devices() -> None:
    from apz.devices import list_output_devices

    console.print("  Available output devices:\n")
    for dev in list_output_devices():
        default_marker = " [dim](default)[/dim]" if dev["is_default"] else ""
        console.print(
            f"    [{dev['index']}] [bold]{dev['name']}[/bold]"
            f"  ({dev['channels']}ch, {dev['sample_rate']}Hz)"
            f"{default_marker}"
        )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("audio_file", required=False, type=click.Path())
@click.option(
    "-v", "--visualizer",
    is_flag=True,
    default=False,
    help="Show a live spectrum analyzer instead of the waveform.",
)
@click.option(
    "-m", "--mirror",
    is_flag=True,
    default=False,
    help="Draw the waveform two-sided around a centre line.",
)
@click.option(
    "--device",
    type=str,
    default=None,
    help="Output device name or index to play through.",
)
@click.option("--list-devices", is_flag=True, default=False, help="List output devices and exit.")
@click.option("--show-config", is_flag=True, default=False, help="Show current config values and exit.")
@click.option("--setup", "run_setup", is_flag=True, default=False, help="Create the config file and check dependencies.")
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(__version__, prog_name="apz")
@click.pass_context
def main(
    ctx: click.Context,
    audio_file: str | None,
    visualizer: bool,
    mirror: bool,
    device: str | None,
    list_devices: bool,
    show_config: bool,
    run_setup: bool,
    debug: bool,
) -> None:
    """Play AUDIO_FILE in the terminal with a waveform or spectrum view."""
    setup_logging(debug=debug)

    if show_config:
        _show_config()
        return

    if run_setup:
        ctx.exit(0 if _run_setup() else 1)

    if not audio_file and not list_devices:
        _print_usage(ctx.info_name or "apz")
        ctx.exit(1)

    try:
        from apz.engine import PlaybackEngine
    except OSError:
        err_console.print(
            "  [red]Error:[/red] PortAudio not found. "
            "Install it (e.g. 'brew install portaudio' or 'apt install libportaudio2')."
        )
        ctx.exit(1)

    if list_devices:
        _list_devices()
        return

    from apz.errors import LoadError

    try:
        engine = PlaybackEngine(
            audio_file,
            visualize=visualizer,
            enhanced_waveform=mirror,
            device=device,
        )
    except LoadError as exc:
        logger.error("Load failed for %s: %s", audio_file, exc)
        err_console.print(f"Failed to load audio file: {escape(str(exc))}")
        ctx.exit(1)

    from apz.app import PlayerApp

    try:
        PlayerApp(engine).run()
    finally:
        engine.close()

    console.print(f"  [dim]Played {Path(audio_file).name}[/dim]")


if __name__ == "__main__":
    sys.exit(main())
