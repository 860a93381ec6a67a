"""Environment checks for ``apz --setup``: PortAudio, ffmpeg, an output device."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)


def _install_hint(package: str) -> str:
    if sys.platform == "darwin":
        return f"  brew install {package}"
    return f"  sudo apt install {package}   (or your distribution's equivalent)"


def check_portaudio() -> tuple[bool, str]:
    """Check if PortAudio is available (needed by sounddevice)."""
    try:
        import sounddevice  # noqa: F401
        return True, "PortAudio is available."
    except OSError:
        package = "portaudio" if sys.platform == "darwin" else "libportaudio2"
        return False, "PortAudio not found. Install it with:\n" + _install_hint(package)


def check_ffmpeg(binary: str = "ffmpeg") -> tuple[bool, str]:
    """Check that ffmpeg runs. WAV playback works without it."""
    path = shutil.which(binary)
    if path is None:
        return False, (
            f"'{binary}' not found. MP3, FLAC, OGG and AAC/M4A need it:\n"
            + _install_hint("ffmpeg")
        )
    try:
        result = subprocess.run(
            [path, "-version"], capture_output=True, text=True, timeout=10
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        return False, f"Could not run {path}: {exc}"
    if result.returncode != 0:
        return False, f"{path} -version exited with status {result.returncode}."
    first_line = result.stdout.splitlines()[0] if result.stdout else path
    return True, first_line


def check_output_device() -> tuple[bool, str]:
    """Check that at least one output device exists."""
    import sounddevice as sd

    from apz.devices import list_output_devices

    try:
        devices = list_output_devices()
    except sd.PortAudioError as exc:
        return False, f"Could not query audio devices: {exc}"
    if not devices:
        return False, "No audio output devices found."
    default = next((d for d in devices if d["is_default"]), devices[0])
    return True, f"{len(devices)} output device(s); default: {default['name']}"


def run_all_checks(ffmpeg_binary: str = "ffmpeg") -> list[tuple[str, bool, str]]:
    """Run platform checks. Returns list of (check_name, passed, message)."""
    results: list[tuple[str, bool, str]] = []

    ok, msg = check_portaudio()
    results.append(("PortAudio", ok, msg))
    if ok:
        ok, msg = check_output_device()
        results.append(("Output device", ok, msg))

    ok, msg = check_ffmpeg(ffmpeg_binary)
    results.append(("ffmpeg", ok, msg))

    for name, passed, _ in results:
        logger.debug("Check %s: %s", name, "ok" if passed else "missing")
    return results
