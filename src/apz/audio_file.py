"""Decode a local audio file into float32 frames.

WAV files are read directly with scipy. Everything else (MP3, FLAC, OGG,
AAC/M4A) is piped through ffmpeg as raw 32-bit float PCM.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from scipy.io import wavfile

from apz.errors import FileUnreadableError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: dict[str, str] = {
    ".wav": "WAV",
    ".mp3": "MP3",
    ".flac": "FLAC",
    ".ogg": "OGG",
    ".oga": "OGG",
    ".aac": "AAC",
    ".m4a": "M4A",
}

FFMPEG_CHANNELS = 2


@dataclass(frozen=True)
class AudioFile:
    """A fully decoded track. ``samples`` is shaped (frames, channels)."""

    path: Path
    samples: np.ndarray = field(repr=False)
    sample_rate: int

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Track length in seconds."""
        return self.frames / self.sample_rate

    @property
    def name(self) -> str:
        return self.path.name


def _to_float32_audio(audio_data: np.ndarray) -> np.ndarray:
    """Convert input waveform to float32 in [-1, 1]."""
    if audio_data.dtype == np.uint8:
        return (audio_data.astype(np.float32) - 128.0) / 128.0
    if np.issubdtype(audio_data.dtype, np.integer):
        info = np.iinfo(audio_data.dtype)
        scale = max(abs(info.min), info.max)
        return audio_data.astype(np.float32) / float(scale)
    return audio_data.astype(np.float32)


def _as_frames(audio: np.ndarray) -> np.ndarray:
    if audio.ndim == 1:
        audio = audio.reshape(-1, 1)
    return np.ascontiguousarray(audio, dtype=np.float32)


def _check_readable(path: Path) -> None:
    if not path.exists():
        raise FileUnreadableError(f"No such file: {path}")
    if not path.is_file():
        raise FileUnreadableError(f"Not a regular file: {path}")
    try:
        with path.open("rb") as fh:
            fh.read(1)
    except OSError as exc:
        raise FileUnreadableError(f"Cannot read {path}: {exc}") from exc


def _read_wav(path: Path) -> tuple[int, np.ndarray]:
    try:
        sample_rate, audio_data = wavfile.read(str(path))
    except (ValueError, EOFError) as exc:
        raise UnsupportedFormatError(f"Corrupt or unsupported WAV file: {exc}") from exc
    except OSError as exc:
        raise FileUnreadableError(f"Cannot read {path}: {exc}") from exc
    return int(sample_rate), _as_frames(_to_float32_audio(audio_data))


def _read_with_ffmpeg(path: Path, sample_rate: int, ffmpeg: str) -> tuple[int, np.ndarray]:
    binary = shutil.which(ffmpeg)
    if binary is None:
        raise UnsupportedFormatError(
            f"ffmpeg not found (looked for '{ffmpeg}'); it is needed to decode "
            f"{SUPPORTED_FORMATS[path.suffix.lower()]} files."
        )
    cmd = [
        binary,
        "-nostdin",
        "-v", "error",
        "-i", str(path),
        "-f", "f32le",
        "-ac", str(FFMPEG_CHANNELS),
        "-ar", str(sample_rate),
        "pipe:1",
    ]
    logger.debug("Decoding via ffmpeg: %s", " ".join(cmd))
    result = subprocess.run(cmd, capture_output=True)
    if result.returncode != 0:
        reason = result.stderr.decode("utf-8", errors="replace").strip().splitlines()
        detail = reason[-1] if reason else f"exit status {result.returncode}"
        raise UnsupportedFormatError(f"Could not decode {path.name}: {detail}")

    raw = result.stdout
    usable = len(raw) - len(raw) % (4 * FFMPEG_CHANNELS)
    audio = np.frombuffer(raw[:usable], dtype="<f4").reshape(-1, FFMPEG_CHANNELS)
    return sample_rate, _as_frames(audio)


def load_audio(
    path: str | Path,
    *,
    sample_rate: int = 44100,
    ffmpeg: str = "ffmpeg",
) -> AudioFile:
    """Decode *path* completely into memory.

    *sample_rate* only applies to formats decoded through ffmpeg; WAV files
    keep their native rate and channel layout.
    """
    path = Path(path).expanduser()
    _check_readable(path)

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported format '{suffix or path.name}'. "
            f"Supported: {supported_formats_text()}"
        )

    if suffix == ".wav":
        rate, samples = _read_wav(path)
    else:
        rate, samples = _read_with_ffmpeg(path, sample_rate, ffmpeg)

    if rate <= 0:
        raise UnsupportedFormatError(f"Invalid sample rate {rate} in {path.name}")
    if samples.shape[0] == 0:
        raise UnsupportedFormatError(f"No audio frames in {path.name}")

    audio = AudioFile(path=path.resolve(), samples=samples, sample_rate=rate)
    logger.info(
        "Loaded %s: %d frames, %d Hz, %d ch, %.1fs",
        audio.name, audio.frames, audio.sample_rate, audio.channels, audio.duration,
    )
    return audio


def supported_formats_text() -> str:
    """Human-readable list of supported formats, e.g. for usage messages."""
    names: list[str] = []
    for label in SUPPORTED_FORMATS.values():
        if label not in names:
            names.append(label)
    return ", ".join(names)
