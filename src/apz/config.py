"""Load, save, and validate the JSON config at ~/.config/apz/config.json."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "apz"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULTS: dict[str, dict[str, Any]] = {
    "seek_step": {
        "value": 5.0,
        "description": "Seconds skipped by the left/right arrow keys.",
    },
    "volume_step": {
        "value": 0.05,
        "description": "Volume change per up/down arrow press (0.0-1.0 scale).",
    },
    "initial_volume": {
        "value": 1.0,
        "description": "Volume at startup, 0.0 (mute) to 1.0 (full).",
    },
    "waveform_buckets": {
        "value": 400,
        "description": "Number of amplitude buckets in the whole-track waveform.",
    },
    "waveform_style": {
        "value": "simple",
        "description": "Waveform view: simple (sparkline) or mirrored (two-sided). Override with -m flag.",
    },
    "spectrum_bars": {
        "value": 50,
        "description": "Number of bars in the spectrum analyzer (-v flag).",
    },
    "spectrum_window": {
        "value": 2048,
        "description": "FFT window size in samples. Also the size of the live sample buffer.",
    },
    "spectrum_smoothing": {
        "value": 0.7,
        "description": "Bar smoothing factor. Higher = slower, steadier bars.",
    },
    "refresh_rate": {
        "value": 30,
        "description": "Screen redraws per second.",
    },
    "blocksize": {
        "value": 1024,
        "description": "Frames per audio callback. Larger is safer, smaller reacts faster.",
    },
    "output_device": {
        "value": None,
        "description": "Output device name or index. null = system default. Override with --device flag.",
    },
    "decode_sample_rate": {
        "value": 44100,
        "description": "Sample rate used when decoding non-WAV files through ffmpeg.",
    },
    "ffmpeg_binary": {
        "value": "ffmpeg",
        "description": "ffmpeg executable used to decode MP3, FLAC, OGG and AAC/M4A.",
    },
}


# Inclusive numeric bounds; values outside fall back to the default.
_RANGES: dict[str, tuple[float, float]] = {
    "seek_step": (0.1, 600.0),
    "volume_step": (0.001, 1.0),
    "initial_volume": (0.0, 1.0),
    "waveform_buckets": (1, 100_000),
    "spectrum_bars": (1, 1024),
    "spectrum_window": (64, 65536),
    "spectrum_smoothing": (0.0, 0.99),
    "refresh_rate": (1, 240),
    "blocksize": (16, 65536),
    "decode_sample_rate": (8000, 384000),
}

_CHOICES: dict[str, tuple[str, ...]] = {
    "waveform_style": ("simple", "mirrored"),
}


def _ensure_dir() -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def _validate(key: str, value: Any) -> Any:
    """Return *value* if acceptable for *key*, else the default (with a warning)."""
    default = DEFAULTS[key]["value"]
    if key in _RANGES:
        low, high = _RANGES[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("Config %s=%r is not a number; using %r", key, value, default)
            return default
        if not low <= value <= high:
            logger.warning("Config %s=%r outside [%s, %s]; using %r", key, value, low, high, default)
            return default
        return type(default)(value)
    if key in _CHOICES and value not in _CHOICES[key]:
        logger.warning("Config %s=%r not one of %s; using %r", key, value, _CHOICES[key], default)
        return default
    return value


def load_config() -> dict[str, Any]:
    """Return a flat dict of {key: value} from the config file, merged with defaults."""
    values: dict[str, Any] = {k: v["value"] for k, v in DEFAULTS.items()}

    if CONFIG_PATH.exists():
        try:
            raw = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
            for key, entry in raw.items():
                if key.startswith("_"):
                    continue
                value = entry["value"] if isinstance(entry, dict) and "value" in entry else entry
                values[key] = _validate(key, value) if key in DEFAULTS else value
        except (json.JSONDecodeError, OSError, AttributeError) as exc:
            logger.warning("Could not read config at %s: %s", CONFIG_PATH, exc)

    return values


def save_config(values: dict[str, Any]) -> None:
    """Write current values back to the config file, preserving descriptions."""
    _ensure_dir()
    data: dict[str, Any] = {
        "_description": "apz configuration. Edit values below; descriptions are for reference."
    }
    for key, meta in DEFAULTS.items():
        data[key] = {
            "value": values.get(key, meta["value"]),
            "description": meta["description"],
        }
    CONFIG_PATH.write_text(
        json.dumps(data, indent=4, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info("Config saved to %s", CONFIG_PATH)


def get(key: str) -> Any:
    return load_config()[key]


def init_config_if_missing() -> bool:
    """Create default config file if it doesn't exist. Return True if created."""
    if CONFIG_PATH.exists():
        return False
    save_config({k: v["value"] for k, v in DEFAULTS.items()})
    return True
