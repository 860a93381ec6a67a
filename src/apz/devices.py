"""Output device listing and selection."""

from __future__ import annotations

import logging
from typing import Any

import sounddevice as sd

logger = logging.getLogger(__name__)


def list_output_devices() -> list[dict[str, Any]]:
    """Return a list of available output devices with their properties."""
    devices = sd.query_devices()
    result = []
    default_output = sd.default.device[1]
    for i, d in enumerate(devices):
        if d["max_output_channels"] > 0:
            result.append({
                "index": i,
                "name": d["name"],
                "channels": d["max_output_channels"],
                "sample_rate": int(d["default_samplerate"]),
                "is_default": i == default_output,
            })
    return result


def resolve_output_device(device: str | int | None) -> int | None:
    """Resolve a device argument (name fragment or index) to a device index.

    Returns None for system default.
    """
    if device is None or device == "":
        return None

    try:
        idx = int(device)
    except (TypeError, ValueError):
        idx = None

    if idx is not None:
        devs = sd.query_devices()
        if 0 <= idx < len(devs) and devs[idx]["max_output_channels"] > 0:
            return idx
        raise ValueError(f"Device index {idx} is not a valid output device.")

    name_lower = str(device).lower()
    for dev in list_output_devices():
        if name_lower in dev["name"].lower():
            logger.debug("Output device '%s' resolved to %d", device, dev["index"])
            return dev["index"]

    raise ValueError(f"No output device matching '{device}' found.")
