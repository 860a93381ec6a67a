"""Transport state shared by the engine and the presentation layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class PlaybackState(enum.Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class VisualizationMode(enum.Enum):
    """Which view the presentation layer draws, fixed at construction."""

    SPECTRUM = "spectrum"
    MIRRORED_WAVEFORM = "mirrored"
    SIMPLE_WAVEFORM = "simple"

    @classmethod
    def select(cls, visualize: bool, enhanced_waveform: bool) -> VisualizationMode:
        if visualize:
            return cls.SPECTRUM
        if enhanced_waveform:
            return cls.MIRRORED_WAVEFORM
        return cls.SIMPLE_WAVEFORM


@dataclass(frozen=True)
class PlaybackStatus:
    """Consistent view of the transport, read once per frame."""

    state: PlaybackState
    position: float
    duration: float
    volume: float
    finished: bool
