"""Live spectrum analyzer fed from the shared sample buffer.

Once per UI frame the analyzer copies the oldest ``window_size`` samples out of
the buffer, runs an FFT on that private copy and maps the magnitude spectrum
onto a small number of bars:

- bar i reads bin ``floor((i / B) ** 1.3 * (bins - 1))``, which packs the low
  bars into the bass end and spreads the high bars across the rest;
- the raw magnitude gets a linear bass boost ``1 + 1.5 * (1 - i / B)``;
- each bar is an exponential moving average ``bar * a + amp * (1 - a)``.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.fft import rfft

from apz.sample_buffer import SharedSampleBuffer

logger = logging.getLogger(__name__)

WINDOW_SIZE = 2048
NUM_BARS = 50
SMOOTHING = 0.7
FREQUENCY_EXPONENT = 1.3
BASS_BOOST = 1.5


class SpectrumAnalyzer:
    """Turns the recent-sample window into smoothed, perceptually spaced bars."""

    def __init__(
        self,
        buffer: SharedSampleBuffer,
        window_size: int = WINDOW_SIZE,
        num_bars: int = NUM_BARS,
        smoothing: float = SMOOTHING,
        exponent: float = FREQUENCY_EXPONENT,
        bass_boost: float = BASS_BOOST,
    ):
        if window_size < 2:
            raise ValueError(f"window_size must be at least 2, got {window_size}")
        if num_bars <= 0:
            raise ValueError(f"num_bars must be positive, got {num_bars}")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {smoothing}")
        if buffer.capacity < window_size:
            raise ValueError(
                f"buffer capacity {buffer.capacity} is smaller than window {window_size}"
            )

        self._buffer = buffer
        self.window_size = window_size
        self.smoothing = smoothing
        self._bars = np.zeros(num_bars, dtype=np.float64)

        bins = window_size // 2
        ratios = np.arange(num_bars, dtype=np.float64) / num_bars
        index = np.floor(ratios ** exponent * (bins - 1)).astype(np.int64)
        self._bin_index = np.clip(index, 0, bins - 1)
        self._boost = 1.0 + bass_boost * (1.0 - ratios)

    @property
    def num_bars(self) -> int:
        return int(self._bars.shape[0])

    @property
    def num_bins(self) -> int:
        return self.window_size // 2

    @property
    def bars(self) -> np.ndarray:
        """Copy of the current smoothed bar values."""
        return self._bars.copy()

    @property
    def bin_indices(self) -> np.ndarray:
        """FFT bin read by each bar."""
        return self._bin_index.copy()

    def bar_frequencies(self, sample_rate: int) -> np.ndarray:
        """Frequency in Hz of the bin behind each bar."""
        return self._bin_index * (sample_rate / self.window_size)

    def update(self) -> bool:
        """Advance the bars by one frame. Returns False when data was insufficient."""
        window = self._buffer.snapshot_first(self.window_size)
        if window is None:
            return False

        spectrum = np.abs(rfft(window.astype(np.float64)))[: self.num_bins]
        amplitude = spectrum[self._bin_index] * self._boost

        self._bars *= self.smoothing
        self._bars += amplitude * (1.0 - self.smoothing)
        return True

    def reset(self) -> None:
        self._bars.fill(0.0)
