"""Whole-track amplitude envelope for the static waveform view.

The envelope is computed once, before playback, from the fully decoded
samples: the track is cut into a fixed number of contiguous spans and each
span is reduced to its mean absolute amplitude, then everything is scaled so
the loudest span is 1.0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_BUCKETS = 400

# Frames reduced per step while computing buckets.
CHUNK_FRAMES = 65536


@dataclass(frozen=True)
class WaveformData:
    """Normalized amplitude buckets (0.0-1.0) plus the requested view style."""

    buckets: tuple[float, ...]
    enhanced: bool = False

    def __len__(self) -> int:
        return len(self.buckets)

    def resample(self, width: int) -> list[float]:
        """Return exactly *width* levels, sampling or stretching the buckets."""
        return fit_levels(self.buckets, width)


def fit_levels(levels: Sequence[float], width: int) -> list[float]:
    """Sample or stretch *levels* to exactly *width* values."""
    if width <= 0:
        return []
    n = len(levels)
    if n == 0:
        return [0.0] * width
    step = n / width
    return [float(levels[min(int(i * step), n - 1)]) for i in range(width)]


def _chunk_magnitude(chunk: np.ndarray) -> np.ndarray:
    """Mean absolute value across channels for one chunk of frames."""
    if chunk.ndim == 2:
        return np.abs(chunk).mean(axis=1, dtype=np.float64)
    return np.abs(chunk).astype(np.float64)


def compute_buckets(samples: np.ndarray, width: int = DEFAULT_BUCKETS) -> np.ndarray:
    """Reduce *samples* to *width* normalized mean-absolute buckets.

    Span k covers frames [floor(k*N/W), floor((k+1)*N/W)). When N < W some
    spans are empty and stay at zero. Silent or empty input gives all zeros.

    The track is walked in fixed-size chunks, so the temporaries stay small
    no matter how long the track is.
    """
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    audio = np.asarray(samples)
    n = audio.shape[0]
    if n == 0:
        return np.zeros(width, dtype=np.float64)

    bounds = (np.arange(width + 1, dtype=np.int64) * n) // width
    sums = np.zeros(width, dtype=np.float64)
    for start in range(0, n, CHUNK_FRAMES):
        stop = min(start + CHUNK_FRAMES, n)
        magnitude = _chunk_magnitude(audio[start:stop])
        # Last span whose lower bound is <= frame; skips empty spans.
        owner = np.searchsorted(bounds, np.arange(start, stop), side="right") - 1
        sums += np.bincount(owner, weights=magnitude, minlength=width)[:width]

    counts = np.diff(bounds)
    means = np.divide(sums, counts, out=np.zeros(width, dtype=np.float64), where=counts > 0)

    peak = float(means.max())
    if peak <= 0.0:
        return np.zeros(width, dtype=np.float64)
    return means / peak


def precompute_waveform(
    samples: np.ndarray,
    width: int = DEFAULT_BUCKETS,
    enhanced: bool = False,
) -> WaveformData:
    """Build the immutable envelope handed to the presentation layer."""
    buckets = compute_buckets(samples, width)
    logger.debug("Waveform precomputed: %d samples -> %d buckets", len(samples), width)
    return WaveformData(buckets=tuple(float(v) for v in buckets), enhanced=enhanced)
