"""Playback pipeline stages: the block source and the sample tap.

``TrackReader`` walks a decoded track block by block from a start frame.
``SampleTap`` wraps any source and copies whatever passes through into a
``SharedSampleBuffer`` without altering it.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

import numpy as np

from apz.sample_buffer import SharedSampleBuffer


class TrackReader:
    """Iterator over (frames, channels) blocks of *samples* starting at *start*."""

    def __init__(self, samples: np.ndarray, start: int = 0, blocksize: int = 1024):
        if blocksize <= 0:
            raise ValueError(f"blocksize must be positive, got {blocksize}")
        self._samples = samples
        self._blocksize = blocksize
        self._cursor = min(max(int(start), 0), samples.shape[0])

    @property
    def position(self) -> int:
        """Index of the next frame to be read."""
        return self._cursor

    def __iter__(self) -> TrackReader:
        return self

    def __next__(self) -> np.ndarray:
        if self._cursor >= self._samples.shape[0]:
            raise StopIteration
        block = self._samples[self._cursor:self._cursor + self._blocksize]
        self._cursor += block.shape[0]
        return block


def _mono(block: np.ndarray) -> np.ndarray:
    if block.ndim == 2:
        if block.shape[1] == 1:
            return block[:, 0]
        return block.mean(axis=1)
    return block


class SampleTap:
    """Pass-through stage that duplicates every item into a sample buffer.

    Items may be single float samples or numpy blocks; multi-channel blocks
    are mixed down to mono before they reach the buffer. Once the wrapped
    source is exhausted the tap stays exhausted and writes nothing more.
    """

    def __init__(self, source: Iterable[Any], buffer: SharedSampleBuffer):
        self._source: Iterator[Any] = iter(source)
        self._buffer = buffer
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __iter__(self) -> SampleTap:
        return self

    def __next__(self) -> Any:
        if self._exhausted:
            raise StopIteration
        try:
            item = next(self._source)
        except StopIteration:
            self._exhausted = True
            raise
        if isinstance(item, np.ndarray) and item.ndim > 0:
            self._buffer.extend(_mono(item))
        else:
            self._buffer.push(float(item))
        return item
