"""Bounded window of the most recent samples, shared between two threads.

The audio callback is the only writer and the UI's spectrum analyzer the only
reader. The lock is held for a single push or a single snapshot copy.

Storage is a pre-allocated array of twice the capacity. Writes append at the
end; eviction just moves the start index. When the end of the storage is
reached the live window is copied back to the front in one go, so pushes are
amortized O(1) and never allocate.
"""

from __future__ import annotations

import threading

import numpy as np

DEFAULT_CAPACITY = 2048


class SharedSampleBuffer:
    """Thread-safe most-recent-N sample window."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._data = np.zeros(capacity * 2, dtype=np.float32)
        self._start = 0
        self._end = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return self._end - self._start

    def _compact(self) -> None:
        held = self._end - self._start
        self._data[:held] = self._data[self._start:self._end]
        self._start = 0
        self._end = held

    def push(self, sample: float) -> None:
        """Append one sample, dropping the oldest if over capacity."""
        with self._lock:
            if self._end == self._data.shape[0]:
                self._compact()
            self._data[self._end] = sample
            self._end += 1
            if self._end - self._start > self._capacity:
                self._start = self._end - self._capacity

    def extend(self, samples: np.ndarray) -> None:
        """Append a 1-D block of samples, keeping only the newest *capacity*."""
        block = np.asarray(samples, dtype=np.float32).reshape(-1)
        n = block.shape[0]
        if n == 0:
            return
        with self._lock:
            if n >= self._capacity:
                self._data[:self._capacity] = block[n - self._capacity:]
                self._start = 0
                self._end = self._capacity
                return
            if self._end + n > self._data.shape[0]:
                self._compact()
            self._data[self._end:self._end + n] = block
            self._end += n
            if self._end - self._start > self._capacity:
                self._start = self._end - self._capacity

    def snapshot_first(self, n: int) -> np.ndarray | None:
        """Copy of the oldest *n* held samples, or None if fewer are held."""
        with self._lock:
            if self._end - self._start < n:
                return None
            return self._data[self._start:self._start + n].copy()

    def snapshot(self) -> np.ndarray:
        """Copy of every held sample, oldest first."""
        with self._lock:
            return self._data[self._start:self._end].copy()

    def clear(self) -> None:
        with self._lock:
            self._start = 0
            self._end = 0
