"""Shared fixtures: isolated config/log directory and WAV file factory."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pytest
from scipy.io import wavfile

from apz import config, logging_setup


@pytest.fixture(autouse=True)
def isolated_config_dir(monkeypatch, tmp_path: Path) -> Path:
    cfg_dir = tmp_path / "apz-config"
    monkeypatch.setattr(config, "CONFIG_DIR", cfg_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", cfg_dir / "config.json")
    monkeypatch.setattr(logging_setup, "LOG_DIR", cfg_dir)
    monkeypatch.setattr(logging_setup, "LOG_FILE", cfg_dir / "apz.log")
    return cfg_dir


@pytest.fixture
def make_wav(tmp_path: Path):
    """Write a sine-tone WAV and return its path."""

    def _make(
        seconds: float = 1.0,
        sample_rate: int = 44100,
        channels: int = 1,
        freq: float = 440.0,
        amplitude: float = 0.5,
        name: str = "tone.wav",
    ) -> Path:
        n = int(seconds * sample_rate)
        t = np.arange(n) / sample_rate
        tone = amplitude * np.sin(2 * np.pi * freq * t)
        data = np.repeat(tone[:, None], channels, axis=1) if channels > 1 else tone
        path = tmp_path / name
        wavfile.write(str(path), sample_rate, np.clip(data * 32767, -32768, 32767).astype(np.int16))
        return path

    return _make


@pytest.fixture(autouse=True)
def reset_apz_logger():
    """Drop handlers that setup_logging attached during a test."""
    yield
    log = logging.getLogger("apz")
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
