"""Playback engine: decode, output stream, transport controls and the visualization feed.

Design:
- The whole track is decoded up front. The waveform envelope is computed from
  those samples before the output stream opens, so there is no second decode.
- The pipeline is an explicit composition: ``TrackReader`` (block source),
  optionally wrapped in ``SampleTap`` when the spectrum view is enabled.
  Seeking and restarting rebuild the pipeline at the new frame.
- The sounddevice callback pulls one block per call under the engine lock and
  scales it by the current volume. Volume is applied after the tap, so the
  spectrum shows the source signal regardless of volume.
- Transport operations and queries share the same lock and only hold it for a
  few assignments; the callback never waits on the UI for longer than that.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Iterator

import numpy as np
import sounddevice as sd

from apz.audio_file import AudioFile, load_audio
from apz.config import load_config
from apz.devices import resolve_output_device
from apz.errors import OutputDeviceUnavailableError
from apz.sample_buffer import SharedSampleBuffer
from apz.spectrum import SpectrumAnalyzer
from apz.state import PlaybackState, PlaybackStatus, VisualizationMode
from apz.tap import SampleTap, TrackReader
from apz.waveform import WaveformData, precompute_waveform

logger = logging.getLogger(__name__)


def _clamp_volume(value: float) -> float:
    return round(min(max(float(value), 0.0), 1.0), 6)


class PlaybackEngine:
    """Plays one audio file and feeds the waveform and spectrum views."""

    def __init__(
        self,
        path: str | Path,
        visualize: bool = False,
        *,
        enhanced_waveform: bool = False,
        config: dict[str, Any] | None = None,
        device: str | int | None = None,
        stream_factory: Callable[..., Any] | None = None,
    ):
        cfg = config if config is not None else load_config()
        self._blocksize: int = int(cfg.get("blocksize", 1024))
        self._volume: float = _clamp_volume(cfg.get("initial_volume", 1.0))

        self._audio: AudioFile = load_audio(
            path,
            sample_rate=int(cfg.get("decode_sample_rate", 44100)),
            ffmpeg=cfg.get("ffmpeg_binary", "ffmpeg"),
        )

        enhanced = enhanced_waveform or cfg.get("waveform_style") == "mirrored"
        self.mode = VisualizationMode.select(visualize, enhanced)
        self._waveform = precompute_waveform(
            self._audio.samples,
            width=int(cfg.get("waveform_buckets", 400)),
            enhanced=self.mode is VisualizationMode.MIRRORED_WAVEFORM,
        )

        self._sample_buffer: SharedSampleBuffer | None = None
        self.analyzer: SpectrumAnalyzer | None = None
        if self.mode is VisualizationMode.SPECTRUM:
            window = int(cfg.get("spectrum_window", 2048))
            self._sample_buffer = SharedSampleBuffer(capacity=window)
            self.analyzer = SpectrumAnalyzer(
                self._sample_buffer,
                window_size=window,
                num_bars=int(cfg.get("spectrum_bars", 50)),
                smoothing=float(cfg.get("spectrum_smoothing", 0.7)),
            )

        self._lock = threading.Lock()
        self._state = PlaybackState.PLAYING
        self._reader: TrackReader
        self._pipeline: Iterator[np.ndarray]
        self._build_pipeline(0)

        self._stream: Any = None
        self._open_stream(
            device if device is not None else cfg.get("output_device"),
            stream_factory or sd.OutputStream,
        )

    # -- construction -------------------------------------------------------

    def _build_pipeline(self, start_frame: int) -> None:
        """Compose source -> (tap) for playback starting at *start_frame*."""
        self._reader = TrackReader(self._audio.samples, start_frame, self._blocksize)
        if self._sample_buffer is not None:
            self._pipeline = SampleTap(self._reader, self._sample_buffer)
        else:
            self._pipeline = self._reader

    def _open_stream(self, device: str | int | None, factory: Callable[..., Any]) -> None:
        try:
            device_idx = resolve_output_device(device)
        except (ValueError, sd.PortAudioError) as exc:
            raise OutputDeviceUnavailableError(str(exc)) from exc

        try:
            stream = factory(
                device=device_idx,
                samplerate=self._audio.sample_rate,
                channels=self._audio.channels,
                dtype="float32",
                blocksize=self._blocksize,
                callback=self._callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as exc:
            raise OutputDeviceUnavailableError(f"Could not open audio output: {exc}") from exc

        self._stream = stream
        logger.info(
            "Output stream open: device=%s %d Hz %d ch blocksize=%d",
            "default" if device_idx is None else device_idx,
            self._audio.sample_rate, self._audio.channels, self._blocksize,
        )

    # -- audio thread -------------------------------------------------------

    def _callback(self, outdata: np.ndarray, frames: int, time_info: Any, status: sd.CallbackFlags) -> None:
        if status:
            logger.warning("Output callback status: %s", status)
        with self._lock:
            if self._state is not PlaybackState.PLAYING:
                outdata.fill(0)
                return
            block = next(self._pipeline, None)
            volume = self._volume
        if block is None:
            outdata.fill(0)
            return
        n = min(block.shape[0], frames)
        np.multiply(block[:n], volume, out=outdata[:n])
        outdata[n:] = 0

    # -- transport ----------------------------------------------------------

    def play(self) -> None:
        with self._lock:
            if self._state is PlaybackState.PAUSED:
                self._state = PlaybackState.PLAYING
                logger.debug("Play")

    def pause(self) -> None:
        with self._lock:
            if self._state is PlaybackState.PLAYING:
                self._state = PlaybackState.PAUSED
                logger.debug("Pause")

    def toggle(self) -> None:
        with self._lock:
            if self._state is PlaybackState.PLAYING:
                self._state = PlaybackState.PAUSED
            elif self._state is PlaybackState.PAUSED:
                self._state = PlaybackState.PLAYING

    def seek(self, offset: float) -> None:
        """Move the position by *offset* seconds, clamped to the track."""
        with self._lock:
            if self._state is PlaybackState.STOPPED:
                return
            target = self._reader.position + int(round(offset * self._audio.sample_rate))
            target = min(max(target, 0), self._audio.frames)
            self._build_pipeline(target)
        logger.debug("Seek %+.1fs -> frame %d", offset, target)

    def restart(self) -> None:
        with self._lock:
            if self._state is PlaybackState.STOPPED:
                return
            self._build_pipeline(0)
            self._state = PlaybackState.PLAYING
        logger.info("Restarted %s", self._audio.name)

    def adjust_volume(self, delta: float) -> float:
        """Change volume by *delta*, clamped to [0, 1]. Returns the new volume."""
        with self._lock:
            self._volume = _clamp_volume(self._volume + delta)
            return self._volume

    def set_volume(self, value: float) -> float:
        with self._lock:
            self._volume = _clamp_volume(value)
            return self._volume

    def close(self) -> None:
        """Stop output and release the device. Safe to call more than once."""
        with self._lock:
            if self._state is PlaybackState.STOPPED:
                return
            self._state = PlaybackState.STOPPED
            stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()
        logger.info("Playback stopped: %s", self._audio.name)

    def __enter__(self) -> PlaybackEngine:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- queries ------------------------------------------------------------

    def position(self) -> float:
        """Current position in seconds."""
        with self._lock:
            return self._reader.position / self._audio.sample_rate

    def duration(self) -> float:
        return self._audio.duration

    def state(self) -> PlaybackState:
        with self._lock:
            return self._state

    def volume(self) -> float:
        with self._lock:
            return self._volume

    def is_finished(self) -> bool:
        with self._lock:
            return self._reader.position >= self._audio.frames

    def status(self) -> PlaybackStatus:
        with self._lock:
            return PlaybackStatus(
                state=self._state,
                position=self._reader.position / self._audio.sample_rate,
                duration=self._audio.duration,
                volume=self._volume,
                finished=self._reader.position >= self._audio.frames,
            )

    def waveform(self) -> WaveformData:
        return self._waveform

    @property
    def audio(self) -> AudioFile:
        return self._audio

    @property
    def filename(self) -> str:
        return self._audio.name
