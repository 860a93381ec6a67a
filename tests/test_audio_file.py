"""Tests for decoding audio files into float frames."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
from scipy.io import wavfile

from apz.audio_file import load_audio, supported_formats_text
from apz.errors import FileUnreadableError, LoadError, UnsupportedFormatError


class TestWav:
    def test_mono_int16(self, make_wav):
        audio = load_audio(make_wav(seconds=0.5, sample_rate=8000))
        assert audio.sample_rate == 8000
        assert audio.samples.shape == (4000, 1)
        assert audio.samples.dtype == np.float32
        assert audio.duration == pytest.approx(0.5)
        assert np.abs(audio.samples).max() == pytest.approx(0.5, abs=1e-3)

    def test_stereo(self, make_wav):
        audio = load_audio(make_wav(channels=2))
        assert audio.channels == 2
        assert audio.frames == 44100

    def test_float32_wav_kept_as_is(self, tmp_path: Path):
        data = np.linspace(-1.0, 1.0, 100, dtype=np.float32)
        path = tmp_path / "float.wav"
        wavfile.write(str(path), 16000, data)
        audio = load_audio(path)
        np.testing.assert_array_equal(audio.samples[:, 0], data)

    def test_uint8_is_centred(self, tmp_path: Path):
        path = tmp_path / "u8.wav"
        wavfile.write(str(path), 8000, np.array([0, 128, 255], dtype=np.uint8))
        audio = load_audio(path)
        np.testing.assert_allclose(audio.samples[:, 0], [-1.0, 0.0, 127 / 128])

    def test_uppercase_suffix(self, make_wav):
        audio = load_audio(make_wav(name="LOUD.WAV"))
        assert audio.name == "LOUD.WAV"


class TestErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileUnreadableError):
            load_audio(tmp_path / "missing.wav")

    def test_directory(self, tmp_path: Path):
        folder = tmp_path / "album.wav"
        folder.mkdir()
        with pytest.raises(FileUnreadableError):
            load_audio(folder)

    def test_unknown_extension(self, tmp_path: Path):
        path = tmp_path / "song.xyz"
        path.write_bytes(b"\x00" * 64)
        with pytest.raises(UnsupportedFormatError, match="Supported"):
            load_audio(path)

    def test_corrupt_wav(self, tmp_path: Path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"this is not a riff header at all")
        with pytest.raises(UnsupportedFormatError):
            load_audio(path)

    def test_empty_wav(self, tmp_path: Path):
        path = tmp_path / "empty.wav"
        wavfile.write(str(path), 44100, np.zeros(0, dtype=np.int16))
        with pytest.raises(UnsupportedFormatError):
            load_audio(path)

    def test_errors_share_a_base(self):
        assert issubclass(FileUnreadableError, LoadError)
        assert issubclass(UnsupportedFormatError, LoadError)


class TestFfmpeg:
    @pytest.fixture
    def mp3(self, tmp_path: Path) -> Path:
        path = tmp_path / "track.mp3"
        path.write_bytes(b"ID3fake")
        return path

    def test_missing_ffmpeg(self, mp3: Path):
        with patch("apz.audio_file.shutil.which", return_value=None):
            with pytest.raises(UnsupportedFormatError, match="ffmpeg"):
                load_audio(mp3)

    def test_decodes_stereo_f32(self, mp3: Path):
        frames = np.array([[0.25, -0.25], [0.5, -0.5], [1.0, 0.0]], dtype="<f4")
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout=frames.tobytes(), stderr=b"")
        with patch("apz.audio_file.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("apz.audio_file.subprocess.run", return_value=done) as run:
            audio = load_audio(mp3, sample_rate=48000)

        cmd = run.call_args[0][0]
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert str(mp3) in cmd
        assert cmd[cmd.index("-ar") + 1] == "48000"
        assert cmd[cmd.index("-f") + 1] == "f32le"
        assert audio.sample_rate == 48000
        np.testing.assert_array_equal(audio.samples, frames)

    def test_decoder_failure(self, mp3: Path):
        failed = subprocess.CompletedProcess(
            args=[], returncode=1, stdout=b"",
            stderr=b"ffmpeg version x\ntrack.mp3: Invalid data found when processing input\n",
        )
        with patch("apz.audio_file.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("apz.audio_file.subprocess.run", return_value=failed):
            with pytest.raises(UnsupportedFormatError, match="Invalid data"):
                load_audio(mp3)

    def test_no_frames_decoded(self, mp3: Path):
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"", stderr=b"")
        with patch("apz.audio_file.shutil.which", return_value="/usr/bin/ffmpeg"), \
             patch("apz.audio_file.subprocess.run", return_value=done):
            with pytest.raises(UnsupportedFormatError, match="No audio frames"):
                load_audio(mp3)


def test_supported_formats_text():
    text = supported_formats_text()
    for name in ("WAV", "MP3", "FLAC", "OGG", "AAC"):
        assert name in text
    assert text.count("OGG") == 1
