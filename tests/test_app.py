"""Tests for the player TUI: key bindings and action dispatch."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import Mock

import numpy as np
import pytest

pytest.importorskip("textual")

from apz.app import PLAYER_BINDINGS, PlayerApp
from apz.state import PlaybackState, PlaybackStatus, VisualizationMode
from apz.waveform import WaveformData

CFG = {"seek_step": 5.0, "volume_step": 0.05, "refresh_rate": 30}


def _binding_exists(bindings, key: str, action: str, *, priority: bool | None = None) -> bool:
    for binding in bindings:
        if binding.key == key and binding.action == action:
            if priority is None or bool(binding.priority) == priority:
                return True
    return False


def _app(mode: VisualizationMode = VisualizationMode.SIMPLE_WAVEFORM) -> tuple[PlayerApp, Mock]:
    engine = Mock()
    engine.mode = mode
    engine.waveform.return_value = WaveformData(buckets=(0.0, 0.5, 1.0, 0.5))
    app = PlayerApp(engine, config=CFG)
    app.exit = Mock()
    return app, engine


@pytest.mark.parametrize(
    ("key", "action"),
    [
        ("space", "toggle_play"),
        ("q", "quit_player"),
        ("r", "restart"),
        ("left", "seek_backward"),
        ("right", "seek_forward"),
        ("up", "volume_up"),
        ("down", "volume_down"),
    ],
)
def test_player_keys(key: str, action: str) -> None:
    assert _binding_exists(PLAYER_BINDINGS, key, action)


def test_ctrl_c_quits_with_priority() -> None:
    assert _binding_exists(PLAYER_BINDINGS, "ctrl+c", "quit_player", priority=True)


def test_space_toggles() -> None:
    app, engine = _app()
    app.action_toggle_play()
    engine.toggle.assert_called_once_with()
    app.exit.assert_not_called()


def test_arrows_use_configured_steps() -> None:
    app, engine = _app()
    app.action_seek_forward()
    app.action_seek_backward()
    app.action_volume_up()
    app.action_volume_down()
    assert [c.args for c in engine.seek.call_args_list] == [(5.0,), (-5.0,)]
    assert [c.args for c in engine.adjust_volume.call_args_list] == [(0.05,), (-0.05,)]


def test_restart() -> None:
    app, engine = _app()
    app.action_restart()
    engine.restart.assert_called_once_with()


def test_quit_exits() -> None:
    app, engine = _app()
    app.action_quit_player()
    app.exit.assert_called_once_with()


def test_simple_waveform_is_one_line() -> None:
    app, _ = _app()
    out = app._render_visual(8, 3, 0.5, "cyan")
    assert "\n" not in out
    assert out.startswith("[cyan]")


def test_mirrored_waveform_fills_height() -> None:
    app, _ = _app(VisualizationMode.MIRRORED_WAVEFORM)
    out = app._render_visual(8, 4, 0.5, "cyan")
    assert len(out.split("\n")) == 4


def test_spectrum_advances_analyzer_each_frame() -> None:
    app, engine = _app(VisualizationMode.SPECTRUM)
    engine.analyzer.bars = np.array([0.0, 100.0, 1000.0])
    engine.analyzer.bar_frequencies.return_value = np.array([0.0, 2000.0, 12000.0])
    engine.audio.sample_rate = 44100
    app._render_visual(6, 2, 0.0, "cyan")
    app._render_visual(6, 2, 0.0, "cyan")
    assert engine.analyzer.update.call_count == 2
    engine.waveform.assert_not_called()
    engine.analyzer.bar_frequencies.assert_called_with(44100)


def test_spectrum_reserves_a_row_for_frequency_labels() -> None:
    app, engine = _app(VisualizationMode.SPECTRUM)
    engine.analyzer.bars = np.array([0.0, 1e9, 0.0])
    engine.analyzer.bar_frequencies.return_value = np.array([0.0, 2000.0, 12000.0])
    rows = app._render_visual(30, 4, 0.0, "cyan").split("\n")
    assert len(rows) == 4
    assert "12.0k" in rows[-1]


def _status(finished: bool) -> PlaybackStatus:
    return PlaybackStatus(
        state=PlaybackState.PLAYING,
        position=10.0 if finished else 1.0,
        duration=10.0,
        volume=1.0,
        finished=finished,
    )


def _running_engine(finished: bool) -> Mock:
    engine = Mock()
    engine.mode = VisualizationMode.SIMPLE_WAVEFORM
    engine.filename = "tone.wav"
    engine.waveform.return_value = WaveformData(buckets=(0.2, 0.8, 0.4))
    engine.status.return_value = _status(finished)
    return engine


def test_end_of_track_exits_and_closes_engine(caplog) -> None:
    caplog.set_level(logging.INFO, logger="apz")
    engine = _running_engine(finished=True)
    app = PlayerApp(engine, config=CFG)

    async def run() -> None:
        async with app.run_test():
            pass

    asyncio.run(run())

    assert "Reached end of tone.wav" in caplog.text
    engine.close.assert_called_once_with()


def test_quit_key_closes_engine() -> None:
    engine = _running_engine(finished=False)
    app = PlayerApp(engine, config=CFG)

    async def run() -> None:
        async with app.run_test() as pilot:
            await pilot.press("q")

    asyncio.run(run())

    engine.close.assert_called_once_with()


def test_title_bar_shows_brand() -> None:
    engine = _running_engine(finished=False)
    app = PlayerApp(engine, config=CFG)
    seen: dict[str, str] = {}

    async def run() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            seen["brand"] = str(app.query_one("#brand").render())
            seen["title"] = str(app.query_one("#title").render())

    asyncio.run(run())

    assert seen["brand"] == "apz"
    assert "tone.wav" in seen["title"]
