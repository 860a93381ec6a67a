"""Textual TUI for playback.

Layout:
┌─────────────────────────────────────────────┐
│  ▶ track.flac                          apz  │
├─────────────────────────────────────────────┤
│  ▁▂▃▅▇▅▃▂▁▂▃▄▅▆▇▆▅▄▃▂▁▂▃▅▇▅▃▂▁             │
│  (spectrum bars over a Hz label row,        │
│   or the mirrored waveform)                 │
├─────────────────────────────────────────────┤
│  Progress  01:23 / 04:56  ██████░░░░░░░░░░  │
│  Volume    80%            ████████████░░░░  │
├─────────────────────────────────────────────┤
│  space play/pause  q quit  r restart ...    │
└─────────────────────────────────────────────┘
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Static

from apz.config import load_config
from apz.controls import ControlAction, apply_action
from apz.render import (
    format_duration,
    render_frequency_axis,
    render_gauge,
    render_mirrored,
    render_sparkline,
    render_spectrum,
    state_color,
    state_symbol,
    volume_color,
)
from apz.state import VisualizationMode

if TYPE_CHECKING:
    from apz.engine import PlaybackEngine

logger = logging.getLogger(__name__)

PLAYER_BINDINGS = [
    Binding("space", "toggle_play", "Play/Pause", key_display="space"),
    Binding("q", "quit_player", "Quit"),
    Binding("ctrl+c", "quit_player", "Quit", show=False, priority=True),
    Binding("r", "restart", "Restart"),
    Binding("left", "seek_backward", "Seek -", key_display="←"),
    Binding("right", "seek_forward", "Seek +", key_display="→"),
    Binding("up", "volume_up", "Vol +", key_display="↑"),
    Binding("down", "volume_down", "Vol -", key_display="↓"),
]

# Label column width for the progress/volume rows.
_LABEL_WIDTH = 24


class PlayerApp(App[None]):
    """Main playback TUI. The engine is created by the caller and closed here."""

    CSS = """
    #title-bar {
        dock: top;
        height: 1;
        background: $accent;
        color: $text;
        padding: 0 1;
    }

    #title {
        width: 1fr;
    }

    #brand {
        width: auto;
        text-style: bold;
    }

    #visual {
        height: 1fr;
        min-height: 3;
        padding: 0 1;
        background: $surface;
    }

    #visual.simple {
        height: 3;
    }

    #gauges {
        height: auto;
        padding: 1 1 0 1;
    }

    #progress, #volume {
        height: 1;
    }
    """

    BINDINGS = PLAYER_BINDINGS

    def __init__(self, engine: PlaybackEngine, config: dict | None = None):
        super().__init__()
        self.engine = engine
        cfg = config if config is not None else load_config()
        self.seek_step = float(cfg.get("seek_step", 5.0))
        self.volume_step = float(cfg.get("volume_step", 0.05))
        self.refresh_rate = max(int(cfg.get("refresh_rate", 30)), 1)

    def compose(self) -> ComposeResult:
        yield Horizontal(
            Static("", id="title"),
            Static("apz", id="brand"),
            id="title-bar",
        )
        visual = Static("", id="visual")
        if self.engine.mode is VisualizationMode.SIMPLE_WAVEFORM:
            visual.add_class("simple")
        yield visual
        yield Vertical(
            Static("", id="progress"),
            Static("", id="volume"),
            id="gauges",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._update_display()
        self.set_interval(1 / self.refresh_rate, self._update_display)

    def on_unmount(self) -> None:
        self.engine.close()

    def _update_display(self) -> None:
        """Redraw from one engine snapshot; exit once the track has finished."""
        status = self.engine.status()
        if status.finished:
            logger.info("Reached end of %s", self.engine.filename)
            self.exit()
            return

        color = state_color(status.state)
        self.query_one("#title", Static).update(
            f"[bold {color}]{state_symbol(status.state)}[/] "
            f"[bold]{escape(self.engine.filename)}[/]"
        )

        visual = self.query_one("#visual", Static)
        width = max((visual.size.width or 0) - 2, 1)
        height = max(visual.size.height or 0, 1)
        progress = status.position / status.duration if status.duration > 0 else 0.0
        visual.update(self._render_visual(width, height, progress, color))

        bar_w = max((self.size.width or 0) - _LABEL_WIDTH - 4, 10)
        position = f"Progress  {format_duration(status.position)} / {format_duration(status.duration)}"
        self.query_one("#progress", Static).update(
            f"{position:<{_LABEL_WIDTH}}[cyan]{render_gauge(progress, bar_w)}[/]"
        )
        vol_pct = f"Volume    {int(round(status.volume * 100))}%"
        self.query_one("#volume", Static).update(
            f"{vol_pct:<{_LABEL_WIDTH}}[{volume_color(status.volume)}]"
            f"{render_gauge(status.volume, bar_w)}[/]"
        )

    def _render_visual(self, width: int, height: int, progress: float, color: str) -> str:
        mode = self.engine.mode
        if mode is VisualizationMode.SPECTRUM and self.engine.analyzer is not None:
            analyzer = self.engine.analyzer
            analyzer.update()
            if height < 2:
                return render_spectrum(analyzer.bars, width, height, color=color)
            freqs = analyzer.bar_frequencies(self.engine.audio.sample_rate)
            bars = render_spectrum(analyzer.bars, width, height - 1, color=color)
            return f"{bars}\n[dim]{render_frequency_axis(freqs, width)}[/]"
        waveform = self.engine.waveform()
        levels = waveform.resample(width)
        if mode is VisualizationMode.MIRRORED_WAVEFORM:
            return render_mirrored(levels, width, height, progress, color=color)
        return f"[{color}]{render_sparkline(levels, width)}[/]"

    def _apply(self, action: ControlAction, amount: float = 0.0) -> None:
        if not apply_action(self.engine, action, amount):
            self.exit()

    def action_toggle_play(self) -> None:
        self._apply(ControlAction.TOGGLE_PLAY)

    def action_quit_player(self) -> None:
        self._apply(ControlAction.QUIT)

    def action_restart(self) -> None:
        self._apply(ControlAction.RESTART)

    def action_seek_forward(self) -> None:
        self._apply(ControlAction.SEEK_FORWARD, self.seek_step)

    def action_seek_backward(self) -> None:
        self._apply(ControlAction.SEEK_BACKWARD, self.seek_step)

    def action_volume_up(self) -> None:
        self._apply(ControlAction.VOLUME_UP, self.volume_step)

    def action_volume_down(self) -> None:
        self._apply(ControlAction.VOLUME_DOWN, self.volume_step)
