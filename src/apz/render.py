"""Text rendering for the player screen.

Everything here turns numbers into strings of Unicode block characters with
Rich markup, so the Textual widgets only have to call ``update()``.
"""

from __future__ import annotations

import math
from typing import Sequence

from apz.state import PlaybackState
from apz.waveform import fit_levels

BLOCKS = " ▁▂▃▄▅▆▇█"
FULL = "█"
CENTER_LINE = "─"

# Raw bar magnitude that fills the full height (log scaled below it).
SPECTRUM_CEILING = 512.0


def state_color(state: PlaybackState) -> str:
    if state is PlaybackState.PLAYING:
        return "cyan"
    if state is PlaybackState.PAUSED:
        return "yellow"
    return "grey50"


def state_symbol(state: PlaybackState) -> str:
    if state is PlaybackState.PLAYING:
        return "▶"
    if state is PlaybackState.PAUSED:
        return "⏸"
    return "■"


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS (minutes keep growing past 59)."""
    secs = max(int(seconds), 0)
    mins, secs = divmod(secs, 60)
    return f"{mins:02d}:{secs:02d}"


def render_sparkline(levels: Sequence[float], width: int) -> str:
    """One-line waveform of 0.0-1.0 *levels* using eighth-block characters."""
    chars = []
    for level in fit_levels(levels, width):
        level = min(max(level, 0.0), 1.0)
        chars.append(BLOCKS[int(level * (len(BLOCKS) - 1))])
    return "".join(chars)


def render_mirrored(
    levels: Sequence[float],
    width: int,
    height: int,
    progress: float,
    color: str = "cyan",
) -> str:
    """Two-sided waveform around a centre line; played columns are coloured."""
    if width <= 0 or height <= 0:
        return ""
    data = fit_levels(levels, width)
    center = height // 2
    cursor = int(min(max(progress, 0.0), 1.0) * width)
    rows: list[list[str]] = [[" "] * width for _ in range(height)]

    for x, amplitude in enumerate(data):
        bar = min(int(amplitude * center), center)
        for y in range(bar):
            rows[center - y - 1][x] = FULL
            if center + y < height:
                rows[center + y][x] = FULL
    if center < height:
        rows[center] = [FULL if c == FULL else CENTER_LINE for c in rows[center]]

    lines = []
    for row in rows:
        played = "".join(row[:cursor + 1])
        rest = "".join(row[cursor + 1:])
        lines.append(f"[{color}]{played}[/][grey37]{rest}[/]")
    return "\n".join(lines)


def spectrum_level(amplitude: float, ceiling: float = SPECTRUM_CEILING) -> float:
    """Map a raw bar magnitude onto 0.0-1.0 with log compression."""
    if amplitude <= 0.0:
        return 0.0
    return min(math.log1p(amplitude) / math.log1p(ceiling), 1.0)


def _bar_color(index: int, count: int, intensity: float, base: str) -> str:
    if intensity > 0.8:
        return "red"
    if intensity > 0.5:
        hue = index / count
        if hue < 0.33:
            return "magenta"
        if hue < 0.66:
            return base
        return "green"
    return base


def render_spectrum(
    bars: Sequence[float],
    width: int,
    height: int,
    color: str = "cyan",
    ceiling: float = SPECTRUM_CEILING,
) -> str:
    """Vertical bars, one column group per bar, bottom-aligned."""
    count = len(bars)
    if width <= 0 or height <= 0 or count == 0:
        return ""
    bar_width = max(width // count, 1)
    heights = [spectrum_level(b, ceiling) * height for b in bars]

    lines = []
    for row in range(height):
        level_from_bottom = height - row - 1
        cells = []
        for i, h in enumerate(heights):
            if i * bar_width >= width:
                break
            filled = h - level_from_bottom
            if filled >= 1.0:
                glyph = FULL
            elif filled > 0.0:
                glyph = BLOCKS[int(filled * (len(BLOCKS) - 1))]
            else:
                glyph = " "
            if glyph == " ":
                cells.append(" " * bar_width)
            else:
                tint = _bar_color(i, count, level_from_bottom / max(h, 1.0), color)
                cells.append(f"[{tint}]{glyph * bar_width}[/]")
        lines.append("".join(cells))
    return "\n".join(lines)


def format_frequency(hz: float) -> str:
    if hz >= 1000.0:
        return f"{hz / 1000.0:.1f}k"
    return f"{int(hz)}"


def render_frequency_axis(frequencies: Sequence[float], width: int) -> str:
    """Label row under the spectrum: a few bar frequencies at their columns."""
    count = len(frequencies)
    if width <= 0 or count == 0:
        return ""
    bar_width = max(width // count, 1)
    row = [" "] * width
    free_from = 0
    for i in sorted({0, count // 4, count // 2, (3 * count) // 4, count - 1}):
        label = format_frequency(frequencies[i])
        col = min(i * bar_width, width - len(label))
        if col < free_from or col < 0:
            continue
        row[col:col + len(label)] = label
        free_from = col + len(label) + 1
    return "".join(row)


def render_gauge(ratio: float, width: int) -> str:
    """Horizontal fill bar for progress and volume."""
    if width <= 0:
        return ""
    ratio = min(max(ratio, 0.0), 1.0)
    filled = int(round(ratio * width))
    return FULL * filled + "░" * (width - filled)


def volume_color(volume: float) -> str:
    if volume > 0.7:
        return "green"
    if volume > 0.3:
        return "yellow"
    return "red"
