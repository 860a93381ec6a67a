"""Player actions and their mapping onto engine operations."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apz.engine import PlaybackEngine

logger = logging.getLogger(__name__)


class ControlAction(enum.Enum):
    QUIT = "quit"
    TOGGLE_PLAY = "toggle_play"
    RESTART = "restart"
    SEEK_FORWARD = "seek_forward"
    SEEK_BACKWARD = "seek_backward"
    VOLUME_UP = "volume_up"
    VOLUME_DOWN = "volume_down"
    CONTINUE = "continue"


def apply_action(engine: PlaybackEngine, action: ControlAction, amount: float = 0.0) -> bool:
    """Run *action* against *engine*. Returns False when the player should exit.

    *amount* is the seek step in seconds or the volume step, depending on the
    action; its sign is ignored.
    """
    step = abs(amount)
    logger.debug("Action %s step=%g", action.value, step)
    if action is ControlAction.QUIT:
        return False
    if action is ControlAction.TOGGLE_PLAY:
        engine.toggle()
    elif action is ControlAction.RESTART:
        engine.restart()
    elif action is ControlAction.SEEK_FORWARD:
        engine.seek(step)
    elif action is ControlAction.SEEK_BACKWARD:
        engine.seek(-step)
    elif action is ControlAction.VOLUME_UP:
        engine.adjust_volume(step)
    elif action is ControlAction.VOLUME_DOWN:
        engine.adjust_volume(-step)
    return True
