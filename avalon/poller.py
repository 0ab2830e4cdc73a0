"""Keeps one game's state in sync with the server while a session view is open."""

import logging

from discord.ext import tasks

from .actions import ClearGame
from .config import REFRESH_GAME_STATE_INTERVAL_MS
from .service import GameService


logger = logging.getLogger(__name__)


class GamePoller:
    """Polls the game on a fixed cadence.

    The loop awaits each fetch before sleeping, so a slow fetch delays the next
    tick instead of overlapping it. The first failed fetch disarms the loop;
    only a fresh ``activate()`` starts polling again.
    """

    def __init__(
        self,
        game_service: GameService,
        game_id: str,
        player_id: str,
        interval_ms: int = REFRESH_GAME_STATE_INTERVAL_MS,
    ):
        self.game_service = game_service
        self.game_id = game_id
        self.player_id = player_id
        self.interval_ms = interval_ms
        self.ticks = 0
        self._armed = False
        self._loop = tasks.loop(seconds=interval_ms / 1000, reconnect=False)(self._tick)
        self._loop.error(self._on_loop_error)

    @property
    def armed(self) -> bool:
        return self._armed

    def activate(self):
        """Show the game as loading and start polling."""
        if self._armed:
            return
        logger.info(f"Polling game {self.game_id} every {self.interval_ms}ms")
        self.game_service.begin_game_sync()
        self._armed = True
        if self._loop.is_running():
            self._loop.restart()
        else:
            self._loop.start()

    def deactivate(self):
        """Stop polling and drop the synchronized game. Safe to call repeatedly."""
        self._disarm(graceful=False)
        self.game_service.store.dispatch(ClearGame())

    def is_running(self) -> bool:
        return self._loop.is_running()

    def _disarm(self, graceful: bool):
        if not self._armed:
            return
        self._armed = False
        if graceful:
            # Called from inside a tick: let the current iteration finish
            self._loop.stop()
        else:
            self._loop.cancel()
        logger.info(f"Stopped polling game {self.game_id} after {self.ticks} tick(s)")

    async def _tick(self):
        if not self._armed:
            return
        self.ticks += 1
        succeeded = await self.game_service.get_game_state(self.game_id, self.player_id)
        if not succeeded:
            self._disarm(graceful=True)

    async def _on_loop_error(self, error: Exception):
        logger.error(f"Unexpected error while polling game {self.game_id}: {error}", exc_info=error)
        self._armed = False
