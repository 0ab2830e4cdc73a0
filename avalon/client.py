"""One player's client: store, services, notifications and game poller."""

import logging
from typing import Optional

from .api import GameApi
from .config import REFRESH_GAME_STATE_INTERVAL_MS
from .models import PlayerMetadata
from .notifications import NotificationManager, NotificationSink
from .poller import GamePoller
from .service import GameService, StateService
from .store import Store


logger = logging.getLogger(__name__)


class AvalonClient:
    """Owns the state of a single player and the lifetime of its game view."""

    def __init__(
        self,
        api: GameApi,
        sink: NotificationSink,
        interval_ms: int = REFRESH_GAME_STATE_INTERVAL_MS,
    ):
        self.store = Store()
        self.game_service = GameService(self.store, api)
        self.state_service = StateService(self.store)
        self.notifications = NotificationManager(sink)
        self.notifications.attach(self.store)
        self.interval_ms = interval_ms
        self.poller: Optional[GamePoller] = None
        self.game_id: Optional[str] = None
        self.metadata: Optional[PlayerMetadata] = None

    @property
    def in_game(self) -> bool:
        return self.game_id is not None

    def open_game(self, game_id: str, metadata: PlayerMetadata):
        """Mount the game view: start synchronizing ``game_id`` as ``metadata``."""
        self.close_game()
        self.game_id = game_id
        self.metadata = metadata
        self.poller = GamePoller(self.game_service, game_id, metadata.player_id, self.interval_ms)
        self.poller.activate()

    def resume_polling(self) -> bool:
        """Re-arm polling after it stopped on a failed fetch."""
        if self.poller is None or self.poller.armed:
            return False
        self.poller.activate()
        return True

    def close_game(self):
        """Unmount the game view: stop polling and forget the game."""
        if self.poller is not None:
            self.poller.deactivate()
            logger.info(f"Closed game {self.game_id}")
        self.poller = None
        self.game_id = None
        self.metadata = None

    def shutdown(self):
        self.close_game()
        self.notifications.detach()
