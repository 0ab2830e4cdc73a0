"""Orchestration between player intent, the game server and the store."""

import logging
from typing import Optional, Set, Tuple

from . import quests, remote
from .actions import (
    SET_GAME,
    SET_GAME_ID,
    SET_PLAYER_NAME,
    ClearGame,
    ClearHomeState,
    CreateToast,
    SetGameAction,
    SetHomeAction,
)
from .api import GameApi
from .errors import RequestError
from .models import (
    Game,
    GameAction,
    GameCredentials,
    HomeAction,
    PlayerMetadata,
    ProposeQuestRequest,
    StartGameRequest,
)
from .store import Store


logger = logging.getLogger(__name__)


class GameService:
    """Issues remote calls and turns their outcome into store events.

    A ``RequestError`` never escapes: it becomes a failure toast and the call
    reports ``None``/``False`` to its caller.
    """

    def __init__(self, store: Store, api: GameApi):
        self.store = store
        self.api = api
        # (game id, round, attempt, phase) of every vote sent or in flight
        self._votes_cast: Set[Tuple[str, int, int, str]] = set()

    def _fail(self, action: str, error: RequestError):
        logger.warning(f"{action} failed: {error.message}")
        self.store.dispatch(CreateToast.failure(error.message))

    async def create_game(self, user_name: str) -> Optional[GameCredentials]:
        try:
            credentials = await self.api.create_game(user_name)
        except RequestError as e:
            self._fail("Create game", e)
            return None
        logger.info(f"Created game {credentials.game_id} for {user_name}")
        self.store.dispatch(SET_GAME_ID.succeeded(credentials.game_id))
        return credentials

    async def join_game(self, game_id: str, user_name: str) -> Optional[PlayerMetadata]:
        try:
            metadata = await self.api.join_game(game_id, user_name)
        except RequestError as e:
            self._fail("Join game", e)
            return None
        logger.info(f"{user_name} joined game {game_id}")
        return metadata

    async def start_game(self, game_id: str, player_id: str, player_name: str, request: StartGameRequest) -> bool:
        try:
            await self.api.start_game(game_id, player_id, player_name, request)
        except RequestError as e:
            self._fail("Start game", e)
            return False
        return True

    def begin_game_sync(self):
        """Show the game as loading until the first fetch settles."""
        self.store.dispatch(SET_GAME.started())

    async def get_game_state(self, game_id: str, player_id: str) -> bool:
        try:
            game = await self.api.get_game_state(game_id, player_id)
        except RequestError as e:
            logger.warning(f"Fetching game {game_id} failed: {e.message}")
            self.store.dispatch_all(SET_GAME.failed(e.message), CreateToast.failure(e.message))
            return False
        self.store.dispatch(SET_GAME.succeeded(game))
        return True

    async def propose_quest(
        self,
        game_id: str,
        player_id: str,
        player_name: str,
        request: ProposeQuestRequest,
    ) -> bool:
        try:
            await self.api.propose_quest(game_id, player_id, player_name, request)
        except RequestError as e:
            self._fail("Propose quest", e)
            return False
        return True

    def _claim_vote(self, game_id: str, game: Game) -> Optional[Tuple[str, int, int, str]]:
        """Reserve the current attempt's vote; ``None`` if one was already sent.

        The polled game only shows a vote once the next fetch lands, so votes
        sent from this client are remembered until then.
        """
        attempt = quests.current_attempt(game)
        key = (game_id, attempt.round_number, attempt.attempt_number, attempt.status.value)
        if key in self._votes_cast:
            return None
        self._votes_cast.add(key)
        return key

    async def vote_on_proposal(self, game_id: str, player_id: str, player_name: str, approve: bool) -> bool:
        game = remote.get_or_default(self.store.state.game_state.game, None)
        if game is None or not quests.can_vote_on_proposal(game):
            logger.info(f"Ignoring proposal vote from {player_name}: no vote is open for them")
            return False
        key = self._claim_vote(game_id, game)
        if key is None:
            logger.info(f"Ignoring proposal vote from {player_name}: already sent for this attempt")
            return False
        try:
            await self.api.vote_on_proposal(game_id, player_id, player_name, approve)
        except RequestError as e:
            self._votes_cast.discard(key)
            self._fail("Proposal vote", e)
            return False
        return True

    async def vote_on_quest(self, game_id: str, player_id: str, player_name: str, vote: quests.QuestVote) -> bool:
        game = remote.get_or_default(self.store.state.game_state.game, None)
        if game is None or vote not in quests.quest_vote_options(game):
            logger.info(f"Ignoring quest vote {vote.value} from {player_name}: option not offered")
            return False
        key = self._claim_vote(game_id, game)
        if key is None:
            logger.info(f"Ignoring quest vote from {player_name}: already sent for this attempt")
            return False
        try:
            await self.api.vote_on_quest(game_id, player_id, player_name, vote is quests.QuestVote.PASS)
        except RequestError as e:
            self._votes_cast.discard(key)
            self._fail("Quest vote", e)
            return False
        return True


class StateService:
    """Local-only state changes requested by the presentation layer."""

    def __init__(self, store: Store):
        self.store = store

    def set_game_action(self, game_action: GameAction):
        self.store.dispatch(SetGameAction(game_action))

    def set_home_action(self, home_action: HomeAction):
        self.store.dispatch(SetHomeAction(home_action))

    def set_player_name(self, player_name: str):
        self.store.dispatch(SET_PLAYER_NAME.succeeded(player_name))

    def set_game_id(self, game_id: str):
        self.store.dispatch(SET_GAME_ID.succeeded(game_id))

    def clear_game(self):
        self.store.dispatch(ClearGame())

    def clear_home_state(self):
        self.store.dispatch(ClearHomeState())

    def show_fail_toast(self, message: str):
        self.store.dispatch(CreateToast.failure(message))
