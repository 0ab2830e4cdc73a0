"""HTTP client for the Avalon game server (create, join, start, state, propose, vote)."""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from .errors import RequestError
from .models import Game, GameCredentials, PlayerMetadata, ProposeQuestRequest, StartGameRequest


logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    text = response.text.strip()
    if text:
        return text[:300]
    return f"Request failed with status {response.status_code}"


class GameApi:
    """Thin async wrapper over the game server's REST endpoints.

    Every failure (connection, HTTP status, undecodable body) surfaces as a
    ``RequestError`` whose message can be shown to the player as-is.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") or API_BASE_URL
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            async with self._client() as c:
                r = await c.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RequestError(f"Could not reach the game server: {e}") from e

        if r.is_error:
            message = _error_message(r)
            logger.warning(f"{method} {path} returned {r.status_code}: {message}")
            raise RequestError(message, r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise RequestError("The game server sent a response that could not be read") from e

    async def create_game(self, user_name: str) -> GameCredentials:
        """POST /api/games. Returns the new game's id and the creator's identity."""
        data = await self._request("POST", "/api/games", json={"playerName": user_name})
        try:
            return GameCredentials(data["gameId"], data["playerId"], user_name)
        except (KeyError, TypeError) as e:
            raise RequestError("The game server did not return a game id") from e

    async def join_game(self, game_id: str, user_name: str) -> PlayerMetadata:
        """POST /api/games/{id}/join. Returns the identity to rejoin with."""
        data = await self._request("POST", f"/api/games/{game_id}/join", json={"playerName": user_name})
        try:
            return PlayerMetadata(data["playerId"], user_name)
        except (KeyError, TypeError) as e:
            raise RequestError("The game server did not return a player id") from e

    async def start_game(self, game_id: str, player_id: str, player_name: str, request: StartGameRequest):
        """POST /api/games/{id}/start with the chosen roles."""
        await self._request(
            "POST",
            f"/api/games/{game_id}/start",
            params={"playerId": player_id, "playerName": player_name},
            json=request.to_json(),
        )

    async def get_game_state(self, game_id: str, player_id: str) -> Game:
        """GET /api/games/{id}?playerId=... Returns the game as this player sees it."""
        data = await self._request("GET", f"/api/games/{game_id}", params={"playerId": player_id})
        try:
            return Game.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise RequestError("The game server sent a game that could not be read") from e

    async def propose_quest(self, game_id: str, player_id: str, player_name: str, request: ProposeQuestRequest):
        """POST /api/games/{id}/propose with the proposed quest members."""
        await self._request(
            "POST",
            f"/api/games/{game_id}/propose",
            params={"playerId": player_id, "playerName": player_name},
            json=request.to_json(),
        )

    async def vote_on_proposal(self, game_id: str, player_id: str, player_name: str, approve: bool):
        """POST /api/games/{id}/vote/proposal."""
        await self._request(
            "POST",
            f"/api/games/{game_id}/vote/proposal",
            params={"playerId": player_id, "playerName": player_name},
            json={"approve": approve},
        )

    async def vote_on_quest(self, game_id: str, player_id: str, player_name: str, passed: bool):
        """POST /api/games/{id}/vote/quest."""
        await self._request(
            "POST",
            f"/api/games/{game_id}/vote/quest",
            params={"playerId": player_id, "playerName": player_name},
            json={"pass": passed},
        )
