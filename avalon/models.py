"""Data models for the Avalon client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from . import remote
from .remote import RemoteValue


class GameStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    GOOD_WON = "GOOD_WON"
    EVIL_WON = "EVIL_WON"


class QuestAttemptStatus(str, Enum):
    PENDING_PROPOSAL = "PENDING_PROPOSAL"
    PENDING_PROPOSAL_VOTES = "PENDING_PROPOSAL_VOTES"
    PROPOSAL_REJECTED = "PROPOSAL_REJECTED"
    PENDING_QUEST_RESULTS = "PENDING_QUEST_RESULTS"
    PASSED = "PASSED"
    FAILED = "FAILED"


class GameAction(str, Enum):
    """Which part of an in-progress game the player is looking at."""
    VIEW_ROLES = "VIEW_ROLES"
    VIEW_PLAYERS = "VIEW_PLAYERS"
    VIEW_QUESTS = "VIEW_QUESTS"


class HomeAction(str, Enum):
    """Which lobby form is shown before a game is entered."""
    JOIN_GAME = "JOIN_GAME"
    CREATE_GAME = "CREATE_GAME"


class Intent(str, Enum):
    NONE = "none"
    PRIMARY = "primary"
    SUCCESS = "success"
    DANGER = "danger"


@dataclass(frozen=True)
class QuestAttempt:
    """One proposal-and-vote cycle within a round."""
    round_number: int
    attempt_number: int
    leader: str
    members: Tuple[str, ...]
    status: QuestAttemptStatus
    votes: Dict[str, Optional[bool]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestAttempt":
        return cls(
            round_number=int(data["roundNumber"]),
            attempt_number=int(data["attemptNumber"]),
            leader=data["leader"],
            members=tuple(data.get("members") or ()),
            status=QuestAttemptStatus(data["status"]),
            votes=dict(data.get("votes") or {}),
        )


@dataclass(frozen=True)
class Game:
    """Authoritative game snapshot as seen by one player."""
    id: str
    status: GameStatus
    creator: str
    my_name: str
    my_id: str
    roles: Dict[str, bool]  # role name -> is on the good side
    players: Tuple[str, ...]
    my_role: Optional[str] = None
    quest_configurations: Optional[Tuple[int, ...]] = None
    quest_attempts: Tuple[QuestAttempt, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        configurations = data.get("questConfigurations")
        return cls(
            id=data["id"],
            status=GameStatus(data["status"]),
            creator=data["creator"],
            my_name=data["myName"],
            my_id=data["myId"],
            roles=dict(data.get("roles") or {}),
            players=tuple(data.get("players") or ()),
            my_role=data.get("myRole"),
            quest_configurations=tuple(configurations) if configurations is not None else None,
            quest_attempts=tuple(QuestAttempt.from_dict(attempt) for attempt in data.get("questAttempts") or ()),
        )


@dataclass(frozen=True)
class PlayerMetadata:
    """Rejoin token: who this client is inside a given game."""
    player_id: str
    player_name: str

    def to_query(self) -> Dict[str, str]:
        return {"playerId": self.player_id, "playerName": self.player_name}


@dataclass(frozen=True)
class GameCredentials:
    """Identity handed back when a game is created or joined."""
    game_id: str
    player_id: str
    player_name: str

    @property
    def metadata(self) -> PlayerMetadata:
        return PlayerMetadata(self.player_id, self.player_name)


@dataclass(frozen=True)
class StartGameRequest:
    roles: Tuple[str, ...]

    def to_json(self) -> Dict[str, Any]:
        return {"roles": list(self.roles)}


@dataclass(frozen=True)
class ProposeQuestRequest:
    proposal: Tuple[str, ...]

    def to_json(self) -> Dict[str, Any]:
        return {"proposal": list(self.proposal)}


@dataclass(frozen=True)
class Toast:
    """A user-facing notification."""
    message: str
    intent: Intent = Intent.DANGER


@dataclass(frozen=True)
class GameState:
    game: RemoteValue = field(default_factory=remote.not_started)
    game_action: GameAction = GameAction.VIEW_QUESTS


@dataclass(frozen=True)
class HomeState:
    home_action: HomeAction = HomeAction.JOIN_GAME
    player_name: RemoteValue = field(default_factory=remote.not_started)
    game_id: RemoteValue = field(default_factory=remote.not_started)


@dataclass(frozen=True)
class ApplicationState:
    game_state: GameState = field(default_factory=GameState)
    home_state: HomeState = field(default_factory=HomeState)
