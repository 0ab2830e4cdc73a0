"""Events dispatched into the application store."""

from dataclasses import dataclass
from typing import Any, Tuple

from .models import GameAction, HomeAction, Intent, Toast


@dataclass(frozen=True)
class AsyncStarted:
    family: str


@dataclass(frozen=True)
class AsyncSucceeded:
    family: str
    value: Any


@dataclass(frozen=True)
class AsyncFailed:
    family: str
    error: Any


class AsyncActionFamily:
    """Names one logical async operation and builds its three events."""

    def __init__(self, name: str):
        self.name = name

    def started(self) -> AsyncStarted:
        return AsyncStarted(self.name)

    def succeeded(self, value: Any) -> AsyncSucceeded:
        return AsyncSucceeded(self.name, value)

    def failed(self, error: Any) -> AsyncFailed:
        return AsyncFailed(self.name, error)

    def owns(self, event: Any) -> bool:
        return isinstance(event, (AsyncStarted, AsyncSucceeded, AsyncFailed)) and event.family == self.name

    def __repr__(self):
        return f"AsyncActionFamily({self.name!r})"


SET_GAME = AsyncActionFamily("SetGame")
SET_PLAYER_NAME = AsyncActionFamily("SetPlayerName")
SET_GAME_ID = AsyncActionFamily("SetGameId")


@dataclass(frozen=True)
class SetGameAction:
    game_action: GameAction


@dataclass(frozen=True)
class SetHomeAction:
    home_action: HomeAction


@dataclass(frozen=True)
class ClearGame:
    pass


@dataclass(frozen=True)
class ClearHomeState:
    pass


@dataclass(frozen=True)
class CreateToast:
    toast: Toast

    @classmethod
    def failure(cls, message: str) -> "CreateToast":
        return cls(Toast(message, Intent.DANGER))


@dataclass(frozen=True)
class CompoundAction:
    """Several events applied as a single state transition."""
    events: Tuple[Any, ...]


def flatten(event: Any) -> Tuple[Any, ...]:
    """Expand nested compound actions into their leaf events, in order."""
    if isinstance(event, CompoundAction):
        leaves = ()
        for child in event.events:
            leaves += flatten(child)
        return leaves
    return (event,)
