"""Shared builders and fakes for the Avalon client tests."""

import asyncio

import pytest

from avalon.errors import RequestError
from avalon.models import Game, GameCredentials, GameStatus, PlayerMetadata, QuestAttempt, QuestAttemptStatus
from avalon.notifications import NotificationSink

PLAYERS = ("Arthur", "Merlin", "Percival", "Morgana", "Assassin")


def make_attempt(round_number=1, attempt_number=1, status=QuestAttemptStatus.PENDING_PROPOSAL_VOTES,
                 leader="Arthur", members=("Arthur", "Merlin"), votes=None):
    return QuestAttempt(
        round_number=round_number,
        attempt_number=attempt_number,
        leader=leader,
        members=tuple(members),
        status=status,
        votes=dict(votes or {}),
    )


def make_game(attempts=(), status=GameStatus.IN_PROGRESS, my_name="Merlin", my_role="Merlin",
              roles=None, configurations=(2, 3, 2, 3, 3), creator="Arthur", game_id="avalon"):
    return Game(
        id=game_id,
        status=status,
        creator=creator,
        my_name=my_name,
        my_id=f"{my_name.lower()}-id",
        roles=dict(roles if roles is not None else {"Merlin": True, "Assassin": False}),
        players=PLAYERS,
        my_role=my_role,
        quest_configurations=tuple(configurations) if configurations is not None else None,
        quest_attempts=tuple(attempts),
    )


class RecordingSink(NotificationSink):
    """Keeps every toast it is handed."""

    def __init__(self):
        self.toasts = []

    async def notify(self, toast):
        self.toasts.append(toast)


class FakeApi:
    """Stand-in for ``GameApi`` with scripted game-state responses.

    ``outcomes`` holds one entry per ``get_game_state`` call: a ``Game`` is
    returned, an exception is raised. Once exhausted the last entry repeats.
    """

    def __init__(self, outcomes=None, fetch_delay=0.0):
        self.outcomes = list(outcomes or [make_game()])
        self.fetch_delay = fetch_delay
        self.state_calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = []

    async def get_game_state(self, game_id, player_id):
        self.state_calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.fetch_delay:
                await asyncio.sleep(self.fetch_delay)
            outcome = self.outcomes[min(self.state_calls, len(self.outcomes)) - 1]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1

    async def create_game(self, user_name):
        self.calls.append(("create_game", user_name))
        return GameCredentials("avalon", "p-1", user_name)

    async def join_game(self, game_id, user_name):
        self.calls.append(("join_game", game_id, user_name))
        if game_id == "missing":
            raise RequestError("Game missing does not exist", 404)
        return PlayerMetadata("p-2", user_name)

    async def start_game(self, game_id, player_id, player_name, request):
        self.calls.append(("start_game", game_id, request.roles))

    async def propose_quest(self, game_id, player_id, player_name, request):
        self.calls.append(("propose_quest", game_id, request.proposal))

    async def vote_on_proposal(self, game_id, player_id, player_name, approve):
        self.calls.append(("vote_on_proposal", player_name, approve))

    async def vote_on_quest(self, game_id, player_id, player_name, passed):
        self.calls.append(("vote_on_quest", player_name, passed))


async def wait_until(predicate, timeout=2.0):
    """Yield to the event loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def sink():
    return RecordingSink()
