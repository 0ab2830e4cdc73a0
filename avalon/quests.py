"""Read-only queries over a synchronized game.

Everything the presentation layer decides (which prompt to show, which votes to
offer, how the round history looks) is derived here from a ``Game`` snapshot.
Nothing in this module talks to the server or mutates state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from . import remote
from .errors import unreachable
from .models import Game, GameAction, GameState, GameStatus, Intent, QuestAttempt, QuestAttemptStatus


STRINGS = {
    "AVALON": "Avalon",
    "WAITING_FOR_GAME_START_TITLE": "Waiting for game to start",
    "WAITING_FOR_PROPOSAL_VOTES_TITLE": "Waiting for players to vote on proposal",
    "PROPOSAL_REJECTED_TITLE": "Proposal rejected",
    "WAITING_FOR_QUEST_RESULTS_TITLE": "Waiting for quest results",
    "QUEST_PASSED_TITLE": "Quest passed",
    "QUEST_FAILED_TITLE": "Quest failed",
    "VIEW_ROLES_TITLE": "View roles",
    "VIEW_PLAYERS_TITLE": "View players",
}


class QuestPrompt(str, Enum):
    """What the current attempt asks of this player."""
    AWAITING_PROPOSAL = "AWAITING_PROPOSAL"
    PROPOSE_QUEST = "PROPOSE_QUEST"
    PROPOSAL_VOTE = "PROPOSAL_VOTE"
    WAITING_FOR_OTHER_VOTES = "WAITING_FOR_OTHER_VOTES"
    PROPOSAL_REJECTED = "PROPOSAL_REJECTED"
    QUEST_VOTE = "QUEST_VOTE"
    WAITING_FOR_QUEST_RESULTS = "WAITING_FOR_QUEST_RESULTS"
    QUEST_DONE = "QUEST_DONE"


class QuestVote(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True)
class RoundMarker:
    """One entry of the round history strip."""
    round_number: int
    size: int
    filled: bool
    intent: Intent


def current_attempt(game: Game) -> Optional[QuestAttempt]:
    """The attempt everyone is acting on, i.e. the last one received."""
    if not game.quest_attempts:
        return None
    return game.quest_attempts[-1]


def pending_proposal_text(game: Game) -> str:
    return f"Waiting for {game.creator} to start the game"


def has_voted(game: Game, attempt: QuestAttempt) -> bool:
    return game.my_name in attempt.votes


def can_vote_on_proposal(game: Game) -> bool:
    attempt = current_attempt(game)
    return (
        attempt is not None
        and attempt.status is QuestAttemptStatus.PENDING_PROPOSAL_VOTES
        and not has_voted(game, attempt)
    )


def can_vote_on_quest(game: Game) -> bool:
    attempt = current_attempt(game)
    return (
        attempt is not None
        and attempt.status is QuestAttemptStatus.PENDING_QUEST_RESULTS
        and not has_voted(game, attempt)
    )


def is_on_good_side(game: Game) -> Optional[bool]:
    """Side of this player's role, or ``None`` before roles are dealt."""
    if game.my_role is None or game.my_role not in game.roles:
        return None
    return bool(game.roles[game.my_role])


def can_fail_quest(game: Game) -> bool:
    # Only roles whose good bit is false may sabotage
    return can_vote_on_quest(game) and is_on_good_side(game) is False


def quest_vote_options(game: Game) -> Tuple[QuestVote, ...]:
    if not can_vote_on_quest(game):
        return ()
    if can_fail_quest(game):
        return (QuestVote.PASS, QuestVote.FAIL)
    return (QuestVote.PASS,)


def intent_for_status(status: QuestAttemptStatus) -> Intent:
    if status in (
        QuestAttemptStatus.PENDING_PROPOSAL,
        QuestAttemptStatus.PENDING_PROPOSAL_VOTES,
        QuestAttemptStatus.PROPOSAL_REJECTED,
        QuestAttemptStatus.PENDING_QUEST_RESULTS,
    ):
        return Intent.PRIMARY
    if status is QuestAttemptStatus.PASSED:
        return Intent.SUCCESS
    if status is QuestAttemptStatus.FAILED:
        return Intent.DANGER
    unreachable(status)


def latest_attempt_for_round(attempts: Iterable[QuestAttempt], round_number: int) -> Optional[QuestAttempt]:
    relevant = [attempt for attempt in attempts if attempt.round_number == round_number]
    if not relevant:
        return None
    return max(relevant, key=lambda attempt: attempt.attempt_number)


def round_history(game: Game) -> Optional[Tuple[RoundMarker, ...]]:
    """Markers for every configured round, ``None`` while rounds are not configured."""
    if game.quest_configurations is None:
        return None
    markers = []
    for idx, size in enumerate(game.quest_configurations):
        round_number = idx + 1
        attempt = latest_attempt_for_round(game.quest_attempts, round_number)
        if attempt is None:
            markers.append(RoundMarker(round_number, size, False, Intent.NONE))
        else:
            markers.append(RoundMarker(round_number, size, True, intent_for_status(attempt.status)))
    return tuple(markers)


def quest_size(game: Game, round_number: int) -> Optional[int]:
    if game.quest_configurations is None or not 1 <= round_number <= len(game.quest_configurations):
        return None
    return game.quest_configurations[round_number - 1]


def current_quest_prompt(game: Game) -> QuestPrompt:
    attempt = current_attempt(game)
    if attempt is None:
        return QuestPrompt.AWAITING_PROPOSAL

    status = attempt.status
    if status is QuestAttemptStatus.PENDING_PROPOSAL:
        if attempt.leader == game.my_name:
            return QuestPrompt.PROPOSE_QUEST
        return QuestPrompt.AWAITING_PROPOSAL
    if status is QuestAttemptStatus.PENDING_PROPOSAL_VOTES:
        return QuestPrompt.WAITING_FOR_OTHER_VOTES if has_voted(game, attempt) else QuestPrompt.PROPOSAL_VOTE
    if status is QuestAttemptStatus.PROPOSAL_REJECTED:
        return QuestPrompt.PROPOSAL_REJECTED
    if status is QuestAttemptStatus.PENDING_QUEST_RESULTS:
        return QuestPrompt.WAITING_FOR_QUEST_RESULTS if has_voted(game, attempt) else QuestPrompt.QUEST_VOTE
    if status in (QuestAttemptStatus.PASSED, QuestAttemptStatus.FAILED):
        return QuestPrompt.QUEST_DONE
    unreachable(status)


def outcome_text(attempt: QuestAttempt) -> Optional[str]:
    """Display line for an attempt that reached a terminal status."""
    if attempt.status is QuestAttemptStatus.PROPOSAL_REJECTED:
        return f"Quest {attempt.round_number} proposal {attempt.attempt_number} was rejected."
    if attempt.status in (QuestAttemptStatus.PASSED, QuestAttemptStatus.FAILED):
        return f"Quest number {attempt.round_number} {attempt.status.value.lower()}!"
    return None


def can_propose_quest(game: Game, members: Iterable[str]) -> bool:
    """Whether this player may submit ``members`` for the current attempt."""
    members = tuple(members)
    attempt = current_attempt(game)
    if game.status is not GameStatus.IN_PROGRESS or attempt is None:
        return False
    if attempt.status is not QuestAttemptStatus.PENDING_PROPOSAL or attempt.leader != game.my_name:
        return False
    if len(set(members)) != len(members) or not set(members) <= set(game.players):
        return False
    return len(members) == quest_size(game, attempt.round_number)


def shows_navigation(game: Game) -> bool:
    return game.status is GameStatus.IN_PROGRESS


def title_for_attempt(attempt: QuestAttempt) -> str:
    status = attempt.status
    if status is QuestAttemptStatus.PENDING_PROPOSAL:
        return STRINGS["WAITING_FOR_GAME_START_TITLE"]
    if status is QuestAttemptStatus.PENDING_PROPOSAL_VOTES:
        return STRINGS["WAITING_FOR_PROPOSAL_VOTES_TITLE"]
    if status is QuestAttemptStatus.PROPOSAL_REJECTED:
        return STRINGS["PROPOSAL_REJECTED_TITLE"]
    if status is QuestAttemptStatus.PENDING_QUEST_RESULTS:
        return STRINGS["WAITING_FOR_QUEST_RESULTS_TITLE"]
    if status is QuestAttemptStatus.PASSED:
        return STRINGS["QUEST_PASSED_TITLE"]
    if status is QuestAttemptStatus.FAILED:
        return STRINGS["QUEST_FAILED_TITLE"]
    unreachable(status)


def document_title(game_state: GameState) -> str:
    action = game_state.game_action
    if action is GameAction.VIEW_ROLES:
        return STRINGS["VIEW_ROLES_TITLE"]
    if action is GameAction.VIEW_PLAYERS:
        return STRINGS["VIEW_PLAYERS_TITLE"]
    if action is GameAction.VIEW_QUESTS:
        game = remote.get_or_default(game_state.game, None)
        attempt = current_attempt(game) if game is not None else None
        if attempt is None:
            return STRINGS["AVALON"]
        return title_for_attempt(attempt)
    unreachable(action)
