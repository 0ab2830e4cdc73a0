"""Tests for the quest-attempt queries the presentation layer relies on."""

import pytest

from avalon import quests, remote
from avalon.models import GameAction, GameState, GameStatus, Intent, QuestAttemptStatus
from avalon.quests import QuestPrompt, QuestVote

from conftest import make_attempt, make_game


def test_no_attempt_means_waiting_for_creator():
    game = make_game(attempts=())
    assert quests.current_attempt(game) is None
    assert quests.current_quest_prompt(game) is QuestPrompt.AWAITING_PROPOSAL
    assert quests.pending_proposal_text(game) == "Waiting for Arthur to start the game"


def test_current_attempt_is_the_last_one():
    first = make_attempt(status=QuestAttemptStatus.PROPOSAL_REJECTED)
    second = make_attempt(attempt_number=2)
    assert quests.current_attempt(make_game(attempts=(first, second))) is second


def test_proposal_vote_flips_to_waiting_once_recorded():
    open_vote = make_game(attempts=(make_attempt(votes={}),))
    assert quests.can_vote_on_proposal(open_vote)
    assert quests.current_quest_prompt(open_vote) is QuestPrompt.PROPOSAL_VOTE

    voted = make_game(attempts=(make_attempt(votes={"Merlin": True}),))
    assert not quests.can_vote_on_proposal(voted)
    assert quests.current_quest_prompt(voted) is QuestPrompt.WAITING_FOR_OTHER_VOTES


def test_vote_key_presence_counts_even_for_falsy_votes():
    game = make_game(attempts=(make_attempt(votes={"Merlin": False}),))
    assert not quests.can_vote_on_proposal(game)

    hidden = make_game(attempts=(make_attempt(status=QuestAttemptStatus.PENDING_QUEST_RESULTS,
                                              votes={"Merlin": None}),))
    assert not quests.can_vote_on_quest(hidden)


def test_evil_role_may_fail_quest():
    attempt = make_attempt(status=QuestAttemptStatus.PENDING_QUEST_RESULTS, votes={})
    game = make_game(attempts=(attempt,), my_name="Assassin", my_role="Assassin", roles={"Assassin": False})

    assert quests.can_vote_on_quest(game)
    assert quests.can_fail_quest(game)
    assert quests.quest_vote_options(game) == (QuestVote.PASS, QuestVote.FAIL)


def test_good_role_may_only_pass():
    attempt = make_attempt(status=QuestAttemptStatus.PENDING_QUEST_RESULTS, votes={})
    game = make_game(attempts=(attempt,), my_role="Merlin", roles={"Merlin": True})

    assert not quests.can_fail_quest(game)
    assert quests.quest_vote_options(game) == (QuestVote.PASS,)


def test_missing_role_never_offers_fail():
    attempt = make_attempt(status=QuestAttemptStatus.PENDING_QUEST_RESULTS, votes={})
    game = make_game(attempts=(attempt,), my_role=None)
    assert quests.quest_vote_options(game) == (QuestVote.PASS,)


def test_quest_vote_closes_after_voting():
    attempt = make_attempt(status=QuestAttemptStatus.PENDING_QUEST_RESULTS, votes={"Assassin": None})
    game = make_game(attempts=(attempt,), my_name="Assassin", my_role="Assassin", roles={"Assassin": False})

    assert quests.quest_vote_options(game) == ()
    assert quests.current_quest_prompt(game) is QuestPrompt.WAITING_FOR_QUEST_RESULTS


def test_round_history_marks_played_rounds():
    game = make_game(attempts=(make_attempt(status=QuestAttemptStatus.PASSED),))
    markers = quests.round_history(game)

    assert [m.size for m in markers] == [2, 3, 2, 3, 3]
    assert markers[0].filled and markers[0].intent is Intent.SUCCESS
    assert all(not m.filled and m.intent is Intent.NONE for m in markers[1:])


def test_round_history_uses_highest_attempt_number():
    attempts = (
        make_attempt(round_number=1, attempt_number=1, status=QuestAttemptStatus.PASSED),
        make_attempt(round_number=2, attempt_number=2, status=QuestAttemptStatus.FAILED),
        make_attempt(round_number=2, attempt_number=1, status=QuestAttemptStatus.PROPOSAL_REJECTED),
    )
    markers = quests.round_history(make_game(attempts=attempts))
    assert markers[1].intent is Intent.DANGER


def test_round_history_absent_without_configuration():
    assert quests.round_history(make_game(configurations=None)) is None


def test_rejections_only_advance_attempt_number():
    rejected = [
        make_attempt(round_number=1, attempt_number=n, status=QuestAttemptStatus.PROPOSAL_REJECTED)
        for n in range(1, 4)
    ]
    passed = make_attempt(round_number=1, attempt_number=4, status=QuestAttemptStatus.PASSED)
    next_round = make_attempt(round_number=2, attempt_number=1, status=QuestAttemptStatus.PENDING_PROPOSAL)
    attempts = rejected + [passed, next_round]

    round_one = [a.attempt_number for a in attempts if a.round_number == 1]
    assert round_one == [1, 2, 3, 4]
    assert [a.round_number for a in attempts] == [1, 1, 1, 1, 2]

    markers = quests.round_history(make_game(attempts=attempts))
    assert markers[0].intent is Intent.SUCCESS
    assert markers[1].intent is Intent.PRIMARY


@pytest.mark.parametrize("status,intent", [
    (QuestAttemptStatus.PENDING_PROPOSAL, Intent.PRIMARY),
    (QuestAttemptStatus.PENDING_PROPOSAL_VOTES, Intent.PRIMARY),
    (QuestAttemptStatus.PROPOSAL_REJECTED, Intent.PRIMARY),
    (QuestAttemptStatus.PENDING_QUEST_RESULTS, Intent.PRIMARY),
    (QuestAttemptStatus.PASSED, Intent.SUCCESS),
    (QuestAttemptStatus.FAILED, Intent.DANGER),
])
def test_intent_for_status(status, intent):
    assert quests.intent_for_status(status) is intent


def test_terminal_attempts_only_describe_outcome():
    rejected = make_attempt(round_number=2, attempt_number=3, status=QuestAttemptStatus.PROPOSAL_REJECTED)
    game = make_game(attempts=(rejected,))
    assert quests.current_quest_prompt(game) is QuestPrompt.PROPOSAL_REJECTED
    assert quests.outcome_text(rejected) == "Quest 2 proposal 3 was rejected."

    failed = make_attempt(round_number=3, status=QuestAttemptStatus.FAILED)
    game = make_game(attempts=(failed,))
    assert quests.current_quest_prompt(game) is QuestPrompt.QUEST_DONE
    assert quests.outcome_text(failed) == "Quest number 3 failed!"
    assert not quests.can_vote_on_proposal(game)
    assert quests.quest_vote_options(game) == ()


def test_leader_is_prompted_to_propose():
    attempt = make_attempt(status=QuestAttemptStatus.PENDING_PROPOSAL, leader="Merlin", members=())
    assert quests.current_quest_prompt(make_game(attempts=(attempt,))) is QuestPrompt.PROPOSE_QUEST

    other = make_attempt(status=QuestAttemptStatus.PENDING_PROPOSAL, leader="Arthur", members=())
    assert quests.current_quest_prompt(make_game(attempts=(other,))) is QuestPrompt.AWAITING_PROPOSAL


def test_can_propose_quest_checks_input():
    attempt = make_attempt(status=QuestAttemptStatus.PENDING_PROPOSAL, leader="Merlin", members=())
    game = make_game(attempts=(attempt,))

    assert quests.can_propose_quest(game, ["Merlin", "Percival"])
    assert not quests.can_propose_quest(game, ["Merlin"])
    assert not quests.can_propose_quest(game, ["Merlin", "Merlin"])
    assert not quests.can_propose_quest(game, ["Merlin", "Mordred"])

    not_leader = make_game(attempts=(attempt,), my_name="Arthur")
    assert not quests.can_propose_quest(not_leader, ["Merlin", "Percival"])


def test_navigation_only_in_progress():
    assert quests.shows_navigation(make_game(status=GameStatus.IN_PROGRESS))
    assert not quests.shows_navigation(make_game(status=GameStatus.NOT_STARTED))
    assert not quests.shows_navigation(make_game(status=GameStatus.EVIL_WON))


def test_document_title_follows_game_action():
    game = make_game(attempts=(make_attempt(status=QuestAttemptStatus.PENDING_QUEST_RESULTS),))
    ready = remote.success(game)

    assert quests.document_title(GameState(ready, GameAction.VIEW_ROLES)) == "View roles"
    assert quests.document_title(GameState(ready, GameAction.VIEW_PLAYERS)) == "View players"
    assert quests.document_title(GameState(ready, GameAction.VIEW_QUESTS)) == "Waiting for quest results"
    assert quests.document_title(GameState(remote.loading(), GameAction.VIEW_QUESTS)) == "Avalon"
