"""Tests for reducer composition and the application reducer."""

from dataclasses import dataclass

import pytest

from avalon import remote
from avalon.actions import (
    SET_GAME,
    SET_GAME_ID,
    SET_PLAYER_NAME,
    ClearGame,
    ClearHomeState,
    CompoundAction,
    CreateToast,
    SetGameAction,
    SetHomeAction,
)
from avalon.models import ApplicationState, GameAction, HomeAction
from avalon.reducers import (
    ReducerBuilder,
    app_reducer,
    async_load_reducer,
    combine_reducers,
    compose_reducers,
    reduce_compound_actions,
)

from conftest import make_game


@dataclass(frozen=True)
class Counters:
    left: int = 0
    right: int = 0


def _bump_on(tag):
    def reducer(state, event):
        return state + 1 if event == tag else state
    return reducer


def test_combine_reducers_keeps_reference_when_nothing_changes():
    reducer = combine_reducers(Counters, left=_bump_on("left"), right=_bump_on("right"))
    state = Counters()

    assert reducer(state, "unrelated") is state

    updated = reducer(state, "left")
    assert updated == Counters(left=1, right=0)
    assert updated is not state


def test_combine_reducers_rejects_unknown_fields():
    with pytest.raises(ValueError):
        combine_reducers(Counters, middle=_bump_on("middle"))


def test_compose_reducers_runs_in_order():
    seen = []

    def first(state, event):
        seen.append("first")
        return state + ["a"]

    def second(state, event):
        seen.append("second")
        return state + ["b"]

    assert compose_reducers(first, second)([], "go") == ["a", "b"]
    assert seen == ["first", "second"]


def test_compound_actions_fold_left_to_right():
    reducer = reduce_compound_actions(lambda state, event: state + [event])
    assert reducer([], CompoundAction(("a", CompoundAction(("b", "c")), "d"))) == ["a", "b", "c", "d"]


def test_reducer_builder_ignores_unknown_events():
    reducer = ReducerBuilder().with_handler(SetGameAction, lambda state, event: event.game_action).build()
    assert reducer(GameAction.VIEW_ROLES, SetGameAction(GameAction.VIEW_PLAYERS)) is GameAction.VIEW_PLAYERS
    assert reducer(GameAction.VIEW_ROLES, ClearGame()) is GameAction.VIEW_ROLES


def test_reducer_builder_rejects_duplicate_handlers():
    builder = ReducerBuilder().with_handler(ClearGame, lambda state, event: state)
    with pytest.raises(ValueError):
        builder.with_handler(ClearGame, lambda state, event: state)


def test_async_load_reducer_transitions():
    reducer = async_load_reducer(SET_PLAYER_NAME, on_success=str.upper, on_failure=lambda e: f"error: {e}")
    state = remote.not_started()

    state = reducer(state, SET_PLAYER_NAME.started())
    assert remote.is_loading(state)

    state = reducer(state, SET_PLAYER_NAME.succeeded("merlin"))
    assert state == remote.success("MERLIN")

    state = reducer(state, SET_PLAYER_NAME.failed("boom"))
    assert state == remote.failure("error: boom")


def test_async_load_reducer_passes_other_families_through():
    reducer = async_load_reducer(SET_PLAYER_NAME)
    state = remote.success("merlin")
    assert reducer(state, SET_GAME_ID.succeeded("avalon")) is state
    assert reducer(state, "not an event") is state


def test_async_load_reducer_keeps_reference_for_equal_values():
    reducer = async_load_reducer(SET_GAME)
    state = remote.success(make_game())
    assert reducer(state, SET_GAME.succeeded(make_game())) is state


def test_app_reducer_leaves_untargeted_fields_alone():
    state = ApplicationState()
    updated = app_reducer(state, SET_GAME.started())

    assert remote.is_loading(updated.game_state.game)
    assert updated.home_state is state.home_state
    assert updated.game_state.game_action is state.game_state.game_action


def test_app_reducer_ignores_toasts():
    state = ApplicationState()
    assert app_reducer(state, CreateToast.failure("boom")) is state


def test_game_is_replaced_wholesale_and_cleared():
    state = app_reducer(ApplicationState(), SET_GAME.succeeded(make_game(my_name="Merlin")))
    state = app_reducer(state, SET_GAME.succeeded(make_game(my_name="Percival", my_role=None)))
    assert state.game_state.game.value.my_name == "Percival"
    assert state.game_state.game.value.my_role is None

    cleared = app_reducer(state, ClearGame())
    assert remote.is_not_started(cleared.game_state.game)
    assert app_reducer(cleared, ClearGame()) is cleared


def test_game_action_is_stable_when_unchanged():
    state = ApplicationState()
    assert app_reducer(state, SetGameAction(GameAction.VIEW_QUESTS)) is state
    assert app_reducer(state, SetGameAction(GameAction.VIEW_ROLES)).game_state.game_action is GameAction.VIEW_ROLES


def test_switching_home_action_resets_inputs():
    state = app_reducer(ApplicationState(), CompoundAction((
        SET_PLAYER_NAME.succeeded("merlin"),
        SET_GAME_ID.succeeded("avalon"),
    )))
    assert state.home_state.player_name == remote.success("merlin")

    switched = app_reducer(state, SetHomeAction(HomeAction.CREATE_GAME))
    assert switched.home_state.home_action is HomeAction.CREATE_GAME
    assert remote.is_not_started(switched.home_state.player_name)
    assert remote.is_not_started(switched.home_state.game_id)
    assert switched.game_state is state.game_state


def test_clear_home_state_keeps_action():
    state = app_reducer(ApplicationState(), SetHomeAction(HomeAction.CREATE_GAME))
    state = app_reducer(state, SET_PLAYER_NAME.succeeded("merlin"))

    cleared = app_reducer(state, ClearHomeState())
    assert cleared.home_state.home_action is HomeAction.CREATE_GAME
    assert remote.is_not_started(cleared.home_state.player_name)
    assert app_reducer(cleared, ClearHomeState()) is cleared


def test_repeating_home_action_still_resets_inputs():
    state = app_reducer(ApplicationState(), SET_PLAYER_NAME.succeeded("merlin"))
    assert state.home_state.home_action is HomeAction.JOIN_GAME

    same = app_reducer(state, SetHomeAction(HomeAction.JOIN_GAME))
    assert same.home_state.home_action is HomeAction.JOIN_GAME
    assert remote.is_not_started(same.home_state.player_name)
