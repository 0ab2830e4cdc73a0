"""Reducer composition for the client's application state.

Reducers are pure ``(state, event) -> state`` functions. Returning the exact
input reference means "no change"; listeners are only woken when the top-level
reference moves.
"""

import dataclasses
from typing import Any, Callable, Dict, Type, TypeVar

from . import remote
from .actions import (
    SET_GAME,
    SET_GAME_ID,
    SET_PLAYER_NAME,
    AsyncActionFamily,
    AsyncFailed,
    AsyncStarted,
    AsyncSucceeded,
    ClearGame,
    ClearHomeState,
    CompoundAction,
    SetGameAction,
    SetHomeAction,
)
from .models import ApplicationState, GameAction, GameState, HomeAction, HomeState


S = TypeVar("S")
Reducer = Callable[[S, Any], S]


def combine_reducers(state_type: Type[S], **field_reducers: Reducer) -> Reducer:
    """Build a reducer over a dataclass from one reducer per field.

    The combined reducer hands back its input unchanged when every field
    reducer returned its own input.
    """
    fields = {f.name for f in dataclasses.fields(state_type)}
    unknown = set(field_reducers) - fields
    if unknown:
        raise ValueError(f"No such fields on {state_type.__name__}: {sorted(unknown)}")

    def combined(state: S, event: Any) -> S:
        changes = {}
        for name, reducer in field_reducers.items():
            previous = getattr(state, name)
            updated = reducer(previous, event)
            if updated is not previous:
                changes[name] = updated
        if not changes:
            return state
        return dataclasses.replace(state, **changes)

    return combined


def compose_reducers(*reducers: Reducer) -> Reducer:
    """Apply reducers for the same state shape one after another."""

    def composed(state: S, event: Any) -> S:
        for reducer in reducers:
            state = reducer(state, event)
        return state

    return composed


def reduce_compound_actions(reducer: Reducer) -> Reducer:
    """Fold the events of a ``CompoundAction`` into one transition."""

    def batched(state: S, event: Any) -> S:
        if isinstance(event, CompoundAction):
            for child in event.events:
                state = batched(state, child)
            return state
        return reducer(state, event)

    return batched


class ReducerBuilder:
    """Builds a reducer from handlers keyed by event type."""

    def __init__(self):
        self._handlers: Dict[type, Callable[[Any, Any], Any]] = {}

    def with_handler(self, event_type: type, handler: Callable[[Any, Any], Any]) -> "ReducerBuilder":
        if event_type in self._handlers:
            raise ValueError(f"Handler already registered for {event_type.__name__}")
        self._handlers[event_type] = handler
        return self

    def build(self) -> Reducer:
        handlers = dict(self._handlers)

        def reducer(state, event):
            handler = handlers.get(type(event))
            if handler is None:
                return state
            return handler(state, event)

        return reducer


def _identity(value):
    return value


def async_load_reducer(
    family: AsyncActionFamily,
    on_success: Callable[[Any], Any] = _identity,
    on_failure: Callable[[Any], Any] = _identity,
) -> Reducer:
    """Reducer for one ``RemoteValue`` field driven by one async operation.

    Start events move the field to ``Loading``, success and failure events store
    the transformed payload or error. A transition that lands on a value-equal
    container keeps the old reference.
    """

    def reducer(state, event):
        if not family.owns(event):
            return state
        if isinstance(event, AsyncStarted):
            updated = remote.loading()
        elif isinstance(event, AsyncSucceeded):
            updated = remote.success(on_success(event.value))
        elif isinstance(event, AsyncFailed):
            updated = remote.failure(on_failure(event.error))
        else:
            return state
        return state if updated == state else updated

    return reducer


def _set_game_action(state: GameAction, event: SetGameAction) -> GameAction:
    return state if state is event.game_action else event.game_action


def _set_home_action(state: HomeAction, event: SetHomeAction) -> HomeAction:
    return state if state is event.home_action else event.home_action


def _clear_game(state, event: ClearGame):
    return state if remote.is_not_started(state) else remote.not_started()


game_reducer = compose_reducers(
    async_load_reducer(SET_GAME, on_failure=str),
    ReducerBuilder().with_handler(ClearGame, _clear_game).build(),
)

game_action_reducer = ReducerBuilder().with_handler(SetGameAction, _set_game_action).build()

game_state_reducer = combine_reducers(
    GameState,
    game=game_reducer,
    game_action=game_action_reducer,
)

individual_home_state_reducer = combine_reducers(
    HomeState,
    home_action=ReducerBuilder().with_handler(SetHomeAction, _set_home_action).build(),
    player_name=async_load_reducer(SET_PLAYER_NAME, on_failure=str),
    game_id=async_load_reducer(SET_GAME_ID, on_failure=str),
)


def _reset_inputs(state: HomeState) -> HomeState:
    if remote.is_not_started(state.player_name) and remote.is_not_started(state.game_id):
        return state
    return dataclasses.replace(state, player_name=remote.not_started(), game_id=remote.not_started())


# Switching lobby forms always starts from empty inputs
combined_home_state_reducer = (
    ReducerBuilder()
    .with_handler(SetHomeAction, lambda state, event: _reset_inputs(state))
    .with_handler(ClearHomeState, lambda state, event: _reset_inputs(state))
    .build()
)

home_state_reducer = compose_reducers(individual_home_state_reducer, combined_home_state_reducer)

app_reducer = reduce_compound_actions(combine_reducers(
    ApplicationState,
    game_state=game_state_reducer,
    home_state=home_state_reducer,
))
