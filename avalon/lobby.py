"""Gating for the pre-game join/create forms."""

from typing import Optional

from . import remote
from .models import HomeState, Intent


def can_join_game(home_state: HomeState) -> bool:
    return remote.is_ready(home_state.game_id) and remote.is_ready(home_state.player_name)


def can_create_game(home_state: HomeState) -> bool:
    return remote.is_ready(home_state.player_name) and remote.is_not_started(home_state.game_id)


def field_intent(value: Optional[str]) -> Intent:
    """Intent for a required text input: untouched, filled or emptied."""
    if value is None:
        return Intent.NONE
    if len(value) > 0:
        return Intent.PRIMARY
    return Intent.DANGER


def helper_text(field, text: str) -> Optional[str]:
    """Show ``text`` only once a required field has been set to an empty value."""
    if remote.value_check(field, lambda value: len(value) == 0):
        return text
    return None
