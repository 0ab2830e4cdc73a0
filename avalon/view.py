"""View formatting for Avalon displays."""

from typing import Iterable

import discord

from . import quests, remote
from .config import COLOR_DANGER, COLOR_NEUTRAL, COLOR_PRIMARY, COLOR_SUCCESS
from .errors import unreachable
from .models import Game, GameAction, GameState, GameStatus, Intent, QuestAttemptStatus


STRINGS = {
    "WAITING_FOR_PLAYERS": "Waiting for players to join",
    "PLAYERS": "Players",
    "ROLES": "Roles",
    "QUEST_HISTORY": "Quest history",
    "CURRENT_QUEST": "Current quest",
    "WAITING_FOR_QUEST_RESULTS": "Waiting for all quest members to vote.",
    "WAITING_FOR_OTHER_VOTES": "Waiting for other players to vote.",
    "PROPOSAL_TITLE": "Do you approve or reject this proposal? Use `/avalon_vote`.",
    "QUEST_TITLE": "Do you approve or reject this quest? Use `/avalon_quest`.",
    "GAME_NOT_STARTED": "The game has not started and roles have not been specified",
    "CONFIGURE_GAME": "Everyone in? Start the game with `/avalon_start`.",
    "LOADING": "Loading game...",
    "GOOD_WON": "Good won!",
    "EVIL_WON": "Evil won!",
}

MARKERS = {
    Intent.NONE: "⚪",
    Intent.PRIMARY: "🔵",
    Intent.SUCCESS: "🟢",
    Intent.DANGER: "🔴",
}


class GameView:
    """Handles formatting of game displays."""

    def format_game(self, game_state: GameState) -> discord.Embed:
        """Format whatever the current game state calls for."""
        game_value = game_state.game
        if remote.is_failure(game_value):
            return self.format_error(game_value.error)
        if not remote.is_ready(game_value):
            return self.format_skeleton()

        game = game_value.value
        status = game.status
        if status is GameStatus.NOT_STARTED:
            return self.format_lobby(game)
        if status is GameStatus.IN_PROGRESS:
            return self.format_in_progress(game, game_state.game_action, quests.document_title(game_state))
        if status is GameStatus.GOOD_WON:
            return discord.Embed(title=f"👍 {STRINGS['GOOD_WON']}", color=COLOR_SUCCESS)
        if status is GameStatus.EVIL_WON:
            return discord.Embed(title=f"💀 {STRINGS['EVIL_WON']}", color=COLOR_DANGER)
        unreachable(status)

    def format_skeleton(self) -> discord.Embed:
        return discord.Embed(title="Avalon", description=STRINGS["LOADING"], color=COLOR_NEUTRAL)

    def format_lobby(self, game: Game) -> discord.Embed:
        embed = discord.Embed(title=f"Avalon - {game.id}", color=COLOR_NEUTRAL)
        if game.creator == game.my_name:
            embed.description = STRINGS["CONFIGURE_GAME"]
        else:
            embed.description = STRINGS["WAITING_FOR_PLAYERS"]
        embed.add_field(name=STRINGS["PLAYERS"], value=self._player_list(game.players, game), inline=False)
        return embed

    def format_in_progress(self, game: Game, game_action: GameAction, title: str) -> discord.Embed:
        embed = discord.Embed(title=title, color=COLOR_PRIMARY)
        if game_action is GameAction.VIEW_ROLES:
            embed.add_field(name=STRINGS["ROLES"], value=self._roles(game), inline=False)
        elif game_action is GameAction.VIEW_PLAYERS:
            embed.add_field(name=STRINGS["PLAYERS"], value=self._player_list(game.players, game), inline=False)
        elif game_action is GameAction.VIEW_QUESTS:
            embed.add_field(name=STRINGS["QUEST_HISTORY"], value=self._quest_history(game), inline=False)
            current = self._current_quest(game)
            if current:
                embed.add_field(name=STRINGS["CURRENT_QUEST"], value=current, inline=False)
            embed.add_field(name="Next", value=self._current_actions(game), inline=False)
        else:
            unreachable(game_action)
        embed.set_footer(text=f"Game {game.id} • You are {game.my_name}")
        return embed

    def _player_list(self, players: Iterable[str], game: Game) -> str:
        lines = []
        for player in players:
            marker = " (you)" if player == game.my_name else ""
            lines.append(f"• {player}{marker}")
        return "\n".join(lines) or "No players yet."

    def _roles(self, game: Game) -> str:
        if not game.roles:
            return f"⚠️ {STRINGS['GAME_NOT_STARTED']}"
        return "\n".join(
            f"{'🛡️' if good else '🗡️'} {role}" for role, good in game.roles.items()
        )

    def _quest_history(self, game: Game) -> str:
        markers = quests.round_history(game)
        if markers is None:
            return quests.pending_proposal_text(game)
        return "  ".join(f"{marker.size} {MARKERS[marker.intent]}" for marker in markers)

    def _current_quest(self, game: Game) -> str:
        attempt = quests.current_attempt(game)
        if attempt is None or attempt.status is QuestAttemptStatus.PENDING_PROPOSAL:
            return ""
        return (
            f"Quest {attempt.round_number} - Attempt {attempt.attempt_number}\n"
            f"Leader: {attempt.leader}\n"
            f"Participants: {', '.join(attempt.members)}"
        )

    def _current_actions(self, game: Game) -> str:
        prompt = quests.current_quest_prompt(game)
        attempt = quests.current_attempt(game)
        if prompt is quests.QuestPrompt.AWAITING_PROPOSAL:
            return quests.pending_proposal_text(game)
        if prompt is quests.QuestPrompt.PROPOSE_QUEST:
            size = quests.quest_size(game, attempt.round_number)
            count = f"{size} players" if size is not None else "the quest members"
            return f"You lead this quest. Pick {count} with `/avalon_propose`."
        if prompt is quests.QuestPrompt.PROPOSAL_VOTE:
            return STRINGS["PROPOSAL_TITLE"]
        if prompt is quests.QuestPrompt.WAITING_FOR_OTHER_VOTES:
            return STRINGS["WAITING_FOR_OTHER_VOTES"]
        if prompt is quests.QuestPrompt.QUEST_VOTE:
            options = " or ".join(option.value.lower() for option in quests.quest_vote_options(game))
            return f"{STRINGS['QUEST_TITLE']} You may {options}."
        if prompt is quests.QuestPrompt.WAITING_FOR_QUEST_RESULTS:
            return STRINGS["WAITING_FOR_QUEST_RESULTS"]
        if prompt in (quests.QuestPrompt.PROPOSAL_REJECTED, quests.QuestPrompt.QUEST_DONE):
            return quests.outcome_text(attempt)
        unreachable(prompt)

    def format_error(self, message: str) -> discord.Embed:
        """Format an error message."""
        return discord.Embed(title="❌ Error", description=message, color=COLOR_DANGER)

    def format_success(self, message: str) -> discord.Embed:
        """Format a success message."""
        return discord.Embed(title="✅ Success", description=message, color=COLOR_SUCCESS)
