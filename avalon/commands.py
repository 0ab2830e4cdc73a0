"""Discord slash commands for the Avalon client."""

import asyncio
import logging
from typing import Dict, Optional

import discord
from discord import app_commands
from discord.ext import commands

from . import quests, remote
from .api import GameApi
from .client import AvalonClient
from .config import PERSIST_SESSIONS, SESSION_LINK_BASE
from .models import GameAction, GameState, PlayerMetadata, ProposeQuestRequest, StartGameRequest
from .notifications import DiscordNotificationSink
from .sessions import SessionStore, session_url
from .view import GameView


logger = logging.getLogger(__name__)


def _split_names(raw: str):
    return tuple(name.strip() for name in raw.split(",") if name.strip())


class AvalonCommands(commands.Cog):
    """Cog containing all Avalon slash commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.api = GameApi()
        self.sessions = SessionStore()
        self.view = GameView()
        self.clients: Dict[int, AvalonClient] = {}
        self.status_messages: Dict[int, discord.Message] = {}
        # Game state currently shown in each user's status message
        self._shown: Dict[int, GameState] = {}
        self._render_tasks: Dict[int, asyncio.Task] = {}

    async def cog_load(self):
        """Initialize the database when the cog loads."""
        await self.sessions.initialize()

    async def cog_unload(self):
        """Stop every poller on shutdown."""
        for task in self._render_tasks.values():
            task.cancel()
        self._render_tasks.clear()
        for client in self.clients.values():
            client.shutdown()
        self.clients.clear()

    def _get_client(self, user: discord.abc.User) -> AvalonClient:
        client = self.clients.get(user.id)
        if client is None:
            client = AvalonClient(self.api, DiscordNotificationSink(user))
            client.store.subscribe(lambda state, user_id=user.id: self._request_render(user_id))
            self.clients[user.id] = client
        return client

    def _request_render(self, user_id: int):
        """Bring the user's status message up to date, one edit at a time."""
        task = self._render_tasks.get(user_id)
        if task is not None and not task.done():
            # The running task re-reads the latest state before it finishes
            return
        if user_id not in self.status_messages:
            return
        self._render_tasks[user_id] = asyncio.get_running_loop().create_task(self._render_status(user_id))

    async def _render_status(self, user_id: int):
        while True:
            message = self.status_messages.get(user_id)
            client = self.clients.get(user_id)
            if message is None or client is None:
                return
            game_state = client.store.state.game_state
            # Lobby input changes and a closed game have nothing to re-render
            if game_state is self._shown.get(user_id) or remote.is_not_started(game_state.game):
                return
            self._shown[user_id] = game_state
            try:
                await message.edit(embed=self.view.format_game(game_state))
            except discord.NotFound:
                logger.info(f"Status message for user {user_id} is gone; stopping updates")
                if self.status_messages.get(user_id) is message:
                    self.status_messages.pop(user_id, None)
                return
            except discord.HTTPException as e:
                logger.warning(f"Failed to update status message for user {user_id}: {e}")
                return

    async def _enter_game(
        self,
        interaction: discord.Interaction,
        client: AvalonClient,
        game_id: str,
        metadata: PlayerMetadata,
    ):
        owner_id = str(interaction.user.id)
        if PERSIST_SESSIONS:
            await self.sessions.save_session(owner_id, game_id, metadata)
            note = f"Use `/avalon_rejoin {game_id}` to pick this game back up later."
        else:
            note = f"Keep this link to rejoin: {session_url(SESSION_LINK_BASE, game_id, metadata)}"

        client.open_game(game_id, metadata)
        user_id = interaction.user.id
        game_state = client.store.state.game_state
        try:
            message = await interaction.user.send(embed=self.view.format_game(game_state))
        except discord.Forbidden:
            logger.warning(f"Cannot DM user {user_id}; game status will not be shown")
        else:
            self.status_messages[user_id] = message
            self._shown[user_id] = game_state
            # The first poll may have settled while the DM was being sent
            self._request_render(user_id)
        await interaction.followup.send(
            embed=self.view.format_success(f"You are in game **{game_id}** as **{metadata.player_name}**. {note}"),
            ephemeral=True,
        )

    def _require_game(self, client: AvalonClient):
        """Return the synchronized game or ``None`` when there is nothing to act on."""
        if not client.in_game:
            return None
        return remote.get_or_default(client.store.state.game_state.game, None)

    @app_commands.command(name="avalon_create", description="Create a new Avalon game")
    @app_commands.describe(name="Your name in the game")
    async def create(self, interaction: discord.Interaction, name: str):
        """Create a game and join it as its creator."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        client.state_service.set_player_name(name.strip())

        credentials = await client.game_service.create_game(name.strip())
        if credentials is None:
            await interaction.followup.send(embed=self.view.format_error("Could not create the game."), ephemeral=True)
            return
        await self._enter_game(interaction, client, credentials.game_id, credentials.metadata)

    @app_commands.command(name="avalon_join", description="Join an existing Avalon game")
    @app_commands.describe(game_id="Id of the game you would like to join", name="Your name in the game")
    async def join(self, interaction: discord.Interaction, game_id: str, name: str):
        """Join a game by id."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        client.state_service.set_game_id(game_id.strip())
        client.state_service.set_player_name(name.strip())

        metadata = await client.game_service.join_game(game_id.strip(), name.strip())
        if metadata is None:
            await interaction.followup.send(embed=self.view.format_error("Could not join the game."), ephemeral=True)
            return
        await self._enter_game(interaction, client, game_id.strip(), metadata)

    @app_commands.command(name="avalon_rejoin", description="Pick a game back up without joining again")
    @app_commands.describe(game_id="Game to rejoin (leave empty for your most recent one)")
    async def rejoin(self, interaction: discord.Interaction, game_id: Optional[str] = None):
        """Restore identity from a stored rejoin token."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        owner_id = str(interaction.user.id)

        if game_id:
            metadata = await self.sessions.get_session(owner_id, game_id.strip())
            found = (game_id.strip(), metadata) if metadata else None
        else:
            found = await self.sessions.get_latest_session(owner_id)

        if found is None:
            await interaction.followup.send(embed=self.view.format_error("No saved session found."), ephemeral=True)
            return
        if client.game_id == found[0] and client.resume_polling():
            await interaction.followup.send(embed=self.view.format_success("Resumed syncing your game."), ephemeral=True)
            return
        await self._enter_game(interaction, client, found[0], found[1])

    @app_commands.command(name="avalon_start", description="Start your game with the chosen roles")
    @app_commands.describe(roles="Comma separated roles, e.g. Merlin, Assassin, Percival")
    async def start(self, interaction: discord.Interaction, roles: str):
        """Start the game (creator only)."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        game = self._require_game(client)
        if game is None or game.creator != game.my_name:
            await interaction.followup.send(embed=self.view.format_error("Only the creator of a game can start it."), ephemeral=True)
            return

        started = await client.game_service.start_game(
            client.game_id, client.metadata.player_id, client.metadata.player_name,
            StartGameRequest(_split_names(roles)),
        )
        if started:
            await interaction.followup.send(embed=self.view.format_success("Game started!"), ephemeral=True)
        else:
            await interaction.followup.send(embed=self.view.format_error("The game could not be started."), ephemeral=True)

    @app_commands.command(name="avalon_propose", description="Propose the members of the current quest")
    @app_commands.describe(members="Comma separated player names")
    async def propose(self, interaction: discord.Interaction, members: str):
        """Propose quest members (leader only)."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        game = self._require_game(client)
        proposal = _split_names(members)
        if game is None or not quests.can_propose_quest(game, proposal):
            await interaction.followup.send(
                embed=self.view.format_error("You cannot propose that quest right now."), ephemeral=True
            )
            return

        proposed = await client.game_service.propose_quest(
            client.game_id, client.metadata.player_id, client.metadata.player_name,
            ProposeQuestRequest(proposal),
        )
        if proposed:
            await interaction.followup.send(embed=self.view.format_success("Quest proposed."), ephemeral=True)

    @app_commands.command(name="avalon_vote", description="Approve or reject the current proposal")
    @app_commands.describe(approve="True to approve, False to reject")
    async def vote(self, interaction: discord.Interaction, approve: bool):
        """Vote on the current proposal."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        game = self._require_game(client)
        if game is None or not quests.can_vote_on_proposal(game):
            await interaction.followup.send(embed=self.view.format_error("There is no proposal for you to vote on."), ephemeral=True)
            return

        if await client.game_service.vote_on_proposal(
            client.game_id, client.metadata.player_id, client.metadata.player_name, approve
        ):
            await interaction.followup.send(embed=self.view.format_success("Vote recorded."), ephemeral=True)

    @app_commands.command(name="avalon_quest", description="Pass or fail the quest you are on")
    @app_commands.describe(outcome="Your quest vote")
    @app_commands.choices(outcome=[
        app_commands.Choice(name="Pass", value=quests.QuestVote.PASS.value),
        app_commands.Choice(name="Fail", value=quests.QuestVote.FAIL.value),
    ])
    async def quest(self, interaction: discord.Interaction, outcome: app_commands.Choice[str]):
        """Vote on the current quest."""
        await interaction.response.defer(ephemeral=True)
        client = self._get_client(interaction.user)
        game = self._require_game(client)
        vote = quests.QuestVote(outcome.value)
        if game is None or vote not in quests.quest_vote_options(game):
            await interaction.followup.send(embed=self.view.format_error("That quest vote is not available to you."), ephemeral=True)
            return

        if await client.game_service.vote_on_quest(
            client.game_id, client.metadata.player_id, client.metadata.player_name, vote
        ):
            await interaction.followup.send(embed=self.view.format_success("Quest vote recorded."), ephemeral=True)

    @app_commands.command(name="avalon_view", description="Switch what your game status shows")
    @app_commands.describe(section="What to look at")
    @app_commands.choices(section=[
        app_commands.Choice(name="Roles", value=GameAction.VIEW_ROLES.value),
        app_commands.Choice(name="Players", value=GameAction.VIEW_PLAYERS.value),
        app_commands.Choice(name="Quests", value=GameAction.VIEW_QUESTS.value),
    ])
    async def view_section(self, interaction: discord.Interaction, section: app_commands.Choice[str]):
        """Change the game action shown in the status message."""
        client = self._get_client(interaction.user)
        game = self._require_game(client)
        if game is None or not quests.shows_navigation(game):
            await interaction.response.send_message(
                embed=self.view.format_error("Navigation is only available while a game is in progress."), ephemeral=True
            )
            return
        client.state_service.set_game_action(GameAction(section.value))
        await interaction.response.send_message(
            embed=self.view.format_game(client.store.state.game_state), ephemeral=True
        )

    @app_commands.command(name="avalon_leave", description="Stop following your current game")
    async def leave(self, interaction: discord.Interaction):
        """Close the game view and stop syncing."""
        client = self.clients.get(interaction.user.id)
        if client is None or not client.in_game:
            await interaction.response.send_message(embed=self.view.format_error("You are not following a game."), ephemeral=True)
            return
        game_id = client.game_id
        client.close_game()
        client.state_service.clear_home_state()
        self.status_messages.pop(interaction.user.id, None)
        self._shown.pop(interaction.user.id, None)
        await interaction.response.send_message(
            embed=self.view.format_success(f"Stopped following game **{game_id}**."), ephemeral=True
        )


async def setup(bot: commands.Bot):
    """Setup function to add the cog to the bot."""
    await bot.add_cog(AvalonCommands(bot))
