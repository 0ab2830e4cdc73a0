"""Delivery of user-facing toasts raised through the store."""

import asyncio
import logging
from typing import Any, Callable, Optional, Set

import discord

from .actions import CreateToast
from .config import COLOR_DANGER, COLOR_PRIMARY, COLOR_SUCCESS
from .models import Intent, Toast
from .store import Store


logger = logging.getLogger(__name__)

_INTENT_COLORS = {
    Intent.NONE: COLOR_PRIMARY,
    Intent.PRIMARY: COLOR_PRIMARY,
    Intent.SUCCESS: COLOR_SUCCESS,
    Intent.DANGER: COLOR_DANGER,
}


class NotificationSink:
    """Somewhere a toast can be shown to the player."""

    async def notify(self, toast: Toast):
        raise NotImplementedError


class DiscordNotificationSink(NotificationSink):
    """Sends toasts as embeds to a channel, DM or interaction followup."""

    def __init__(self, destination: discord.abc.Messageable):
        self.destination = destination

    async def notify(self, toast: Toast):
        embed = discord.Embed(
            title="❌ Something went wrong" if toast.intent is Intent.DANGER else "ℹ️ Avalon",
            description=toast.message,
            color=_INTENT_COLORS[toast.intent],
        )
        try:
            await self.destination.send(embed=embed)
        except discord.HTTPException as e:
            logger.warning(f"Failed to deliver toast '{toast.message}': {e}")


class NotificationManager:
    """Forwards ``CreateToast`` events from a store to a sink.

    Delivery runs in its own task so dispatch never waits on Discord.
    """

    def __init__(self, sink: NotificationSink):
        self.sink = sink
        self._pending: Set[asyncio.Task] = set()
        self._detach: Optional[Callable[[], None]] = None

    def attach(self, store: Store):
        self.detach()
        self._detach = store.add_event_listener(self._on_event)

    def detach(self):
        if self._detach is not None:
            self._detach()
            self._detach = None

    def _on_event(self, event: Any):
        if not isinstance(event, CreateToast):
            return
        logger.info(f"Toast: {event.toast.message}")
        task = asyncio.get_running_loop().create_task(self.sink.notify(event.toast))
        # Keep a reference so the task is not garbage collected mid-flight
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self):
        """Wait for every toast handed to the sink so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
