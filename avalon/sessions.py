"""Rejoin-token persistence.

A rejoin token (player id + name) is kept per game so a player can pick a
session back up without joining again. Tokens live in sqlite, or travel as
query parameters on a session link when persistence is switched off.
"""

from typing import Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlencode

import aiosqlite

from .config import DATABASE_PATH
from .models import PlayerMetadata


class SessionStore:
    """Handles all database operations for rejoin tokens."""

    def __init__(self, db_path: str = DATABASE_PATH):
        self.db_path = db_path

    async def initialize(self):
        """Initialize the database with the sessions table."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    owner_id TEXT NOT NULL,
                    game_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    player_name TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY(owner_id, game_id)
                )
            """)
            await db.commit()

    async def save_session(self, owner_id: str, game_id: str, metadata: PlayerMetadata):
        """Store or refresh the token for a game."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                INSERT OR REPLACE INTO sessions (owner_id, game_id, player_id, player_name, updated_at)
                VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
            """, (owner_id, game_id, metadata.player_id, metadata.player_name))
            await db.commit()

    async def get_session(self, owner_id: str, game_id: str) -> Optional[PlayerMetadata]:
        """Get the token stored for a game, if any."""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT player_id, player_name FROM sessions WHERE owner_id = ? AND game_id = ?",
                (owner_id, game_id)
            ) as cursor:
                row = await cursor.fetchone()
                return PlayerMetadata(row[0], row[1]) if row else None

    async def get_latest_session(self, owner_id: str) -> Optional[Tuple[str, PlayerMetadata]]:
        """Get the most recently stored game id and token for an owner."""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT game_id, player_id, player_name FROM sessions WHERE owner_id = ? "
                "ORDER BY updated_at DESC, rowid DESC LIMIT 1",
                (owner_id,)
            ) as cursor:
                row = await cursor.fetchone()
                return (row[0], PlayerMetadata(row[1], row[2])) if row else None

    async def delete_session(self, owner_id: str, game_id: str):
        """Forget the token for a game."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM sessions WHERE owner_id = ? AND game_id = ?", (owner_id, game_id))
            await db.commit()


def session_url(base: str, game_id: str, metadata: PlayerMetadata) -> str:
    """Link to a game that carries the rejoin token in its query string."""
    return f"{base.rstrip('/')}/{game_id}?{urlencode(metadata.to_query())}"


def parse_session_query(query: str) -> Optional[PlayerMetadata]:
    """Read a rejoin token back out of a query string; ``None`` if incomplete."""
    params: Mapping[str, list] = parse_qs(query.lstrip("?"))
    player_id = params.get("playerId", [None])[0]
    player_name = params.get("playerName", [None])[0]
    if not player_id or not player_name:
        return None
    return PlayerMetadata(player_id, player_name)
