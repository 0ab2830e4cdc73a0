"""Client configuration constants and settings."""

import os

API_BASE_URL = os.getenv("AVALON_API_URL", "http://localhost:8080")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("AVALON_REQUEST_TIMEOUT", "10"))

REFRESH_GAME_STATE_INTERVAL_MS = 1000

DATABASE_PATH = os.getenv("AVALON_DATABASE_PATH", "avalon_sessions.db")

# When disabled, rejoin tokens are handed back as a link with query parameters instead
PERSIST_SESSIONS = os.getenv("AVALON_PERSIST_SESSIONS", "1") == "1"
SESSION_LINK_BASE = os.getenv("AVALON_SESSION_LINK_BASE", "https://avalon.example/game")

# Discord colours
COLOR_PRIMARY = 0x4169E1
COLOR_SUCCESS = 0x00ff00
COLOR_DANGER = 0xff0000
COLOR_NEUTRAL = 0x800080
