"""Error types shared across the client."""

from typing import Any, NoReturn


class RequestError(Exception):
    """A remote call failed. Carries a message fit to show the player."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def unreachable(value: Any) -> NoReturn:
    """Fatal default for exhaustive matches over closed enums."""
    raise AssertionError(f"Unhandled value: {value!r}")
