"""Current-player lookup supplied by the host application."""

from __future__ import annotations

from typing import Protocol

from noirnote.domain.errors import AuthenticationRequired
from noirnote.domain.models import Player


class IdentityProvider(Protocol):
    def current_player(self) -> Player | None: ...


class StaticIdentity:
    """Identity fixed at startup (CLI flag, settings file, tests)."""

    def __init__(self, player: Player | None = None) -> None:
        self._player = player

    def current_player(self) -> Player | None:
        return self._player

    def sign_in(self, player: Player) -> None:
        self._player = player

    def sign_out(self) -> None:
        self._player = None


def require_player(identity: IdentityProvider, operation: str) -> Player:
    player = identity.current_player()
    if player is None:
        raise AuthenticationRequired(operation)
    return player
