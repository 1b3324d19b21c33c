"""Key store protocol — credential lookup by account."""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..keystore import KeyPair


class KeyStore(Protocol):
    """Abstract interface for resolving signing keys."""

    def get_key(self, network_id: str, account_id: str) -> KeyPair | None: ...
