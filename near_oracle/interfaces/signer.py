"""Signer protocol — opaque signing and submission of transactions."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..keystore import KeyPair


class Signer(Protocol):
    """Signs a function call with ``key_pair`` and submits it."""

    async def sign_and_send(
        self,
        key_pair: KeyPair,
        receiver_id: str,
        method_name: str,
        args: dict[str, Any],
    ) -> Any: ...
