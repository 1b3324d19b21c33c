"""Typed handle to one on-ledger contract."""
from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .identifiers import PriceIdentifier
from .models import PriceRecord
from .oracles.pyth import PythOracle

if TYPE_CHECKING:
    from .connection import LedgerConnection


class ContractHandle:
    """Contract bound to a connection with a fixed set of entry points.

    Holds no mutable state, so one handle can serve concurrent view calls.
    """

    def __init__(
        self,
        connection: LedgerConnection,
        account_id: str,
        view_methods: Iterable[str] = (),
        change_methods: Iterable[str] = (),
    ) -> None:
        self._connection = connection
        self.account_id = account_id
        self.view_methods = frozenset(view_methods)
        self.change_methods = frozenset(change_methods)

    def __repr__(self) -> str:
        return f"ContractHandle({self.account_id!r})"

    async def view(self, method_name: str, args: dict[str, Any] | None = None) -> Any:
        if method_name not in self.view_methods:
            raise ValueError(f"'{method_name}' is not a view method of {self.account_id}")
        return await self._connection.view_function(self.account_id, method_name, args or {})

    async def call(self, method_name: str, args: dict[str, Any] | None = None) -> Any:
        if method_name not in self.change_methods:
            raise ValueError(
                f"'{method_name}' is not a change method of {self.account_id}"
            )
        return await self._connection.function_call(self.account_id, method_name, args or {})

    async def get_price(
        self, identifier: PriceIdentifier | bytes, identifier_encoding: str = "array"
    ) -> PriceRecord:
        """Pyth ``get_price`` against this contract."""
        return await PythOracle(self, identifier_encoding=identifier_encoding).get_price(
            identifier
        )
