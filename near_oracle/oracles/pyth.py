"""Pyth price feeds on NEAR."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import InvalidIdentifierError, MalformedResponseError, NotFoundError
from ..identifiers import IDENTIFIER_SIZE, PriceIdentifier
from ..models import PriceRecord
from ..rpc import encode_identifier
from ._parse import parse_int

if TYPE_CHECKING:
    from ..contract import ContractHandle

logger = logging.getLogger(__name__)

PYTH_VIEW_METHODS = ("get_price", "get_price_unsafe", "get_ema_price", "price_feed_exists")
PYTH_CHANGE_METHODS = ("update_price_feeds",)


def _identifier_bytes(identifier: PriceIdentifier | bytes) -> bytes:
    # Padding and truncation belong to the codec; never re-applied here
    if isinstance(identifier, PriceIdentifier):
        return identifier.raw
    if isinstance(identifier, (bytes, bytearray)):
        if len(identifier) != IDENTIFIER_SIZE:
            raise InvalidIdentifierError(
                f"Identifier must be exactly {IDENTIFIER_SIZE} bytes, got {len(identifier)}"
            )
        return bytes(identifier)
    raise InvalidIdentifierError(
        f"Identifier must be bytes or PriceIdentifier, got {type(identifier).__name__}"
    )


def parse_price_record(data: Any) -> PriceRecord:
    """Build a PriceRecord from the contract's JSON, rejecting partial payloads."""
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Price record is not an object: {data!r}")
    return PriceRecord(
        price=parse_int(data, "price", "price record"),
        conf=parse_int(data, "conf", "price record"),
        expo=parse_int(data, "expo", "price record"),
        publish_time=parse_int(data, "publish_time", "price record"),
    )


class PythOracle:
    """Read-only queries against a Pyth contract handle."""

    def __init__(
        self,
        handle: ContractHandle,
        identifier_encoding: str = "array",
        argument_name: str = "price_identifier",
    ) -> None:
        self.handle = handle
        self.identifier_encoding = identifier_encoding
        self.argument_name = argument_name

    async def _view(self, method_name: str, identifier: PriceIdentifier | bytes) -> Any:
        raw = _identifier_bytes(identifier)
        args = {self.argument_name: encode_identifier(raw, self.identifier_encoding)}
        return await self.handle.view(method_name, args)

    async def _query_price(
        self, method_name: str, identifier: PriceIdentifier | bytes
    ) -> PriceRecord:
        result = await self._view(method_name, identifier)
        if result is None:
            key = _identifier_bytes(identifier).hex()
            logger.info("No price registered for %s on %s", key, self.handle.account_id)
            raise NotFoundError(f"No price registered for identifier {key}")
        return parse_price_record(result)

    async def get_price(self, identifier: PriceIdentifier | bytes) -> PriceRecord:
        return await self._query_price("get_price", identifier)

    async def get_price_unsafe(self, identifier: PriceIdentifier | bytes) -> PriceRecord:
        """Latest price without the contract's staleness check."""
        return await self._query_price("get_price_unsafe", identifier)

    async def get_ema_price(self, identifier: PriceIdentifier | bytes) -> PriceRecord:
        return await self._query_price("get_ema_price", identifier)

    async def price_feed_exists(self, identifier: PriceIdentifier | bytes) -> bool:
        result = await self._view("price_feed_exists", identifier)
        if not isinstance(result, bool):
            raise MalformedResponseError(f"price_feed_exists returned {result!r}")
        return result


async def get_price(
    handle: ContractHandle,
    identifier: PriceIdentifier | bytes,
    identifier_encoding: str = "array",
) -> PriceRecord:
    """One-shot ``get_price`` lookup on ``handle``."""
    return await PythOracle(handle, identifier_encoding=identifier_encoding).get_price(
        identifier
    )
