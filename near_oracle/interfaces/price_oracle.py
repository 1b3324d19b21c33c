"""Price oracle protocol — identifier-keyed price lookup."""
from typing import Protocol

from ..identifiers import PriceIdentifier
from ..models import PriceRecord


class PriceOracle(Protocol):
    """Abstract interface for fetching a price record by identifier."""

    async def get_price(self, identifier: PriceIdentifier | bytes) -> PriceRecord: ...
