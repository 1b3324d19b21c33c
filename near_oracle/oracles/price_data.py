"""Asset price-data oracle (``get_price_data``)."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import MalformedResponseError
from ..models import AssetOptionalPrice, AssetPrice, PriceData
from ._parse import parse_int

if TYPE_CHECKING:
    from ..contract import ContractHandle

PRICE_DATA_VIEW_METHODS = ("get_price_data",)


def _parse_asset_price(entry: Any) -> AssetOptionalPrice:
    if not isinstance(entry, dict) or not isinstance(entry.get("asset_id"), str):
        raise MalformedResponseError(f"Invalid asset price entry: {entry!r}")

    raw_price = entry.get("price")
    if raw_price is None:
        return AssetOptionalPrice(asset_id=entry["asset_id"])
    if not isinstance(raw_price, dict):
        raise MalformedResponseError(f"Invalid price for {entry['asset_id']}: {raw_price!r}")

    context = f"price of {entry['asset_id']}"
    return AssetOptionalPrice(
        asset_id=entry["asset_id"],
        price=AssetPrice(
            multiplier=parse_int(raw_price, "multiplier", context),
            decimals=parse_int(raw_price, "decimals", context),
        ),
    )


def parse_price_data(data: Any) -> PriceData:
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Price data is not an object: {data!r}")
    prices = data.get("prices")
    if not isinstance(prices, list):
        raise MalformedResponseError("Price data has no 'prices' list")

    return PriceData(
        timestamp=parse_int(data, "timestamp", "price data"),
        recency_duration_sec=parse_int(data, "recency_duration_sec", "price data"),
        prices=tuple(_parse_asset_price(p) for p in prices),
    )


class PriceDataOracle:
    """Reads asset price snapshots from a price-data oracle contract."""

    def __init__(self, handle: ContractHandle) -> None:
        self.handle = handle

    async def get_price_data(self, asset_ids: list[str] | None = None) -> PriceData:
        """Prices for ``asset_ids``, or every asset the oracle tracks when None."""
        result = await self.handle.view(
            "get_price_data",
            {"asset_ids": list(asset_ids) if asset_ids is not None else None},
        )
        return parse_price_data(result)
