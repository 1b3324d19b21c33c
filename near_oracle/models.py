"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceRecord:
    """A Pyth price as stored by the oracle contract.

    ``price`` and ``conf`` are fixed-point integers scaled by ``10**expo``.
    """

    price: int
    conf: int
    expo: int
    publish_time: int

    @property
    def value(self) -> float:
        return self.price * (10**self.expo)

    @property
    def confidence(self) -> float:
        return self.conf * (10**self.expo)


@dataclass(frozen=True)
class AssetPrice:
    """Asset price expressed as ``multiplier / 10**decimals``."""

    multiplier: int
    decimals: int

    @property
    def value(self) -> float:
        return self.multiplier / (10**self.decimals)


@dataclass(frozen=True)
class AssetOptionalPrice:
    asset_id: str
    price: AssetPrice | None = None


@dataclass(frozen=True)
class PriceData:
    """Snapshot returned by an asset price-data oracle."""

    timestamp: int
    recency_duration_sec: int
    prices: tuple[AssetOptionalPrice, ...] = ()

    def price_for(self, asset_id: str) -> AssetPrice | None:
        for entry in self.prices:
            if entry.asset_id == asset_id:
                return entry.price
        return None


def to_nano(seconds: int) -> int:
    """Convert whole seconds to a nanosecond ledger timestamp."""
    return seconds * 10**9
