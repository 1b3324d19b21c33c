"""Protocol interfaces for the oracle client."""
from .key_store import KeyStore
from .price_oracle import PriceOracle
from .signer import Signer

__all__ = ["KeyStore", "PriceOracle", "Signer"]
