"""Oracle readers over bound contract handles."""
from .price_data import PriceDataOracle
from .pyth import PythOracle, get_price

__all__ = ["PriceDataOracle", "PythOracle", "get_price"]
