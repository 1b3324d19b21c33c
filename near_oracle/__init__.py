"""Client for price oracles hosted on the NEAR ledger."""
from .config import AppConfig, ConnectionConfig, load_config
from .connection import ConnectionState, LedgerConnection, connect
from .contract import ContractHandle
from .errors import (
    ConnectError,
    ConnectUnreachableError,
    InvalidConfigError,
    InvalidIdentifierError,
    MalformedResponseError,
    NotFoundError,
    OracleError,
    QueryError,
    QueryUnreachableError,
    UnauthorizedError,
)
from .identifiers import DerivationMethod, PriceIdentifier, derive
from .keystore import FileSystemKeyStore, InMemoryKeyStore, KeyPair
from .models import PriceRecord
from .oracles import PriceDataOracle, PythOracle, get_price

__all__ = [
    "AppConfig",
    "ConnectError",
    "ConnectUnreachableError",
    "ConnectionConfig",
    "ConnectionState",
    "ContractHandle",
    "DerivationMethod",
    "FileSystemKeyStore",
    "InMemoryKeyStore",
    "InvalidConfigError",
    "InvalidIdentifierError",
    "KeyPair",
    "LedgerConnection",
    "MalformedResponseError",
    "NotFoundError",
    "OracleError",
    "PriceDataOracle",
    "PriceIdentifier",
    "PriceRecord",
    "PythOracle",
    "QueryError",
    "QueryUnreachableError",
    "UnauthorizedError",
    "connect",
    "derive",
    "get_price",
    "load_config",
]
