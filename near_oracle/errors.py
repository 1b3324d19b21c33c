"""Error taxonomy for connecting to the ledger and querying oracles."""


class OracleError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Connection errors
# ---------------------------------------------------------------------------


class ConnectError(OracleError):
    """Establishing a ledger session failed."""


class ConnectUnreachableError(ConnectError):
    """The RPC endpoint could not be reached while connecting."""


class InvalidConfigError(ConnectError, ValueError):
    """Connection or application configuration is invalid."""


# ---------------------------------------------------------------------------
# Query errors
# ---------------------------------------------------------------------------


class QueryError(OracleError):
    """A call against a bound contract failed."""


class NotFoundError(QueryError):
    """The identifier is not registered in the oracle."""


class QueryUnreachableError(QueryError):
    """Transport failure while the query was in flight."""


class MalformedResponseError(QueryError):
    """The response does not match the expected schema."""


class InvalidIdentifierError(QueryError, ValueError):
    """An identifier is not exactly 32 bytes."""


class UnauthorizedError(QueryError):
    """A state-changing call was attempted without signing capability."""
