"""Ledger session: connect once, bind contract handles, issue calls."""
from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlparse

from .config import ConnectionConfig
from .contract import ContractHandle
from .errors import (
    ConnectUnreachableError,
    InvalidConfigError,
    QueryError,
    QueryUnreachableError,
    UnauthorizedError,
)
from .interfaces.signer import Signer
from .rpc import NearRpcClient

logger = logging.getLogger(__name__)

_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[\-_])*[a-z\d]+\.)*([a-z\d]+[\-_])*[a-z\d]+$")


class ConnectionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


def is_valid_account_id(account_id: str) -> bool:
    """NEAR account id grammar: 2-64 chars of lowercase alnum separated by . - _"""
    return 2 <= len(account_id) <= 64 and bool(_ACCOUNT_ID_RE.match(account_id))


def validate_connection_config(config: ConnectionConfig) -> None:
    if not config.network_id:
        raise InvalidConfigError("network_id is required")

    parsed = urlparse(config.node_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidConfigError(f"Malformed RPC endpoint: {config.node_url!r}")

    if config.signer_account_id is not None and not is_valid_account_id(
        config.signer_account_id
    ):
        raise InvalidConfigError(
            f"Invalid signer account id: {config.signer_account_id!r}"
        )


class LedgerConnection:
    """Authenticated session against one NEAR RPC endpoint.

    UNINITIALIZED -> CONNECTING -> READY, or FAILED on error. FAILED is
    terminal; build a new connection to try again.
    """

    def __init__(self, config: ConnectionConfig, signer: Signer | None = None) -> None:
        self.config = config
        self.state = ConnectionState.UNINITIALIZED
        self.error: BaseException | None = None
        self.chain_id: str | None = None
        self._signer = signer
        self._rpc = NearRpcClient(config.node_url, timeout=config.rpc_timeout)

    @property
    def network_id(self) -> str:
        return self.config.network_id

    @property
    def signer_account_id(self) -> str | None:
        return self.config.signer_account_id

    async def connect(self) -> LedgerConnection:
        if self.state is not ConnectionState.UNINITIALIZED:
            raise RuntimeError(f"Cannot connect from state {self.state.value}")

        self.state = ConnectionState.CONNECTING
        logger.info("Connecting to %s (%s)", self.config.node_url, self.network_id)
        try:
            validate_connection_config(self.config)
            await self._rpc.open()
            status = await self._rpc.status()
        except InvalidConfigError as e:
            await self._fail(e)
            raise
        except QueryUnreachableError as e:
            err = ConnectUnreachableError(str(e))
            await self._fail(err)
            raise err from e
        except QueryError as e:
            err = InvalidConfigError(
                f"{self.config.node_url} did not answer as a NEAR RPC node: {e}"
            )
            await self._fail(err)
            raise err from e
        except BaseException as e:
            # Cancellation or an unexpected error must not leave the session open
            await self._fail(e)
            raise

        self.chain_id = status.get("chain_id")
        if self.chain_id and self.chain_id != self.network_id:
            logger.warning(
                "Node reports chain '%s' but network '%s' was configured",
                self.chain_id,
                self.network_id,
            )
        self.state = ConnectionState.READY
        logger.info("Connected to %s", self.config.node_url)
        return self

    async def _fail(self, error: BaseException) -> None:
        self.state = ConnectionState.FAILED
        self.error = error
        logger.warning("Connection to %s failed: %s", self.config.node_url, error)
        await self._rpc.close()

    async def close(self) -> None:
        await self._rpc.close()
        if self.state is ConnectionState.READY:
            self.state = ConnectionState.CLOSED

    async def __aenter__(self) -> LedgerConnection:
        if self.state is ConnectionState.UNINITIALIZED:
            await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _require_ready(self) -> None:
        if self.state is not ConnectionState.READY:
            raise RuntimeError(f"Connection is {self.state.value}, not ready")

    def bind(
        self,
        contract_id: str,
        view_methods: Iterable[str] = (),
        change_methods: Iterable[str] = (),
    ) -> ContractHandle:
        """Return a handle for ``contract_id``; may be called for many contracts."""
        self._require_ready()
        if not is_valid_account_id(contract_id):
            raise InvalidConfigError(f"Invalid contract account id: {contract_id!r}")
        return ContractHandle(self, contract_id, view_methods, change_methods)

    async def view_function(
        self, contract_id: str, method_name: str, args: dict[str, Any]
    ) -> Any:
        """Read-only call; needs no key."""
        self._require_ready()
        logger.debug("View %s.%s", contract_id, method_name)
        try:
            return await self._rpc.call_function(contract_id, method_name, args)
        except QueryError as e:
            logger.warning("View %s.%s failed: %s", contract_id, method_name, e)
            raise

    async def function_call(
        self, contract_id: str, method_name: str, args: dict[str, Any]
    ) -> Any:
        """Signed, state-changing call through the injected signer."""
        self._require_ready()
        account_id = self.signer_account_id
        if not account_id:
            raise UnauthorizedError("No signer account configured")

        key_pair = self.config.key_store.get_key(self.network_id, account_id)
        if key_pair is None:
            raise UnauthorizedError(
                f"No key for {account_id} on {self.network_id} in the credential store"
            )
        if self._signer is None:
            raise UnauthorizedError("No signer available for state-changing calls")

        logger.info("Call %s.%s as %s", contract_id, method_name, account_id)
        return await self._signer.sign_and_send(key_pair, contract_id, method_name, args)


async def connect(
    config: ConnectionConfig, signer: Signer | None = None
) -> LedgerConnection:
    """Open a new connection; raises ``ConnectError`` on failure."""
    return await LedgerConnection(config, signer=signer).connect()
