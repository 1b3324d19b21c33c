"""Shared test fixtures and a fake NEAR RPC node."""
from __future__ import annotations

import base64
import json
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from near_oracle.config import (
    AppConfig,
    ConnectionConfig,
    CredentialsConfig,
    NetworkConfig,
    OracleConfig,
)
from near_oracle.keystore import InMemoryKeyStore, KeyPair
from near_oracle.models import PriceRecord

# SHA-256("BTC/USD")
BTC_USD_DIGEST_HEX = "7b4c9651c426361ed0e6bd9a9b3e70d71ec9507686a12b899c50c1faba8db94d"
# SHA-256("")
EMPTY_DIGEST_HEX = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
NEAR_USD_FEED_ID = "c415de8d2eba7db216527dff4b60e8f3a5311c740dadb233e13e12547e226750"

NODE_URL = "https://rpc.testnet.example.com"
PYTH_CONTRACT = "pyth.testnet"


# ---------------------------------------------------------------------------
# Fake node
# ---------------------------------------------------------------------------


class FakeNearNode:
    """Answers ``status`` and ``query`` JSON-RPC requests from registered handlers."""

    def __init__(self, chain_id: str = "testnet") -> None:
        self.chain_id = chain_id
        self.views: dict[tuple[str, str], Callable[[dict[str, Any]], Any]] = {}
        self.requests: list[dict[str, Any]] = []
        self.post_error: Exception | None = None

    def on_view(
        self, account_id: str, method_name: str, handler: Callable[[dict[str, Any]], Any]
    ) -> None:
        self.views[(account_id, method_name)] = handler

    @property
    def query_requests(self) -> list[dict[str, Any]]:
        return [r for r in self.requests if r["method"] == "query"]

    def _answer(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(payload)
        if payload["method"] == "status":
            return {"jsonrpc": "2.0", "id": payload["id"], "result": {"chain_id": self.chain_id}}

        params = payload["params"]
        handler = self.views.get((params["account_id"], params["method_name"]))
        if handler is None:
            return {
                "jsonrpc": "2.0",
                "id": payload["id"],
                "error": {
                    "name": "HANDLER_ERROR",
                    "cause": {"name": "UNKNOWN_ACCOUNT"},
                    "data": f"account {params['account_id']} does not exist",
                },
            }

        args = json.loads(base64.b64decode(params["args_base64"]))
        value = handler(args)
        return {
            "jsonrpc": "2.0",
            "id": payload["id"],
            "result": {
                "result": list(json.dumps(value).encode("utf-8")),
                "logs": [],
                "block_height": 1,
            },
        }

    def session(self) -> AsyncMock:
        def post(*args: Any, **kwargs: Any) -> AsyncMock:
            if self.post_error is not None:
                raise self.post_error
            mock_response = AsyncMock()
            mock_response.status = 200
            mock_response.json = AsyncMock(return_value=self._answer(kwargs["json"]))
            mock_response.__aenter__ = AsyncMock(return_value=mock_response)
            mock_response.__aexit__ = AsyncMock(return_value=None)
            return mock_response

        mock_session = AsyncMock()
        mock_session.post = MagicMock(side_effect=post)
        return mock_session


def pyth_registry_handler(
    registry: dict[str, dict[str, Any]],
) -> Callable[[dict[str, Any]], Any]:
    """View handler resolving ``price_identifier`` byte arrays against ``registry``."""

    def handler(args: dict[str, Any]) -> Any:
        key = bytes(args["price_identifier"]).hex()
        return registry.get(key)

    return handler


@pytest.fixture()
def fake_node() -> Iterator[FakeNearNode]:
    node = FakeNearNode()
    with patch(
        "near_oracle.rpc.aiohttp.ClientSession", side_effect=lambda *a, **k: node.session()
    ):
        with patch("near_oracle.rpc.aiohttp.TCPConnector"):
            yield node


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def key_pair() -> KeyPair:
    return KeyPair(
        account_id="kenobi.testnet",
        public_key="ed25519:PUBLIC",
        secret_key="ed25519:SECRET",
    )


@pytest.fixture()
def connection_config() -> ConnectionConfig:
    return ConnectionConfig(
        network_id="testnet",
        node_url=NODE_URL,
        key_store=InMemoryKeyStore(),
        signer_account_id="kenobi.testnet",
    )


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        network=NetworkConfig(network_id="testnet", node_url=NODE_URL),
        credentials=CredentialsConfig(store="memory"),
        signer_account_id="kenobi.testnet",
        oracle=OracleConfig(
            contract_id=PYTH_CONTRACT,
            feeds={"NEAR/USD": NEAR_USD_FEED_ID},
        ),
    )


@pytest.fixture()
def btc_usd_record_json() -> dict[str, Any]:
    return {
        "price": "6512345000000",
        "conf": "2100000000",
        "expo": -8,
        "publish_time": 1700000000,
    }


@pytest.fixture()
def btc_usd_record() -> PriceRecord:
    return PriceRecord(
        price=6512345000000, conf=2100000000, expo=-8, publish_time=1700000000
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    network:
      network_id: testnet
      node_url: "https://rpc.example.com"
      rpc_timeout: 15
    credentials:
      store: file
      path: /tmp/creds
    signer_account_id: kenobi.testnet
    oracle:
      contract_id: pyth.testnet
      identifier_method: digest
      identifier_encoding: base64
      feeds:
        NEAR/USD: "0xc415de8d2eba7db216527dff4b60e8f3a5311c740dadb233e13e12547e226750"
    price_data_oracle:
      contract_id: priceoracle.testnet
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
