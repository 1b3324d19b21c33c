"""NEAR JSON-RPC transport over aiohttp."""
from __future__ import annotations

import asyncio
import base64
import json
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from .errors import MalformedResponseError, QueryError, QueryUnreachableError

logger = logging.getLogger(__name__)

IDENTIFIER_ENCODINGS = ("array", "base64", "hex")


def encode_identifier(raw: bytes, encoding: str = "array") -> Any:
    """Encode 32 raw identifier bytes as a JSON argument value."""
    if encoding == "array":
        return list(raw)
    if encoding == "base64":
        return base64.b64encode(raw).decode("ascii")
    if encoding == "hex":
        return raw.hex()
    raise ValueError(f"Unknown identifier encoding '{encoding}'")


def _describe_rpc_error(error: Any) -> str:
    if isinstance(error, dict):
        cause = error.get("cause") or {}
        name = cause.get("name") if isinstance(cause, dict) else None
        detail = error.get("data") or error.get("message") or error.get("name")
        if name:
            return f"{name}: {detail}"
        return str(detail)
    return str(error)


class NearRpcClient:
    """Single-endpoint JSON-RPC client bound to one HTTP session."""

    def __init__(self, node_url: str, timeout: float | None = None) -> None:
        self.node_url = node_url
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None
        self._request_id = 0

    @property
    def is_open(self) -> bool:
        return self._session is not None

    async def open(self) -> None:
        if self._session is not None:
            return
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        self._session = aiohttp.ClientSession(connector=connector)

    async def close(self) -> None:
        if self._session is not None:
            session, self._session = self._session, None
            await session.close()

    async def rpc_call(self, method: str, params: Any) -> Any:
        """POST one JSON-RPC request and return its ``result`` member."""
        if self._session is None:
            raise RuntimeError("RPC client is not open")

        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        try:
            async with self._session.post(
                self.node_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    if response.status != 200:
                        raise QueryUnreachableError(
                            f"{self.node_url} answered HTTP {response.status}"
                        ) from e
                    raise MalformedResponseError(
                        f"{self.node_url} returned a non-JSON body"
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise QueryUnreachableError(f"{self.node_url} unreachable: {e}") from e

        if not isinstance(body, dict):
            raise MalformedResponseError(f"Unexpected RPC envelope: {body!r}")
        if body.get("error") is not None:
            raise QueryError(f"RPC Error: {_describe_rpc_error(body['error'])}")
        if "result" not in body:
            raise MalformedResponseError("RPC response has neither result nor error")
        return body["result"]

    async def status(self) -> dict[str, Any]:
        """Node status, including ``chain_id``."""
        result = await self.rpc_call("status", [])
        if not isinstance(result, dict):
            raise MalformedResponseError(f"Unexpected status payload: {result!r}")
        return result

    async def call_function(
        self, account_id: str, method_name: str, args: dict[str, Any]
    ) -> Any:
        """Run a view method at final finality and decode its JSON return value."""
        args_base64 = base64.b64encode(json.dumps(args).encode("utf-8")).decode("ascii")
        result = await self.rpc_call(
            "query",
            {
                "request_type": "call_function",
                "finality": "final",
                "account_id": account_id,
                "method_name": method_name,
                "args_base64": args_base64,
            },
        )

        if not isinstance(result, dict):
            raise MalformedResponseError(f"Unexpected query payload: {result!r}")
        # Older nodes report contract failures inside an otherwise successful result
        if result.get("error"):
            raise QueryError(f"{account_id}.{method_name} failed: {result['error']}")

        raw = result.get("result")
        if not isinstance(raw, list):
            raise MalformedResponseError(
                f"{account_id}.{method_name} returned no result bytes"
            )
        try:
            text = bytes(raw).decode("utf-8")
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"{account_id}.{method_name} returned invalid bytes"
            ) from e
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise MalformedResponseError(
                f"{account_id}.{method_name} returned non-JSON data: {text[:80]!r}"
            ) from e
