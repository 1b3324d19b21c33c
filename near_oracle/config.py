"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import InvalidConfigError
from .identifiers import DerivationMethod, PriceIdentifier
from .interfaces.key_store import KeyStore
from .keystore import DEFAULT_CREDENTIALS_DIR, FileSystemKeyStore, InMemoryKeyStore
from .rpc import IDENTIFIER_ENCODINGS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NetworkConfig:
    network_id: str = "testnet"
    node_url: str = "https://rpc.testnet.near.org"
    rpc_timeout: float | None = None


@dataclass(frozen=True)
class CredentialsConfig:
    store: str = "memory"
    path: str = str(DEFAULT_CREDENTIALS_DIR)


@dataclass(frozen=True)
class OracleConfig:
    contract_id: str = "pyth.testnet"
    identifier_method: DerivationMethod = DerivationMethod.DIGEST
    identifier_encoding: str = "array"
    argument_name: str = "price_identifier"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceDataOracleConfig:
    contract_id: str = "priceoracle.testnet"


@dataclass(frozen=True)
class AppConfig:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    signer_account_id: str | None = None
    oracle: OracleConfig = field(default_factory=OracleConfig)
    price_data_oracle: PriceDataOracleConfig = field(
        default_factory=PriceDataOracleConfig
    )


@dataclass(frozen=True)
class ConnectionConfig:
    """Everything ``connect`` needs to open a ledger session."""

    network_id: str
    node_url: str
    key_store: KeyStore = field(default_factory=InMemoryKeyStore)
    signer_account_id: str | None = None
    rpc_timeout: float | None = None


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _build_network(raw: dict[str, Any]) -> NetworkConfig:
    return NetworkConfig(
        network_id=raw.get("network_id", NetworkConfig.network_id),
        node_url=raw.get("node_url", NetworkConfig.node_url),
        rpc_timeout=_optional_float(raw.get("rpc_timeout")),
    )


def _build_credentials(raw: dict[str, Any]) -> CredentialsConfig:
    return CredentialsConfig(
        store=raw.get("store", CredentialsConfig.store),
        path=raw.get("path", CredentialsConfig.path),
    )


def _build_oracle(raw: dict[str, Any]) -> OracleConfig:
    method = raw.get("identifier_method", DerivationMethod.DIGEST.value)
    try:
        identifier_method = DerivationMethod(method)
    except ValueError as e:
        raise InvalidConfigError(f"Unknown identifier method '{method}'") from e
    return OracleConfig(
        contract_id=raw.get("contract_id", OracleConfig.contract_id),
        identifier_method=identifier_method,
        identifier_encoding=raw.get("identifier_encoding", "array"),
        argument_name=raw.get("argument_name", OracleConfig.argument_name),
        feeds={str(k): str(v) for k, v in (raw.get("feeds") or {}).items()},
    )


def _build_price_data_oracle(raw: dict[str, Any]) -> PriceDataOracleConfig:
    return PriceDataOracleConfig(
        contract_id=raw.get("contract_id", PriceDataOracleConfig.contract_id),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        network=_build_network(raw.get("network") or {}),
        credentials=_build_credentials(raw.get("credentials") or {}),
        signer_account_id=raw.get("signer_account_id") or None,
        oracle=_build_oracle(raw.get("oracle") or {}),
        price_data_oracle=_build_price_data_oracle(raw.get("price_data_oracle") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.credentials.store not in ("file", "memory"):
        raise InvalidConfigError(
            f"Unknown credential store '{cfg.credentials.store}' (expected file or memory)"
        )
    if cfg.oracle.identifier_method is DerivationMethod.FEED_ID:
        raise InvalidConfigError("identifier_method must be 'digest' or 'truncate'")
    if cfg.oracle.identifier_encoding not in IDENTIFIER_ENCODINGS:
        raise InvalidConfigError(
            f"Unknown identifier encoding '{cfg.oracle.identifier_encoding}'"
        )
    if not cfg.oracle.contract_id:
        raise InvalidConfigError("oracle.contract_id is required")
    for symbol, feed_id in cfg.oracle.feeds.items():
        try:
            PriceIdentifier.from_feed_id(feed_id)
        except ValueError as e:
            raise InvalidConfigError(f"Feed '{symbol}' has an invalid id: {e}") from e


def build_key_store(credentials: CredentialsConfig) -> KeyStore:
    if credentials.store == "file":
        return FileSystemKeyStore(credentials.path)
    return InMemoryKeyStore()


def connection_config_from(cfg: AppConfig) -> ConnectionConfig:
    """Translate application config into the connection settings."""
    return ConnectionConfig(
        network_id=cfg.network.network_id,
        node_url=cfg.network.node_url,
        key_store=build_key_store(cfg.credentials),
        signer_account_id=cfg.signer_account_id,
        rpc_timeout=cfg.network.rpc_timeout,
    )
