"""Credential stores holding signing keys per (network, account)."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .errors import InvalidConfigError

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_DIR = Path.home() / ".near-credentials"


@dataclass(frozen=True)
class KeyPair:
    account_id: str
    public_key: str
    secret_key: str = field(repr=False)


class InMemoryKeyStore:
    """Key store backed by a dict. Empty unless keys are added."""

    def __init__(self) -> None:
        self._keys: dict[tuple[str, str], KeyPair] = {}

    def set_key(self, network_id: str, key_pair: KeyPair) -> None:
        self._keys[(network_id, key_pair.account_id)] = key_pair

    def get_key(self, network_id: str, account_id: str) -> KeyPair | None:
        return self._keys.get((network_id, account_id))

    def remove_key(self, network_id: str, account_id: str) -> None:
        self._keys.pop((network_id, account_id), None)

    def __len__(self) -> int:
        return len(self._keys)


class FileSystemKeyStore:
    """Unencrypted near-cli credentials: ``<root>/<network>/<account>.json``."""

    def __init__(self, root: str | Path = DEFAULT_CREDENTIALS_DIR) -> None:
        self.root = Path(root).expanduser()

    def _key_path(self, network_id: str, account_id: str) -> Path:
        return self.root / network_id / f"{account_id}.json"

    def get_key(self, network_id: str, account_id: str) -> KeyPair | None:
        path = self._key_path(network_id, account_id)
        if not path.exists():
            logger.debug("No credentials for %s on %s at %s", account_id, network_id, path)
            return None

        try:
            with open(path) as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidConfigError(f"Cannot read credentials file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise InvalidConfigError(f"Credentials file {path} is not a JSON object")
        secret = raw.get("private_key") or raw.get("secret_key")
        public = raw.get("public_key")
        if not secret or not public:
            raise InvalidConfigError(f"Credentials file {path} is missing key material")

        return KeyPair(
            account_id=raw.get("account_id", account_id),
            public_key=public,
            secret_key=secret,
        )
