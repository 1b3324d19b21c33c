"""Unit tests for credential stores."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from near_oracle.errors import InvalidConfigError
from near_oracle.keystore import FileSystemKeyStore, InMemoryKeyStore, KeyPair


class TestInMemoryKeyStore:
    def test_empty_by_default(self) -> None:
        store = InMemoryKeyStore()
        assert len(store) == 0
        assert store.get_key("testnet", "kenobi.testnet") is None

    def test_set_and_get(self, key_pair: KeyPair) -> None:
        store = InMemoryKeyStore()
        store.set_key("testnet", key_pair)
        assert store.get_key("testnet", "kenobi.testnet") == key_pair
        assert store.get_key("mainnet", "kenobi.testnet") is None

    def test_remove(self, key_pair: KeyPair) -> None:
        store = InMemoryKeyStore()
        store.set_key("testnet", key_pair)
        store.remove_key("testnet", "kenobi.testnet")
        assert store.get_key("testnet", "kenobi.testnet") is None

    def test_secret_not_in_repr(self, key_pair: KeyPair) -> None:
        assert "SECRET" not in repr(key_pair)


class TestFileSystemKeyStore:
    def _write_key(self, root: Path, content: str) -> None:
        path = root / "testnet" / "kenobi.testnet.json"
        path.parent.mkdir(parents=True)
        path.write_text(content)

    def test_reads_near_cli_file(self, tmp_path: Path) -> None:
        self._write_key(
            tmp_path,
            json.dumps(
                {
                    "account_id": "kenobi.testnet",
                    "public_key": "ed25519:PUB",
                    "private_key": "ed25519:PRIV",
                }
            ),
        )
        key = FileSystemKeyStore(tmp_path).get_key("testnet", "kenobi.testnet")
        assert key == KeyPair("kenobi.testnet", "ed25519:PUB", "ed25519:PRIV")

    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert FileSystemKeyStore(tmp_path).get_key("testnet", "kenobi.testnet") is None

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        self._write_key(tmp_path, "{not json")
        with pytest.raises(InvalidConfigError, match="Cannot read"):
            FileSystemKeyStore(tmp_path).get_key("testnet", "kenobi.testnet")

    def test_missing_key_material_raises(self, tmp_path: Path) -> None:
        self._write_key(tmp_path, json.dumps({"account_id": "kenobi.testnet"}))
        with pytest.raises(InvalidConfigError, match="missing key material"):
            FileSystemKeyStore(tmp_path).get_key("testnet", "kenobi.testnet")

    def test_expands_user(self) -> None:
        assert "~" not in str(FileSystemKeyStore("~/.near-credentials").root)
