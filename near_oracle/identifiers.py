"""Price identifiers — symbol to 32-byte lookup key.

Two derivation conventions exist and an oracle registry is populated
under exactly one of them:

* ``TRUNCATE_PAD`` copies the UTF-8 bytes of the symbol into a zeroed
  32-byte buffer, dropping anything past byte 32. Lossy; legacy only.
* ``DIGEST`` is the SHA-256 of the UTF-8 bytes. Default.

Identifiers carry the method that produced them so values from the two
conventions never compare equal.
"""
from __future__ import annotations

import enum
import hashlib
from dataclasses import dataclass

from .errors import InvalidIdentifierError

IDENTIFIER_SIZE = 32


class DerivationMethod(str, enum.Enum):
    TRUNCATE_PAD = "truncate"
    DIGEST = "digest"
    # Decoded from a published hex feed id rather than derived from a symbol
    FEED_ID = "feed_id"


@dataclass(frozen=True)
class PriceIdentifier:
    """Canonical 32-byte oracle key tagged with its derivation method."""

    raw: bytes
    method: DerivationMethod

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != IDENTIFIER_SIZE:
            raise InvalidIdentifierError(
                f"Identifier must be exactly {IDENTIFIER_SIZE} bytes, "
                f"got {_describe_length(self.raw)}"
            )

    def __bytes__(self) -> bytes:
        return self.raw

    def __len__(self) -> int:
        return len(self.raw)

    def hex(self) -> str:
        return self.raw.hex()

    @classmethod
    def from_symbol_truncated(cls, symbol: str) -> PriceIdentifier:
        """Left-align the UTF-8 encoding in 32 zero bytes, truncating overflow."""
        encoded = _encode_symbol(symbol)[:IDENTIFIER_SIZE]
        return cls(encoded.ljust(IDENTIFIER_SIZE, b"\x00"), DerivationMethod.TRUNCATE_PAD)

    @classmethod
    def from_symbol_digest(cls, symbol: str) -> PriceIdentifier:
        """SHA-256 of the UTF-8 encoding."""
        digest = hashlib.sha256(_encode_symbol(symbol)).digest()
        return cls(digest, DerivationMethod.DIGEST)

    @classmethod
    def from_feed_id(cls, feed_id: str) -> PriceIdentifier:
        """Decode a 64-digit hex feed id, with or without a ``0x`` prefix."""
        text = feed_id.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidIdentifierError(f"Feed id is not valid hex: {feed_id!r}") from e
        return cls(raw, DerivationMethod.FEED_ID)


def derive(
    symbol: str, method: DerivationMethod = DerivationMethod.DIGEST
) -> PriceIdentifier:
    """Derive the identifier for ``symbol`` under ``method``."""
    method = DerivationMethod(method)
    if method is DerivationMethod.DIGEST:
        return PriceIdentifier.from_symbol_digest(symbol)
    if method is DerivationMethod.TRUNCATE_PAD:
        return PriceIdentifier.from_symbol_truncated(symbol)
    raise ValueError(f"{method.value!r} is not a symbol derivation method")


def _encode_symbol(symbol: str) -> bytes:
    """UTF-8 bytes with lone surrogates replaced by U+FFFD."""
    return symbol.encode("utf-16", "surrogatepass").decode("utf-16", "replace").encode("utf-8")


def _describe_length(value: object) -> str:
    try:
        return f"{len(value)} bytes"  # type: ignore[arg-type]
    except TypeError:
        return type(value).__name__
