"""
Casper address parsing.

Addresses reach the middleware in three encodings. ``parse_address`` turns
the raw string into one of three immutable variants once, at the boundary,
so downstream code dispatches on the variant type instead of re-inspecting
string prefixes:

- ``account-hash-<64 hex>``      -> :class:`AccountHashAddress`
- ``uref-<64 hex>[-<3 octal>]``  -> :class:`PurseAddress`
- ``01<32-byte hex>`` / ``02<33-byte hex>`` -> :class:`PublicKeyAddress`

The account hash of a public key is
``blake2b-256(algorithm_name || 0x00 || raw_public_key)``.
"""

from __future__ import annotations
import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..runtime.errors import InvalidAddressError

ACCOUNT_HASH_PREFIX = "account-hash-"
UREF_PREFIX = "uref-"
DEFAULT_PURSE_ACCESS = "001"

HASH_HEX_LENGTH = 64
_ACCESS_RIGHTS = re.compile(r"^[0-7]{3}$")


class Algorithm(Enum):
    """Public key algorithms and their one-byte tags."""
    ED25519 = "ed25519"
    SECP256K1 = "secp256k1"

    @property
    def tag(self) -> str:
        return _ALGORITHM_TAGS[self]

    @property
    def key_length(self) -> int:
        return _KEY_LENGTHS[self]

    @classmethod
    def from_tag(cls, tag: str) -> Optional[Algorithm]:
        for algorithm, algorithm_tag in _ALGORITHM_TAGS.items():
            if algorithm_tag == tag:
                return algorithm
        return None


_ALGORITHM_TAGS = {Algorithm.ED25519: "01", Algorithm.SECP256K1: "02"}
_KEY_LENGTHS = {Algorithm.ED25519: 32, Algorithm.SECP256K1: 33}


@dataclass(frozen=True)
class AccountHashAddress:
    """Account identified by its 32-byte account hash."""
    hash_hex: str

    @property
    def key(self) -> str:
        """Global-state key of the account."""
        return f"{ACCOUNT_HASH_PREFIX}{self.hash_hex}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class PurseAddress:
    """A purse URef, with its access-rights suffix when one was given."""
    uref_hex: str
    access: Optional[str] = None

    @property
    def canonical(self) -> str:
        """Suffix-free form used as an operation account address."""
        return f"{UREF_PREFIX}{self.uref_hex}"

    @property
    def balance_key(self) -> str:
        """Suffixed form used for balance queries."""
        return f"{self.canonical}-{self.access or DEFAULT_PURSE_ACCESS}"

    def __str__(self) -> str:
        if self.access is None:
            return self.canonical
        return f"{self.canonical}-{self.access}"


@dataclass(frozen=True)
class PublicKeyAddress:
    """Tagged public key of an account."""
    algorithm: Algorithm
    raw: bytes

    @property
    def hex(self) -> str:
        return self.algorithm.tag + self.raw.hex()

    def account_hash(self) -> AccountHashAddress:
        return AccountHashAddress(account_hash_hex(self.algorithm, self.raw))

    def __str__(self) -> str:
        return self.hex


Address = Union[AccountHashAddress, PurseAddress, PublicKeyAddress]


def account_hash_hex(algorithm: Algorithm, raw: bytes) -> str:
    """
    Derive the account hash of a public key.

    Args:
        algorithm: Signature algorithm of the key
        raw: Raw public key bytes, without the tag byte

    Returns:
        Lowercase hex of the 32-byte blake2b digest
    """
    preimage = algorithm.value.encode("ascii") + b"\x00" + raw
    return hashlib.blake2b(preimage, digest_size=32).hexdigest()


def _decode_hex(value: str, address: str, expected_length: int) -> bytes:
    try:
        raw = bytes.fromhex(value)
    except ValueError as e:
        raise InvalidAddressError(f"Malformed hex in address {address!r}", address=address, cause=e) from e
    if len(raw) != expected_length:
        raise InvalidAddressError(
            f"Expected {expected_length} bytes in address {address!r}, got {len(raw)}",
            address=address,
        )
    return raw


def parse_address(address: str) -> Address:
    """
    Parse a raw address string into its tagged variant.

    Args:
        address: Account hash, purse URef or tagged public key

    Returns:
        AccountHashAddress, PurseAddress or PublicKeyAddress

    Raises:
        InvalidAddressError: Unknown shape or malformed hex
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddressError("Address must be a non-empty string", address=str(address))

    if address.startswith(ACCOUNT_HASH_PREFIX):
        hash_hex = address[len(ACCOUNT_HASH_PREFIX):]
        raw = _decode_hex(hash_hex, address, HASH_HEX_LENGTH // 2)
        return AccountHashAddress(raw.hex())

    if address.startswith(UREF_PREFIX):
        parts = address[len(UREF_PREFIX):].split("-")
        if len(parts) > 2:
            raise InvalidAddressError(f"Too many segments in purse {address!r}", address=address)
        raw = _decode_hex(parts[0], address, HASH_HEX_LENGTH // 2)
        access = parts[1] if len(parts) == 2 else None
        if access is not None and not _ACCESS_RIGHTS.match(access):
            raise InvalidAddressError(f"Invalid access rights suffix in purse {address!r}", address=address)
        return PurseAddress(raw.hex(), access)

    algorithm = Algorithm.from_tag(address[:2])
    if algorithm is not None:
        raw = _decode_hex(address[2:], address, algorithm.key_length)
        return PublicKeyAddress(algorithm, raw)

    raise InvalidAddressError(f"Unrecognized address shape {address!r}", address=address)


def purse_without_index(purse: str) -> str:
    """Strip the access-rights suffix from a purse URef string."""
    if purse.startswith(UREF_PREFIX) and purse.count("-") >= 2:
        return purse.rpartition("-")[0]
    return purse
