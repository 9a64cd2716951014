"""
CLValue helpers.

Deploy runtime args arrive as ``[name, {"cl_type": ..., "bytes": ..., "parsed": ...}]``
pairs. The node usually fills ``parsed``; when it does not, U512 values are
decoded from ``bytes`` (one length byte followed by that many little-endian
bytes).
"""

from __future__ import annotations
from typing import Any, Optional

from ..runtime.errors import UnableToParseError
from .types import Deploy

PAYMENT_AMOUNT_ARG = "amount"


def decode_u512(hex_bytes: str) -> int:
    """
    Decode a serialized U512.

    Args:
        hex_bytes: Hex of the length-prefixed little-endian integer

    Returns:
        The decoded non-negative integer

    Raises:
        UnableToParseError: If the hex or the length prefix is malformed
    """
    try:
        raw = bytes.fromhex(hex_bytes)
    except ValueError as e:
        raise UnableToParseError(f"Invalid U512 hex: {hex_bytes!r}", cause=e) from e
    if not raw:
        raise UnableToParseError("Empty U512 encoding")
    length = raw[0]
    if length > 64 or len(raw) != 1 + length:
        raise UnableToParseError(f"Bad U512 length prefix {length} for {len(raw) - 1} bytes")
    return int.from_bytes(raw[1:], "little")


def find_arg(args: list, name: str) -> Optional[Any]:
    """Return the CLValue named ``name`` from a runtime args list."""
    for entry in args:
        if isinstance(entry, (list, tuple)) and len(entry) == 2 and entry[0] == name:
            return entry[1]
    return None


def clvalue_to_int(value: Any) -> int:
    if not isinstance(value, dict):
        raise UnableToParseError(f"CLValue must be an object, got {type(value).__name__}")
    parsed = value.get("parsed")
    if parsed is not None:
        try:
            return int(parsed)
        except (TypeError, ValueError) as e:
            raise UnableToParseError(f"CLValue parsed value is not an integer: {parsed!r}", cause=e) from e
    if "bytes" in value:
        return decode_u512(value["bytes"])
    raise UnableToParseError("CLValue has neither parsed nor bytes")


def read_payment_amount(deploy: Deploy) -> Optional[str]:
    """
    Read the explicit payment amount of a deploy.

    Returns:
        Decimal string, or None when the payment clause has no ``amount`` arg
    """
    value = find_arg(deploy.payment_args, PAYMENT_AMOUNT_ARG)
    if value is None:
        return None
    try:
        return str(clvalue_to_int(value))
    except UnableToParseError as e:
        raise e.with_details(deploy_hash=deploy.hash, stage="read_payment_amount")
