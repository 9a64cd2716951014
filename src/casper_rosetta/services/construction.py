"""
Rosetta Construction API.

Only the offline-safe preparation steps are served: deriving an account
from a public key, collecting transfer options from the intended operations,
and echoing them back as metadata. Building, signing and submitting deploys
is not supported.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from ..casper.address import Algorithm, PublicKeyAddress, parse_address
from ..configuration import Configuration
from ..rosetta.types import AccountIdentifier, Amount, NetworkIdentifier, Operation, PublicKey
from ..runtime.errors import (
    InvalidAddressError,
    UnableToParseError,
    UnavailableOfflineError,
    UnimplementedError,
)

logger = logging.getLogger(__name__)

CHAIN_NAME = "chain_name"
TRANSFER_AMOUNT = "transfer_amount"
PAYMENT_AMOUNT = "payment_amount"
TARGET = "target"
SOURCE = "source"
GAS_PRICE = "gas_price"
TRANSFER_ID = "transfer_id"

DEFAULT_GAS_PRICE = "1"

TRANSFER_OPTIONS = (CHAIN_NAME, TRANSFER_AMOUNT, TARGET, SOURCE, GAS_PRICE, PAYMENT_AMOUNT, TRANSFER_ID)

CURVE_ALGORITHMS = {
    "edwards25519": Algorithm.ED25519,
    "secp256k1": Algorithm.SECP256K1,
}


class ConstructionAPIService:
    def __init__(self, config: Configuration):
        self.config = config

    def derive(self, public_key: PublicKey) -> AccountIdentifier:
        """
        Derive the account identifier of a public key.

        Args:
            public_key: Raw key bytes (hex, without tag byte) and curve type

        Returns:
            AccountIdentifier whose address is the tagged public key hex; the
            account hash is kept in metadata

        Raises:
            InvalidAddressError: Unsupported curve or wrong key length
        """
        algorithm = CURVE_ALGORITHMS.get(public_key.curve_type)
        if algorithm is None:
            raise InvalidAddressError(f"Unsupported curve type {public_key.curve_type!r}",
                                      address=public_key.hex_bytes)

        key = PublicKeyAddress(algorithm, self._key_bytes(public_key.hex_bytes, algorithm))
        return AccountIdentifier(address=key.hex, metadata={"account_hash": key.account_hash().key})

    @staticmethod
    def _key_bytes(hex_bytes: str, algorithm: Algorithm) -> bytes:
        try:
            raw = bytes.fromhex(hex_bytes)
        except ValueError as e:
            raise InvalidAddressError("Malformed public key hex", address=hex_bytes, cause=e) from e
        if len(raw) != algorithm.key_length:
            raise InvalidAddressError(
                f"Expected {algorithm.key_length} byte {algorithm.value} key, got {len(raw)}",
                address=hex_bytes,
            )
        return raw

    def preprocess(self, network_identifier: NetworkIdentifier, operations: List[Operation],
                   max_fee: Optional[List[Amount]] = None) -> Dict[str, Any]:
        """
        Collect transfer options from a debit/credit operation pair.

        Operation 0 is the sender, operation 1 the recipient and carries the
        transfer amount and optional ``transfer_id`` metadata. The first
        max fee entry becomes the payment amount.

        Returns:
            ``{"options": {...}, "required_public_keys": [AccountIdentifier]}``

        Raises:
            InvalidAddressError: A sender or recipient address is malformed
            UnableToParseError: The operation pair or max fee is missing
        """
        options: Dict[str, Any] = {CHAIN_NAME: network_identifier.network, GAS_PRICE: DEFAULT_GAS_PRICE}
        required: List[AccountIdentifier] = []

        for operation in operations:
            if operation.account is None:
                continue
            if operation.index == 0:
                parse_address(operation.account.address)
                options[SOURCE] = operation.account.address
                required.append(AccountIdentifier(address=operation.account.address))
            elif operation.index == 1:
                parse_address(operation.account.address)
                if operation.amount is None:
                    raise UnableToParseError("Transfer operation has no amount",
                                             details={"operation_index": 1})
                options[TRANSFER_AMOUNT] = str(abs(operation.amount.as_int))
                options[TARGET] = operation.account.address
                options[TRANSFER_ID] = (operation.metadata or {}).get(TRANSFER_ID)

        for name in (SOURCE, TARGET):
            if name not in options:
                raise UnableToParseError(f"Missing {name} operation", details={"option": name})
        if not max_fee:
            raise UnableToParseError("A max fee is required to set the payment amount")
        options[PAYMENT_AMOUNT] = max_fee[0].value

        logger.debug(f"Preprocessed transfer {options[SOURCE]} -> {options[TARGET]}")
        return {"options": options, "required_public_keys": required}

    def metadata(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Echo the transfer options as construction metadata.

        Raises:
            UnavailableOfflineError: Running in offline mode
        """
        if not self.config.online:
            raise UnavailableOfflineError("/construction/metadata")
        return {
            "metadata": {name: options.get(name) for name in TRANSFER_OPTIONS},
            "suggested_fee": [],
        }

    def payloads(self, operations: List[Operation], metadata: Dict[str, Any]) -> Dict[str, Any]:
        raise UnimplementedError("/construction/payloads")

    def combine(self, unsigned_transaction: str, signatures: List[Dict[str, Any]]) -> Dict[str, Any]:
        raise UnimplementedError("/construction/combine")

    def hash(self, signed_transaction: str) -> Dict[str, Any]:
        raise UnimplementedError("/construction/hash")

    def parse(self, transaction: str, signed: bool) -> Dict[str, Any]:
        raise UnimplementedError("/construction/parse")

    def submit(self, signed_transaction: str) -> Dict[str, Any]:
        raise UnimplementedError("/construction/submit")
