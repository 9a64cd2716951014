"""
Rosetta data-API object models.

Pydantic models for the objects this middleware produces. Field names match
the Rosetta JSON schema so ``to_dict()`` output can be served as-is.
"""

from __future__ import annotations
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field, model_validator


class RosettaModel(BaseModel):
    """Base class adding the JSON rendering used at the API boundary."""

    model_config = {"populate_by_name": True}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API-compatible dictionary."""
        return self.model_dump(exclude_none=True)


class Currency(RosettaModel):
    symbol: str
    decimals: int = Field(ge=0)

    model_config = {"frozen": True}


class Amount(RosettaModel):
    """Signed decimal-string integer in the smallest unit of ``currency``."""
    value: str
    currency: Currency

    @model_validator(mode="after")
    def check_integer(self) -> Amount:
        int(self.value)
        return self

    @property
    def as_int(self) -> int:
        return int(self.value)


class AccountIdentifier(RosettaModel):
    address: str
    metadata: Optional[Dict[str, Any]] = None


class OperationIdentifier(RosettaModel):
    index: int = Field(ge=0)


class Operation(RosettaModel):
    operation_identifier: OperationIdentifier
    related_operations: Optional[List[OperationIdentifier]] = None
    type: str
    status: Optional[str] = None
    account: Optional[AccountIdentifier] = None
    amount: Optional[Amount] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def index(self) -> int:
        return self.operation_identifier.index


class TransactionIdentifier(RosettaModel):
    hash: str


class Transaction(RosettaModel):
    transaction_identifier: TransactionIdentifier
    operations: List[Operation] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def hash(self) -> str:
        return self.transaction_identifier.hash


class BlockIdentifier(RosettaModel):
    index: int = Field(ge=0)
    hash: str


class PartialBlockIdentifier(RosettaModel):
    """Block lookup key; both fields empty means "latest" where allowed."""
    index: Optional[int] = Field(default=None, ge=0)
    hash: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.index is None and self.hash is None


class Block(RosettaModel):
    block_identifier: BlockIdentifier
    parent_block_identifier: BlockIdentifier
    timestamp: int = Field(description="Milliseconds since the Unix epoch")
    transactions: List[Transaction] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None


class AccountBalanceResponse(RosettaModel):
    block_identifier: BlockIdentifier
    balances: List[Amount]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NetworkIdentifier(RosettaModel):
    blockchain: str
    network: str

    model_config = {"frozen": True}


class Peer(RosettaModel):
    peer_id: str
    metadata: Optional[Dict[str, Any]] = None


class OperationStatus(RosettaModel):
    status: str
    successful: bool

    model_config = {"frozen": True}


class PublicKey(RosettaModel):
    hex_bytes: str
    curve_type: str


class NetworkStatusResponse(RosettaModel):
    current_block_identifier: BlockIdentifier
    current_block_timestamp: int
    genesis_block_identifier: BlockIdentifier
    peers: List[Peer] = Field(default_factory=list)
