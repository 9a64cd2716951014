"""
Casper node JSON-RPC response models.

Only the fields the middleware reads are declared; everything else the node
returns is ignored. Amounts stay decimal strings as the node sends them
(U512 values do not fit a JSON number).
"""

from __future__ import annotations
from datetime import datetime, timezone, timedelta
from typing import Annotated, Optional, List, Any, Dict
from pydantic import AfterValidator, BaseModel, Field, model_validator


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class NodeModel(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}


def _check_u512(value: str) -> str:
    if int(value) < 0:
        raise ValueError(f"amount must be non-negative, got {value}")
    return value


U512 = Annotated[str, AfterValidator(_check_u512)]


class BlockHeader(NodeModel):
    parent_hash: str
    state_root_hash: str
    timestamp: datetime
    era_id: int = 0
    height: int = Field(ge=0)

    @property
    def timestamp_ms(self) -> int:
        """Milliseconds since the Unix epoch."""
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return (ts - _EPOCH) // timedelta(milliseconds=1)


class BlockBody(NodeModel):
    proposer: str
    deploy_hashes: List[str] = Field(default_factory=list)
    transfer_hashes: List[str] = Field(default_factory=list)


class Block(NodeModel):
    """A block as returned by ``chain_get_block``."""

    hash: str
    header: BlockHeader
    body: BlockBody

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def state_root_hash(self) -> str:
        return self.header.state_root_hash

    @property
    def proposer(self) -> str:
        return self.body.proposer

    @property
    def all_deploy_hashes(self) -> List[str]:
        """Deploy hashes followed by native transfer hashes, duplicates removed."""
        return list(dict.fromkeys(self.body.deploy_hashes + self.body.transfer_hashes))


class Transfer(NodeModel):
    """A value movement recorded while executing a deploy."""

    deploy_hash: str
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    source: str
    target: str
    amount: U512
    gas: str = "0"
    id: Optional[int] = None


class DeployHeader(NodeModel):
    account: str
    timestamp: Optional[datetime] = None
    ttl: Optional[str] = None
    gas_price: int = 1
    body_hash: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)
    chain_name: Optional[str] = None


class Approval(NodeModel):
    signer: str
    signature: str


class Deploy(NodeModel):
    """
    A submitted deploy.

    ``payment`` and ``session`` are executable deploy items: single-key
    objects such as ``{"ModuleBytes": {...}}`` or ``{"Transfer": {...}}``.
    """

    hash: str
    header: DeployHeader
    payment: Dict[str, Any] = Field(default_factory=dict)
    session: Dict[str, Any] = Field(default_factory=dict)
    approvals: List[Approval] = Field(default_factory=list)

    @staticmethod
    def _item_args(item: Dict[str, Any]) -> List[Any]:
        for body in item.values():
            if isinstance(body, dict):
                return list(body.get("args") or [])
        return []

    @property
    def payment_args(self) -> List[Any]:
        """Runtime args of the payment clause as ``[name, CLValue]`` pairs."""
        return self._item_args(self.payment)


class SuccessResult(NodeModel):
    cost: U512
    transfers: List[str] = Field(default_factory=list)


class FailureResult(NodeModel):
    cost: U512
    transfers: List[str] = Field(default_factory=list)
    error_message: Optional[str] = None


class ExecutionResultBody(NodeModel):
    success: Optional[SuccessResult] = Field(default=None, alias="Success")
    failure: Optional[FailureResult] = Field(default=None, alias="Failure")

    @model_validator(mode="after")
    def check_exactly_one(self) -> ExecutionResultBody:
        if (self.success is None) == (self.failure is None):
            raise ValueError("execution result must be exactly one of Success or Failure")
        return self

    @property
    def is_failure(self) -> bool:
        return self.failure is not None

    @property
    def cost(self) -> str:
        return self.failure.cost if self.failure is not None else self.success.cost


class ExecutionResult(NodeModel):
    block_hash: str
    result: ExecutionResultBody


class DeployInfo(NodeModel):
    """Result of ``info_get_deploy``."""

    deploy: Deploy
    execution_results: List[ExecutionResult] = Field(default_factory=list)


class AccountRecord(NodeModel):
    account_hash: Optional[str] = None
    main_purse: str


class StoredValue(NodeModel):
    """Result of ``state_get_item``; only accounts are of interest here."""

    account: Optional[AccountRecord] = Field(default=None, alias="Account")


class PeerEntry(NodeModel):
    node_id: str
    address: str
