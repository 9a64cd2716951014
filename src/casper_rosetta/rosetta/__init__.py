"""Rosetta object models produced by the middleware."""

from .types import (
    Currency,
    Amount,
    AccountIdentifier,
    OperationIdentifier,
    Operation,
    TransactionIdentifier,
    Transaction,
    BlockIdentifier,
    PartialBlockIdentifier,
    Block,
    AccountBalanceResponse,
    NetworkIdentifier,
    Peer,
    OperationStatus,
    PublicKey,
    NetworkStatusResponse,
)

__all__ = [
    "Currency",
    "Amount",
    "AccountIdentifier",
    "OperationIdentifier",
    "Operation",
    "TransactionIdentifier",
    "Transaction",
    "BlockIdentifier",
    "PartialBlockIdentifier",
    "Block",
    "AccountBalanceResponse",
    "NetworkIdentifier",
    "Peer",
    "OperationStatus",
    "PublicKey",
    "NetworkStatusResponse",
]
