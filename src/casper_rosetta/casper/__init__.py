"""Casper node access and Rosetta translation."""

from .address import (
    Algorithm,
    AccountHashAddress,
    PurseAddress,
    PublicKeyAddress,
    Address,
    account_hash_hex,
    parse_address,
    purse_without_index,
)
from .aggregator import group_transfers_by_deploy
from .assembler import TransactionAssembler
from .balance import BalanceQuery
from .client import Client
from .clvalue import decode_u512, read_payment_amount
from .constants import ChainConstants
from .purse import PurseResolver
from .rpc import CasperRpcClient, RpcClientConfig

__all__ = [
    "Algorithm",
    "AccountHashAddress",
    "PurseAddress",
    "PublicKeyAddress",
    "Address",
    "account_hash_hex",
    "parse_address",
    "purse_without_index",
    "group_transfers_by_deploy",
    "TransactionAssembler",
    "BalanceQuery",
    "Client",
    "decode_u512",
    "read_payment_amount",
    "ChainConstants",
    "PurseResolver",
    "CasperRpcClient",
    "RpcClientConfig",
]
