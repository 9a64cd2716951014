from .node import FakeNode, MockResponse, RpcFault
from .factories import (
    STATE_ROOT,
    OTHER_STATE_ROOT,
    SIGNER_KEY,
    VALIDATOR_KEY,
    SECP_KEY,
    SIGNER_PURSE,
    VALIDATOR_PURSE,
    ALICE_PURSE,
    BOB_PURSE,
    BLOCK_TIMESTAMP_MS,
    account_hash_key,
    mk_block,
    mk_deploy,
    mk_deploy_info,
    mk_hash,
    mk_payment,
    mk_transfer,
)

__all__ = [
    "FakeNode",
    "MockResponse",
    "RpcFault",
    "STATE_ROOT",
    "OTHER_STATE_ROOT",
    "SIGNER_KEY",
    "VALIDATOR_KEY",
    "SECP_KEY",
    "SIGNER_PURSE",
    "VALIDATOR_PURSE",
    "ALICE_PURSE",
    "BOB_PURSE",
    "BLOCK_TIMESTAMP_MS",
    "account_hash_key",
    "mk_block",
    "mk_deploy",
    "mk_deploy_info",
    "mk_hash",
    "mk_payment",
    "mk_transfer",
]
