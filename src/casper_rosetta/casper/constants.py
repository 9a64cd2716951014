"""
Casper chain metadata.

``ChainConstants`` is an immutable object built once at startup (see
``Configuration.constants``) and passed by reference into the assembler and
services. Module-level names are plain literals only.
"""

from __future__ import annotations
from typing import Tuple
from pydantic import BaseModel

from ..rosetta.types import BlockIdentifier, Currency, NetworkIdentifier, OperationStatus

BLOCKCHAIN = "Casper"
MAINNET_NETWORK = "casper"
TESTNET_NETWORK = "casper-test"

SYMBOL = "CSPR"
DECIMALS = 9

TRANSFER_OP_TYPE = "TRANSFER"
FEE_OP_TYPE = "FEE"

SUCCESS_STATUS = "SUCCESS"
FAILURE_STATUS = "FAILURE"

GENESIS_BLOCK_INDEX = 0
MAINNET_GENESIS_HASH = "2fe9630b7790852e4409d815b04ca98f37effcdf9097d317b9b9b8ad658f47c8"
TESTNET_GENESIS_HASH = "7952a42ee8568532bc454498a6d5f303423f7cf272880f37af9222a1448efa43"

NODE_VERSION = "1_2_0"
ROSETTA_VERSION = "1.4.10"
MIDDLEWARE_VERSION = "0.0.4"


class ChainConstants(BaseModel):
    """Currency, operation and network metadata for one Casper network."""

    blockchain: str = BLOCKCHAIN
    network: str = MAINNET_NETWORK
    genesis_hash: str = MAINNET_GENESIS_HASH
    currency: Currency = Currency(symbol=SYMBOL, decimals=DECIMALS)
    transfer_op_type: str = TRANSFER_OP_TYPE
    fee_op_type: str = FEE_OP_TYPE
    success_status: str = SUCCESS_STATUS
    failure_status: str = FAILURE_STATUS
    historical_balance_supported: bool = True
    node_version: str = NODE_VERSION
    rosetta_version: str = ROSETTA_VERSION
    middleware_version: str = MIDDLEWARE_VERSION

    model_config = {"frozen": True}

    @classmethod
    def mainnet(cls) -> ChainConstants:
        return cls()

    @classmethod
    def testnet(cls) -> ChainConstants:
        return cls(network=TESTNET_NETWORK, genesis_hash=TESTNET_GENESIS_HASH)

    @property
    def network_identifier(self) -> NetworkIdentifier:
        return NetworkIdentifier(blockchain=self.blockchain, network=self.network)

    @property
    def genesis_block_identifier(self) -> BlockIdentifier:
        return BlockIdentifier(index=GENESIS_BLOCK_INDEX, hash=self.genesis_hash)

    @property
    def operation_types(self) -> Tuple[str, ...]:
        return (self.transfer_op_type, self.fee_op_type)

    @property
    def operation_statuses(self) -> Tuple[OperationStatus, ...]:
        return (
            OperationStatus(status=self.success_status, successful=True),
            OperationStatus(status=self.failure_status, successful=False),
        )
