"""
Casper data client.

Composes the purse resolver, balance query, transfer aggregator and
transaction assembler into the reads behind the Rosetta data API. Every
method pins one block (and so one state root) per call.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from ..rosetta import types as rosetta
from ..runtime.context import RequestContext
from ..runtime.errors import (
    CasperRosettaError,
    IncompleteBlockError,
    NotFoundError,
    UnsupportedIdentifierError,
)
from .address import parse_address
from .aggregator import group_transfers_by_deploy
from .assembler import TransactionAssembler
from .balance import BalanceQuery
from .constants import GENESIS_BLOCK_INDEX, ChainConstants
from .purse import PurseResolver
from .rpc import CasperRpcClient, RpcClientConfig
from .types import Block, Transfer

if TYPE_CHECKING:
    from ..configuration import Configuration

logger = logging.getLogger(__name__)


class Client:
    """
    Read-path client for the Rosetta data API.

    Example:
        ```python
        client = Client(CasperRpcClient(node_url), ChainConstants.mainnet())
        block = client.block(PartialBlockIdentifier(index=1000))
        ```
    """

    def __init__(self, rpc: CasperRpcClient, constants: ChainConstants, max_concurrency: int = 16):
        """
        Args:
            rpc: Node RPC client
            constants: Chain metadata shared by every response
            max_concurrency: Deploys assembled in parallel per block (1 = sequential)
        """
        self.rpc = rpc
        self.constants = constants
        self.max_concurrency = max(1, max_concurrency)
        self.resolver = PurseResolver(rpc)
        self.balances = BalanceQuery(rpc)
        self.assembler = TransactionAssembler(rpc, self.resolver, constants)

    @classmethod
    def from_configuration(cls, config: "Configuration") -> Client:
        rpc = CasperRpcClient(RpcClientConfig(endpoint=config.node_url, timeout=config.rpc_timeout,
                                              pool_maxsize=config.max_concurrency))
        return cls(rpc, config.constants, config.max_concurrency)

    def close(self) -> None:
        self.rpc.close()

    # =========================================================================
    # Blocks
    # =========================================================================

    def fetch_block(self, identifier: Optional[rosetta.PartialBlockIdentifier],
                    ctx: Optional[RequestContext] = None, allow_latest: bool = True) -> Block:
        """
        Fetch a node block by hash, else by height, else the latest one.

        Raises:
            UnsupportedIdentifierError: Empty identifier and ``allow_latest`` is False
            NotFoundError: No such block, or hash and index disagree
        """
        if identifier is None or identifier.is_empty:
            if not allow_latest:
                raise UnsupportedIdentifierError()
            return self.rpc.get_latest_block(ctx)

        if identifier.hash is not None:
            block = self.rpc.get_block_by_hash(identifier.hash, ctx)
            if identifier.index is not None and block.height != identifier.index:
                raise NotFoundError(
                    f"Block {identifier.hash} is at height {block.height}, not {identifier.index}",
                    details={"block_hash": identifier.hash, "index": identifier.index},
                )
            return block
        return self.rpc.get_block_by_height(identifier.index, ctx)

    @staticmethod
    def block_identifier(block: Block) -> rosetta.BlockIdentifier:
        return rosetta.BlockIdentifier(index=block.height, hash=block.hash)

    @classmethod
    def parent_block_identifier(cls, block: Block) -> rosetta.BlockIdentifier:
        """Genesis is its own parent."""
        if block.height == GENESIS_BLOCK_INDEX:
            return cls.block_identifier(block)
        return rosetta.BlockIdentifier(index=block.height - 1, hash=block.header.parent_hash)

    def block(self, identifier: Optional[rosetta.PartialBlockIdentifier] = None,
              ctx: Optional[RequestContext] = None) -> rosetta.Block:
        """
        Build the Rosetta block for ``identifier`` (latest when empty).

        Raises:
            IncompleteBlockError: Some deploys failed; all were attempted
        """
        node_block = self.fetch_block(identifier, ctx)
        transfers = self.rpc.get_block_transfers_by_hash(node_block.hash, ctx)
        grouped = group_transfers_by_deploy(transfers, node_block.all_deploy_hashes)
        transactions = self._build_transactions(node_block, grouped, ctx)

        logger.info(f"Built block {node_block.height} ({node_block.hash}) with "
                    f"{len(transactions)} transactions from {len(transfers)} transfers")

        return rosetta.Block(
            block_identifier=self.block_identifier(node_block),
            parent_block_identifier=self.parent_block_identifier(node_block),
            timestamp=node_block.header.timestamp_ms,
            transactions=transactions,
        )

    def block_transaction(self, block_identifier: rosetta.BlockIdentifier,
                          transaction_identifier: rosetta.TransactionIdentifier,
                          ctx: Optional[RequestContext] = None) -> rosetta.Transaction:
        """
        Build the transaction of a single deploy of a block.

        Raises:
            NotFoundError: The deploy is not part of the block
        """
        partial = rosetta.PartialBlockIdentifier(index=block_identifier.index, hash=block_identifier.hash)
        node_block = self.fetch_block(partial, ctx, allow_latest=False)
        deploy_hash = transaction_identifier.hash
        if deploy_hash not in node_block.all_deploy_hashes:
            raise NotFoundError(
                f"Deploy {deploy_hash} is not in block {node_block.hash}",
                details={"deploy_hash": deploy_hash, "block_hash": node_block.hash},
            )

        transfers = [t for t in self.rpc.get_block_transfers_by_hash(node_block.hash, ctx)
                     if t.deploy_hash == deploy_hash]
        validator_purse = self._validator_purse(node_block, ctx)
        return self.assembler.build_transaction(deploy_hash, transfers, node_block, validator_purse, ctx)

    def _validator_purse(self, block: Block, ctx: Optional[RequestContext]) -> str:
        try:
            return self.resolver.resolve_purse(block.proposer, block.state_root_hash, ctx)
        except CasperRosettaError as e:
            raise e.with_details(block_hash=block.hash, stage="validator_purse")

    def _build_transactions(self, block: Block, grouped: Dict[str, List[Transfer]],
                            ctx: Optional[RequestContext]) -> List[rosetta.Transaction]:
        if not grouped:
            return []

        validator_purse = self._validator_purse(block, ctx)
        built: Dict[str, rosetta.Transaction] = {}
        failures: Dict[str, CasperRosettaError] = {}

        def record(deploy_hash: str, build) -> None:
            try:
                built[deploy_hash] = build()
            except CasperRosettaError as e:
                logger.warning(f"Deploy {deploy_hash} of block {block.hash} failed: {e}")
                failures[deploy_hash] = e

        if self.max_concurrency == 1 or len(grouped) == 1:
            for deploy_hash, transfers in grouped.items():
                record(deploy_hash, lambda: self.assembler.build_transaction(
                    deploy_hash, transfers, block, validator_purse, ctx))
        else:
            workers = min(self.max_concurrency, len(grouped))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {
                    pool.submit(self.assembler.build_transaction, deploy_hash, transfers,
                                block, validator_purse, ctx): deploy_hash
                    for deploy_hash, transfers in grouped.items()
                }
                for future in as_completed(futures):
                    record(futures[future], future.result)

        if failures:
            if ctx is not None:
                ctx.check(stage="block")
            raise IncompleteBlockError(block.hash, failures, [built[h] for h in grouped if h in built])

        return [built[deploy_hash] for deploy_hash in grouped]

    # =========================================================================
    # Accounts
    # =========================================================================

    def balance(self, account: rosetta.AccountIdentifier,
                block: Optional[rosetta.PartialBlockIdentifier] = None,
                ctx: Optional[RequestContext] = None) -> rosetta.AccountBalanceResponse:
        """
        Balance of an account at a block (latest when empty).

        The address may be an account hash, a purse URef or a public key.
        """
        address = parse_address(account.address)
        node_block = self.fetch_block(block, ctx)
        purse = self.resolver.resolve_purse(address, node_block.state_root_hash, ctx)
        value = self.balances.get_balance(purse, node_block.state_root_hash, ctx)

        return rosetta.AccountBalanceResponse(
            block_identifier=self.block_identifier(node_block),
            balances=[rosetta.Amount(value=str(value), currency=self.constants.currency)],
            metadata={},
        )

    # =========================================================================
    # Node status
    # =========================================================================

    def status(self, ctx: Optional[RequestContext] = None
               ) -> Tuple[rosetta.BlockIdentifier, int, Sequence[rosetta.Peer]]:
        """Latest block identifier, its timestamp in milliseconds, and peers."""
        latest = self.rpc.get_latest_block(ctx)
        peers = [
            rosetta.Peer(peer_id=peer.address, metadata={"node_id": peer.node_id})
            for peer in self.rpc.get_peers(ctx)
        ]
        return self.block_identifier(latest), latest.header.timestamp_ms, peers
