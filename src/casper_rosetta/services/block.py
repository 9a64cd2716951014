"""Rosetta Block API: /block and /block/transaction."""

from __future__ import annotations
from typing import Optional

from ..casper.client import Client
from ..configuration import Configuration
from ..rosetta.types import Block, BlockIdentifier, PartialBlockIdentifier, Transaction, TransactionIdentifier
from ..runtime.context import RequestContext
from ..runtime.errors import UnavailableOfflineError


class BlockAPIService:
    def __init__(self, config: Configuration, client: Optional[Client] = None):
        self.config = config
        self.client = client

    def _online_client(self, endpoint: str) -> Client:
        if not self.config.online or self.client is None:
            raise UnavailableOfflineError(endpoint)
        return self.client

    def block(self, block_identifier: Optional[PartialBlockIdentifier] = None,
              ctx: Optional[RequestContext] = None) -> Block:
        return self._online_client("/block").block(block_identifier, ctx)

    def block_transaction(self, block_identifier: BlockIdentifier,
                          transaction_identifier: TransactionIdentifier,
                          ctx: Optional[RequestContext] = None) -> Transaction:
        client = self._online_client("/block/transaction")
        return client.block_transaction(block_identifier, transaction_identifier, ctx)
