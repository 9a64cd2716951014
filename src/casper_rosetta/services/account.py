"""Rosetta Account API: /account/balance and /account/coins."""

from __future__ import annotations
from typing import Optional

from ..casper.client import Client
from ..configuration import Configuration
from ..rosetta.types import AccountBalanceResponse, AccountIdentifier, PartialBlockIdentifier
from ..runtime.context import RequestContext
from ..runtime.errors import UnavailableOfflineError, UnimplementedError


class AccountAPIService:
    def __init__(self, config: Configuration, client: Optional[Client] = None):
        self.config = config
        self.client = client

    def account_balance(self, account_identifier: AccountIdentifier,
                        block_identifier: Optional[PartialBlockIdentifier] = None,
                        ctx: Optional[RequestContext] = None) -> AccountBalanceResponse:
        """
        Balance at a historical block; the address may be an account hash,
        a purse URef or a tagged public key.
        """
        if not self.config.online or self.client is None:
            raise UnavailableOfflineError("/account/balance")
        return self.client.balance(account_identifier, block_identifier, ctx)

    def account_coins(self, account_identifier: AccountIdentifier) -> None:
        # Account-based chain: there are no coins to list.
        raise UnimplementedError("/account/coins")
