"""
Purse resolution.

Maps any supported address encoding to the purse URef that holds its
balance at a given state root.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

from ..runtime.context import RequestContext
from ..runtime.errors import CasperRosettaError, NotFoundError
from .address import Address, AccountHashAddress, PublicKeyAddress, PurseAddress, parse_address
from .rpc import CasperRpcClient

logger = logging.getLogger(__name__)


class PurseResolver:
    """Resolves account hashes, purses and public keys to a main purse."""

    def __init__(self, rpc: CasperRpcClient):
        self.rpc = rpc

    def resolve_purse(self, address: Union[str, Address], state_root_hash: str,
                      ctx: Optional[RequestContext] = None) -> str:
        """
        Resolve the balance-holding purse of an address.

        Args:
            address: Raw address string or an already parsed address
            state_root_hash: State snapshot to read the account from
            ctx: Request context

        Returns:
            Purse URef with access suffix, suitable for balance queries

        Raises:
            InvalidAddressError: Unknown shape or malformed hex
            NotFoundError: No account under that hash at this state root
        """
        parsed = parse_address(address) if isinstance(address, str) else address

        if isinstance(parsed, PurseAddress):
            return parsed.balance_key
        if isinstance(parsed, PublicKeyAddress):
            return self.main_purse(parsed.account_hash(), state_root_hash, ctx)
        if isinstance(parsed, AccountHashAddress):
            return self.main_purse(parsed, state_root_hash, ctx)
        raise TypeError(f"Unsupported address type {type(parsed).__name__}")

    def main_purse(self, account: AccountHashAddress, state_root_hash: str,
                   ctx: Optional[RequestContext] = None) -> str:
        """Read the main purse of an account from global state."""
        try:
            item = self.rpc.get_state_item(state_root_hash, account.key, [], ctx)
        except CasperRosettaError as e:
            raise e.with_details(address=account.key, stage="resolve_purse")
        if item.account is None:
            raise NotFoundError(
                f"No account stored under {account.key}",
                details={"address": account.key, "state_root_hash": state_root_hash, "stage": "resolve_purse"},
            )
        logger.debug(f"Resolved {account.key} to purse {item.account.main_purse}")
        return item.account.main_purse
