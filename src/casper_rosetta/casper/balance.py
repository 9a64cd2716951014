"""Balance lookup at an explicit state root."""

from __future__ import annotations
from typing import Optional

from ..runtime.context import RequestContext
from ..runtime.errors import CasperRosettaError
from .rpc import CasperRpcClient


class BalanceQuery:
    """Reads purse balances; always by state root, never "latest"."""

    def __init__(self, rpc: CasperRpcClient):
        self.rpc = rpc

    def get_balance(self, purse: str, state_root_hash: str,
                    ctx: Optional[RequestContext] = None) -> int:
        """
        Args:
            purse: Suffixed purse URef
            state_root_hash: State snapshot to read from

        Returns:
            Balance in motes

        Raises:
            NotFoundError: The purse does not exist at this snapshot
        """
        try:
            return self.rpc.get_account_balance(state_root_hash, purse, ctx)
        except CasperRosettaError as e:
            raise e.with_details(purse=purse, stage="get_balance")
