"""
Deploy to Rosetta transaction assembly.

Each deploy becomes one transaction whose operations are:

- index 0/1: the fee, debited from the signer's purse and credited to the
  block proposer's purse;
- index 2+2i / 3+2i: the i-th transfer, debited from its source purse and
  credited to its target purse (successful deploys only).

Every credit lists its debit in ``related_operations`` and every pair shares
one status. Failed deploys pay their reported cost and move nothing else.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from ..rosetta.types import (
    AccountIdentifier,
    Amount,
    Operation,
    OperationIdentifier,
    Transaction,
    TransactionIdentifier,
)
from ..runtime.context import RequestContext
from ..runtime.errors import CasperRosettaError, InconsistentExecutionResultError
from .address import purse_without_index
from .clvalue import read_payment_amount
from .constants import ChainConstants
from .purse import PurseResolver
from .rpc import CasperRpcClient
from .types import Block, Deploy, Transfer

logger = logging.getLogger(__name__)


class TransactionAssembler:
    """Builds the operation list of one deploy."""

    def __init__(self, rpc: CasperRpcClient, resolver: PurseResolver, constants: ChainConstants):
        """
        Args:
            rpc: Node client used to fetch deploys
            resolver: Resolves the signer's purse
            constants: Currency and operation metadata
        """
        self.rpc = rpc
        self.resolver = resolver
        self.constants = constants

    def build_transaction(self, deploy_hash: str, transfers: Sequence[Transfer], block: Block,
                          validator_purse: str, ctx: Optional[RequestContext] = None) -> Transaction:
        """
        Build the transaction of one deploy executed in ``block``.

        Args:
            deploy_hash: Deploy to report
            transfers: The deploy's transfers in execution order
            block: Block the deploy was executed in
            validator_purse: Main purse of the block proposer
            ctx: Request context

        Returns:
            Transaction with fee and transfer operations

        Raises:
            InconsistentExecutionResultError: Deploy carries no execution result
            CasperRosettaError: Any read failure, tagged with the deploy hash
        """
        try:
            return self._build(deploy_hash, transfers, block, validator_purse, ctx)
        except CasperRosettaError as e:
            raise e.with_details(deploy_hash=deploy_hash, block_hash=block.hash)

    def _build(self, deploy_hash: str, transfers: Sequence[Transfer], block: Block,
               validator_purse: str, ctx: Optional[RequestContext]) -> Transaction:
        info = self.rpc.get_deploy(deploy_hash, ctx)
        if not info.execution_results:
            raise InconsistentExecutionResultError(deploy_hash)
        result = info.execution_results[0].result

        signer_purse = self.resolver.resolve_purse(info.deploy.header.account, block.state_root_hash, ctx)

        metadata = {}
        if result.is_failure:
            status = self.constants.failure_status
            fee = int(result.cost)
            if result.failure.error_message:
                metadata["error_message"] = result.failure.error_message
        else:
            status = self.constants.success_status
            fee = self.fee_amount(info.deploy, result.cost)

        logger.debug(f"Deploy {deploy_hash}: fee {fee} from {signer_purse} to {validator_purse} ({status})")

        operations = self._pair(0, self.constants.fee_op_type, status, signer_purse, validator_purse, fee)
        if not result.is_failure:
            for transfer in transfers:
                operations.extend(self._pair(
                    len(operations), self.constants.transfer_op_type, status,
                    transfer.source, transfer.target, int(transfer.amount),
                ))

        return Transaction(
            transaction_identifier=TransactionIdentifier(hash=deploy_hash),
            operations=operations,
            metadata=metadata,
        )

    @staticmethod
    def fee_amount(deploy: Deploy, cost: str) -> int:
        """Explicit payment amount when present and non-zero, else the execution cost."""
        payment = read_payment_amount(deploy)
        if payment is not None and int(payment) != 0:
            return int(payment)
        return int(cost)

    def _pair(self, index: int, op_type: str, status: str, debit_purse: str,
              credit_purse: str, amount: int) -> List[Operation]:
        """Debit at ``index`` and the related credit at ``index + 1``."""
        currency = self.constants.currency
        debit = Operation(
            operation_identifier=OperationIdentifier(index=index),
            type=op_type,
            status=status,
            account=AccountIdentifier(address=purse_without_index(debit_purse)),
            amount=Amount(value=str(-amount), currency=currency),
        )
        credit = Operation(
            operation_identifier=OperationIdentifier(index=index + 1),
            related_operations=[OperationIdentifier(index=index)],
            type=op_type,
            status=status,
            account=AccountIdentifier(address=purse_without_index(credit_purse)),
            amount=Amount(value=str(amount), currency=currency),
        )
        return [debit, credit]
