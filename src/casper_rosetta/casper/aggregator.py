"""Grouping of a block's transfers by the deploy that produced them."""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List

from .types import Transfer

logger = logging.getLogger(__name__)


def group_transfers_by_deploy(transfers: Iterable[Transfer],
                              deploy_hashes: Iterable[str]) -> Dict[str, List[Transfer]]:
    """
    Group transfers by deploy hash.

    Every hash in ``deploy_hashes`` gets an entry, in the order given, so
    deploys that moved no value still become a transaction. Transfers keep
    the order the node returned them in. A transfer naming a deploy outside
    ``deploy_hashes`` is skipped with a warning.

    Args:
        transfers: The block's transfers
        deploy_hashes: Every deploy hash of the block

    Returns:
        Mapping of deploy hash to its ordered transfers
    """
    grouped: Dict[str, List[Transfer]] = {deploy_hash: [] for deploy_hash in deploy_hashes}
    for transfer in transfers:
        bucket = grouped.get(transfer.deploy_hash)
        if bucket is None:
            logger.warning(f"Skipping transfer of deploy {transfer.deploy_hash} not listed in block")
            continue
        bucket.append(transfer)
    return grouped
