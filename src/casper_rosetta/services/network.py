"""Rosetta Network API: /network/list, /network/options, /network/status."""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from ..casper.client import Client
from ..configuration import Configuration
from ..rosetta.types import NetworkIdentifier, NetworkStatusResponse
from ..runtime.context import RequestContext
from ..runtime.errors import UnavailableOfflineError, all_errors


class NetworkAPIService:
    """Network discovery and node status."""

    def __init__(self, config: Configuration, client: Optional[Client] = None):
        self.config = config
        self.client = client

    def network_list(self) -> List[NetworkIdentifier]:
        return [self.config.network_identifier]

    def network_options(self) -> Dict[str, Any]:
        """Versions, supported operation types and statuses, and the error catalogue."""
        constants = self.config.constants
        return {
            "version": {
                "rosetta_version": constants.rosetta_version,
                "node_version": constants.node_version,
                "middleware_version": constants.middleware_version,
            },
            "allow": {
                "operation_statuses": [status.to_dict() for status in constants.operation_statuses],
                "operation_types": list(constants.operation_types),
                "errors": all_errors(),
                "historical_balance_lookup": constants.historical_balance_supported,
            },
        }

    def network_status(self, ctx: Optional[RequestContext] = None) -> NetworkStatusResponse:
        if not self.config.online or self.client is None:
            raise UnavailableOfflineError("/network/status")

        current, timestamp, peers = self.client.status(ctx)
        return NetworkStatusResponse(
            current_block_identifier=current,
            current_block_timestamp=timestamp,
            genesis_block_identifier=self.config.genesis_block_identifier,
            peers=list(peers),
        )
