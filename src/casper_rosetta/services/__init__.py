"""Rosetta API services."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..casper.client import Client
from ..configuration import Configuration
from .account import AccountAPIService
from .block import BlockAPIService
from .construction import ConstructionAPIService
from .network import NetworkAPIService


@dataclass
class Services:
    """The API services sharing one configuration and one node client."""
    network: NetworkAPIService
    block: BlockAPIService
    account: AccountAPIService
    construction: ConstructionAPIService
    client: Optional[Client] = None

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


def build_services(config: Configuration, client: Optional[Client] = None) -> Services:
    """
    Wire every API service.

    A node client is created from the configuration in online mode unless
    one is passed in; offline services never get one.
    """
    if config.online and client is None:
        client = Client.from_configuration(config)
    if not config.online:
        client = None

    return Services(
        network=NetworkAPIService(config, client),
        block=BlockAPIService(config, client),
        account=AccountAPIService(config, client),
        construction=ConstructionAPIService(config),
        client=client,
    )


__all__ = [
    "Services",
    "build_services",
    "NetworkAPIService",
    "BlockAPIService",
    "AccountAPIService",
    "ConstructionAPIService",
]
