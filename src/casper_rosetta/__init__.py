"""
Casper Rosetta middleware

Translates Casper node JSON-RPC data into Rosetta blocks, transactions and
balances: purse resolution, historical balance queries, deploy/transfer
grouping and fee-aware transaction assembly.
"""

# Node access and assembly
from .casper import (
    Client, CasperRpcClient, RpcClientConfig, ChainConstants,
    PurseResolver, BalanceQuery, TransactionAssembler, group_transfers_by_deploy,
    parse_address, account_hash_hex,
)

# Configuration and services
from .configuration import Configuration, Mode, load_configuration, configure_logging
from .services import Services, build_services

# Runtime
from .runtime.context import RequestContext
from .runtime.errors import CasperRosettaError, ErrorCode

# Monitoring and telemetry
from .monitoring import MetricsRegistry, get_registry

__version__ = "0.1.0"
__all__ = [
    "Client",
    "CasperRpcClient",
    "RpcClientConfig",
    "ChainConstants",
    "PurseResolver",
    "BalanceQuery",
    "TransactionAssembler",
    "group_transfers_by_deploy",
    "parse_address",
    "account_hash_hex",
    "Configuration",
    "Mode",
    "load_configuration",
    "configure_logging",
    "Services",
    "build_services",
    "RequestContext",
    "CasperRosettaError",
    "ErrorCode",
    "MetricsRegistry",
    "get_registry",
]
