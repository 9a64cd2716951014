"""Shared fixtures: a fake node wired into a real RPC client and data client."""

import pytest

from casper_rosetta.casper import CasperRpcClient, ChainConstants, Client, RpcClientConfig
from casper_rosetta.monitoring import MetricsRegistry

from tests.helpers import FakeNode, SIGNER_KEY, SIGNER_PURSE, VALIDATOR_KEY, VALIDATOR_PURSE

NODE_URL = "http://node.test:7777/rpc"


@pytest.fixture
def node():
    """Empty fake node with the signer and validator accounts registered."""
    fake = FakeNode()
    fake.add_account(SIGNER_KEY, SIGNER_PURSE)
    fake.add_account(VALIDATOR_KEY, VALIDATOR_PURSE)
    return fake


@pytest.fixture
def registry():
    return MetricsRegistry()


@pytest.fixture
def rpc(node, registry):
    config = RpcClientConfig(endpoint=NODE_URL, max_retries=0)
    return CasperRpcClient(config, session=node, metrics=registry)


@pytest.fixture
def constants():
    return ChainConstants.mainnet()


@pytest.fixture
def client(rpc, constants):
    return Client(rpc, constants, max_concurrency=4)
