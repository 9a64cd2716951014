"""Tests for the Rosetta API services"""

import pytest
from unittest.mock import Mock

from casper_rosetta.casper import Client
from casper_rosetta.configuration import load_configuration
from casper_rosetta.rosetta.types import (
    AccountIdentifier,
    Amount,
    BlockIdentifier,
    Currency,
    NetworkIdentifier,
    Operation,
    OperationIdentifier,
    PartialBlockIdentifier,
    PublicKey,
    TransactionIdentifier,
)
from casper_rosetta.runtime.errors import (
    ErrorCode,
    InvalidAddressError,
    UnableToParseError,
    UnavailableOfflineError,
    UnimplementedError,
)
from casper_rosetta.services import (
    AccountAPIService,
    BlockAPIService,
    ConstructionAPIService,
    NetworkAPIService,
    build_services,
)

from tests.helpers import (
    BLOCK_TIMESTAMP_MS,
    SIGNER_KEY,
    SIGNER_PURSE,
    account_hash_key,
    mk_block,
)

CSPR = {"symbol": "CSPR", "decimals": 9}
TARGET = "01" + "dd" * 32


@pytest.fixture
def online(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return load_configuration(mode="ONLINE", network="MAINNET", port=8080)


@pytest.fixture
def offline(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return load_configuration(mode="OFFLINE", network="MAINNET", port=8080)


def transfer_operations(amount="1000", transfer_id="42"):
    currency = Currency(**CSPR)
    return [
        Operation(operation_identifier=OperationIdentifier(index=0), type="TRANSFER",
                  account=AccountIdentifier(address=SIGNER_KEY),
                  amount=Amount(value=f"-{amount}", currency=currency)),
        Operation(operation_identifier=OperationIdentifier(index=1), type="TRANSFER",
                  related_operations=[OperationIdentifier(index=0)],
                  account=AccountIdentifier(address=TARGET),
                  amount=Amount(value=amount, currency=currency),
                  metadata={"transfer_id": transfer_id}),
    ]


class TestNetworkService:
    """Test /network endpoints"""

    def test_network_list(self, online):
        service = NetworkAPIService(online)
        assert service.network_list() == [NetworkIdentifier(blockchain="Casper", network="casper")]

    def test_network_options(self, online):
        options = NetworkAPIService(online).network_options()

        assert options["version"]["rosetta_version"] == "1.4.10"
        assert options["version"]["node_version"] == "1_2_0"
        allow = options["allow"]
        assert allow["operation_types"] == ["TRANSFER", "FEE"]
        assert {"status": "SUCCESS", "successful": True} in allow["operation_statuses"]
        assert {"status": "FAILURE", "successful": False} in allow["operation_statuses"]
        assert allow["historical_balance_lookup"] is True
        codes = [error["code"] for error in allow["errors"]]
        assert len(codes) == len(set(codes))
        assert int(ErrorCode.INCOMPLETE_BLOCK) in codes

    def test_network_options_offline(self, offline):
        assert NetworkAPIService(offline).network_options()["allow"]["operation_types"]

    def test_network_status(self, online, client, node):
        block = node.add_block(mk_block(height=10))
        node.peers = [{"node_id": "tls:ab12", "address": "1.2.3.4:35000"}]

        status = NetworkAPIService(online, client).network_status()

        assert status.current_block_identifier == BlockIdentifier(index=10, hash=block["hash"])
        assert status.current_block_timestamp == BLOCK_TIMESTAMP_MS
        assert status.genesis_block_identifier == online.genesis_block_identifier
        assert status.peers[0].peer_id == "1.2.3.4:35000"

    def test_network_status_offline(self, offline):
        with pytest.raises(UnavailableOfflineError) as exc_info:
            NetworkAPIService(offline, Mock(spec=Client)).network_status()
        assert exc_info.value.details["endpoint"] == "/network/status"


class TestBlockService:
    """Test /block endpoints"""

    def test_block(self, online, client, node):
        node.add_block(mk_block(height=10))
        result = BlockAPIService(online, client).block(PartialBlockIdentifier(index=10))
        assert result.block_identifier.index == 10

    def test_block_transaction_delegates(self, online):
        client = Mock(spec=Client)
        block_id = BlockIdentifier(index=1, hash="h")
        tx_id = TransactionIdentifier(hash="d")

        BlockAPIService(online, client).block_transaction(block_id, tx_id)

        client.block_transaction.assert_called_once_with(block_id, tx_id, None)

    @pytest.mark.parametrize("call", [
        lambda service: service.block(PartialBlockIdentifier(index=1)),
        lambda service: service.block_transaction(BlockIdentifier(index=1, hash="h"),
                                                  TransactionIdentifier(hash="d")),
    ])
    def test_offline(self, offline, call):
        client = Mock(spec=Client)
        with pytest.raises(UnavailableOfflineError):
            call(BlockAPIService(offline, client))
        assert not client.method_calls


class TestAccountService:
    """Test /account endpoints"""

    def test_account_balance(self, online, client, node):
        node.add_block(mk_block(height=10))
        node.set_balance(SIGNER_PURSE, "77")
        response = AccountAPIService(online, client).account_balance(
            AccountIdentifier(address=SIGNER_KEY), PartialBlockIdentifier(index=10))
        assert response.to_dict()["balances"] == [{"value": "77", "currency": CSPR}]

    def test_account_balance_offline(self, offline):
        with pytest.raises(UnavailableOfflineError):
            AccountAPIService(offline).account_balance(AccountIdentifier(address=SIGNER_KEY))

    def test_account_coins(self, online):
        with pytest.raises(UnimplementedError) as exc_info:
            AccountAPIService(online).account_coins(AccountIdentifier(address=SIGNER_KEY))
        assert exc_info.value.code == ErrorCode.UNIMPLEMENTED


class TestConstructionService:
    """Test /construction endpoints"""

    def test_derive_ed25519(self, offline):
        account = ConstructionAPIService(offline).derive(PublicKey(hex_bytes="aa" * 32, curve_type="edwards25519"))
        assert account.address == SIGNER_KEY
        assert account.metadata == {"account_hash": account_hash_key(SIGNER_KEY)}

    def test_derive_secp256k1(self, offline):
        raw = "03" + "cc" * 32
        account = ConstructionAPIService(offline).derive(PublicKey(hex_bytes=raw, curve_type="secp256k1"))
        assert account.address == "02" + raw
        assert account.metadata == {"account_hash": account_hash_key("02" + raw)}

    def test_derived_address_reads_balance(self, online, offline, client, node):
        """Test the derived address is accepted by the balance lookup"""
        node.add_block(mk_block(height=10))
        node.set_balance(SIGNER_PURSE, "77")
        account = ConstructionAPIService(offline).derive(PublicKey(hex_bytes="aa" * 32, curve_type="edwards25519"))
        response = AccountAPIService(online, client).account_balance(
            AccountIdentifier(address=account.address), PartialBlockIdentifier(index=10))
        assert response.balances[0].value == "77"

    @pytest.mark.parametrize("hex_bytes,curve_type", [
        ("aa" * 32, "secp256r1"),
        ("aa" * 31, "edwards25519"),
        ("zz" * 32, "edwards25519"),
        ("aa" * 32, "secp256k1"),
    ])
    def test_derive_rejects_bad_keys(self, offline, hex_bytes, curve_type):
        with pytest.raises(InvalidAddressError):
            ConstructionAPIService(offline).derive(PublicKey(hex_bytes=hex_bytes, curve_type=curve_type))

    def test_preprocess(self, offline):
        network = NetworkIdentifier(blockchain="Casper", network="casper")
        max_fee = [Amount(value="10000", currency=CSPR)]

        result = ConstructionAPIService(offline).preprocess(network, transfer_operations(), max_fee)

        assert result["options"] == {
            "chain_name": "casper",
            "source": SIGNER_KEY,
            "target": TARGET,
            "transfer_amount": "1000",
            "transfer_id": "42",
            "gas_price": "1",
            "payment_amount": "10000",
        }
        assert result["required_public_keys"] == [AccountIdentifier(address=SIGNER_KEY)]

    def test_preprocess_requires_max_fee(self, offline):
        network = NetworkIdentifier(blockchain="Casper", network="casper")
        with pytest.raises(UnableToParseError):
            ConstructionAPIService(offline).preprocess(network, transfer_operations())

    def test_preprocess_requires_target(self, offline):
        network = NetworkIdentifier(blockchain="Casper", network="casper")
        with pytest.raises(UnableToParseError):
            ConstructionAPIService(offline).preprocess(
                network, transfer_operations()[:1], [Amount(value="1", currency=CSPR)])

    def test_preprocess_rejects_bad_address(self, offline):
        network = NetworkIdentifier(blockchain="Casper", network="casper")
        operations = transfer_operations()
        operations[1].account = AccountIdentifier(address="not-an-address")
        with pytest.raises(InvalidAddressError):
            ConstructionAPIService(offline).preprocess(network, operations, [Amount(value="1", currency=CSPR)])

    def test_metadata(self, online):
        options = {"chain_name": "casper", "source": SIGNER_KEY, "target": TARGET, "transfer_amount": "1",
                   "gas_price": "1", "payment_amount": "10", "transfer_id": None, "extra": "dropped"}
        result = ConstructionAPIService(online).metadata(options)
        assert "extra" not in result["metadata"]
        assert result["metadata"]["payment_amount"] == "10"
        assert result["suggested_fee"] == []

    def test_metadata_offline(self, offline):
        with pytest.raises(UnavailableOfflineError):
            ConstructionAPIService(offline).metadata({})

    @pytest.mark.parametrize("call", [
        lambda service: service.payloads([], {}),
        lambda service: service.combine("", []),
        lambda service: service.hash(""),
        lambda service: service.parse("", False),
        lambda service: service.submit(""),
    ])
    def test_unimplemented(self, online, call):
        with pytest.raises(UnimplementedError):
            call(ConstructionAPIService(online))


class TestBuildServices:
    def test_online_with_client(self, online):
        client = Mock(spec=Client)
        services = build_services(online, client)
        assert services.block.client is client
        assert services.account.client is client
        services.close()
        client.close.assert_called_once()

    def test_online_creates_client(self, online):
        services = build_services(online)
        assert isinstance(services.client, Client)
        assert services.client.rpc.endpoint == online.node_url
        assert services.client.max_concurrency == online.max_concurrency
        assert services.client.rpc.config.pool_maxsize == online.max_concurrency
        services.close()

    def test_offline_has_no_client(self, offline):
        services = build_services(offline, Mock(spec=Client))
        assert services.client is None
        assert services.network.client is None
        with pytest.raises(UnavailableOfflineError):
            services.block.block()
