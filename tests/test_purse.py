"""Tests for purse resolution and balance queries"""

import pytest

from casper_rosetta.casper.address import parse_address
from casper_rosetta.casper.balance import BalanceQuery
from casper_rosetta.casper.purse import PurseResolver
from casper_rosetta.runtime.errors import InvalidAddressError, NotFoundError

from tests.helpers import (
    OTHER_STATE_ROOT,
    SECP_KEY,
    SIGNER_KEY,
    SIGNER_PURSE,
    STATE_ROOT,
    account_hash_key,
)


@pytest.fixture
def resolver(rpc):
    return PurseResolver(rpc)


@pytest.fixture
def balances(rpc):
    return BalanceQuery(rpc)


class TestPurseResolver:
    """Test address to purse resolution"""

    def test_bare_purse_gets_default_access(self, resolver, node):
        """Test a purse without suffix resolves locally with -001"""
        purse = "uref-" + "55" * 32
        assert resolver.resolve_purse(purse, STATE_ROOT) == purse + "-001"
        assert node.calls == []

    def test_suffixed_purse_unchanged(self, resolver, node):
        purse = "uref-" + "55" * 32 + "-007"
        assert resolver.resolve_purse(purse, STATE_ROOT) == purse
        assert node.calls == []

    def test_account_hash(self, resolver, node):
        """Test an account hash resolves to the stored main purse"""
        key = account_hash_key(SIGNER_KEY)
        assert resolver.resolve_purse(key, STATE_ROOT) == SIGNER_PURSE
        assert node.calls == [("state_get_item", {"state_root_hash": STATE_ROOT, "key": key, "path": []})]

    def test_public_key_and_account_hash_agree(self, resolver):
        """Test a public key and its account hash resolve to the same purse"""
        by_key = resolver.resolve_purse(SIGNER_KEY, STATE_ROOT)
        by_hash = resolver.resolve_purse(account_hash_key(SIGNER_KEY), STATE_ROOT)
        assert by_key == by_hash == SIGNER_PURSE

    def test_parsed_address_accepted(self, resolver):
        assert resolver.resolve_purse(parse_address(SIGNER_KEY), STATE_ROOT) == SIGNER_PURSE

    def test_secp256k1_public_key(self, resolver, node):
        purse = "uref-" + "66" * 32 + "-007"
        node.add_account(SECP_KEY, purse)
        assert resolver.resolve_purse(SECP_KEY, STATE_ROOT) == purse

    def test_resolution_is_per_state_root(self, resolver, node):
        """Test the account is read at the requested state root"""
        with pytest.raises(NotFoundError):
            resolver.resolve_purse(SIGNER_KEY, OTHER_STATE_ROOT)
        assert node.calls[-1][1]["state_root_hash"] == OTHER_STATE_ROOT

    def test_unknown_account(self, resolver):
        """Test a missing account is a NotFoundError attributed to the address"""
        key = "account-hash-" + "77" * 32
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve_purse(key, STATE_ROOT)
        assert exc_info.value.details["address"] == key
        assert exc_info.value.details["stage"] == "resolve_purse"

    def test_invalid_address_makes_no_call(self, resolver, node):
        with pytest.raises(InvalidAddressError):
            resolver.resolve_purse("account-hash-xyz", STATE_ROOT)
        assert node.calls == []


class TestBalanceQuery:
    """Test balance reads at an explicit state root"""

    def test_balance(self, balances, node):
        node.set_balance(SIGNER_PURSE, "1000000000")
        assert balances.get_balance(SIGNER_PURSE, STATE_ROOT) == 1_000_000_000
        assert node.calls == [
            ("state_get_balance", {"state_root_hash": STATE_ROOT, "purse_uref": SIGNER_PURSE}),
        ]

    def test_balance_beyond_64_bits(self, balances, node):
        """Test U512 balances keep full precision"""
        value = str(2 ** 200 + 7)
        node.set_balance(SIGNER_PURSE, value)
        assert balances.get_balance(SIGNER_PURSE, STATE_ROOT) == 2 ** 200 + 7

    def test_balance_at_other_root(self, balances, node):
        node.set_balance(SIGNER_PURSE, "1", STATE_ROOT)
        node.set_balance(SIGNER_PURSE, "2", OTHER_STATE_ROOT)
        assert balances.get_balance(SIGNER_PURSE, OTHER_STATE_ROOT) == 2

    def test_missing_purse(self, balances):
        with pytest.raises(NotFoundError) as exc_info:
            balances.get_balance(SIGNER_PURSE, STATE_ROOT)
        assert exc_info.value.details["purse"] == SIGNER_PURSE
        assert exc_info.value.details["stage"] == "get_balance"
