"""Tests for address parsing and account hash derivation"""

import hashlib

import pytest

from casper_rosetta.casper.address import (
    AccountHashAddress,
    Algorithm,
    PublicKeyAddress,
    PurseAddress,
    account_hash_hex,
    parse_address,
    purse_without_index,
)
from casper_rosetta.runtime.errors import ErrorCode, InvalidAddressError

from tests.helpers import SECP_KEY, SIGNER_KEY, account_hash_key


class TestParseAddress:
    """Test the three address encodings"""

    def test_account_hash(self):
        """Test account-hash addresses parse to AccountHashAddress"""
        address = "account-hash-" + "0f" * 32
        parsed = parse_address(address)
        assert isinstance(parsed, AccountHashAddress)
        assert parsed.hash_hex == "0f" * 32
        assert parsed.key == address

    def test_account_hash_is_lowercased(self):
        """Test uppercase hex is normalised"""
        parsed = parse_address("account-hash-" + "AB" * 32)
        assert parsed.key == "account-hash-" + "ab" * 32

    def test_purse_without_suffix(self):
        """Test a bare purse gets the default access rights for balance queries"""
        parsed = parse_address("uref-" + "11" * 32)
        assert isinstance(parsed, PurseAddress)
        assert parsed.access is None
        assert parsed.canonical == "uref-" + "11" * 32
        assert parsed.balance_key == "uref-" + "11" * 32 + "-001"

    def test_purse_with_suffix_is_kept(self):
        """Test an explicit access suffix is kept for balance queries"""
        parsed = parse_address("uref-" + "11" * 32 + "-007")
        assert parsed.access == "007"
        assert parsed.balance_key == "uref-" + "11" * 32 + "-007"
        assert str(parsed) == "uref-" + "11" * 32 + "-007"

    def test_ed25519_public_key(self):
        parsed = parse_address(SIGNER_KEY)
        assert isinstance(parsed, PublicKeyAddress)
        assert parsed.algorithm is Algorithm.ED25519
        assert parsed.raw == bytes.fromhex("aa" * 32)
        assert parsed.hex == SIGNER_KEY

    def test_secp256k1_public_key(self):
        parsed = parse_address(SECP_KEY)
        assert parsed.algorithm is Algorithm.SECP256K1
        assert len(parsed.raw) == 33

    @pytest.mark.parametrize("address", [
        "",
        "account-hash-" + "0f" * 31,
        "account-hash-zz" + "0f" * 31,
        "uref-" + "11" * 32 + "-007-1",
        "uref-" + "11" * 32 + "-9x9",
        "uref-" + "11" * 32 + "-0007",
        "uref-1234",
        "01" + "aa" * 31,
        "02" + "aa" * 32,
        "03" + "aa" * 32,
        "hash-" + "0f" * 32,
    ])
    def test_invalid_addresses(self, address):
        """Test malformed or unknown addresses are rejected"""
        with pytest.raises(InvalidAddressError) as exc_info:
            parse_address(address)
        assert exc_info.value.code == ErrorCode.INVALID_ADDRESS

    def test_invalid_address_is_attributed(self):
        """Test the offending address is carried in the error details"""
        with pytest.raises(InvalidAddressError) as exc_info:
            parse_address("nonsense")
        assert exc_info.value.details["address"] == "nonsense"


class TestAccountHash:
    """Test public key to account hash derivation"""

    def test_ed25519_account_hash(self):
        """Test the hash is blake2b-256 over algorithm name, NUL and raw key"""
        raw = bytes.fromhex("aa" * 32)
        expected = hashlib.blake2b(b"ed25519\x00" + raw, digest_size=32).hexdigest()
        assert account_hash_hex(Algorithm.ED25519, raw) == expected

    def test_secp256k1_account_hash(self):
        raw = bytes.fromhex(SECP_KEY[2:])
        expected = hashlib.blake2b(b"secp256k1\x00" + raw, digest_size=32).hexdigest()
        assert account_hash_hex(Algorithm.SECP256K1, raw) == expected

    def test_public_key_account_hash(self):
        """Test PublicKeyAddress derives the same key the node stores the account under"""
        parsed = parse_address(SIGNER_KEY)
        assert parsed.account_hash().key == account_hash_key(SIGNER_KEY)

    def test_account_hash_is_deterministic(self):
        first = parse_address(SIGNER_KEY).account_hash()
        second = parse_address(SIGNER_KEY).account_hash()
        assert first == second

    def test_algorithm_from_tag(self):
        assert Algorithm.from_tag("01") is Algorithm.ED25519
        assert Algorithm.from_tag("02") is Algorithm.SECP256K1
        assert Algorithm.from_tag("03") is None


class TestPurseWithoutIndex:
    """Test access suffix stripping for operation accounts"""

    def test_strips_suffix(self):
        assert purse_without_index("uref-" + "11" * 32 + "-007") == "uref-" + "11" * 32

    def test_bare_purse_unchanged(self):
        assert purse_without_index("uref-" + "11" * 32) == "uref-" + "11" * 32

    def test_non_purse_unchanged(self):
        address = "account-hash-" + "0f" * 32
        assert purse_without_index(address) == address
