"""
Order encoding and authentication tests.

Signature recovery runs against real secp256k1 keys; the injected
verifier seam is exercised with a fake.
"""

import pytest

from conftest import FixedClock, NOW, VALID_TO
from lpvault.constants import PERSONAL_SIGN_PREFIX, UINT32_MAX
from lpvault.crypto import (
    PrivateKey,
    Signature,
    keccak256,
    personal_message_hash,
    recover_message_signer,
    sign_message,
)
from lpvault.exceptions import (
    ArithmeticOverflow,
    InvalidAuthorization,
    MalformedSignature,
    OrderExpired,
    RecoveryFailed,
)
from lpvault.vault import (
    BALANCE_ERC20,
    KIND_SELL,
    ORDER_TYPE_HASH,
    ZERO_APP_DATA,
    EcdsaSignatureVerifier,
    Order,
    OrderAuthenticator,
    SignatureVerifier,
    sign_order,
)

SELL = "0x" + "11" * 20
BUY = "0x" + "22" * 20


class FakeVerifier:
    """Returns a canned signer and records every call."""

    def __init__(self, signer=None, error=None):
        self.signer = signer
        self.error = error
        self.calls = []

    def recover(self, message_hash, signature):
        self.calls.append((message_hash, signature))
        if self.error:
            raise self.error
        return self.signer


def _order(receiver, sell_amount=1000, min_buy=900, valid_to=VALID_TO):
    return Order.sell(SELL, BUY, receiver, sell_amount, min_buy, valid_to)


# ============================================================================
# Wire encoding
# ============================================================================


class TestOrderEncoding:

    def test_constants(self):
        assert KIND_SELL == keccak256(b"sell")
        assert BALANCE_ERC20 == keccak256(b"erc20")
        assert ZERO_APP_DATA == bytes(32)
        assert len(ORDER_TYPE_HASH) == 32

    def test_placeholders_pinned(self):
        order = _order("0x" + "33" * 20)
        assert order.app_data == ZERO_APP_DATA
        assert order.fee_amount == 0
        assert order.kind == KIND_SELL
        assert order.partially_fillable is False
        assert order.sell_token_balance == BALANCE_ERC20
        assert order.buy_token_balance == BALANCE_ERC20

    def test_encoding_layout(self):
        """Thirteen static 32-byte words: type hash then twelve fields."""
        order = _order("0x" + "33" * 20, sell_amount=1000, min_buy=900, valid_to=12345)
        encoded = order.encode()
        words = [encoded[i:i + 32] for i in range(0, len(encoded), 32)]

        assert len(encoded) == 13 * 32
        assert words[0] == ORDER_TYPE_HASH
        assert words[1] == bytes(12) + bytes.fromhex("11" * 20)
        assert words[2] == bytes(12) + bytes.fromhex("22" * 20)
        assert words[3] == bytes(12) + bytes.fromhex("33" * 20)
        assert int.from_bytes(words[4], "big") == 1000
        assert int.from_bytes(words[5], "big") == 900
        assert int.from_bytes(words[6], "big") == 12345
        assert words[7] == ZERO_APP_DATA
        assert int.from_bytes(words[8], "big") == 0
        assert words[9] == KIND_SELL
        assert int.from_bytes(words[10], "big") == 0
        assert words[11] == BALANCE_ERC20
        assert words[12] == BALANCE_ERC20

    def test_hash_and_digest(self):
        order = _order("0x" + "33" * 20)
        assert order.hash() == keccak256(order.encode())
        assert order.signing_digest() == keccak256(PERSONAL_SIGN_PREFIX + order.hash())
        assert order.signing_digest() == personal_message_hash(order.hash())

    def test_every_term_changes_hash(self):
        receiver = "0x" + "33" * 20
        base = _order(receiver).hash()
        assert _order(receiver, sell_amount=1001).hash() != base
        assert _order(receiver, min_buy=901).hash() != base
        assert _order(receiver, valid_to=VALID_TO + 1).hash() != base
        assert _order("0x" + "44" * 20).hash() != base
        assert Order.sell(BUY, SELL, receiver, 1000, 900, VALID_TO).hash() != base

    def test_address_case_does_not_change_hash(self):
        lower = Order.sell("0x" + "ab" * 20, BUY, "0x" + "cd" * 20, 1, 1, 1)
        upper = Order.sell("0x" + "AB" * 20, BUY, "0x" + "CD" * 20, 1, 1, 1)
        assert lower.hash() == upper.hash()

    def test_valid_to_must_fit_uint32(self):
        with pytest.raises(ArithmeticOverflow):
            _order("0x" + "33" * 20, valid_to=UINT32_MAX + 1)


# ============================================================================
# Authentication against real keys
# ============================================================================


class TestEcdsaAuthentication:

    def setup_method(self):
        self.key = PrivateKey.from_int(0x7A11CE)
        self.other = PrivateKey.from_int(0xB0B0B0)
        self.auth = OrderAuthenticator(clock=FixedClock())

    def test_valid_signature(self):
        order = _order(self.key.address)
        signature = sign_order(order, self.key)
        assert len(signature) == 65
        assert signature[64] in (27, 28)
        assert self.auth.authenticate(order, signature, self.key.address) is True

    def test_verifier_recovers_signer(self):
        order = _order(self.key.address)
        signature = sign_order(order, self.key)
        assert EcdsaSignatureVerifier().recover(order.signing_digest(), signature) == self.key.address

    def test_personal_sign_over_order_hash_accepted(self):
        order = _order(self.key.address)
        signature = sign_message(self.key, order.hash()).to_bytes()
        assert signature == sign_order(order, self.key)
        assert recover_message_signer(order.hash(), Signature.from_bytes(signature)) == self.key.address
        assert self.auth.authenticate(order, signature, self.key.address) is True

    def test_wrong_signer_returns_false(self):
        order = _order(self.key.address)
        signature = sign_order(order, self.other)
        assert self.auth.authenticate(order, signature, self.key.address) is False

    def test_expected_signer_case_insensitive(self):
        order = _order(self.key.address)
        signature = sign_order(order, self.key)
        assert self.auth.authenticate(order, signature, self.key.address.lower()) is True

    def test_raw_recovery_id(self):
        order = _order(self.key.address)
        signature = sign_order(order, self.key)
        raw = signature[:64] + bytes([signature[64] - 27])
        assert self.auth.authenticate(order, raw, self.key.address) is True

    @pytest.mark.parametrize("length", [0, 64, 66, 130])
    def test_wrong_length(self, length):
        with pytest.raises(MalformedSignature, match="65 bytes"):
            self.auth.authenticate(_order(self.key.address), b"\x01" * length, self.key.address)

    @pytest.mark.parametrize("v", [2, 26, 29, 35, 255])
    def test_bad_recovery_id(self, v):
        order = _order(self.key.address)
        signature = sign_order(order, self.key)[:64] + bytes([v])
        with pytest.raises(MalformedSignature, match="recovery id"):
            self.auth.authenticate(order, signature, self.key.address)

    def test_not_bytes(self):
        with pytest.raises(MalformedSignature):
            self.auth.authenticate(_order(self.key.address), "0x" + "00" * 65, self.key.address)

    def test_malformed_is_invalid_authorization(self):
        assert issubclass(MalformedSignature, InvalidAuthorization)
        assert issubclass(RecoveryFailed, InvalidAuthorization)


# ============================================================================
# Injected verifier
# ============================================================================


class TestInjectedVerifier:

    def test_fake_satisfies_protocol(self):
        assert isinstance(FakeVerifier(), SignatureVerifier)

    def test_uses_signing_digest(self):
        signer = "0x" + "55" * 20
        verifier = FakeVerifier(signer=signer)
        auth = OrderAuthenticator(verifier=verifier)
        order = _order(signer)

        assert auth.authenticate(order, b"\x00" * 64 + b"\x1b", signer) is True
        assert verifier.calls == [(order.signing_digest(), b"\x00" * 64 + b"\x1b")]

    def test_mismatch(self):
        verifier = FakeVerifier(signer="0x" + "55" * 20)
        auth = OrderAuthenticator(verifier=verifier)
        assert auth.authenticate(_order("0x" + "66" * 20), b"\x00" * 65, "0x" + "66" * 20) is False

    def test_encoding_checked_before_verifier(self):
        verifier = FakeVerifier(signer="0x" + "55" * 20)
        auth = OrderAuthenticator(verifier=verifier)
        with pytest.raises(MalformedSignature):
            auth.authenticate(_order("0x" + "55" * 20), b"\x00" * 64, "0x" + "55" * 20)
        assert verifier.calls == []

    def test_recovery_failure_propagates(self):
        verifier = FakeVerifier(error=RecoveryFailed("point at infinity"))
        auth = OrderAuthenticator(verifier=verifier)
        with pytest.raises(RecoveryFailed):
            auth.authenticate(_order("0x" + "55" * 20), b"\x00" * 65, "0x" + "55" * 20)


# ============================================================================
# Deadlines
# ============================================================================


class TestDeadline:

    def test_before_and_at_deadline(self):
        auth = OrderAuthenticator(clock=FixedClock(NOW))
        auth.check_deadline(NOW + 1)
        auth.check_deadline(NOW)

    def test_past_deadline(self):
        auth = OrderAuthenticator(clock=FixedClock(NOW))
        with pytest.raises(OrderExpired) as exc_info:
            auth.check_deadline(NOW - 1)
        assert exc_info.value.valid_to == NOW - 1
        assert exc_info.value.now == NOW

    def test_clock_skew(self):
        auth = OrderAuthenticator(clock=FixedClock(NOW), clock_skew=30)
        auth.check_deadline(NOW - 30)
        with pytest.raises(OrderExpired):
            auth.check_deadline(NOW - 31)
