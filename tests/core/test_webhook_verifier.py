"""
Tests for webhook signature verification.

The signature check guards every status write, so these tests pin down
the rejection paths as much as the happy one.
"""

import hashlib
import hmac
from unittest.mock import patch

import pytest

from core import webhook_verifier
from core.webhook_verifier import sign, verify

SECRET = "whsec_test"
BODY = b'{"type":"invoice.paid","invoiceId":"inv_1","metadata":{"orderId":"order_1"}}'


def _flip_bit(data: bytes, index: int, bit: int = 0) -> bytes:
    mutable = bytearray(data)
    mutable[index] ^= 1 << bit
    return bytes(mutable)


class TestSign:

    def test_matches_hmac_sha256_hex(self):
        expected = hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
        assert sign(BODY, SECRET) == expected

    def test_is_64_hex_chars(self):
        assert len(sign(BODY, SECRET)) == 64


class TestVerify:

    def test_valid_signature(self):
        assert verify(BODY, sign(BODY, SECRET), SECRET) is True

    def test_uppercase_hex_accepted(self):
        assert verify(BODY, sign(BODY, SECRET).upper(), SECRET) is True

    def test_sha256_prefix_accepted(self):
        assert verify(BODY, "sha256=" + sign(BODY, SECRET), SECRET) is True

    def test_surrounding_whitespace_ignored(self):
        assert verify(BODY, f"  {sign(BODY, SECRET)}\n", SECRET) is True

    def test_wrong_secret_rejected(self):
        assert verify(BODY, sign(BODY, "other-secret"), SECRET) is False

    @pytest.mark.parametrize("index", [0, 10, len(BODY) - 1])
    def test_single_bit_flip_in_body_rejected(self, index):
        signature = sign(BODY, SECRET)
        assert verify(_flip_bit(BODY, index), signature, SECRET) is False

    @pytest.mark.parametrize("index", [0, 15, 31])
    def test_single_bit_flip_in_signature_rejected(self, index):
        digest = bytes.fromhex(sign(BODY, SECRET))
        tampered = _flip_bit(digest, index, bit=7).hex()
        assert verify(BODY, tampered, SECRET) is False

    def test_reserialized_body_rejected(self):
        """Signature covers the raw bytes, not the JSON value."""
        signature = sign(BODY, SECRET)
        reformatted = b'{"type": "invoice.paid", "invoiceId": "inv_1", "metadata": {"orderId": "order_1"}}'
        assert verify(reformatted, signature, SECRET) is False

    def test_truncated_signature_rejected(self):
        assert verify(BODY, sign(BODY, SECRET)[:32], SECRET) is False

    @pytest.mark.parametrize("signature", ["not-hex", "abc", "zz" * 32])
    def test_non_hex_signature_rejected(self, signature):
        assert verify(BODY, signature, SECRET) is False

    @pytest.mark.parametrize("signature", [None, ""])
    def test_missing_signature_rejected_without_hashing(self, signature):
        with patch.object(webhook_verifier, "_compute_digest") as compute:
            assert verify(BODY, signature, SECRET) is False
        compute.assert_not_called()

    def test_empty_secret_raises(self):
        with pytest.raises(ValueError, match="secret"):
            verify(BODY, sign(BODY, SECRET), "")

    def test_compares_full_decoded_digests(self):
        with patch.object(webhook_verifier.hmac, "compare_digest", wraps=hmac.compare_digest) as compare:
            verify(BODY, sign(BODY, SECRET), SECRET)

        expected, provided = compare.call_args.args
        assert isinstance(expected, bytes) and len(expected) == 32
        assert isinstance(provided, bytes) and len(provided) == 32
