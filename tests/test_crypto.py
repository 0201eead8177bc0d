"""Tests for payment signature computation and verification."""
import hashlib
import hmac

import pytest

from payrelay.utils.crypto import compute_payment_signature, verify_payment_signature

from conftest import SECRET, sign


class TestComputeSignature:
    def test_matches_hmac_sha256_over_order_pipe_payment(self) -> None:
        expected = hmac.new(b"s3cret", b"order_1|pay_1", hashlib.sha256).hexdigest()
        assert compute_payment_signature("order_1", "pay_1", "s3cret") == expected

    def test_field_order_matters(self) -> None:
        assert compute_payment_signature("a", "b", SECRET) != compute_payment_signature("b", "a", SECRET)

    def test_hex_digest_length(self) -> None:
        assert len(compute_payment_signature("order_1", "pay_1", SECRET)) == 64

    def test_unicode_ids_are_utf8_encoded(self) -> None:
        expected = hmac.new(SECRET.encode(), "заказ|платеж".encode("utf-8"), hashlib.sha256).hexdigest()
        assert compute_payment_signature("заказ", "платеж", SECRET) == expected


class TestVerifySignature:
    @pytest.mark.parametrize(
        "order_id,payment_id",
        [("order_Nx1", "pay_Nx1"), ("order_" + "x" * 200, "pay_1"), ("", "pay_1"), ("order_1", "")],
    )
    def test_valid_signature_accepted(self, order_id: str, payment_id: str) -> None:
        assert verify_payment_signature(order_id, payment_id, sign(order_id, payment_id), SECRET) is True

    def test_every_single_character_mutation_rejected(self) -> None:
        signature = sign("order_1", "pay_1")
        for i, char in enumerate(signature):
            replacement = "0" if char != "0" else "1"
            mutated = signature[:i] + replacement + signature[i + 1:]
            assert verify_payment_signature("order_1", "pay_1", mutated, SECRET) is False

    def test_wrong_secret_rejected(self) -> None:
        assert verify_payment_signature("order_1", "pay_1", sign("order_1", "pay_1"), "other") is False

    def test_swapped_ids_rejected(self) -> None:
        assert verify_payment_signature("pay_1", "order_1", sign("order_1", "pay_1"), SECRET) is False

    def test_empty_ids_are_not_special_cased(self) -> None:
        # Подпись от непустых id не подходит к пустым
        assert verify_payment_signature("", "", sign("order_1", "pay_1"), SECRET) is False
        assert verify_payment_signature("", "", sign("", ""), SECRET) is True

    @pytest.mark.parametrize("secret", ["", None])
    def test_missing_secret_returns_false(self, secret) -> None:
        assert verify_payment_signature("order_1", "pay_1", sign("order_1", "pay_1"), secret) is False

    @pytest.mark.parametrize("signature", ["", None, "неверная-подпись", "x" * 1000])
    def test_malformed_signature_returns_false(self, signature) -> None:
        assert verify_payment_signature("order_1", "pay_1", signature, SECRET) is False

    def test_uppercase_hex_rejected(self) -> None:
        assert verify_payment_signature("order_1", "pay_1", sign("order_1", "pay_1").upper(), SECRET) is False
