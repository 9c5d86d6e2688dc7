# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest

from bech32 import bech32_encode, convertbits

from starcoin_sdk.account import Account
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.receipt_identifier import (
    FormatError,
    ReceiptIdentifier,
    decode_receipt_identifier,
    encode_receipt_identifier,
)

ADDRESS = "0xc13b50bdb12e3fdd03c4e3b05e34926a"


class Test(unittest.TestCase):
    def test_round_trip_without_auth_key(self):
        address = AccountAddress.from_str(ADDRESS)
        encoded = encode_receipt_identifier(address)

        self.assertTrue(encoded.startswith("stc1"))
        decoded = decode_receipt_identifier(encoded)
        self.assertEqual(decoded.address, address)
        self.assertIsNone(decoded.auth_key)

    def test_round_trip_with_auth_key(self):
        for _ in range(5):
            account = Account.generate()
            receipt_identifier = ReceiptIdentifier(account.address(), account.auth_key())
            self.assertEqual(
                ReceiptIdentifier.decode(receipt_identifier.encode()), receipt_identifier
            )

    def test_string_arguments(self):
        account = Account.generate()
        encoded = encode_receipt_identifier(
            account.address().hex(), account.auth_key().hex()
        )
        self.assertEqual(
            decode_receipt_identifier(encoded),
            ReceiptIdentifier(account.address(), account.auth_key()),
        )
        # An empty auth key means none.
        self.assertIsNone(
            decode_receipt_identifier(encode_receipt_identifier(ADDRESS, "")).auth_key
        )

    def test_corrupted_checksum(self):
        encoded = encode_receipt_identifier(ADDRESS)
        corrupted = encoded[:-1] + ("q" if encoded[-1] != "q" else "p")
        with self.assertRaises(FormatError):
            decode_receipt_identifier(corrupted)

    def test_corrupted_data(self):
        encoded = encode_receipt_identifier(ADDRESS)
        position = len("stc1") + 3
        corrupted = (
            encoded[:position]
            + ("q" if encoded[position] != "q" else "p")
            + encoded[position + 1 :]
        )
        with self.assertRaises(FormatError):
            decode_receipt_identifier(corrupted)

    def test_wrong_prefix(self):
        words = convertbits(AccountAddress.from_str(ADDRESS).address, 8, 5)
        with self.assertRaises(FormatError):
            decode_receipt_identifier(bech32_encode("bc", [1] + words))

    def test_wrong_version(self):
        words = convertbits(AccountAddress.from_str(ADDRESS).address, 8, 5)
        with self.assertRaises(FormatError):
            decode_receipt_identifier(bech32_encode("stc", [0] + words))

    def test_wrong_length(self):
        words = convertbits(bytes(20), 8, 5)
        with self.assertRaises(FormatError):
            decode_receipt_identifier(bech32_encode("stc", [1] + words))

    def test_not_bech32(self):
        for value in ("", "stc1", "0x1", "stc1bbbbbb"):
            with self.assertRaises(FormatError):
                decode_receipt_identifier(value)


if __name__ == "__main__":
    unittest.main()
