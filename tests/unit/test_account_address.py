# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest
from dataclasses import dataclass

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import (
    AccountAddress,
    AuthenticationKey,
    ParseAddressError,
)
from starcoin_sdk.bcs import Deserializer, Serializer

# Exported from a starcoin console, `account export`.
SENDER_PRIVATE_KEY = "0xe424e16db235e3f3b9ef2475516c51d4c15aa5287ceb364213698bd551eab4f2"
SENDER_PUBLIC_KEY = "0x704148879e1341243f754d62fa5228529ccb207be6bd3af20b2c5422f6f234d8"
SENDER_ADDRESS = "0x319ccfe5fc73a2cdae11c40f31ca1b61"


@dataclass(init=True, frozen=True)
class TestAddresses:
    short_with_0x: str
    short_without_0x: str
    long_with_0x: str
    long_without_0x: str
    bytes: bytes


ADDRESS_ZERO = TestAddresses(
    short_with_0x="0x0",
    short_without_0x="0",
    long_with_0x="0x00000000000000000000000000000000",
    long_without_0x="00000000000000000000000000000000",
    bytes=bytes([0] * 16),
)

ADDRESS_F = TestAddresses(
    short_with_0x="0xf",
    short_without_0x="f",
    long_with_0x="0x0000000000000000000000000000000f",
    long_without_0x="0000000000000000000000000000000f",
    bytes=bytes([0] * 15 + [15]),
)

ADDRESS_TEN = TestAddresses(
    short_with_0x="0x10",
    short_without_0x="10",
    long_with_0x="0x00000000000000000000000000000010",
    long_without_0x="00000000000000000000000000000010",
    bytes=bytes([0] * 15 + [16]),
)

ADDRESS_OTHER = TestAddresses(
    short_with_0x="0xc13b50bdb12e3fdd03c4e3b05e34926a",
    short_without_0x="c13b50bdb12e3fdd03c4e3b05e34926a",
    long_with_0x="0xc13b50bdb12e3fdd03c4e3b05e34926a",
    long_without_0x="c13b50bdb12e3fdd03c4e3b05e34926a",
    bytes=bytes.fromhex("c13b50bdb12e3fdd03c4e3b05e34926a"),
)


class Test(unittest.TestCase):
    def test_from_str(self):
        for address in (ADDRESS_ZERO, ADDRESS_F, ADDRESS_TEN, ADDRESS_OTHER):
            for value in (
                address.short_with_0x,
                address.short_without_0x,
                address.long_with_0x,
                address.long_without_0x,
            ):
                self.assertEqual(AccountAddress.from_str(value).address, address.bytes)

    def test_to_str(self):
        # Special addresses are printed in short form, all others in long form.
        self.assertEqual(str(AccountAddress(ADDRESS_ZERO.bytes)), "0x0")
        self.assertEqual(str(AccountAddress(ADDRESS_F.bytes)), "0xf")
        self.assertEqual(str(AccountAddress(ADDRESS_TEN.bytes)), ADDRESS_TEN.long_with_0x)
        self.assertEqual(
            str(AccountAddress(ADDRESS_OTHER.bytes)), ADDRESS_OTHER.long_with_0x
        )

    def test_hex_is_full_width(self):
        self.assertEqual(
            AccountAddress(ADDRESS_F.bytes).hex(), ADDRESS_F.long_with_0x
        )

    def test_round_trip_through_text(self):
        for address in (ADDRESS_ZERO, ADDRESS_F, ADDRESS_TEN, ADDRESS_OTHER):
            account_address = AccountAddress(address.bytes)
            self.assertEqual(AccountAddress.from_str(str(account_address)), account_address)
            self.assertEqual(AccountAddress.from_str(account_address.hex()), account_address)

    def test_invalid(self):
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0x")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0x" + "1" * 33)
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0xzz")
        with self.assertRaises(ParseAddressError):
            AccountAddress(bytes(32))

    def test_serialization_has_no_length_prefix(self):
        address = AccountAddress(ADDRESS_OTHER.bytes)
        ser = Serializer()
        address.serialize(ser)
        self.assertEqual(ser.output(), ADDRESS_OTHER.bytes)
        self.assertEqual(AccountAddress.deserialize(Deserializer(ser.output())), address)

    def test_from_key(self):
        private_key = ed25519.PrivateKey.from_str(SENDER_PRIVATE_KEY)
        public_key = private_key.public_key()

        self.assertEqual(str(public_key), SENDER_PUBLIC_KEY)
        self.assertEqual(
            AccountAddress.from_key(public_key), AccountAddress.from_str(SENDER_ADDRESS)
        )

    def test_authentication_key(self):
        public_key = ed25519.PublicKey.from_str(SENDER_PUBLIC_KEY)
        auth_key = AuthenticationKey.from_public_key(public_key)

        self.assertEqual(len(auth_key.key), AuthenticationKey.LENGTH)
        self.assertEqual(auth_key.hex()[-32:], SENDER_ADDRESS[2:])
        self.assertEqual(auth_key.derived_address(), AccountAddress.from_str(SENDER_ADDRESS))
        self.assertEqual(AuthenticationKey.from_str(auth_key.hex()), auth_key)

        with self.assertRaises(ParseAddressError):
            AuthenticationKey(bytes(16))


if __name__ == "__main__":
    unittest.main()
