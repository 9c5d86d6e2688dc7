# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

"""Shareable receipt identifiers: `stc1...` bech32 strings carrying an address and,
optionally, the authentication key needed to create the account on first transfer.

Layout of the bech32 data part: one 5-bit version word (1), then the 8 to 5 bit
conversion of `address (16 bytes) || auth_key (32 bytes, or nothing)`.
"""

from __future__ import annotations

from bech32 import bech32_decode, bech32_encode, convertbits

from starcoin_sdk.account_address import AccountAddress, AuthenticationKey

PREFIX = "stc"
VERSION = 1


class ReceiptIdentifier:
    address: AccountAddress
    auth_key: AuthenticationKey | None

    def __init__(
        self, address: AccountAddress, auth_key: AuthenticationKey | None = None
    ):
        self.address = address
        self.auth_key = auth_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReceiptIdentifier):
            return NotImplemented
        return self.address == other.address and self.auth_key == other.auth_key

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        return f"ReceiptIdentifier({self.address.hex()}, {self.auth_key!r})"

    def encode(self) -> str:
        data = self.address.address
        if self.auth_key is not None:
            data += self.auth_key.key
        words = convertbits(data, 8, 5)
        return bech32_encode(PREFIX, [VERSION] + words)

    @staticmethod
    def decode(value: str) -> ReceiptIdentifier:
        """Parses a receipt identifier.

        Raises:
            FormatError: If the prefix, checksum, version or payload length is wrong.

        """
        hrp, words = bech32_decode(value)
        if hrp is None or words is None:
            raise FormatError(value, "invalid bech32 characters or checksum")
        if hrp != PREFIX:
            raise FormatError(value, f"expected prefix {PREFIX!r}, found {hrp!r}")
        if len(words) == 0 or words[0] != VERSION:
            raise FormatError(value, "unsupported version")

        data = convertbits(words[1:], 5, 8, False)
        if data is None:
            raise FormatError(value, "invalid padding")
        data = bytes(data)

        if len(data) == AccountAddress.LENGTH:
            return ReceiptIdentifier(AccountAddress(data))
        if len(data) == AccountAddress.LENGTH + AuthenticationKey.LENGTH:
            return ReceiptIdentifier(
                AccountAddress(data[: AccountAddress.LENGTH]),
                AuthenticationKey(data[AccountAddress.LENGTH :]),
            )
        raise FormatError(value, f"unexpected payload length {len(data)}")


def encode_receipt_identifier(
    address: AccountAddress | str, auth_key: AuthenticationKey | str | None = None
) -> str:
    if isinstance(address, str):
        address = AccountAddress.from_str(address)
    if isinstance(auth_key, str):
        auth_key = AuthenticationKey.from_str(auth_key) if auth_key else None
    return ReceiptIdentifier(address, auth_key).encode()


def decode_receipt_identifier(value: str) -> ReceiptIdentifier:
    return ReceiptIdentifier.decode(value)


def is_receipt_identifier(value: str) -> bool:
    return value.lower().startswith(f"{PREFIX}1")


class FormatError(Exception):
    """A receipt identifier could not be decoded."""

    def __init__(self, value: str, reason: str):
        self.value = value
        super().__init__(f"Invalid receipt identifier {value!r}: {reason}")
