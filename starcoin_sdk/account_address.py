# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import hashlib

from starcoin_sdk import ed25519
from starcoin_sdk.bcs import Deserializer, Serializer


class AuthKeyScheme:
    Ed25519: bytes = b"\x00"
    MultiEd25519: bytes = b"\x01"


class ParseAddressError(Exception):
    """There was an error parsing an address."""


class AccountAddress:
    address: bytes
    LENGTH: int = 16

    def __init__(self, address: bytes):
        self.address = address

        if len(address) != AccountAddress.LENGTH:
            raise ParseAddressError(
                f"Expected address of length {AccountAddress.LENGTH}, found {len(address)}"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def __str__(self):
        """Special addresses (0x0 to 0xf) are represented in SHORT form, e.g. 0x1, all
        other addresses in LONG form, i.e. 0x followed by 32 hex characters.
        """
        suffix = self.address.hex()
        if self.is_special():
            suffix = suffix.lstrip("0") or "0"
        return f"0x{suffix}"

    def __repr__(self):
        return self.__str__()

    def hex(self) -> str:
        """Full width form, as the node prints addresses in JSON results."""
        return f"0x{self.address.hex()}"

    def is_special(self):
        """An address is special if the first 15 bytes are zero and the last byte is
        smaller than 16, i.e. the range 0x0 to 0xf inclusive.
        """
        return all(b == 0 for b in self.address[:-1]) and self.address[-1] < 0b10000

    @staticmethod
    def from_str(address: str) -> AccountAddress:
        """Creates an instance of AccountAddress from a hex string.

        Both LONG (32 hex chars) and SHORT (1 to 31 hex chars, left padded with zeroes)
        forms are accepted, with or without the leading 0x.

        Parameters
        ----------
        - address (str): A hex string representing an account address.

        Returns
        -------
        - AccountAddress: An instance of AccountAddress.

        """
        addr = address

        # Strip 0x prefix if present.
        if address[0:2] in ("0x", "0X"):
            addr = address[2:]

        if len(addr) < 1:
            raise ParseAddressError(
                "Hex string is too short, must be 1 to 32 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) > AccountAddress.LENGTH * 2:
            raise ParseAddressError(
                "Hex string is too long, must be 1 to 32 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) < AccountAddress.LENGTH * 2:
            pad = "0" * (AccountAddress.LENGTH * 2 - len(addr))
            addr = pad + addr

        try:
            return AccountAddress(bytes.fromhex(addr))
        except ValueError as err:
            raise ParseAddressError(f"Invalid hex string: {address}") from err

    @staticmethod
    def from_key(key: ed25519.PublicKey) -> AccountAddress:
        return AuthenticationKey.from_public_key(key).derived_address()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AccountAddress:
        return AccountAddress(deserializer.fixed_bytes(AccountAddress.LENGTH))

    def serialize(self, serializer: Serializer):
        serializer.fixed_bytes(self.address)


class AuthenticationKey:
    """sha3_256(public_key || scheme). The account address is its last 16 bytes."""

    key: bytes
    LENGTH: int = 32

    def __init__(self, key: bytes):
        if len(key) != AuthenticationKey.LENGTH:
            raise ParseAddressError(
                f"Expected authentication key of length {AuthenticationKey.LENGTH}, found {len(key)}"
            )
        self.key = key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthenticationKey):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.key.hex()

    def __repr__(self) -> str:
        return f"AuthenticationKey({self.key.hex()})"

    def hex(self) -> str:
        return f"0x{self.key.hex()}"

    @staticmethod
    def from_str(value: str) -> AuthenticationKey:
        if value[0:2] == "0x":
            value = value[2:]
        try:
            return AuthenticationKey(bytes.fromhex(value))
        except ValueError as err:
            raise ParseAddressError(f"Invalid hex string: {value}") from err

    @staticmethod
    def from_public_key(key: ed25519.PublicKey) -> AuthenticationKey:
        hasher = hashlib.sha3_256()
        hasher.update(key.to_crypto_bytes())
        hasher.update(AuthKeyScheme.Ed25519)
        return AuthenticationKey(hasher.digest())

    def derived_address(self) -> AccountAddress:
        return AccountAddress(self.key[-AccountAddress.LENGTH :])
