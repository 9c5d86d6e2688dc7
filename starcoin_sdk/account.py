# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import AccountAddress, AuthenticationKey
from starcoin_sdk.transactions import RawUserTransaction, TransactionAuthenticator


class Account:
    """Represents an account as well as the private, public key-pair for the Starcoin blockchain."""

    account_address: AccountAddress
    private_key: ed25519.PrivateKey

    def __init__(
        self, account_address: AccountAddress, private_key: ed25519.PrivateKey
    ):
        self.account_address = account_address
        self.private_key = private_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Account):
            return NotImplemented
        return (
            self.account_address == other.account_address
            and self.private_key == other.private_key
        )

    @staticmethod
    def generate() -> Account:
        private_key = ed25519.PrivateKey.random()
        account_address = AccountAddress.from_key(private_key.public_key())
        return Account(account_address, private_key)

    @staticmethod
    def load_key(key: str) -> Account:
        private_key = ed25519.PrivateKey.from_str(key)
        account_address = AccountAddress.from_key(private_key.public_key())
        return Account(account_address, private_key)

    @staticmethod
    def load(path: str) -> Account:
        with open(path) as file:
            data = json.load(file)
        return Account(
            AccountAddress.from_str(data["account_address"]),
            ed25519.PrivateKey.from_str(data["private_key"]),
        )

    def store(self, path: str):
        data = {
            "account_address": self.account_address.hex(),
            "private_key": str(self.private_key),
        }
        with open(path, "w") as file:
            json.dump(data, file)

    def address(self) -> AccountAddress:
        """Returns the address associated with the given account"""
        return self.account_address

    def auth_key(self) -> AuthenticationKey:
        """Returns the auth_key for the associated account"""
        return AuthenticationKey.from_public_key(self.private_key.public_key())

    def sign(self, data: bytes) -> ed25519.Signature:
        return self.private_key.sign(data)

    def sign_transaction(
        self, transaction: RawUserTransaction
    ) -> TransactionAuthenticator:
        return transaction.sign(self.private_key)

    def public_key(self) -> ed25519.PublicKey:
        """Returns the public key for the associated account"""
        return self.private_key.public_key()
