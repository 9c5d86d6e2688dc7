# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

"""Password protected storage for an ed25519 private key.

The seed is sealed with a NaCl `SecretBox` whose key is derived from the password with
argon2id. Only the address and public key are readable without the password.
"""

from __future__ import annotations

import json
from typing import Any

from nacl import pwhash, secret, utils
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

from starcoin_sdk import ed25519
from starcoin_sdk.account import Account
from starcoin_sdk.account_address import AccountAddress

KDF_NAME = "argon2id"


class KeyStore:
    """Encrypted key material of a single account.

    Attributes:
        address (AccountAddress): Address of the account the key belongs to.
        public_key (ed25519.PublicKey): Public half of the key, stored in clear.
        salt (bytes): argon2id salt.
        opslimit (int): argon2id operations limit used to seal the key.
        memlimit (int): argon2id memory limit used to seal the key.
        ciphertext (bytes): Nonce and sealed private key seed.

    """

    DEFAULT_OPSLIMIT: int = pwhash.argon2id.OPSLIMIT_INTERACTIVE
    DEFAULT_MEMLIMIT: int = pwhash.argon2id.MEMLIMIT_INTERACTIVE

    address: AccountAddress
    public_key: ed25519.PublicKey
    salt: bytes
    opslimit: int
    memlimit: int
    ciphertext: bytes

    def __init__(
        self,
        address: AccountAddress,
        public_key: ed25519.PublicKey,
        salt: bytes,
        opslimit: int,
        memlimit: int,
        ciphertext: bytes,
    ):
        self.address = address
        self.public_key = public_key
        self.salt = salt
        self.opslimit = opslimit
        self.memlimit = memlimit
        self.ciphertext = ciphertext

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyStore):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def encrypt(
        account: Account,
        password: str,
        opslimit: int | None = None,
        memlimit: int | None = None,
    ) -> KeyStore:
        """Seals the account's private key with the given password.

        Args:
            account (Account): Account whose private key is stored.
            password (str): Password protecting the key.
            opslimit (int | None): argon2id operations limit. Default to `DEFAULT_OPSLIMIT`.
            memlimit (int | None): argon2id memory limit. Default to `DEFAULT_MEMLIMIT`.

        Returns:
            KeyStore: The sealed key store.

        """
        opslimit = opslimit or KeyStore.DEFAULT_OPSLIMIT
        memlimit = memlimit or KeyStore.DEFAULT_MEMLIMIT
        salt = utils.random(pwhash.argon2id.SALTBYTES)
        key = _derive_key(password, salt, opslimit, memlimit)
        ciphertext = secret.SecretBox(key).encrypt(
            account.private_key.to_crypto_bytes()
        )
        return KeyStore(
            account.address(),
            account.public_key(),
            salt,
            opslimit,
            memlimit,
            bytes(ciphertext),
        )

    def decrypt(self, password: str) -> Account:
        """Opens the key store.

        Raises:
            AuthError: If the password does not open the key store.

        """
        key = _derive_key(password, self.salt, self.opslimit, self.memlimit)
        try:
            seed = secret.SecretBox(key).decrypt(self.ciphertext)
        except CryptoError as err:
            raise AuthError(f"Invalid credential for account {self.address}") from err

        private_key = ed25519.PrivateKey(SigningKey(seed))
        if private_key.public_key() != self.public_key:
            raise AuthError(f"Key store for {self.address} is corrupted")
        return Account(self.address, private_key)

    def verify(self, password: str) -> bool:
        try:
            self.decrypt(password)
        except AuthError:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address.hex(),
            "public_key": str(self.public_key),
            "crypto": {
                "kdf": KDF_NAME,
                "salt": self.salt.hex(),
                "opslimit": self.opslimit,
                "memlimit": self.memlimit,
                "ciphertext": self.ciphertext.hex(),
            },
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> KeyStore:
        crypto = data["crypto"]
        if crypto["kdf"] != KDF_NAME:
            raise ValueError(f"Unsupported key derivation function: {crypto['kdf']}")
        return KeyStore(
            AccountAddress.from_str(data["address"]),
            ed25519.PublicKey.from_str(data["public_key"]),
            bytes.fromhex(crypto["salt"]),
            int(crypto["opslimit"]),
            int(crypto["memlimit"]),
            bytes.fromhex(crypto["ciphertext"]),
        )

    @staticmethod
    def load(path: str) -> KeyStore:
        with open(path) as file:
            return KeyStore.from_dict(json.load(file))

    def store(self, path: str):
        with open(path, "w") as file:
            json.dump(self.to_dict(), file)


def _derive_key(password: str, salt: bytes, opslimit: int, memlimit: int) -> bytes:
    return pwhash.argon2id.kdf(
        secret.SecretBox.KEY_SIZE,
        password.encode(),
        salt,
        opslimit=opslimit,
        memlimit=memlimit,
    )


class AuthError(Exception):
    """Raised when a credential does not unlock the key material, or signing is attempted while locked."""
