# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import tempfile
import unittest

from nacl import pwhash

from starcoin_sdk.account import Account
from starcoin_sdk.keystore import AuthError, KeyStore

OPSLIMIT = pwhash.argon2id.OPSLIMIT_MIN
MEMLIMIT = pwhash.argon2id.MEMLIMIT_MIN


class Test(unittest.TestCase):
    def setUp(self):
        self.account = Account.generate()
        self.key_store = KeyStore.encrypt(
            self.account, "password", opslimit=OPSLIMIT, memlimit=MEMLIMIT
        )

    def test_decrypt(self):
        self.assertEqual(self.key_store.decrypt("password"), self.account)
        self.assertEqual(self.key_store.address, self.account.address())
        self.assertEqual(self.key_store.public_key, self.account.public_key())

    def test_wrong_password(self):
        with self.assertRaises(AuthError):
            self.key_store.decrypt("wrong")
        self.assertFalse(self.key_store.verify("wrong"))
        self.assertTrue(self.key_store.verify("password"))

    def test_private_key_is_not_stored_in_clear(self):
        seed = self.account.private_key.to_crypto_bytes().hex()
        self.assertNotIn(seed, str(self.key_store.to_dict()))

    def test_load_and_store(self):
        (_file, path) = tempfile.mkstemp()
        self.key_store.store(path)
        loaded = KeyStore.load(path)

        self.assertEqual(loaded, self.key_store)
        self.assertEqual(loaded.decrypt("password"), self.account)

    def test_unknown_kdf(self):
        data = self.key_store.to_dict()
        data["crypto"]["kdf"] = "scrypt"
        with self.assertRaises(ValueError):
            KeyStore.from_dict(data)


if __name__ == "__main__":
    unittest.main()
