# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import tempfile
import unittest

from starcoin_sdk.account import Account
from starcoin_sdk.account_address import AccountAddress


class Test(unittest.TestCase):
    def test_load_and_store(self):
        (_file, path) = tempfile.mkstemp()
        start = Account.generate()
        start.store(path)
        load = Account.load(path)

        self.assertEqual(start, load)
        # The address is the tail of the authentication key.
        self.assertEqual(start.auth_key().derived_address(), start.address())

    def test_key(self):
        message = b"test message"
        account = Account.generate()
        signature = account.sign(message)
        self.assertTrue(account.public_key().verify(message, signature))

    def test_load_key(self):
        account = Account.load_key(
            "0xe424e16db235e3f3b9ef2475516c51d4c15aa5287ceb364213698bd551eab4f2"
        )
        self.assertEqual(
            account.address(),
            AccountAddress.from_str("0x319ccfe5fc73a2cdae11c40f31ca1b61"),
        )


if __name__ == "__main__":
    unittest.main()
