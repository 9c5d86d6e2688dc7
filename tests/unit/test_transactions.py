# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import hashlib
import unittest

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.bcs import (
    EncodingError,
    InvalidUtf8Error,
    InvalidVariantError,
    Serializer,
)
from starcoin_sdk.transaction_builder import ScriptCall
from starcoin_sdk.transactions import (
    ModuleId,
    Package,
    RawUserTransaction,
    Script,
    ScriptFunction,
    SignedUserTransaction,
    TransactionArgument,
    TransactionAuthenticator,
    TransactionPayload,
    salt,
)
from starcoin_sdk.type_tag import StructTag, TypeTag

SENDER_PRIVATE_KEY = "0xe424e16db235e3f3b9ef2475516c51d4c15aa5287ceb364213698bd551eab4f2"
RECEIVER = "0xc13b50bdb12e3fdd03c4e3b05e34926a"

# 0x1 sends 1024 STC to RECEIVER through 0x1::TransferScripts::peer_to_peer, sequence number 5,
# max gas 10_000_000, gas price 1, expiring at 43200, on chain 251.
RAW_TRANSACTION_CORPUS = "".join(
    [
        "00000000000000000000000000000001",  # sender
        "0500000000000000",  # sequence number
        "02",  # script function payload
        "00000000000000000000000000000001",  # module address
        "0f5472616e7366657253637269707473",  # TransferScripts
        "0c706565725f746f5f70656572",  # peer_to_peer
        "01",  # one type argument
        "0700000000000000000000000000000001035354430353544300",  # 0x1::STC::STC
        "03",  # three arguments
        "10c13b50bdb12e3fdd03c4e3b05e34926a",  # receiver address
        "0100",  # empty auth key, x""
        "1000040000000000000000000000000000",  # 1024u128
        "8096980000000000",  # max gas amount
        "0100000000000000",  # gas unit price
        "0d3078313a3a5354433a3a535443",  # gas token code
        "c0a8000000000000",  # expiration timestamp
        "fb",  # chain id
    ]
)

# RAW_TRANSACTION_CORPUS signed by SENDER_PRIVATE_KEY.
SIGNATURE_CORPUS = (
    "48992954f42d785086e839687ec2d89beab8558467e12cb5e4dbfd89eefd146e"
    "8b7a217777fbf3af706ec0aad1d87618f28d623b6fae0a9bace44ecd16ab7606"
)
SIGNED_TRANSACTION_CORPUS = "".join(
    [
        RAW_TRANSACTION_CORPUS,
        "00",  # ed25519 authenticator
        "20704148879e1341243f754d62fa5228529ccb207be6bd3af20b2c5422f6f234d8",  # public key
        "40" + SIGNATURE_CORPUS,
    ]
)


def peer_to_peer_payload() -> TransactionPayload:
    transaction_arguments = [
        TransactionArgument(AccountAddress.from_str(RECEIVER), Serializer.struct),
        TransactionArgument(b"", Serializer.to_bytes),
        TransactionArgument(1024, Serializer.u128),
    ]
    return TransactionPayload(
        ScriptFunction.natural(
            "0x1::TransferScripts",
            "peer_to_peer",
            [TypeTag(StructTag.from_str("0x1::STC::STC"))],
            transaction_arguments,
        )
    )


def peer_to_peer_transaction(sequence_number: int = 5) -> RawUserTransaction:
    return RawUserTransaction(
        AccountAddress.from_str("0x1"),
        sequence_number,
        peer_to_peer_payload(),
        10_000_000,
        1,
        43200,
        251,
    )


class Test(unittest.TestCase):
    def test_raw_transaction_with_corpus(self):
        raw_transaction = peer_to_peer_transaction()
        self.assertEqual(raw_transaction.to_bytes().hex(), RAW_TRANSACTION_CORPUS)
        self.assertEqual(
            RawUserTransaction.from_bytes(bytes.fromhex(RAW_TRANSACTION_CORPUS)),
            raw_transaction,
        )

    def test_signature_with_corpus(self):
        private_key = ed25519.PrivateKey.from_str(SENDER_PRIVATE_KEY)
        raw_transaction = peer_to_peer_transaction()
        signed_transaction = SignedUserTransaction(
            raw_transaction, raw_transaction.sign(private_key)
        )

        self.assertEqual(signed_transaction.signature.data().hex(), SIGNATURE_CORPUS)
        self.assertEqual(signed_transaction.to_hex(), f"0x{SIGNED_TRANSACTION_CORPUS}")
        self.assertEqual(
            SignedUserTransaction.from_bytes(bytes.fromhex(SIGNED_TRANSACTION_CORPUS)),
            signed_transaction,
        )

    def test_malformed_module_name(self):
        data = bytearray(bytes.fromhex(RAW_TRANSACTION_CORPUS))
        # First byte of "TransferScripts".
        data[42] = 0xFF
        with self.assertRaises(InvalidUtf8Error) as context:
            RawUserTransaction.from_bytes(bytes(data))
        self.assertIsInstance(context.exception, EncodingError)

    def test_overlong_payload_tag(self):
        data = bytes.fromhex(RAW_TRANSACTION_CORPUS)
        overlong = data[:24] + b"\x82\x00" + data[25:]
        with self.assertRaises(EncodingError):
            RawUserTransaction.from_bytes(overlong)

    def test_serialization_is_deterministic(self):
        self.assertEqual(
            peer_to_peer_transaction().to_bytes(), peer_to_peer_transaction().to_bytes()
        )
        self.assertNotEqual(
            peer_to_peer_transaction(5).to_bytes(), peer_to_peer_transaction(6).to_bytes()
        )

    def test_literal_arguments_match_encoded_arguments(self):
        script_call = ScriptCall(
            "0x1::TransferScripts::peer_to_peer",
            ["0x1::STC::STC"],
            [RECEIVER, 'x""', "1024u128"],
        )
        self.assertEqual(script_call.to_payload(), peer_to_peer_payload())

    def test_keyed_is_salted(self):
        raw_transaction = peer_to_peer_transaction()
        keyed = raw_transaction.keyed()
        self.assertEqual(
            keyed[:32], hashlib.sha3_256(b"STARCOIN::RawUserTransaction").digest()
        )
        self.assertEqual(keyed[32:], raw_transaction.to_bytes())
        self.assertEqual(salt("RawUserTransaction"), keyed[:32])

    def test_sign_and_verify(self):
        private_key = ed25519.PrivateKey.from_str(SENDER_PRIVATE_KEY)
        raw_transaction = peer_to_peer_transaction()

        authenticator = raw_transaction.sign(private_key)
        signed_transaction = SignedUserTransaction(raw_transaction, authenticator)

        self.assertTrue(signed_transaction.verify())
        self.assertEqual(signed_transaction.signature_scheme, TransactionAuthenticator.ED25519)
        self.assertEqual(signed_transaction.public_key, private_key.public_key())
        self.assertTrue(
            raw_transaction.verify(private_key.public_key(), signed_transaction.signature)
        )
        # Same key, same transaction, same signature.
        self.assertEqual(raw_transaction.sign(private_key), authenticator)

        tampered = SignedUserTransaction(peer_to_peer_transaction(6), authenticator)
        self.assertFalse(tampered.verify())

    def test_signed_transaction_layout(self):
        private_key = ed25519.PrivateKey.from_str(SENDER_PRIVATE_KEY)
        raw_transaction = peer_to_peer_transaction()
        signed_transaction = SignedUserTransaction(
            raw_transaction, raw_transaction.sign(private_key)
        )

        signed_bytes = signed_transaction.to_bytes()
        raw_length = len(raw_transaction.to_bytes())
        self.assertEqual(signed_bytes[:raw_length], raw_transaction.to_bytes())
        authenticator = signed_bytes[raw_length:]
        self.assertEqual(authenticator[0], TransactionAuthenticator.ED25519)
        self.assertEqual(authenticator[1], 32)
        self.assertEqual(authenticator[2:34], private_key.public_key().to_crypto_bytes())
        self.assertEqual(authenticator[34], 64)
        self.assertEqual(authenticator[35:], signed_transaction.signature.data())

        self.assertEqual(signed_transaction.to_hex(), f"0x{signed_bytes.hex()}")
        self.assertEqual(SignedUserTransaction.from_bytes(signed_bytes), signed_transaction)
        self.assertTrue(signed_transaction.hash().startswith("0x"))
        self.assertEqual(len(signed_transaction.hash()), 66)

    def test_signed_transaction_is_read_only(self):
        private_key = ed25519.PrivateKey.from_str(SENDER_PRIVATE_KEY)
        raw_transaction = peer_to_peer_transaction()
        signed_transaction = SignedUserTransaction(
            raw_transaction, raw_transaction.sign(private_key)
        )
        with self.assertRaises(AttributeError):
            signed_transaction.raw_txn = peer_to_peer_transaction(6)  # type: ignore[misc]

    def test_multi_ed25519_authenticator_is_rejected(self):
        raw_bytes = peer_to_peer_transaction().to_bytes()
        with self.assertRaises(InvalidVariantError):
            SignedUserTransaction.from_bytes(raw_bytes + b"\x01")

    def test_unknown_payload_variant(self):
        data = bytearray(bytes.fromhex(RAW_TRANSACTION_CORPUS))
        data[24] = 5
        with self.assertRaises(InvalidVariantError):
            RawUserTransaction.from_bytes(bytes(data))

    def test_other_payloads(self):
        script = TransactionPayload(
            Script(b"\xa1\x1c\xeb\x0b", [], [b"\x01\x00"])
        )
        package = TransactionPayload(
            Package(
                AccountAddress.from_str("0x2"),
                [],
                ScriptFunction(ModuleId.from_str("0x2::Init"), "init", [], []),
            )
        )
        for payload in (script, package):
            raw_transaction = RawUserTransaction(
                AccountAddress.from_str("0x2"), 0, payload, 1000, 1, 1, 254
            )
            self.assertEqual(
                RawUserTransaction.from_bytes(raw_transaction.to_bytes()),
                raw_transaction,
            )
        self.assertEqual(script.variant, TransactionPayload.SCRIPT)
        self.assertEqual(package.variant, TransactionPayload.PACKAGE)

    def test_from_function_id(self):
        script_function = ScriptFunction.from_function_id(
            "0x1::TransferScripts::peer_to_peer", [], []
        )
        self.assertEqual(script_function.function_id(), "0x1::TransferScripts::peer_to_peer")
        with self.assertRaises(ValueError):
            ScriptFunction.from_function_id("0x1::TransferScripts", [], [])


if __name__ == "__main__":
    unittest.main()
