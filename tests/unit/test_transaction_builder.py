# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.bcs import OutOfRangeError
from starcoin_sdk.receipt_identifier import encode_receipt_identifier
from starcoin_sdk.transaction_builder import (
    ScriptCall,
    TransactionRequest,
    encode_script_function,
    generate_raw_user_transaction,
    parse_argument,
    sign_raw_user_transaction,
)
from starcoin_sdk.transactions import SignedUserTransaction, TransactionPayload
from starcoin_sdk.type_tag import encode_struct_type_tags

SENDER_PRIVATE_KEY = "0xe424e16db235e3f3b9ef2475516c51d4c15aa5287ceb364213698bd551eab4f2"
SENDER_ADDRESS = "0x319ccfe5fc73a2cdae11c40f31ca1b61"
RECEIVER = "0x84d6de1c82bea949966fd13e7896e381"


class Test(unittest.TestCase):
    def test_integer_literals(self):
        self.assertEqual(parse_argument("7u8"), b"\x07")
        self.assertEqual(parse_argument("1024u64"), b"\x00\x04" + b"\x00" * 6)
        self.assertEqual(parse_argument("1024"), b"\x00\x04" + b"\x00" * 6)
        self.assertEqual(parse_argument("1024u128"), b"\x00\x04" + b"\x00" * 14)
        self.assertEqual(parse_argument("1u256"), b"\x01" + b"\x00" * 31)
        self.assertEqual(parse_argument(1024), parse_argument("1024u64"))

    def test_integer_literal_out_of_range(self):
        with self.assertRaises(OutOfRangeError):
            parse_argument("256u8")
        with self.assertRaises(OutOfRangeError):
            parse_argument(f"{2**64}u64")

    def test_bool_literals(self):
        self.assertEqual(parse_argument("true"), b"\x01")
        self.assertEqual(parse_argument("false"), b"\x00")
        self.assertEqual(parse_argument(True), b"\x01")

    def test_vector_literals(self):
        self.assertEqual(parse_argument('x""'), b"\x00")
        self.assertEqual(parse_argument('x"0a0b"'), b"\x02\x0a\x0b")
        self.assertEqual(parse_argument('b"foo"'), b"\x03foo")

    def test_address_literals(self):
        address = AccountAddress.from_str(RECEIVER)
        self.assertEqual(parse_argument(RECEIVER), address.address)
        self.assertEqual(parse_argument("0x1"), bytes(15) + b"\x01")
        self.assertEqual(parse_argument(address), address.address)
        self.assertEqual(
            parse_argument(encode_receipt_identifier(address)), address.address
        )

    def test_pre_encoded_bytes_pass_through(self):
        self.assertEqual(parse_argument(b"\x01\x02"), b"\x01\x02")

    def test_unrecognized(self):
        with self.assertRaises(ValueError):
            parse_argument("hello")

    def test_encode_script_function(self):
        payload = encode_script_function(
            "0x1::TransferScripts::peer_to_peer",
            encode_struct_type_tags(["0x1::STC::STC"]),
            [parse_argument(RECEIVER), parse_argument('x""'), parse_argument("1024u128")],
        )
        self.assertEqual(payload.variant, TransactionPayload.SCRIPT_FUNCTION)
        self.assertEqual(
            payload.value.function_id(), "0x1::TransferScripts::peer_to_peer"
        )
        self.assertEqual(len(payload.value.args), 3)

    def test_generate_and_sign(self):
        payload = ScriptCall(
            "0x1::TransferScripts::peer_to_peer",
            ["0x1::STC::STC"],
            [RECEIVER, 'x""', "1024u128"],
        ).to_payload()
        raw_txn = generate_raw_user_transaction(
            SENDER_ADDRESS, payload, 10_000_000, 3, 1_700_000_000, 251
        )
        self.assertEqual(raw_txn.sender, AccountAddress.from_str(SENDER_ADDRESS))
        self.assertEqual(raw_txn.gas_unit_price, 1)
        self.assertEqual(raw_txn.gas_token_code, "0x1::STC::STC")

        signed_hex = sign_raw_user_transaction(SENDER_PRIVATE_KEY, raw_txn)
        signed_txn = SignedUserTransaction.from_bytes(bytes.fromhex(signed_hex[2:]))
        self.assertEqual(signed_txn.raw_txn, raw_txn)
        self.assertTrue(signed_txn.verify())
        self.assertEqual(
            signed_txn.public_key,
            ed25519.PrivateKey.from_str(SENDER_PRIVATE_KEY).public_key(),
        )

    def test_request_params(self):
        request = TransactionRequest(
            ScriptCall(
                "0x1::TransferScripts::peer_to_peer",
                ["0x1::STC::STC"],
                [RECEIVER, 'x""', "100000u128"],
            ),
            sender=SENDER_ADDRESS,
            sequence_number=0,
            chain_id=251,
        )
        self.assertEqual(
            request.to_params(),
            {
                "script": {
                    "code": "0x1::TransferScripts::peer_to_peer",
                    "type_args": ["0x1::STC::STC"],
                    "args": [RECEIVER, 'x""', "100000u128"],
                },
                "sender": SENDER_ADDRESS,
                "sequence_number": 0,
                "chain_id": 251,
            },
        )

    def test_request_params_reject_encoded_arguments(self):
        script_call = ScriptCall("0x1::Foo::bar", [], [b"\x01"])
        with self.assertRaises(ValueError):
            script_call.to_params()


if __name__ == "__main__":
    unittest.main()
