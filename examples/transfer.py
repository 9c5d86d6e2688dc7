# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

import asyncio
import json
import logging
import sys

import aiofiles

from examples.common import KEY_STORE_PASSWORD, KEY_STORE_PATH, RPC_NODE_URL
from starcoin_sdk.account import Account
from starcoin_sdk.clients.rpc import StarcoinClient, StarcoinClientConfig
from starcoin_sdk.keystore import KeyStore
from starcoin_sdk.receipt_identifier import decode_receipt_identifier
from starcoin_sdk.transaction_builder import ScriptCall, TransactionRequest
from starcoin_sdk.transactions import STC_TOKEN_CODE


async def load_key_store(path: str) -> KeyStore:
    async with aiofiles.open(path, mode="r") as file:
        return KeyStore.from_dict(json.loads(await file.read()))


async def main(receipt: str):
    starcoin_client = StarcoinClient(
        RPC_NODE_URL, StarcoinClientConfig(confirmations=2)
    )

    key_store = await load_key_store(KEY_STORE_PATH)
    alice = starcoin_client.get_signer(key_store)
    await alice.unlock(KEY_STORE_PASSWORD, duration=300)

    # A receipt identifier carries the address and, for new accounts, the auth key.
    receipt_identifier = decode_receipt_identifier(receipt)
    auth_key = receipt_identifier.auth_key.key.hex() if receipt_identifier.auth_key else ""
    print(f"Alice account address: {alice.address()}")
    print(f"Bob account address: {receipt_identifier.address}")

    print("\n=== Initial Balances ===")
    print(f"Alice: {await starcoin_client.get_balance(alice.address())}")
    print(f"Bob: {await starcoin_client.get_balance(receipt_identifier.address)}")

    request = TransactionRequest(
        ScriptCall(
            "0x1::TransferScripts::peer_to_peer",
            [STC_TOKEN_CODE],
            [receipt_identifier.address.hex(), f'x"{auth_key}"', "1000u128"],
        )
    )
    dry_run = await alice.dry_run(request)
    print(f"\nDry run: {dry_run['status']}, gas used {dry_run['gas_used']}")

    # Have Alice give Bob 1_000 nanoSTC
    pending_transaction = await alice.send_transaction(request)
    print(f"Submitted {pending_transaction.transaction_hash}")
    info = await pending_transaction.wait(
        confirmations=2,
        timeout=starcoin_client.transaction_config.transaction_wait_time_in_seconds,
    )
    print(f"Confirmed at block {info.block_number}, gas used {info.gas_used}")

    print("\n=== Final Balances ===")
    print(f"Alice: {await starcoin_client.get_balance(alice.address())}")
    print(f"Bob: {await starcoin_client.get_balance(receipt_identifier.address)}")

    await alice.lock()
    await starcoin_client.close()


async def create_key_store(password: str):
    account = Account.generate()
    key_store = KeyStore.encrypt(account, password)
    async with aiofiles.open(KEY_STORE_PATH, mode="w") as file:
        await file.write(json.dumps(key_store.to_dict()))
    print(f"Stored key of {account.address()} in {KEY_STORE_PATH}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) == 2 and sys.argv[1] == "--new":
        asyncio.run(create_key_store(KEY_STORE_PASSWORD))
    elif len(sys.argv) == 2:
        asyncio.run(main(sys.argv[1]))
    else:
        sys.exit(f"usage: {sys.argv[0]} <receipt identifier> | --new")
