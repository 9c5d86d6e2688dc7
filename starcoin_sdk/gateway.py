# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

"""Read and submit operations the signer and the confirmation engine need from a node.

`StarcoinClient` implements this over JSON-RPC. Anything else with the same coroutine methods, e.g. an in-memory fake,
can stand in for it. Lookups of things the node does not know return None instead of raising.
"""

from __future__ import annotations

from typing import Any, Protocol

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.clients.rpc.rpc_types import EventFilter, Network
from starcoin_sdk.transaction_builder import TransactionRequest
from starcoin_sdk.transactions import RawUserTransaction, SignedUserTransaction


class NodeGateway(Protocol):
    async def get_network(self) -> Network: ...

    async def get_chain_id(self) -> int: ...

    async def get_block_number(self) -> int: ...

    async def get_block(self, block: int | str) -> dict[str, Any] | None: ...

    async def get_transaction(self, transaction_hash: str) -> dict[str, Any] | None: ...

    async def get_transaction_info(
        self, transaction_hash: str
    ) -> dict[str, Any] | None: ...

    async def get_events_of_transaction(
        self, transaction_hash: str
    ) -> list[dict[str, Any]]: ...

    async def query_events(self, event_filter: EventFilter) -> list[dict[str, Any]]: ...

    async def call_contract(
        self, function_id: str, type_args: list[str], args: list[str]
    ) -> list[Any]: ...

    async def dry_run_transaction(
        self, request: TransactionRequest | dict[str, Any]
    ) -> dict[str, Any]: ...

    async def dry_run_raw_transaction(
        self, raw_txn: RawUserTransaction, public_key: ed25519.PublicKey
    ) -> dict[str, Any]: ...

    async def get_resource(
        self, account_address: AccountAddress, resource_type: str
    ) -> dict[str, Any] | None: ...

    async def get_code(self, module_id: str) -> str | None: ...

    async def get_sequence_number(self, account_address: AccountAddress) -> int: ...

    async def get_now_seconds(self) -> int: ...

    async def submit_transaction(
        self, signed_transaction: SignedUserTransaction | bytes | str
    ) -> str: ...
