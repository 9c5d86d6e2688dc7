# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from typing import Any

from starcoin_sdk import ed25519
from starcoin_sdk.clients.rpc.rpc_client import RpcClient
from starcoin_sdk.clients.rpc.rpc_types import (
    CONTRACT_CALL_V2_METHOD,
    CONTRACT_DRY_RUN_METHOD,
    CONTRACT_DRY_RUN_RAW_METHOD,
    CONTRACT_GET_CODE_METHOD,
)
from starcoin_sdk.transaction_builder import TransactionRequest
from starcoin_sdk.transactions import RawUserTransaction


class ContractRpcClient(RpcClient):
    """A class that provides methods to invoke `contract` JSON-RPC methods of a Starcoin node.

    Attributes:
        api_client (ApiClient): Inherited from `RpcClient`. Used to send JSON-RPC calls to the Starcoin node.

    """

    async def call_contract(
        self, function_id: str, type_args: list[str], args: list[str]
    ) -> list[Any]:
        """Executes a read-only Move function.

        Args:
            function_id (str): Function to call e.g. '0x1::Account::balance'.
            type_args (list[str]): Type arguments e.g. ['0x1::STC::STC'].
            args (list[str]): Argument literals e.g. ['0x1'].

        Returns:
            list[Any]: Decoded return values of the function.

        """
        return await self.api_client.request(
            CONTRACT_CALL_V2_METHOD,
            [{"function_id": function_id, "type_args": type_args, "args": args}],
        )

    async def dry_run_transaction(
        self, request: TransactionRequest | dict[str, Any]
    ) -> dict[str, Any]:
        """Executes a transaction request without committing it.

        Args:
            request (TransactionRequest | dict[str, Any]): The request, its `sender_public_key` must be set.

        Returns:
            dict[str, Any]: Execution status, gas used, write set and events.

        """
        params = (
            request.to_params() if isinstance(request, TransactionRequest) else request
        )
        return await self.api_client.request(CONTRACT_DRY_RUN_METHOD, [params])

    async def dry_run_raw_transaction(
        self, raw_txn: RawUserTransaction, public_key: ed25519.PublicKey
    ) -> dict[str, Any]:
        """Executes an unsigned raw transaction without committing it.

        Args:
            raw_txn (RawUserTransaction): The raw transaction.
            public_key (ed25519.PublicKey): Public key of the sender.

        Returns:
            dict[str, Any]: Execution status, gas used, write set and events.

        """
        return await self.api_client.request(
            CONTRACT_DRY_RUN_RAW_METHOD, [raw_txn.to_hex(), str(public_key)]
        )

    async def get_code(self, module_id: str) -> str | None:
        """Retrieves the bytecode of a published module.

        Args:
            module_id (str): Module to fetch e.g. '0x1::Account'.

        Returns:
            str | None: Hex encoded bytecode, None if the module is not published.

        """
        return await self.api_client.request(CONTRACT_GET_CODE_METHOD, [module_id])
