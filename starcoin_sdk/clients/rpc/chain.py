# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from typing import Any

from starcoin_sdk.clients.rpc.rpc_client import RpcClient
from starcoin_sdk.clients.rpc.rpc_types import (
    CHAIN_GET_BLOCK_BY_HASH_METHOD,
    CHAIN_GET_BLOCK_BY_NUMBER_METHOD,
    CHAIN_GET_EVENTS_BY_TXN_HASH_METHOD,
    CHAIN_GET_EVENTS_METHOD,
    CHAIN_GET_TRANSACTION_INFO_METHOD,
    CHAIN_GET_TRANSACTION_METHOD,
    CHAIN_ID_METHOD,
    CHAIN_INFO_METHOD,
    DECODE_OPTION,
    EventFilter,
    Network,
)


class ChainRpcClient(RpcClient):
    """A class that provides methods to invoke `chain` JSON-RPC methods of a Starcoin node.

    Attributes:
        api_client (ApiClient): Inherited from `RpcClient`. Used to send JSON-RPC calls to the Starcoin node.

    """

    async def get_network(self) -> Network:
        """Provides the name and chain id of the network the node serves.

        Returns:
            Network: Network name and chain id.

        """
        result = await self.api_client.request(CHAIN_ID_METHOD)
        return Network(result["name"], int(result["id"]))

    async def get_chain_info(self) -> dict[str, Any]:
        """Provides the chain head, genesis hash and total difficulty.

        Returns:
            dict[str, Any]: Chain information.

        """
        return await self.api_client.request(CHAIN_INFO_METHOD)

    async def get_block_number(self) -> int:
        """Provides the current height of the chain.

        Returns:
            int: Number of the head block.

        """
        chain_info = await self.get_chain_info()
        return int(chain_info["head"]["number"])

    async def get_block(self, block: int | str) -> dict[str, Any] | None:
        """Retrieves a block by number or by hash.

        Args:
            block (int | str): Block number, or '0x' prefixed block hash.

        Returns:
            dict[str, Any] | None: The block, None if the node does not know it.

        """
        if isinstance(block, int):
            return await self.api_client.request(
                CHAIN_GET_BLOCK_BY_NUMBER_METHOD, [block]
            )
        return await self.api_client.request(CHAIN_GET_BLOCK_BY_HASH_METHOD, [block])

    async def get_transaction(self, transaction_hash: str) -> dict[str, Any] | None:
        """Retrieves a transaction included in a block.

        Args:
            transaction_hash (str): Hash of the transaction.

        Returns:
            dict[str, Any] | None: The transaction, None if it is not on chain (yet).

        """
        return await self.api_client.request(
            CHAIN_GET_TRANSACTION_METHOD, [transaction_hash]
        )

    async def get_transaction_info(
        self, transaction_hash: str
    ) -> dict[str, Any] | None:
        """Retrieves the execution outcome of a transaction.

        Args:
            transaction_hash (str): Hash of the transaction.

        Returns:
            dict[str, Any] | None: Block number, gas used and status of the transaction, None if it is not on
                chain (yet).

        """
        return await self.api_client.request(
            CHAIN_GET_TRANSACTION_INFO_METHOD, [transaction_hash]
        )

    async def get_events_of_transaction(
        self, transaction_hash: str
    ) -> list[dict[str, Any]]:
        """Retrieves the events emitted by a transaction, with decoded event data.

        Args:
            transaction_hash (str): Hash of the transaction.

        Returns:
            list[dict[str, Any]]: Emitted events, empty if the transaction is unknown.

        """
        result = await self.api_client.request(
            CHAIN_GET_EVENTS_BY_TXN_HASH_METHOD, [transaction_hash, DECODE_OPTION]
        )
        return result or []

    async def query_events(self, event_filter: EventFilter) -> list[dict[str, Any]]:
        """Retrieves events matching the given filter, with decoded event data.

        Args:
            event_filter (EventFilter): Block range, keys, addresses and types to match.

        Returns:
            list[dict[str, Any]]: Matching events.

        """
        result = await self.api_client.request(
            CHAIN_GET_EVENTS_METHOD, [event_filter.to_params(), DECODE_OPTION]
        )
        return result or []
