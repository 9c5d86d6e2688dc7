# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from typing import Any

from starcoin_sdk.clients.rpc.rpc_client import RpcClient
from starcoin_sdk.clients.rpc.rpc_types import NODE_INFO_METHOD


class NodeRpcClient(RpcClient):
    """A class that provides methods to invoke `node` JSON-RPC methods of a Starcoin node.

    Attributes:
        api_client (ApiClient): Inherited from `RpcClient`. Used to send JSON-RPC calls to the Starcoin node.

    """

    async def node_info(self) -> dict[str, Any]:
        """Provides the node's peer info, network and clock.

        Returns:
            dict[str, Any]: Node information.

        """
        return await self.api_client.request(NODE_INFO_METHOD)

    async def get_now_seconds(self) -> int:
        """Provides the node's on-chain clock, used to compute transaction expiration.

        Returns:
            int: Current time in seconds as seen by the node.

        """
        info = await self.node_info()
        return int(info["now_seconds"])
