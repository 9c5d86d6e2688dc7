# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from typing import Any

from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.clients.rpc.rpc_client import RpcClient
from starcoin_sdk.clients.rpc.rpc_types import (
    DECODE_OPTION,
    STATE_GET_RESOURCE_METHOD,
    STATE_LIST_RESOURCE_METHOD,
)


class StateRpcClient(RpcClient):
    """A class that provides methods to invoke `state` JSON-RPC methods of a Starcoin node.

    Attributes:
        api_client (ApiClient): Inherited from `RpcClient`. Used to send JSON-RPC calls to the Starcoin node.

    """

    async def get_resource(
        self, account_address: AccountAddress, resource_type: str
    ) -> dict[str, Any] | None:
        """Retrieves a decoded resource stored under an account.

        Args:
            account_address (AccountAddress): Address of the account.
            resource_type (str): Type of the resource e.g. '0x1::Account::Account'.

        Returns:
            dict[str, Any] | None: The resource's fields, None if the account holds no such resource.

        """
        result = await self.api_client.request(
            STATE_GET_RESOURCE_METHOD,
            [account_address.hex(), resource_type, DECODE_OPTION],
        )
        if result is None:
            return None
        return result.get("json")

    async def get_resources(
        self, account_address: AccountAddress
    ) -> dict[str, dict[str, Any]]:
        """Retrieves every decoded resource stored under an account.

        Args:
            account_address (AccountAddress): Address of the account.

        Returns:
            dict[str, dict[str, Any]]: Resource fields keyed by resource type, empty for an unknown account.

        """
        result = await self.api_client.request(
            STATE_LIST_RESOURCE_METHOD, [account_address.hex(), DECODE_OPTION]
        )
        if result is None:
            return {}
        return {
            resource_type: resource.get("json")
            for resource_type, resource in result.get("resources", {}).items()
        }
