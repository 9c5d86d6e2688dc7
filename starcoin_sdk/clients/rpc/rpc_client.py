# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from starcoin_sdk.clients import ApiClient


class RpcClient:
    """A base class for building namespace specific JSON-RPC clients.

    Each subclass covers one RPC namespace of the node (`chain`, `state`, ...) and sends its calls through the shared
    `api_client`, so that one `StarcoinClient` can combine them all.

    Attributes:
        api_client (ApiClient): The API client instance used to perform JSON-RPC calls.

    """

    api_client: ApiClient

    def __init__(self, api_client: ApiClient):
        self.api_client = api_client
