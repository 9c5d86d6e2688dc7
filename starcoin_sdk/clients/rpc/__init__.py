# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from starcoin_sdk.clients.rpc.starcoin_client import (
    StarcoinClient,
    StarcoinClientConfig,
)

__all__ = ["StarcoinClient", "StarcoinClientConfig"]
