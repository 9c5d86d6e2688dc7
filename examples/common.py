# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

import os

RPC_NODE_URL = os.getenv("STARCOIN_RPC_NODE_URL", "http://localhost:9850/")
KEY_STORE_PATH = os.getenv("STARCOIN_KEY_STORE_PATH", "key_store.json")
KEY_STORE_PASSWORD = os.getenv("STARCOIN_KEY_STORE_PASSWORD", "")
