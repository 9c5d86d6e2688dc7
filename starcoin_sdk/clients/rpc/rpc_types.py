# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass, field
from typing import Any

# chain
CHAIN_ID_METHOD = "chain.id"
CHAIN_INFO_METHOD = "chain.info"
CHAIN_GET_BLOCK_BY_NUMBER_METHOD = "chain.get_block_by_number"
CHAIN_GET_BLOCK_BY_HASH_METHOD = "chain.get_block_by_hash"
CHAIN_GET_TRANSACTION_METHOD = "chain.get_transaction"
CHAIN_GET_TRANSACTION_INFO_METHOD = "chain.get_transaction_info"
CHAIN_GET_EVENTS_BY_TXN_HASH_METHOD = "chain.get_events_by_txn_hash"
CHAIN_GET_EVENTS_METHOD = "chain.get_events"

# contract
CONTRACT_CALL_V2_METHOD = "contract.call_v2"
CONTRACT_DRY_RUN_METHOD = "contract.dry_run"
CONTRACT_DRY_RUN_RAW_METHOD = "contract.dry_run_raw"
CONTRACT_GET_CODE_METHOD = "contract.get_code"

# state
STATE_GET_RESOURCE_METHOD = "state.get_resource"
STATE_LIST_RESOURCE_METHOD = "state.list_resource"

# txpool
TXPOOL_NEXT_SEQUENCE_NUMBER_METHOD = "txpool.next_sequence_number"
TXPOOL_SUBMIT_HEX_TRANSACTION_METHOD = "txpool.submit_hex_transaction"

# node
NODE_INFO_METHOD = "node.info"

DECODE_OPTION = {"decode": True}


@dataclass(frozen=True)
class Network:
    """Identity of the chain a node serves.

    Attributes:
        name (str): Network name, e.g. 'barnard' or 'main'.
        chain_id (int): Chain id placed in every raw transaction.

    """

    name: str
    chain_id: int


@dataclass
class EventFilter:
    """Selects events for `chain.get_events`.

    Attributes:
        from_block (int | None): First block to search. Default to None.
        to_block (int | None): Last block to search. Default to None.
        event_keys (list[str]): Hex encoded event keys to match. Default to empty.
        addrs (list[str]): Emitting addresses to match. Default to empty.
        type_tags (list[str]): Event types to match, e.g. '0x1::Account::DepositEvent'.
            Default to empty.
        limit (int | None): Maximum number of events returned. Default to None.

    """

    from_block: int | None = None
    to_block: int | None = None
    event_keys: list[str] = field(default_factory=list)
    addrs: list[str] = field(default_factory=list)
    type_tags: list[str] = field(default_factory=list)
    limit: int | None = None

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "from_block": self.from_block,
            "to_block": self.to_block,
            "event_keys": self.event_keys or None,
            "addrs": self.addrs or None,
            "type_tags": self.type_tags or None,
            "limit": self.limit,
        }
        return {key: val for key, val in params.items() if val is not None}
