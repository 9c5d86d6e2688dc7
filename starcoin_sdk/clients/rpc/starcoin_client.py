# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

import logging
import re
from dataclasses import dataclass

import httpx

from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.clients import ApiClient, ApiClientConfig
from starcoin_sdk.clients.rpc.chain import ChainRpcClient
from starcoin_sdk.clients.rpc.contract import ContractRpcClient
from starcoin_sdk.clients.rpc.node import NodeRpcClient
from starcoin_sdk.clients.rpc.rpc_types import Network
from starcoin_sdk.clients.rpc.state import StateRpcClient
from starcoin_sdk.clients.rpc.txpool import TxPoolRpcClient
from starcoin_sdk.keystore import KeyStore
from starcoin_sdk.pending_transaction import PendingTransaction, TransactionInfo
from starcoin_sdk.signer import Signer
from starcoin_sdk.transaction_builder import TransactionConfig
from starcoin_sdk.transactions import STC_TOKEN_CODE, SignedUserTransaction

logger = logging.getLogger(__name__)

ACCOUNT_RESOURCE = "0x00000000000000000000000000000001::Account::Account"
BALANCE_RESOURCE = "0x00000000000000000000000000000001::Account::Balance"

_BALANCE_TYPE = re.compile(r"^0x0*1::Account::Balance<(.+)>$")


@dataclass
class StarcoinClientConfig(TransactionConfig, ApiClientConfig):
    """Configuration for the Starcoin client.

    This dataclass inherits from both `TransactionConfig` and `ApiClientConfig`, allowing a single object to hold both
    transaction-related parameters and API client connection settings.
    """


class StarcoinClient(
    ChainRpcClient,
    ContractRpcClient,
    StateRpcClient,
    TxPoolRpcClient,
    NodeRpcClient,
):
    """Unified client for the JSON-RPC API of a Starcoin node.

    Combines the namespace specific RPC clients into one entry point and implements `NodeGateway`, so it can be
    handed to a `Signer` and to `PendingTransaction`. On top of the raw RPC calls it offers balance lookups,
    submission of signed transactions and waiting for their confirmation.

    Attributes:
        _chain_id (int | None): The chain-id of the network, cached after the first lookup.
        api_client (ApiClient): Inherited from `RpcClient`. Used to send JSON-RPC calls to the Starcoin node.
        transaction_config (TransactionConfig): Defaults for transaction building and polling.

    """

    _chain_id: int | None
    transaction_config: TransactionConfig

    def __init__(
        self,
        base_url: str,
        starcoin_client_config: StarcoinClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initializes the JSON-RPC client.

        Args:
            base_url (str): URL of the node's JSON-RPC endpoint.
            starcoin_client_config (StarcoinClientConfig): Configuration options for requests and transactions.
            transport (httpx.AsyncBaseTransport | None): Custom HTTP transport. Default to None.

        """
        self._chain_id = None
        starcoin_client_config = starcoin_client_config or StarcoinClientConfig()

        transaction_config = TransactionConfig(
            expiration_ttl=starcoin_client_config.expiration_ttl,
            gas_unit_price=starcoin_client_config.gas_unit_price,
            max_gas_amount=starcoin_client_config.max_gas_amount,
            gas_token_code=starcoin_client_config.gas_token_code,
            transaction_wait_time_in_seconds=starcoin_client_config.transaction_wait_time_in_seconds,
            polling_wait_time_in_seconds=starcoin_client_config.polling_wait_time_in_seconds,
            confirmations=starcoin_client_config.confirmations,
            wait_for_transaction=starcoin_client_config.wait_for_transaction,
        )
        self.transaction_config = transaction_config

        api_client_config = ApiClientConfig(
            http2=starcoin_client_config.http2,
            access_token=starcoin_client_config.access_token,
            timeout=starcoin_client_config.timeout,
        )
        super().__init__(ApiClient(base_url, api_client_config, transport))

    async def close(self):
        """Closes the HTTP client session."""
        await self.api_client.close()

    async def get_chain_id(self) -> int:
        """Provides the network Chain-ID.

        Returns:
            int: Network Chain-ID.

        """
        if self._chain_id is None:
            network: Network = await self.get_network()
            self._chain_id = network.chain_id
        return self._chain_id

    async def get_sequence_number(self, account_address: AccountAddress) -> int:
        """Provides the sequence number the next transaction of the account must carry.

        Transactions still waiting in the pool are counted, then the on-chain account resource. An account that does
        not exist yet starts at 0.

        Args:
            account_address (AccountAddress): Address of the account.

        Returns:
            int: The next sequence number.

        """
        pool_sequence_number = await self.next_sequence_number(account_address)
        if pool_sequence_number is not None:
            return pool_sequence_number

        resource = await self.get_resource(account_address, ACCOUNT_RESOURCE)
        if resource is None:
            return 0
        return int(resource["sequence_number"])

    async def get_balance(
        self, account_address: AccountAddress, token_code: str = STC_TOKEN_CODE
    ) -> int | None:
        """Provides the account's balance of the given token.

        Args:
            account_address (AccountAddress): Address of the account.
            token_code (str): Token type. Default to '0x1::STC::STC'.

        Returns:
            int | None: The balance, None if the account holds no balance of that token.

        """
        resource = await self.get_resource(
            account_address, f"{BALANCE_RESOURCE}<{token_code}>"
        )
        if resource is None:
            return None
        return int(resource["token"]["value"])

    async def get_balances(self, account_address: AccountAddress) -> dict[str, int]:
        """Provides every token balance held by the account.

        Args:
            account_address (AccountAddress): Address of the account.

        Returns:
            dict[str, int]: Balances keyed by token type, empty for an unknown account.

        """
        balances = {}
        for resource_type, resource in (await self.get_resources(account_address)).items():
            match = _BALANCE_TYPE.match(resource_type)
            if match:
                balances[match.group(1)] = int(resource["token"]["value"])
        return balances

    async def submit_transaction(
        self, signed_transaction: SignedUserTransaction | bytes | str
    ) -> str:
        """Submits a signed transaction to the node's transaction pool.

        Args:
            signed_transaction (SignedUserTransaction | bytes | str): The signed transaction, its BCS bytes or their
                hex encoding.

        Returns:
            str: Transaction hash of the submitted transaction.

        Raises:
            SubmissionError: If the node rejects the transaction. It is not retried.

        """
        if isinstance(signed_transaction, SignedUserTransaction):
            signed_transaction_hex = signed_transaction.to_hex()
        elif isinstance(signed_transaction, (bytes, bytearray)):
            signed_transaction_hex = f"0x{bytes(signed_transaction).hex()}"
        elif signed_transaction.startswith("0x"):
            signed_transaction_hex = signed_transaction
        else:
            signed_transaction_hex = f"0x{signed_transaction}"

        transaction_hash = await self.submit_hex_transaction(signed_transaction_hex)
        logger.info("submitted transaction %s", transaction_hash)
        return transaction_hash

    async def send_transaction(
        self, signed_transaction: SignedUserTransaction | bytes | str
    ) -> PendingTransaction:
        """Submits a signed transaction and returns a handle to wait for it.

        If `transaction_config.wait_for_transaction` is set, the handle is only returned once the transaction is
        confirmed.

        Args:
            signed_transaction (SignedUserTransaction | bytes | str): The signed transaction, its BCS bytes or their
                hex encoding.

        Returns:
            PendingTransaction: Handle on the submitted transaction.

        """
        transaction_hash = await self.submit_transaction(signed_transaction)
        pending_transaction = PendingTransaction(
            transaction_hash,
            self,
            polling_interval=self.transaction_config.polling_wait_time_in_seconds,
        )
        if self.transaction_config.wait_for_transaction:
            await pending_transaction.wait(
                self.transaction_config.confirmations,
                self.transaction_config.transaction_wait_time_in_seconds,
            )
        return pending_transaction

    async def wait_for_transaction(
        self,
        transaction_hash: str,
        confirmations: int | None = None,
        timeout: float | None = None,
    ) -> TransactionInfo:
        """Waits until a transaction is confirmed.

        Args:
            transaction_hash (str): Hash of the transaction.
            confirmations (int | None): Blocks required on top of the including block. Default to
                `transaction_config.confirmations`.
            timeout (float | None): Seconds to wait at most. Default to
                `transaction_config.transaction_wait_time_in_seconds`.

        Returns:
            TransactionInfo: Execution outcome of the transaction.

        """
        pending_transaction = PendingTransaction(
            transaction_hash,
            self,
            polling_interval=self.transaction_config.polling_wait_time_in_seconds,
        )
        return await pending_transaction.wait(
            self.transaction_config.confirmations if confirmations is None else confirmations,
            self.transaction_config.transaction_wait_time_in_seconds if timeout is None else timeout,
        )

    def get_signer(self, key_store: KeyStore) -> Signer:
        """Provides a locked signer for the key store's account, sending through this client.

        Args:
            key_store (KeyStore): Encrypted key of the account.

        Returns:
            Signer: The signer, call `unlock` before signing.

        """
        return Signer(key_store, self, self.transaction_config)

