# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.clients import RpcError, SubmissionError
from starcoin_sdk.clients.rpc.rpc_client import RpcClient
from starcoin_sdk.clients.rpc.rpc_types import (
    TXPOOL_NEXT_SEQUENCE_NUMBER_METHOD,
    TXPOOL_SUBMIT_HEX_TRANSACTION_METHOD,
)


class TxPoolRpcClient(RpcClient):
    """A class that provides methods to invoke `txpool` JSON-RPC methods of a Starcoin node.

    Attributes:
        api_client (ApiClient): Inherited from `RpcClient`. Used to send JSON-RPC calls to the Starcoin node.

    """

    async def next_sequence_number(self, account_address: AccountAddress) -> int | None:
        """Provides the sequence number following the account's pending transactions.

        Args:
            account_address (AccountAddress): Address of the account.

        Returns:
            int | None: Next sequence number, None if the pool holds no transaction of the account.

        """
        result = await self.api_client.request(
            TXPOOL_NEXT_SEQUENCE_NUMBER_METHOD, [account_address.hex()]
        )
        return None if result is None else int(result)

    async def submit_hex_transaction(self, signed_transaction_hex: str) -> str:
        """Submits a hex encoded signed transaction to the transaction pool.

        Args:
            signed_transaction_hex (str): '0x' prefixed BCS encoding of the signed transaction.

        Returns:
            str: Hash of the accepted transaction.

        Raises:
            SubmissionError: If the node rejects the transaction.

        """
        try:
            return await self.api_client.request(
                TXPOOL_SUBMIT_HEX_TRANSACTION_METHOD, [signed_transaction_hex]
            )
        except RpcError as err:
            raise SubmissionError.from_rpc_error(err) from err
