# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

"""Tracks a submitted transaction until it is confirmed, fails, times out or is cancelled."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from starcoin_sdk.gateway import NodeGateway

logger = logging.getLogger(__name__)

EXECUTED = "Executed"
DEFAULT_POLLING_INTERVAL = 1.0

T = TypeVar("T")


class TransactionStatus(str, Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    INCLUDED = "included"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class TransactionInfo:
    """Execution outcome of a transaction as reported by `chain.get_transaction_info`.

    Attributes:
        transaction_hash (str): Hash of the transaction.
        block_hash (str | None): Hash of the including block.
        block_number (int): Height of the including block.
        gas_used (int): Gas charged for the execution.
        status (Any): `"Executed"` on success, otherwise the node's description of the failure, e.g.
            `{"MoveAbort": {...}}`.
        raw (dict[str, Any]): The unparsed node response.

    """

    transaction_hash: str
    block_hash: str | None
    block_number: int
    gas_used: int
    status: Any
    raw: dict[str, Any] = field(repr=False, compare=False)

    @property
    def succeeded(self) -> bool:
        return self.status == EXECUTED

    @staticmethod
    def from_dict(data: dict[str, Any]) -> TransactionInfo:
        return TransactionInfo(
            transaction_hash=data.get("transaction_hash", ""),
            block_hash=data.get("block_hash"),
            block_number=int(data.get("block_number", 0)),
            gas_used=int(data.get("gas_used", 0)),
            status=data.get("status"),
            raw=data,
        )


class PendingTransaction:
    """Handle on a submitted transaction.

    `wait` polls the gateway until the transaction's block is buried under the requested number of blocks. Polls
    and sleeps share one absolute deadline, so a wait never outlives its timeout by more than one polling interval.

    Attributes:
        transaction_hash (str): Hash returned by the node on submission.
        gateway (NodeGateway): Node used for polling.
        polling_interval (float): Seconds between two polls.
        status (TransactionStatus): Last observed state of the transaction.

    """

    transaction_hash: str
    gateway: NodeGateway
    polling_interval: float
    status: TransactionStatus

    def __init__(
        self,
        transaction_hash: str,
        gateway: NodeGateway,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ):
        if polling_interval <= 0:
            raise ValueError("polling_interval must be positive")
        self.transaction_hash = transaction_hash
        self.gateway = gateway
        self.polling_interval = polling_interval
        self.status = TransactionStatus.SUBMITTED

    def __str__(self) -> str:
        return f"PendingTransaction({self.transaction_hash}, {self.status.value})"

    async def wait(
        self,
        confirmations: int = 1,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TransactionInfo:
        """Waits until the transaction is included and buried under `confirmations` blocks.

        Args:
            confirmations (int): Blocks required on top of the including block's height. 0 resolves as soon as
                the transaction is included. Default to 1.
            timeout (float | None): Seconds to wait at most. Default to None, i.e. wait forever.
            cancel_event (asyncio.Event | None): Setting it stops the wait before the next poll. Default to None.

        Returns:
            TransactionInfo: Execution outcome of the confirmed transaction.

        Raises:
            TransactionExecutionError: If the transaction was included but failed to execute.
            TransactionWaitTimeoutError: If the deadline passes first.
            TransactionWaitCancelledError: If `cancel_event` is set first.

        """
        if confirmations < 0:
            raise ValueError("confirmations must not be negative")

        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise TransactionWaitCancelledError(self.transaction_hash)

            info = await self._before_deadline(self._poll(confirmations), deadline, timeout)
            if info is not None:
                self.status = TransactionStatus.CONFIRMED
                logger.info(
                    "transaction %s confirmed at block %d",
                    self.transaction_hash,
                    info.block_number,
                )
                return info

            delay = self.polling_interval
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise self._timed_out(timeout)
                delay = min(delay, remaining)

            if await self._sleep(delay, cancel_event):
                raise TransactionWaitCancelledError(self.transaction_hash)

    async def _poll(self, confirmations: int) -> TransactionInfo | None:
        data = await self.gateway.get_transaction_info(self.transaction_hash)
        if data is None:
            self.status = TransactionStatus.PENDING
            logger.debug("transaction %s not yet included", self.transaction_hash)
            return None

        info = TransactionInfo.from_dict(data)
        if not info.succeeded:
            self.status = TransactionStatus.FAILED
            raise TransactionExecutionError(self.transaction_hash, info)

        self.status = TransactionStatus.INCLUDED
        if confirmations == 0:
            return info

        height = await self.gateway.get_block_number()
        logger.debug(
            "transaction %s included at block %d, chain height %d",
            self.transaction_hash,
            info.block_number,
            height,
        )
        if info.block_number + confirmations <= height:
            return info
        return None

    async def _before_deadline(
        self, awaitable: Awaitable[T], deadline: float | None, timeout: float | None
    ) -> T:
        if deadline is None:
            return await awaitable
        remaining = deadline - asyncio.get_running_loop().time()
        try:
            return await asyncio.wait_for(awaitable, timeout=max(remaining, 0))
        except asyncio.TimeoutError as err:
            raise self._timed_out(timeout) from err

    async def _sleep(self, delay: float, cancel_event: asyncio.Event | None) -> bool:
        """Sleeps for `delay` seconds, returns True if `cancel_event` was set meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def _timed_out(self, timeout: float | None) -> TransactionWaitTimeoutError:
        self.status = TransactionStatus.TIMED_OUT
        logger.warning(
            "gave up waiting for transaction %s after %s seconds",
            self.transaction_hash,
            timeout,
        )
        return TransactionWaitTimeoutError(self.transaction_hash, timeout)


class TransactionExecutionError(Exception):
    """The transaction was included in a block but its execution failed."""

    transaction_hash: str
    info: TransactionInfo

    def __init__(self, transaction_hash: str, info: TransactionInfo):
        self.transaction_hash = transaction_hash
        self.info = info
        super().__init__(
            f"Transaction {transaction_hash} failed at block {info.block_number}: {info.status}"
        )


class TransactionWaitTimeoutError(TimeoutError):
    """Exception raised when the transaction is not confirmed before the wait timeout."""

    transaction_hash: str
    timeout: float | None

    def __init__(self, transaction_hash: str, timeout: float | None):
        self.transaction_hash = transaction_hash
        self.timeout = timeout
        super().__init__(
            f"Transaction {transaction_hash} was not confirmed within {timeout} seconds"
        )


class TransactionWaitCancelledError(Exception):
    """Exception raised when the caller cancels a wait through its cancel event."""

    transaction_hash: str

    def __init__(self, transaction_hash: str):
        self.transaction_hash = transaction_hash
        super().__init__(f"Wait for transaction {transaction_hash} was cancelled")
