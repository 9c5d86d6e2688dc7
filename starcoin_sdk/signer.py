# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

"""Signing with a key held in a `KeyStore`.

A `Signer` starts locked. `unlock` opens the key store and keeps the decrypted key in memory until `lock` is called
or the unlock duration runs out. Every signing call fails with `SignerLockedError` while locked.

Messages and transactions are signed under different salts, `STARCOIN::SigningMessage` and
`STARCOIN::RawUserTransaction`, so a signed message can never be replayed as a transaction.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any

from starcoin_sdk import ed25519
from starcoin_sdk.account import Account
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.bcs import Deserializable, Deserializer, Serializable, Serializer
from starcoin_sdk.keystore import AuthError, KeyStore
from starcoin_sdk.pending_transaction import PendingTransaction
from starcoin_sdk.transaction_builder import (
    TransactionConfig,
    TransactionRequest,
    generate_raw_user_transaction,
)
from starcoin_sdk.transactions import (
    Ed25519Authenticator,
    RawUserTransaction,
    SignedUserTransaction,
    TransactionAuthenticator,
    salt,
)

if TYPE_CHECKING:
    from starcoin_sdk.gateway import NodeGateway

logger = logging.getLogger(__name__)


class LockState(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class SigningMessage(Deserializable, Serializable):
    """Arbitrary bytes to be signed off chain, BCS encoded as a byte vector."""

    message: bytes

    def __init__(self, message: bytes | str):
        self.message = message.encode() if isinstance(message, str) else message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SigningMessage):
            return NotImplemented
        return self.message == other.message

    def __str__(self) -> str:
        return f"0x{self.message.hex()}"

    def prehash(self) -> bytes:
        return salt("SigningMessage")

    def keyed(self) -> bytes:
        return self.prehash() + self.to_bytes()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> SigningMessage:
        return SigningMessage(deserializer.to_bytes())

    def serialize(self, serializer: Serializer) -> None:
        serializer.to_bytes(self.message)


class SignedMessage(Deserializable, Serializable):
    """A message with its signature, the signing account and the chain it was signed for.

    Its hex form can be handed to a third party, who checks it with `verify`.
    """

    account: AccountAddress
    message: SigningMessage
    authenticator: TransactionAuthenticator
    chain_id: int

    def __init__(
        self,
        account: AccountAddress,
        message: SigningMessage,
        authenticator: TransactionAuthenticator,
        chain_id: int,
    ):
        self.account = account
        self.message = message
        self.authenticator = authenticator
        self.chain_id = chain_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignedMessage):
            return NotImplemented
        return (
            self.account == other.account
            and self.message == other.message
            and self.authenticator == other.authenticator
            and self.chain_id == other.chain_id
        )

    def verify(self) -> bool:
        """Checks the signature and that the signing key belongs to `account`."""
        public_key = self.authenticator.authenticator.public_key
        if AccountAddress.from_key(public_key) != self.account:
            return False
        return self.authenticator.verify(self.message.keyed())

    def to_hex(self) -> str:
        return f"0x{self.to_bytes().hex()}"

    @staticmethod
    def from_hex(value: str) -> SignedMessage:
        return SignedMessage.from_bytes(bytes.fromhex(value.removeprefix("0x")))

    @staticmethod
    def deserialize(deserializer: Deserializer) -> SignedMessage:
        account = AccountAddress.deserialize(deserializer)
        message = SigningMessage.deserialize(deserializer)
        authenticator = TransactionAuthenticator.deserialize(deserializer)
        chain_id = deserializer.u8()
        return SignedMessage(account, message, authenticator, chain_id)

    def serialize(self, serializer: Serializer) -> None:
        self.account.serialize(serializer)
        self.message.serialize(serializer)
        self.authenticator.serialize(serializer)
        serializer.u8(self.chain_id)


class Signer:
    """Signs messages and transactions for the account of a key store.

    Unlocking, locking and signing are serialised by one `asyncio.Lock`, so no caller can observe the signer while
    its key is being swapped. Building a transaction is not covered: two concurrent `send_transaction` calls for the
    same sender may read the same sequence number, and the node rejects one of them.

    Attributes:
        key_store (KeyStore): Encrypted key of the account.
        gateway (NodeGateway | None): Node used to fill, submit and dry run transactions.
        transaction_config (TransactionConfig): Defaults for unset `TransactionRequest` fields.

    """

    key_store: KeyStore
    gateway: NodeGateway | None
    transaction_config: TransactionConfig

    def __init__(
        self,
        key_store: KeyStore,
        gateway: NodeGateway | None = None,
        transaction_config: TransactionConfig | None = None,
    ):
        self.key_store = key_store
        self.gateway = gateway
        self.transaction_config = transaction_config or TransactionConfig()
        self._mutex = asyncio.Lock()
        self._account: Account | None = None
        self._credential: bytes | None = None
        self._relock_handle: asyncio.TimerHandle | None = None
        self._signed: weakref.WeakValueDictionary[int, RawUserTransaction] = (
            weakref.WeakValueDictionary()
        )

    @property
    def state(self) -> LockState:
        return LockState.LOCKED if self._account is None else LockState.UNLOCKED

    def is_unlocked(self) -> bool:
        return self._account is not None

    def address(self) -> AccountAddress:
        return self.key_store.address

    def public_key(self) -> ed25519.PublicKey:
        return self.key_store.public_key

    async def unlock(self, password: str, duration: float | None = None):
        """Opens the key store.

        Unlocking again with the credential already in use only resets the duration. A wrong credential leaves the
        signer as it was.

        Args:
            password (str): Password of the key store.
            duration (float | None): Seconds after which the signer locks itself. Default to None, i.e. stay
                unlocked until `lock`.

        Raises:
            AuthError: If the password does not open the key store.

        """
        credential = self._digest(password)
        async with self._mutex:
            if self._credential is not None and hmac.compare_digest(
                credential, self._credential
            ):
                self._schedule_relock(duration)
                return

            # Key derivation blocks, run it in a worker thread.
            account = await asyncio.to_thread(self.key_store.decrypt, password)
            self._account = account
            self._credential = credential
            self._schedule_relock(duration)
        logger.info("signer %s unlocked", self.address())

    async def lock(self):
        async with self._mutex:
            self._clear()
        logger.info("signer %s locked", self.address())

    async def sign_message(self, message: bytes | str) -> ed25519.Signature:
        """Signs `sha3_256("STARCOIN::SigningMessage") || bcs(message)`.

        Raises:
            SignerLockedError: If the signer is locked.

        """
        signing_message = SigningMessage(message)
        async with self._mutex:
            account = self._unlocked_account()
            return account.sign(signing_message.keyed())

    async def signed_message(
        self, message: bytes | str, chain_id: int | None = None
    ) -> SignedMessage:
        """Signs a message and bundles it with the account and chain id.

        Args:
            message (bytes | str): Message to sign.
            chain_id (int | None): Chain the message is meant for. Default to the gateway's chain id.

        Returns:
            SignedMessage: The shareable signed message.

        """
        if chain_id is None:
            chain_id = await self._require_gateway().get_chain_id()
        signing_message = SigningMessage(message)
        async with self._mutex:
            account = self._unlocked_account()
            signature = account.sign(signing_message.keyed())
            authenticator = TransactionAuthenticator(
                Ed25519Authenticator(account.public_key(), signature)
            )
        return SignedMessage(account.address(), signing_message, authenticator, chain_id)

    async def sign_transaction(
        self, raw_txn: RawUserTransaction
    ) -> SignedUserTransaction:
        """Signs a raw transaction of this signer's account.

        A raw transaction instance is signed at most once, build a new one (e.g. with the next sequence number) to
        sign again.

        Raises:
            SignerLockedError: If the signer is locked.
            ValueError: If the sender is another account or the instance was already signed.

        """
        async with self._mutex:
            account = self._unlocked_account()
            if raw_txn.sender != self.address():
                raise ValueError(
                    f"Signer for {self.address()} cannot sign a transaction sent by {raw_txn.sender}"
                )
            if self._signed.get(id(raw_txn)) is raw_txn:
                raise ValueError(
                    f"Transaction {raw_txn.sender}:{raw_txn.sequence_number} is already signed"
                )
            authenticator = account.sign_transaction(raw_txn)
            self._signed[id(raw_txn)] = raw_txn
        return SignedUserTransaction(raw_txn, authenticator)

    async def build_transaction(self, request: TransactionRequest) -> RawUserTransaction:
        """Builds a raw transaction, filling unset request fields from the node and `transaction_config`."""
        gateway = self._require_gateway()
        sender = (
            AccountAddress.from_str(request.sender)
            if request.sender is not None
            else self.address()
        )
        sequence_number, chain_id, expiration_timestamp_secs = await asyncio.gather(
            self._or_fetch(request.sequence_number, gateway.get_sequence_number(sender)),
            self._or_fetch(request.chain_id, gateway.get_chain_id()),
            self._or_fetch(request.expiration_timestamp_secs, self._expiration()),
        )
        config = self.transaction_config
        return generate_raw_user_transaction(
            sender,
            request.script.to_payload(),
            _or_default(request.max_gas_amount, config.max_gas_amount),
            sequence_number,
            expiration_timestamp_secs,
            chain_id,
            _or_default(request.gas_unit_price, config.gas_unit_price),
            _or_default(request.gas_token_code, config.gas_token_code),
        )

    async def send_transaction(self, request: TransactionRequest) -> PendingTransaction:
        """Builds, signs and submits a transaction.

        Gateway errors, including `SubmissionError` for a rejected transaction, are raised unchanged and nothing is
        retried.

        Returns:
            PendingTransaction: Handle to wait for the transaction's confirmation.

        """
        gateway = self._require_gateway()
        raw_txn = await self.build_transaction(request)
        signed_txn = await self.sign_transaction(raw_txn)
        transaction_hash = await gateway.submit_transaction(signed_txn)
        logger.info(
            "submitted transaction %s from %s with sequence number %d",
            transaction_hash,
            raw_txn.sender,
            raw_txn.sequence_number,
        )
        return PendingTransaction(
            transaction_hash,
            gateway,
            polling_interval=self.transaction_config.polling_wait_time_in_seconds,
        )

    async def dry_run(self, request: TransactionRequest) -> dict[str, Any]:
        """Executes a request on the node without committing it. Works while locked."""
        raw_txn = await self.build_transaction(request)
        return await self._require_gateway().dry_run_raw_transaction(
            raw_txn, self.public_key()
        )

    async def _expiration(self) -> int:
        now_seconds = await self._require_gateway().get_now_seconds()
        return now_seconds + self.transaction_config.expiration_ttl

    @staticmethod
    async def _or_fetch(value: int | None, fetch) -> int:
        if value is not None:
            fetch.close()
            return value
        return await fetch

    def _require_gateway(self) -> NodeGateway:
        if self.gateway is None:
            raise ValueError("Signer has no gateway to talk to a node")
        return self.gateway

    def _unlocked_account(self) -> Account:
        if self._account is None:
            raise SignerLockedError(self.address())
        return self._account

    def _digest(self, password: str) -> bytes:
        return hashlib.sha3_256(self.key_store.salt + password.encode()).digest()

    def _schedule_relock(self, duration: float | None):
        if self._relock_handle is not None:
            self._relock_handle.cancel()
            self._relock_handle = None
        if duration is not None:
            loop = asyncio.get_running_loop()
            self._relock_handle = loop.call_later(duration, self._expire)

    def _expire(self):
        self._clear()
        logger.info("signer %s locked after unlock duration", self.address())

    def _clear(self):
        if self._relock_handle is not None:
            self._relock_handle.cancel()
            self._relock_handle = None
        self._account = None
        self._credential = None


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


class SignerLockedError(AuthError):
    """Exception raised when signing is attempted on a locked signer."""

    def __init__(self, address: AccountAddress):
        self.address = address
        super().__init__(f"Signer for {address} is locked")
