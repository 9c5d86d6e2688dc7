# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

"""Helpers to turn user facing transaction requests into BCS payloads.

Script function arguments reach the payload as opaque BCS bytes. At the API boundary
they may be given as literals, which are encoded here:

- `true` / `false`                      bool
- `1024u8`, `1024u64`, `1024u128`, ...  unsigned integer of the suffixed width
- `1024`                                u64
- `0x1`, `stc1...`                      address
- `x"0a0b"`                             vector<u8> from hex
- `b"text"`                             vector<u8> from UTF-8
- `bytes`                               already encoded, used as is
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.bcs import Serializer, encoder
from starcoin_sdk.receipt_identifier import ReceiptIdentifier, is_receipt_identifier
from starcoin_sdk.transactions import (
    STC_TOKEN_CODE,
    RawUserTransaction,
    ScriptFunction,
    SignedUserTransaction,
    TransactionPayload,
)
from starcoin_sdk.type_tag import TypeTag

_INTEGER = re.compile(r"(\d+)(u8|u16|u32|u64|u128|u256)?")
_HEX_VECTOR = re.compile(r'x"([0-9a-fA-F]*)"')
_TEXT_VECTOR = re.compile(r'b"(.*)"', re.DOTALL)

_INTEGER_ENCODERS = {
    "u8": Serializer.u8,
    "u16": Serializer.u16,
    "u32": Serializer.u32,
    "u64": Serializer.u64,
    "u128": Serializer.u128,
    "u256": Serializer.u256,
}


def parse_argument(argument: str | bytes | bool | int | AccountAddress) -> bytes:
    """Encodes one script function argument to BCS bytes.

    Raises:
        OutOfRangeError: If an integer literal does not fit its suffixed width.
        ValueError: If the literal is not recognised.

    """
    if isinstance(argument, (bytes, bytearray)):
        return bytes(argument)
    if isinstance(argument, bool):
        return encoder(argument, Serializer.bool)
    if isinstance(argument, int):
        return encoder(argument, Serializer.u64)
    if isinstance(argument, AccountAddress):
        return encoder(argument, Serializer.struct)

    literal = argument.strip()
    if literal in ("true", "false"):
        return encoder(literal == "true", Serializer.bool)

    match = _INTEGER.fullmatch(literal)
    if match:
        width = match.group(2) or "u64"
        return encoder(int(match.group(1)), _INTEGER_ENCODERS[width])

    match = _HEX_VECTOR.fullmatch(literal)
    if match:
        return encoder(bytes.fromhex(match.group(1)), Serializer.to_bytes)

    match = _TEXT_VECTOR.fullmatch(literal)
    if match:
        return encoder(match.group(1).encode(), Serializer.to_bytes)

    if is_receipt_identifier(literal):
        address = ReceiptIdentifier.decode(literal).address
        return encoder(address, Serializer.struct)

    if literal.startswith("0x"):
        return encoder(AccountAddress.from_str(literal), Serializer.struct)

    raise ValueError(f"Unrecognized transaction argument: {argument!r}")


def encode_script_function(
    function_id: str,
    ty_args: list[TypeTag],
    args: list[bytes],
) -> TransactionPayload:
    """Builds a script function payload from pre-encoded arguments."""
    return TransactionPayload(ScriptFunction.from_function_id(function_id, ty_args, args))


def generate_raw_user_transaction(
    sender: AccountAddress | str,
    payload: TransactionPayload,
    max_gas_amount: int,
    sequence_number: int,
    expiration_timestamp_secs: int,
    chain_id: int,
    gas_unit_price: int = 1,
    gas_token_code: str = STC_TOKEN_CODE,
) -> RawUserTransaction:
    if isinstance(sender, str):
        sender = AccountAddress.from_str(sender)
    return RawUserTransaction(
        sender,
        sequence_number,
        payload,
        max_gas_amount,
        gas_unit_price,
        expiration_timestamp_secs,
        chain_id,
        gas_token_code,
    )


def sign_raw_user_transaction(
    private_key: ed25519.PrivateKey | str, raw_txn: RawUserTransaction
) -> str:
    """Signs a raw transaction and returns the hex encoded signed transaction."""
    if isinstance(private_key, str):
        private_key = ed25519.PrivateKey.from_str(private_key)
    return SignedUserTransaction(raw_txn, raw_txn.sign(private_key)).to_hex()


@dataclass(frozen=True)
class ScriptCall:
    """A script function call in request form.

    Attributes:
        code (str): Function id, e.g. '0x1::TransferScripts::peer_to_peer'.
        type_args (list[str]): Type arguments, e.g. ['0x1::STC::STC'].
        args (list[Any]): Argument literals or pre-encoded bytes.

    """

    code: str
    type_args: list[str] = field(default_factory=list)
    args: list[Any] = field(default_factory=list)

    def to_payload(self) -> TransactionPayload:
        return encode_script_function(
            self.code,
            [TypeTag.from_str(type_arg) for type_arg in self.type_args],
            [parse_argument(arg) for arg in self.args],
        )

    def to_params(self) -> dict[str, Any]:
        """JSON form understood by the node, only literal arguments can be expressed."""
        for arg in self.args:
            if not isinstance(arg, str):
                raise ValueError(
                    f"Argument {arg!r} is pre-encoded and has no JSON literal form"
                )
        return {
            "code": self.code,
            "type_args": list(self.type_args),
            "args": list(self.args),
        }


@dataclass(frozen=True)
class TransactionRequest:
    """Everything needed to build a raw user transaction. Unset fields are filled by the signer.

    Attributes:
        script (ScriptCall): The script function to call.
        sender (str | None): Sender address. Default to the signer's address.
        sender_public_key (str | None): Sender public key, only used for dry runs.
        sequence_number (int | None): Default to the node's next sequence number for the sender.
        max_gas_amount (int | None): Default to `TransactionConfig.max_gas_amount`.
        gas_unit_price (int | None): Default to `TransactionConfig.gas_unit_price`.
        gas_token_code (str | None): Default to `TransactionConfig.gas_token_code`.
        expiration_timestamp_secs (int | None): Default to the node time plus
            `TransactionConfig.expiration_ttl`.
        chain_id (int | None): Default to the node's chain id.

    """

    script: ScriptCall
    sender: str | None = None
    sender_public_key: str | None = None
    sequence_number: int | None = None
    max_gas_amount: int | None = None
    gas_unit_price: int | None = None
    gas_token_code: str | None = None
    expiration_timestamp_secs: int | None = None
    chain_id: int | None = None

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"script": self.script.to_params()}
        if self.sender is not None:
            params["sender"] = self.sender
        if self.sender_public_key is not None:
            params["sender_public_key"] = self.sender_public_key
        if self.sequence_number is not None:
            params["sequence_number"] = self.sequence_number
        if self.max_gas_amount is not None:
            params["max_gas_amount"] = self.max_gas_amount
        if self.gas_unit_price is not None:
            params["gas_unit_price"] = self.gas_unit_price
        if self.gas_token_code is not None:
            params["gas_token_code"] = self.gas_token_code
        if self.expiration_timestamp_secs is not None:
            params["expiration_timestamp_secs"] = self.expiration_timestamp_secs
        if self.chain_id is not None:
            params["chain_id"] = self.chain_id
        return params


@dataclass
class TransactionConfig:
    """Configuration options for transaction payload generation and polling.

    This dataclass defines default parameters that are used to fill a `TransactionRequest` and to wait for a
    submitted transaction. It is shared by `StarcoinClient` and `Signer`.

    Attributes:
        expiration_ttl (int): Seconds, counted from the node's clock, before a transaction expires and is rejected by
            the network. Defaults to 43,200.
        gas_unit_price (int): Price per unit of gas used to execute the transaction. Defaults to 1.
        max_gas_amount (int): Maximum number of gas units allowed per transaction. Defaults to 10,000,000.
        gas_token_code (str): Token paying for gas. Defaults to '0x1::STC::STC'.
        transaction_wait_time_in_seconds (int): Number of seconds to wait for a transaction to be confirmed before
            timing out. Defaults to 120.
        polling_wait_time_in_seconds (int): Delay, in seconds, between successive polling attempts when waiting for
            transaction confirmation. Defaults to 1.
        confirmations (int): Blocks required on top of the including block. Defaults to 1.
        wait_for_transaction (bool): Whether to wait for the transaction to be confirmed after submission.
            Defaults to False.

    """

    expiration_ttl: int = 43_200
    gas_unit_price: int = 1
    max_gas_amount: int = 10_000_000
    gas_token_code: str = STC_TOKEN_CODE
    transaction_wait_time_in_seconds: int = 120
    polling_wait_time_in_seconds: int = 1
    confirmations: int = 1
    wait_for_transaction: bool = False
