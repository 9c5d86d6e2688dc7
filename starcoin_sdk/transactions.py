# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""This translates Starcoin transactions to and from BCS for signing and submitting to the JSON-RPC API."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from typing import Any

from starcoin_sdk import ed25519
from starcoin_sdk.account_address import AccountAddress
from starcoin_sdk.bcs import (
    Deserializable,
    Deserializer,
    InvalidVariantError,
    Serializable,
    Serializer,
)
from starcoin_sdk.type_tag import TypeTag

STC_TOKEN_CODE = "0x1::STC::STC"


def salt(type_name: str) -> bytes:
    """Domain separator the node prepends to a BCS value before hashing or signing it."""
    hasher = hashlib.sha3_256()
    hasher.update(f"STARCOIN::{type_name}".encode())
    return hasher.digest()


class RawUserTransaction(Deserializable, Serializable):
    # Sender's address
    sender: AccountAddress
    # Sequence number of this transaction. This must match the sequence number in the sender's
    # account at the time of execution.
    sequence_number: int
    # The transaction payload, e.g., a script function to execute.
    payload: TransactionPayload
    # Maximum total gas to spend for this transaction
    max_gas_amount: int
    # Price to be paid per gas unit.
    gas_unit_price: int
    # The token used to pay for gas, e.g. 0x1::STC::STC
    gas_token_code: str
    # Expiration timestamp for this transaction, represented as seconds from the Unix epoch.
    expiration_timestamp_secs: int
    # Chain ID of the Starcoin network this transaction is intended for.
    chain_id: int

    def __init__(
        self,
        sender: AccountAddress,
        sequence_number: int,
        payload: TransactionPayload,
        max_gas_amount: int,
        gas_unit_price: int,
        expiration_timestamp_secs: int,
        chain_id: int,
        gas_token_code: str = STC_TOKEN_CODE,
    ):
        self.sender = sender
        self.sequence_number = sequence_number
        self.payload = payload
        self.max_gas_amount = max_gas_amount
        self.gas_unit_price = gas_unit_price
        self.gas_token_code = gas_token_code
        self.expiration_timestamp_secs = expiration_timestamp_secs
        self.chain_id = chain_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawUserTransaction):
            return NotImplemented
        return (
            self.sender == other.sender
            and self.sequence_number == other.sequence_number
            and self.payload == other.payload
            and self.max_gas_amount == other.max_gas_amount
            and self.gas_unit_price == other.gas_unit_price
            and self.gas_token_code == other.gas_token_code
            and self.expiration_timestamp_secs == other.expiration_timestamp_secs
            and self.chain_id == other.chain_id
        )

    def __str__(self):
        return f"""RawUserTransaction:
    sender: {self.sender}
    sequence_number: {self.sequence_number}
    payload: {self.payload}
    max_gas_amount: {self.max_gas_amount}
    gas_unit_price: {self.gas_unit_price}
    gas_token_code: {self.gas_token_code}
    expiration_timestamp_secs: {self.expiration_timestamp_secs}
    chain_id: {self.chain_id}
"""

    def prehash(self) -> bytes:
        return salt("RawUserTransaction")

    def keyed(self) -> bytes:
        """The exact bytes a sender signs: the type salt followed by the BCS encoding."""
        prehash = bytearray(self.prehash())
        prehash.extend(self.to_bytes())
        return bytes(prehash)

    def sign(self, key: ed25519.PrivateKey) -> TransactionAuthenticator:
        signature = key.sign(self.keyed())
        return TransactionAuthenticator(
            Ed25519Authenticator(key.public_key(), signature)
        )

    def verify(self, key: ed25519.PublicKey, signature: ed25519.Signature) -> bool:
        return key.verify(self.keyed(), signature)

    def to_hex(self) -> str:
        return f"0x{self.to_bytes().hex()}"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> RawUserTransaction:
        sender = AccountAddress.deserialize(deserializer)
        sequence_number = deserializer.u64()
        payload = TransactionPayload.deserialize(deserializer)
        max_gas_amount = deserializer.u64()
        gas_unit_price = deserializer.u64()
        gas_token_code = deserializer.str()
        expiration_timestamp_secs = deserializer.u64()
        chain_id = deserializer.u8()
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

    def serialize(self, serializer: Serializer) -> None:
        self.sender.serialize(serializer)
        serializer.u64(self.sequence_number)
        self.payload.serialize(serializer)
        serializer.u64(self.max_gas_amount)
        serializer.u64(self.gas_unit_price)
        serializer.str(self.gas_token_code)
        serializer.u64(self.expiration_timestamp_secs)
        serializer.u8(self.chain_id)


class TransactionPayload:
    SCRIPT: int = 0
    PACKAGE: int = 1
    SCRIPT_FUNCTION: int = 2

    variant: int
    value: Any

    def __init__(self, payload: Any):
        if isinstance(payload, Script):
            self.variant = TransactionPayload.SCRIPT
        elif isinstance(payload, Package):
            self.variant = TransactionPayload.PACKAGE
        elif isinstance(payload, ScriptFunction):
            self.variant = TransactionPayload.SCRIPT_FUNCTION
        else:
            raise TypeError(f"Invalid transaction payload type: {type(payload)}")
        self.value = payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransactionPayload):
            return NotImplemented
        return self.variant == other.variant and self.value == other.value

    def __str__(self) -> str:
        return self.value.__str__()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> TransactionPayload:
        variant = deserializer.uleb128()

        if variant == TransactionPayload.SCRIPT:
            payload: Any = Script.deserialize(deserializer)
        elif variant == TransactionPayload.PACKAGE:
            payload = Package.deserialize(deserializer)
        elif variant == TransactionPayload.SCRIPT_FUNCTION:
            payload = ScriptFunction.deserialize(deserializer)
        else:
            raise InvalidVariantError("TransactionPayload", variant)

        return TransactionPayload(payload)

    def serialize(self, serializer: Serializer) -> None:
        serializer.uleb128(self.variant)
        self.value.serialize(serializer)


class Script:
    code: bytes
    ty_args: list[TypeTag]
    args: list[bytes]

    def __init__(self, code: bytes, ty_args: list[TypeTag], args: list[bytes]):
        self.code = code
        self.ty_args = ty_args
        self.args = args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Script):
            return NotImplemented
        return (
            self.code == other.code
            and self.ty_args == other.ty_args
            and self.args == other.args
        )

    def __str__(self):
        return f"<{self.ty_args}>({self.args})"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Script:
        code = deserializer.to_bytes()
        ty_args = deserializer.sequence(TypeTag.deserialize)
        args = deserializer.sequence(Deserializer.to_bytes)
        return Script(code, ty_args, args)

    def serialize(self, serializer: Serializer) -> None:
        serializer.to_bytes(self.code)
        serializer.sequence(self.ty_args, Serializer.struct)
        serializer.sequence(self.args, Serializer.to_bytes)


class Module:
    code: bytes

    def __init__(self, code: bytes):
        self.code = code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Module):
            return NotImplemented
        return self.code == other.code

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Module:
        return Module(deserializer.to_bytes())

    def serialize(self, serializer: Serializer) -> None:
        serializer.to_bytes(self.code)


class Package:
    """A bundle of compiled modules published under one address, with an optional init call."""

    package_address: AccountAddress
    modules: list[Module]
    init_script: ScriptFunction | None

    def __init__(
        self,
        package_address: AccountAddress,
        modules: list[Module],
        init_script: ScriptFunction | None = None,
    ):
        self.package_address = package_address
        self.modules = modules
        self.init_script = init_script

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return (
            self.package_address == other.package_address
            and self.modules == other.modules
            and self.init_script == other.init_script
        )

    def __str__(self):
        return f"Package({self.package_address}, {len(self.modules)} modules)"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Package:
        package_address = AccountAddress.deserialize(deserializer)
        modules = deserializer.sequence(Module.deserialize)
        init_script = deserializer.option(ScriptFunction.deserialize)
        return Package(package_address, modules, init_script)

    def serialize(self, serializer: Serializer) -> None:
        self.package_address.serialize(serializer)
        serializer.sequence(self.modules, Serializer.struct)
        serializer.option(self.init_script, Serializer.struct)


class ScriptFunction:
    module: ModuleId
    function: str
    ty_args: list[TypeTag]
    args: list[bytes]

    def __init__(
        self, module: ModuleId, function: str, ty_args: list[TypeTag], args: list[bytes]
    ):
        self.module = module
        self.function = function
        self.ty_args = ty_args
        self.args = args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScriptFunction):
            return NotImplemented

        return (
            self.module == other.module
            and self.function == other.function
            and self.ty_args == other.ty_args
            and self.args == other.args
        )

    def __str__(self):
        return f"{self.module}::{self.function}::<{self.ty_args}>({self.args})"

    def function_id(self) -> str:
        return f"{self.module}::{self.function}"

    @staticmethod
    def natural(
        module: str,
        function: str,
        ty_args: list[TypeTag],
        args: list[TransactionArgument],
    ) -> ScriptFunction:
        module_id = ModuleId.from_str(module)

        byte_args = []
        for arg in args:
            byte_args.append(arg.encode())
        return ScriptFunction(module_id, function, ty_args, byte_args)

    @staticmethod
    def from_function_id(
        function_id: str, ty_args: list[TypeTag], args: list[bytes]
    ) -> ScriptFunction:
        """Builds a payload from `address::module::function` and pre-encoded arguments."""
        split = function_id.split("::")
        if len(split) != 3:
            raise ValueError(f"Invalid function id: {function_id}")
        module_id = ModuleId(AccountAddress.from_str(split[0]), split[1])
        return ScriptFunction(module_id, split[2], ty_args, args)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> ScriptFunction:
        module = ModuleId.deserialize(deserializer)
        function = deserializer.str()
        ty_args = deserializer.sequence(TypeTag.deserialize)
        args = deserializer.sequence(Deserializer.to_bytes)
        return ScriptFunction(module, function, ty_args, args)

    def serialize(self, serializer: Serializer) -> None:
        self.module.serialize(serializer)
        serializer.str(self.function)
        serializer.sequence(self.ty_args, Serializer.struct)
        serializer.sequence(self.args, Serializer.to_bytes)


class ModuleId:
    address: AccountAddress
    name: str

    def __init__(self, address: AccountAddress, name: str):
        self.address = address
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModuleId):
            return NotImplemented
        return self.address == other.address and self.name == other.name

    def __str__(self) -> str:
        return f"{self.address}::{self.name}"

    @staticmethod
    def from_str(module_id: str) -> ModuleId:
        split = module_id.split("::")
        if len(split) != 2:
            raise ValueError(f"Invalid module id: {module_id}")
        return ModuleId(AccountAddress.from_str(split[0]), split[1])

    @staticmethod
    def deserialize(deserializer: Deserializer) -> ModuleId:
        addr = AccountAddress.deserialize(deserializer)
        name = deserializer.str()
        return ModuleId(addr, name)

    def serialize(self, serializer: Serializer) -> None:
        self.address.serialize(serializer)
        serializer.str(self.name)


class TransactionArgument:
    value: Any
    encoder: Callable[[Serializer, Any], None]

    def __init__(
        self,
        value: Any,
        encoder: Callable[[Serializer, Any], None],
    ):
        self.value = value
        self.encoder = encoder

    def encode(self) -> bytes:
        ser = Serializer()
        self.encoder(ser, self.value)
        return ser.output()


class Ed25519Authenticator:
    public_key: ed25519.PublicKey
    signature: ed25519.Signature

    def __init__(self, public_key: ed25519.PublicKey, signature: ed25519.Signature):
        self.public_key = public_key
        self.signature = signature

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ed25519Authenticator):
            return NotImplemented
        return self.public_key == other.public_key and self.signature == other.signature

    def __str__(self) -> str:
        return f"PublicKey: {self.public_key}, Signature: {self.signature}"

    def verify(self, data: bytes) -> bool:
        return self.public_key.verify(data, self.signature)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Ed25519Authenticator:
        public_key = deserializer.struct(ed25519.PublicKey)
        signature = deserializer.struct(ed25519.Signature)
        return Ed25519Authenticator(public_key, signature)

    def serialize(self, serializer: Serializer):
        serializer.struct(self.public_key)
        serializer.struct(self.signature)


class TransactionAuthenticator:
    """The signature scheme tag followed by the scheme's key and signature."""

    ED25519: int = 0
    MULTI_ED25519: int = 1

    variant: int
    authenticator: Any

    def __init__(self, authenticator: Any):
        if isinstance(authenticator, Ed25519Authenticator):
            self.variant = TransactionAuthenticator.ED25519
        else:
            raise TypeError(f"Invalid authenticator type: {type(authenticator)}")
        self.authenticator = authenticator

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransactionAuthenticator):
            return NotImplemented
        return (
            self.variant == other.variant
            and self.authenticator == other.authenticator
        )

    def __str__(self) -> str:
        return self.authenticator.__str__()

    def verify(self, data: bytes) -> bool:
        return self.authenticator.verify(data)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> TransactionAuthenticator:
        variant = deserializer.uleb128()

        if variant == TransactionAuthenticator.ED25519:
            authenticator: Any = Ed25519Authenticator.deserialize(deserializer)
        else:
            # MultiEd25519 is a valid node tag but is not produced by this client.
            raise InvalidVariantError("TransactionAuthenticator", variant)

        return TransactionAuthenticator(authenticator)

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.variant)
        self.authenticator.serialize(serializer)


class SignedUserTransaction(Deserializable, Serializable):
    """A raw transaction with the sender's authenticator. Read-only once built."""

    _raw_txn: RawUserTransaction
    _authenticator: TransactionAuthenticator

    def __init__(
        self, raw_txn: RawUserTransaction, authenticator: TransactionAuthenticator
    ):
        self._raw_txn = raw_txn
        self._authenticator = authenticator

    @property
    def raw_txn(self) -> RawUserTransaction:
        return self._raw_txn

    @property
    def authenticator(self) -> TransactionAuthenticator:
        return self._authenticator

    @property
    def signature_scheme(self) -> int:
        return self._authenticator.variant

    @property
    def public_key(self) -> ed25519.PublicKey:
        return self._authenticator.authenticator.public_key

    @property
    def signature(self) -> ed25519.Signature:
        return self._authenticator.authenticator.signature

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignedUserTransaction):
            return NotImplemented
        return (
            self.raw_txn == other.raw_txn and self.authenticator == other.authenticator
        )

    def __str__(self) -> str:
        return f"Transaction: {self.raw_txn}Authenticator: {self.authenticator}"

    def verify(self) -> bool:
        return self.authenticator.verify(self.raw_txn.keyed())

    def to_hex(self) -> str:
        """Submission payload for `txpool.submit_hex_transaction`."""
        return f"0x{self.to_bytes().hex()}"

    def hash(self) -> str:
        """Transaction hash as the node reports it after submission."""
        hasher = hashlib.sha3_256()
        hasher.update(salt("SignedUserTransaction"))
        hasher.update(self.to_bytes())
        return f"0x{hasher.hexdigest()}"

    @staticmethod
    def deserialize(deserializer: Deserializer) -> SignedUserTransaction:
        raw_txn = RawUserTransaction.deserialize(deserializer)
        authenticator = TransactionAuthenticator.deserialize(deserializer)
        return SignedUserTransaction(raw_txn, authenticator)

    def serialize(self, serializer: Serializer) -> None:
        self.raw_txn.serialize(serializer)
        self.authenticator.serialize(serializer)
