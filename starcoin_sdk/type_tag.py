# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re
from typing import Any

from starcoin_sdk.account_address import AccountAddress, ParseAddressError
from starcoin_sdk.bcs import (
    Deserializable,
    Deserializer,
    InvalidVariantError,
    Serializable,
    Serializer,
)


class TypeTag(Deserializable, Serializable):
    """TypeTag represents a primitive or a struct type for generic Move calls."""

    BOOL: int = 0
    U8: int = 1
    U64: int = 2
    U128: int = 3
    ACCOUNT_ADDRESS: int = 4
    SIGNER: int = 5
    VECTOR: int = 6
    STRUCT: int = 7

    value: Any

    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeTag):
            return NotImplemented
        return self.value.variant() == other.value.variant() and self.value == other.value

    def __str__(self):
        return self.value.__str__()

    def __repr__(self):
        return self.__str__()

    def variant(self) -> int:
        return self.value.variant()

    @staticmethod
    def from_str(type_tag: str) -> TypeTag:
        return _TypeTagParser(type_tag).parse()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> TypeTag:
        variant = deserializer.uleb128()
        tag_type = _TAGS_BY_VARIANT.get(variant)
        if tag_type is None:
            raise InvalidVariantError("TypeTag", variant)
        return TypeTag(tag_type.deserialize(deserializer))

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.value.variant())
        serializer.struct(self.value)


class _PrimitiveTag:
    VARIANT: int
    NAME: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _PrimitiveTag):
            return NotImplemented
        return self.VARIANT == other.VARIANT

    def __str__(self) -> str:
        return self.NAME

    def variant(self) -> int:
        return self.VARIANT

    @classmethod
    def deserialize(cls, deserializer: Deserializer) -> _PrimitiveTag:
        return cls()

    def serialize(self, serializer: Serializer):
        pass


class BoolTag(_PrimitiveTag):
    VARIANT = TypeTag.BOOL
    NAME = "bool"


class U8Tag(_PrimitiveTag):
    VARIANT = TypeTag.U8
    NAME = "u8"


class U64Tag(_PrimitiveTag):
    VARIANT = TypeTag.U64
    NAME = "u64"


class U128Tag(_PrimitiveTag):
    VARIANT = TypeTag.U128
    NAME = "u128"


class AccountAddressTag(_PrimitiveTag):
    VARIANT = TypeTag.ACCOUNT_ADDRESS
    NAME = "address"


class SignerTag(_PrimitiveTag):
    VARIANT = TypeTag.SIGNER
    NAME = "signer"


class VectorTag:
    element: TypeTag

    def __init__(self, element: TypeTag):
        self.element = element

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VectorTag):
            return NotImplemented
        return self.element == other.element

    def __str__(self) -> str:
        return f"vector<{self.element}>"

    def variant(self) -> int:
        return TypeTag.VECTOR

    @staticmethod
    def deserialize(deserializer: Deserializer) -> VectorTag:
        return VectorTag(TypeTag.deserialize(deserializer))

    def serialize(self, serializer: Serializer):
        serializer.struct(self.element)


class StructTag(Deserializable, Serializable):
    address: AccountAddress
    module: str
    name: str
    type_args: list[TypeTag]

    def __init__(
        self,
        address: AccountAddress,
        module: str,
        name: str,
        type_args: list[TypeTag],
    ):
        self.address = address
        self.module = module
        self.name = name
        self.type_args = type_args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructTag):
            return NotImplemented
        return (
            self.address == other.address
            and self.module == other.module
            and self.name == other.name
            and self.type_args == other.type_args
        )

    def __str__(self) -> str:
        value = f"{self.address}::{self.module}::{self.name}"
        if len(self.type_args) > 0:
            value += f"<{', '.join(str(arg) for arg in self.type_args)}>"
        return value

    def __repr__(self):
        return self.__str__()

    def variant(self) -> int:
        return TypeTag.STRUCT

    @staticmethod
    def from_str(type_tag: str) -> StructTag:
        tag = TypeTag.from_str(type_tag)
        if not isinstance(tag.value, StructTag):
            raise ParseTypeTagError(type_tag, "not a struct type")
        return tag.value

    @staticmethod
    def deserialize(deserializer: Deserializer) -> StructTag:
        address = AccountAddress.deserialize(deserializer)
        module = deserializer.str()
        name = deserializer.str()
        type_args = deserializer.sequence(TypeTag.deserialize)
        return StructTag(address, module, name, type_args)

    def serialize(self, serializer: Serializer):
        self.address.serialize(serializer)
        serializer.str(self.module)
        serializer.str(self.name)
        serializer.sequence(self.type_args, Serializer.struct)


_TAGS_BY_VARIANT: dict[int, Any] = {
    TypeTag.BOOL: BoolTag,
    TypeTag.U8: U8Tag,
    TypeTag.U64: U64Tag,
    TypeTag.U128: U128Tag,
    TypeTag.ACCOUNT_ADDRESS: AccountAddressTag,
    TypeTag.SIGNER: SignerTag,
    TypeTag.VECTOR: VectorTag,
    TypeTag.STRUCT: StructTag,
}

_PRIMITIVES_BY_NAME: dict[str, type[_PrimitiveTag]] = {
    tag.NAME: tag
    for tag in (BoolTag, U8Tag, U64Tag, U128Tag, AccountAddressTag, SignerTag)
}

_TOKEN = re.compile(r"\s*(::|<|>|,|[A-Za-z0-9_]+)")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class _TypeTagParser:
    """Recursive descent over `address::module::name<args>` and primitive names."""

    text: str
    tokens: list[str]
    position: int

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text.strip())
        self.position = 0

    def parse(self) -> TypeTag:
        tag = self._type_tag()
        if self.position != len(self.tokens):
            raise ParseTypeTagError(
                self.text, f"unexpected token {self.tokens[self.position]!r}"
            )
        return tag

    def _tokenize(self, text: str) -> list[str]:
        tokens = []
        position = 0
        while position < len(text):
            match = _TOKEN.match(text, position)
            if match is None:
                raise ParseTypeTagError(
                    self.text, f"unexpected character at position {position}"
                )
            tokens.append(match.group(1))
            position = match.end()
        return tokens

    def _peek(self) -> str | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ParseTypeTagError(self.text, "unexpected end of input")
        self.position += 1
        return token

    def _expect(self, expected: str):
        token = self._next()
        if token != expected:
            raise ParseTypeTagError(
                self.text, f"expected {expected!r}, found {token!r}"
            )

    def _identifier(self) -> str:
        token = self._next()
        if not _IDENTIFIER.fullmatch(token):
            raise ParseTypeTagError(self.text, f"invalid identifier {token!r}")
        return token

    def _type_tag(self) -> TypeTag:
        token = self._next()
        if token in _PRIMITIVES_BY_NAME:
            return TypeTag(_PRIMITIVES_BY_NAME[token]())
        if token == "vector":
            self._expect("<")
            element = self._type_tag()
            self._expect(">")
            return TypeTag(VectorTag(element))
        return TypeTag(self._struct_tag(token))

    def _struct_tag(self, address_token: str) -> StructTag:
        # Struct tags must be fully qualified: address::module::name
        if not address_token.startswith("0x"):
            raise ParseTypeTagError(
                self.text, f"expected a 0x prefixed address, found {address_token!r}"
            )
        try:
            address = AccountAddress.from_str(address_token)
        except ParseAddressError as err:
            raise ParseTypeTagError(self.text, str(err)) from err

        self._expect("::")
        module = self._identifier()
        self._expect("::")
        name = self._identifier()

        type_args: list[TypeTag] = []
        if self._peek() == "<":
            self._next()
            type_args.append(self._type_tag())
            while self._peek() == ",":
                self._next()
                type_args.append(self._type_tag())
            self._expect(">")
        return StructTag(address, module, name, type_args)


def encode_struct_type_tags(type_tags: list[str]) -> list[TypeTag]:
    """Parses fully qualified struct type strings, e.g. ['0x1::STC::STC']."""
    return [TypeTag(StructTag.from_str(type_tag)) for type_tag in type_tags]


class ParseTypeTagError(Exception):
    """A type tag string is malformed or not fully qualified."""

    def __init__(self, type_tag: str, reason: str):
        self.type_tag = type_tag
        super().__init__(f"Cannot parse type tag {type_tag!r}: {reason}")
