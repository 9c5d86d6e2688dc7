# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""This is a simple BCS serializer and deserializer. Learn more at https://github.com/diem/bcs"""

from __future__ import annotations

import io
import typing
from collections.abc import Callable
from typing import Any, Protocol

MAX_U8 = 2**8 - 1
MAX_U16 = 2**16 - 1
MAX_U32 = 2**32 - 1
MAX_U64 = 2**64 - 1
MAX_U128 = 2**128 - 1
MAX_U256 = 2**256 - 1


class Deserializable(Protocol):
    """Deserializable defines the interface all types that support BCS deserialization."""

    @classmethod
    def from_bytes(cls, indata: bytes) -> Deserializable:
        der = Deserializer(indata)
        value = der.struct(cls)
        der.finish()
        return value

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Deserializable: ...


class Serializable(Protocol):
    """Serializable defines the interface all types that support BCS serialization."""

    def to_bytes(self) -> bytes:
        ser = Serializer()
        ser.struct(self)
        return ser.output()

    def serialize(self, serializer: Serializer) -> None: ...


class Deserializer:
    """Reads BCS values off a byte buffer, in declared order."""

    _data: bytes
    _input: io.BytesIO
    _length: int

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._length = len(data)
        self._input = io.BytesIO(self._data)

    def remaining(self) -> int:
        return self._length - self._input.tell()

    def finish(self) -> None:
        """Asserts the whole input has been consumed."""
        if self.remaining() != 0:
            raise TrailingBytesError(self.remaining())

    def bool(self) -> bool:
        value = self._read_int(1)
        if value == 0:
            return False
        elif value == 1:
            return True
        else:
            raise InvalidVariantError("bool", value)

    def to_bytes(self) -> bytes:
        return self._read(self.uleb128())

    def fixed_bytes(self, length: int) -> bytes:
        return self._read(length)

    def map(
        self,
        key_decoder: Callable[[Deserializer], Any],
        value_decoder: Callable[[Deserializer], Any],
    ) -> dict[Any, Any]:
        """Reads a map whose keys are strictly increasing by their encoded bytes.

        Raises:
            EncodingError: If a key repeats or the keys are out of order.

        """
        length = self.uleb128()
        values: dict = {}
        previous_key = None
        for _ in range(length):
            start = self._input.tell()
            key = key_decoder(self)
            encoded_key = self._data[start : self._input.tell()]
            if previous_key is not None and encoded_key <= previous_key:
                if encoded_key == previous_key:
                    raise EncodingError(f"Duplicate map key: {key!r}")
                raise EncodingError(f"Map key out of canonical order: {key!r}")
            previous_key = encoded_key
            values[key] = value_decoder(self)
        return values

    def option(self, value_decoder: Callable[[Deserializer], Any]) -> Any:
        if self.bool():
            return value_decoder(self)
        return None

    def sequence(
        self,
        value_decoder: Callable[[Deserializer], Any],
    ) -> list[Any]:
        length = self.uleb128()
        values: list = []
        while len(values) < length:
            values.append(value_decoder(self))
        return values

    def str(self) -> str:
        data = self.to_bytes()
        try:
            return data.decode()
        except UnicodeDecodeError as err:
            raise InvalidUtf8Error(data) from err

    def struct(self, struct: Any) -> Any:
        return struct.deserialize(self)

    def u8(self) -> int:
        return self._read_int(1)

    def u16(self) -> int:
        return self._read_int(2)

    def u32(self) -> int:
        return self._read_int(4)

    def u64(self) -> int:
        return self._read_int(8)

    def u128(self) -> int:
        return self._read_int(16)

    def u256(self) -> int:
        return self._read_int(32)

    def uleb128(self) -> int:
        value = 0
        shift = 0

        while value <= MAX_U32:
            byte = self._read_int(1)
            value |= (byte & 0x7F) << shift
            if byte & 0x80 == 0:
                break
            shift += 7

        if value > MAX_U32:
            raise EncodingError(f"Unexpectedly large uleb128 value: {value}")
        # A trailing zero group means the same value fits in fewer bytes.
        if shift > 0 and byte == 0:
            raise EncodingError(f"Non-canonical uleb128 encoding of {value}")

        return value

    def _read(self, length: int) -> bytes:
        value = self._input.read(length)
        if len(value) < length:
            raise InsufficientBytesError(length, len(value))
        return value

    def _read_int(self, length: int) -> int:
        return int.from_bytes(self._read(length), byteorder="little", signed=False)


class Serializer:
    """An append-only BCS accumulator. Use one instance per value being encoded."""

    _output: io.BytesIO

    def __init__(self):
        self._output = io.BytesIO()

    def output(self) -> bytes:
        return self._output.getvalue()

    def bool(self, value: bool):
        if value not in (True, False):
            raise OutOfRangeError(value, "bool")
        self._write_int(int(value), 1, MAX_U8, "bool")

    def to_bytes(self, value: bytes):
        self.uleb128(len(value))
        self._output.write(value)

    def fixed_bytes(self, value):
        self._output.write(value)

    def map(
        self,
        values: typing.Dict[Any, Any],
        key_encoder: Callable[[Serializer, Any], None],
        value_encoder: Callable[[Serializer, Any], None],
    ):
        encoded_values = []
        for key, value in values.items():
            encoded_values.append(
                (encoder(key, key_encoder), encoder(value, value_encoder))
            )
        encoded_values.sort(key=lambda item: item[0])

        self.uleb128(len(encoded_values))
        for key, value in encoded_values:
            self.fixed_bytes(key)
            self.fixed_bytes(value)

    def option(self, value: Any, value_encoder: Callable[[Serializer, Any], None]):
        if value is None:
            self.bool(False)
        else:
            self.bool(True)
            value_encoder(self, value)

    @staticmethod
    def sequence_serializer(
        value_encoder: Callable[[Serializer, Any], None],
    ) -> Callable[[Serializer, list[Any]], None]:
        return lambda self, values: self.sequence(values, value_encoder)

    def sequence(
        self,
        values: typing.Sequence[Any],
        value_encoder: Callable[[Serializer, Any], None],
    ):
        self.uleb128(len(values))
        for value in values:
            self.fixed_bytes(encoder(value, value_encoder))

    def str(self, value: str):
        self.to_bytes(value.encode())

    def struct(self, value: Any):
        value.serialize(self)

    def u8(self, value: int):
        self._write_int(value, 1, MAX_U8, "u8")

    def u16(self, value: int):
        self._write_int(value, 2, MAX_U16, "u16")

    def u32(self, value: int):
        self._write_int(value, 4, MAX_U32, "u32")

    def u64(self, value: int):
        self._write_int(value, 8, MAX_U64, "u64")

    def u128(self, value: int):
        self._write_int(value, 16, MAX_U128, "u128")

    def u256(self, value: int):
        self._write_int(value, 32, MAX_U256, "u256")

    def uleb128(self, value: int):
        if value < 0 or value > MAX_U32:
            raise OutOfRangeError(value, "uleb128")

        while value >= 0x80:
            # Write 7 (lowest) bits of data and set the 8th bit to 1.
            byte = value & 0x7F
            self.u8(byte | 0x80)
            value >>= 7

        # Write the remaining bits of data and set the highest bit to 0.
        self.u8(value & 0x7F)

    def _write_int(self, value: int, length: int, max_value: int, type_name: str):
        if value < 0 or value > max_value:
            raise OutOfRangeError(value, type_name)
        self._output.write(value.to_bytes(length, "little", signed=False))


def encoder(value: Any, encoder: Callable[[Serializer, Any], None]) -> bytes:
    """Encodes a single value with a fresh serializer."""
    ser = Serializer()
    encoder(ser, value)
    return ser.output()


class EncodingError(Exception):
    """A value could not be BCS encoded or decoded."""


class OutOfRangeError(EncodingError):
    """An integer does not fit the declared width."""

    def __init__(self, value: int, type_name: str):
        self.value = value
        self.type_name = type_name
        super().__init__(f"Cannot encode {value} into {type_name}")


class InsufficientBytesError(EncodingError):
    """The input ended before the value was fully read."""

    def __init__(self, requested: int, found: int):
        self.requested = requested
        self.found = found
        super().__init__(
            f"Unexpected end of input. Requested: {requested}, found: {found}"
        )


class InvalidVariantError(EncodingError):
    """An enum tag or boolean byte is not one of the allowed values."""

    def __init__(self, type_name: str, variant: int):
        self.type_name = type_name
        self.variant = variant
        super().__init__(f"Invalid {type_name} variant: {variant}")


class InvalidUtf8Error(EncodingError):
    """A string is not valid UTF-8."""

    def __init__(self, data: bytes):
        self.data = data
        super().__init__(f"Invalid UTF-8 string: 0x{data.hex()}")


class TrailingBytesError(EncodingError):
    """Bytes were left over after decoding a top level value."""

    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(f"{remaining} unconsumed bytes after decoding")
