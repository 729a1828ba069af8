# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Enums for element types, attribute types and schema support levels."""

from __future__ import annotations

__all__ = [
    "AttributeType",
    "DataType",
    "SupportLevel",
]

import enum


class AttributeType(enum.IntEnum):
    """Enum for the types of attributes an operator instance can carry.

    Values match ``onnx.AttributeProto.AttributeType``.
    """

    UNDEFINED = 0
    FLOAT = 1
    INT = 2
    STRING = 3
    TENSOR = 4
    GRAPH = 5
    FLOATS = 6
    INTS = 7
    STRINGS = 8
    GRAPHS = 9
    TENSORS = 10
    SPARSE_TENSOR = 11
    SPARSE_TENSORS = 12
    TYPE_PROTO = 13
    TYPE_PROTOS = 14

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.__repr__()


class DataType(enum.IntEnum):
    """Enum for the element types of tensors.

    Values match ``onnx.TensorProto.DataType``.
    """

    UNDEFINED = 0
    FLOAT = 1
    UINT8 = 2
    INT8 = 3
    UINT16 = 4
    INT16 = 5
    INT32 = 6
    INT64 = 7
    STRING = 8
    BOOL = 9
    FLOAT16 = 10
    DOUBLE = 11
    UINT32 = 12
    UINT64 = 13
    COMPLEX64 = 14
    COMPLEX128 = 15
    BFLOAT16 = 16
    FLOAT8E4M3FN = 17
    FLOAT8E4M3FNUZ = 18
    FLOAT8E5M2 = 19
    FLOAT8E5M2FNUZ = 20
    UINT4 = 21
    INT4 = 22
    FLOAT4E2M1 = 23

    @classmethod
    def from_short_name(cls, short_name: str) -> DataType:
        """Returns the DataType for a type name as used in ONNX type strings.

        ``"float"``, ``"double"``, ``"int64"``... as in ``tensor(float)``.

        Raises:
            ValueError: If the name is not recognized.
        """
        if short_name not in _SHORT_NAME_TO_DATA_TYPE:
            raise ValueError(f"Unknown short name: {short_name!r}")
        return cls(_SHORT_NAME_TO_DATA_TYPE[short_name])

    def short_name(self) -> str:
        """Returns the short name of the data type, e.g. ``"float"``."""
        return _DATA_TYPE_TO_SHORT_NAME[self]

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.__repr__()


class SupportLevel(enum.IntEnum):
    """Support level of an operator schema."""

    COMMON = 0
    EXPERIMENTAL = 1

    def __repr__(self) -> str:
        return self.name


_DATA_TYPE_TO_SHORT_NAME = {
    DataType.UNDEFINED: "undefined",
    DataType.BFLOAT16: "bfloat16",
    DataType.DOUBLE: "double",
    DataType.FLOAT: "float",
    DataType.FLOAT16: "float16",
    DataType.INT16: "int16",
    DataType.INT32: "int32",
    DataType.INT64: "int64",
    DataType.INT8: "int8",
    DataType.UINT16: "uint16",
    DataType.UINT32: "uint32",
    DataType.UINT64: "uint64",
    DataType.UINT8: "uint8",
    DataType.COMPLEX64: "complex64",
    DataType.COMPLEX128: "complex128",
    DataType.BOOL: "bool",
    DataType.STRING: "string",
    DataType.FLOAT8E4M3FN: "float8e4m3fn",
    DataType.FLOAT8E4M3FNUZ: "float8e4m3fnuz",
    DataType.FLOAT8E5M2: "float8e5m2",
    DataType.FLOAT8E5M2FNUZ: "float8e5m2fnuz",
    DataType.UINT4: "uint4",
    DataType.INT4: "int4",
    DataType.FLOAT4E2M1: "float4e2m1",
}

_SHORT_NAME_TO_DATA_TYPE = {v: k for k, v in _DATA_TYPE_TO_SHORT_NAME.items()}
