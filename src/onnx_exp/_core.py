# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""In-memory model of tensor types, attributes and operator invocations.

All objects in this module are immutable once constructed so that the
inferred outputs of one node can be handed to its successors without copying.
"""

from __future__ import annotations

__all__ = [
    "Attr",
    "OperatorInvocation",
    "Shape",
    "SymbolicDim",
    "TensorTypeInfo",
]

import dataclasses
import types
import typing
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any, Union

import numpy as np

from onnx_exp._enums import AttributeType, DataType


class SymbolicDim:
    """A dimension whose size is not known statically.

    A symbolic dimension can be named (e.g. ``"batch"``) or anonymous
    (``None``). Two anonymous dimensions compare equal; this only means that
    nothing is known about either of them.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str | None) -> None:
        if isinstance(value, int):
            raise TypeError(
                "The value of a SymbolicDim cannot be an int. "
                "If you are creating a Shape, use int directly instead of SymbolicDim."
            )
        self._value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymbolicDim):
            return self.value == other
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    @property
    def value(self) -> str | None:
        return self._value

    def __str__(self) -> str:
        return "?" if self._value is None else f"{self._value}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._value!r})"


DimLike = Union[int, SymbolicDim, str, None]


class Shape:
    """An immutable tensor shape.

    Each dimension is either a known non-negative ``int`` or a
    :class:`SymbolicDim`. Strings and ``None`` are converted to symbolic
    dimensions.
    """

    __slots__ = ("_dims",)

    def __init__(self, dims: Iterable[DimLike], /) -> None:
        """Initialize a shape.

        Args:
            dims: The dimensions of the shape.

        Raises:
            ValueError: If a concrete dimension is negative.
            TypeError: If a dimension is not an int, str, None or SymbolicDim.
        """
        normalized: list[int | SymbolicDim] = []
        for dim in dims:
            if isinstance(dim, bool):
                raise TypeError(f"Expected int, str, None or SymbolicDim, got '{type(dim)}'")
            if isinstance(dim, (int, np.integer)):
                if dim < 0:
                    raise ValueError(f"Shape dimensions must be non-negative, got {dim}")
                normalized.append(int(dim))
            elif isinstance(dim, SymbolicDim):
                normalized.append(dim)
            elif isinstance(dim, str) or dim is None:
                normalized.append(SymbolicDim(dim))
            else:
                raise TypeError(f"Expected int, str, None or SymbolicDim, got '{type(dim)}'")
        self._dims: tuple[int | SymbolicDim, ...] = tuple(normalized)

    @property
    def dims(self) -> tuple[int | SymbolicDim, ...]:
        """All dimensions in the shape."""
        return self._dims

    def rank(self) -> int:
        """The rank of the shape."""
        return len(self._dims)

    def __len__(self) -> int:
        return len(self._dims)

    def __iter__(self) -> Iterator[int | SymbolicDim]:
        return iter(self._dims)

    @typing.overload
    def __getitem__(self, index: int) -> int | SymbolicDim: ...

    @typing.overload
    def __getitem__(self, index: slice) -> tuple[int | SymbolicDim, ...]: ...

    def __getitem__(self, index):
        return self._dims[index]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self._dims)!r})"

    def __str__(self) -> str:
        """Return a string representation of the shape.

        E.g. [n,1,3]
        """
        return f"[{','.join([str(dim) for dim in self._dims])}]"

    def __eq__(self, other: object) -> bool:
        """Return True if the shapes are equal.

        A shape also compares equal to a plain sequence of the same dimensions.
        """
        if isinstance(other, Shape):
            return self._dims == other._dims
        if not isinstance(other, Iterable) or isinstance(other, str):
            return False
        return list(self._dims) == list(other)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self._dims)


@dataclasses.dataclass(frozen=True)
class TensorTypeInfo:
    """Partial knowledge about a tensor: its element type and its shape.

    Attributes:
        dtype: The element type, or ``None`` if unknown.
        shape: The shape, or ``None`` if even the rank is unknown.
    """

    dtype: DataType | None = None
    shape: Shape | None = None

    def __post_init__(self) -> None:
        if self.shape is not None and not isinstance(self.shape, Shape):
            object.__setattr__(self, "shape", Shape(self.shape))
        if self.dtype is not None and not isinstance(self.dtype, DataType):
            object.__setattr__(self, "dtype", DataType(self.dtype))

    def is_unresolved(self) -> bool:
        """Whether nothing at all is known about the tensor."""
        return self.dtype is None and self.shape is None

    def __str__(self) -> str:
        dtype = self.dtype.short_name() if self.dtype is not None else "?"
        shape = str(self.shape) if self.shape is not None else "?"
        return f"{dtype}{shape}"


_ATTR_PYTHON_TYPES: dict[AttributeType, tuple[type, ...]] = {
    AttributeType.FLOAT: (float, int, np.floating, np.integer),
    AttributeType.INT: (int, np.integer),
    AttributeType.FLOATS: (float, int, np.floating, np.integer),
    AttributeType.INTS: (int, np.integer),
    AttributeType.STRING: (str,),
    AttributeType.STRINGS: (str,),
}

# Attribute types whose payload is not modelled. They are still carried by
# name and type so that the checker can see them.
_OPAQUE_ATTR_TYPES = frozenset(
    {
        AttributeType.GRAPH,
        AttributeType.GRAPHS,
        AttributeType.TENSORS,
        AttributeType.SPARSE_TENSOR,
        AttributeType.SPARSE_TENSORS,
        AttributeType.TYPE_PROTO,
        AttributeType.TYPE_PROTOS,
    }
)


class Attr:
    """An immutable, named operator attribute.

    Attributes:
        name: The attribute name.
        type: The :class:`AttributeType` of the value.
        value: The value. Sequences are stored as tuples and tensors as
            read-only numpy arrays. Graph, tensor list, sparse tensor and type proto
            attributes carry no value (``None``).
    """

    __slots__ = ("name", "type", "value")

    name: str
    type: AttributeType
    value: Any

    def __init__(self, name: str, type: AttributeType, value: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "type", type)
        object.__setattr__(self, "value", _normalize_attr_value(name, type, value))

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @classmethod
    def from_value(cls, name: str, value: Any) -> Attr:
        """Create an attribute, inferring its type from a Python value.

        Raises:
            TypeError: If the type cannot be inferred.
        """
        if isinstance(value, np.ndarray):
            return cls(name, AttributeType.TENSOR, value)
        if isinstance(value, bool):
            return cls(name, AttributeType.INT, int(value))
        if isinstance(value, (int, np.integer)):
            return cls(name, AttributeType.INT, value)
        if isinstance(value, (float, np.floating)):
            return cls(name, AttributeType.FLOAT, value)
        if isinstance(value, str):
            return cls(name, AttributeType.STRING, value)
        if isinstance(value, Sequence) and not isinstance(value, str):
            if all(isinstance(v, (int, np.integer)) for v in value):
                return cls(name, AttributeType.INTS, value)
            if all(isinstance(v, (int, float, np.integer, np.floating)) for v in value):
                return cls(name, AttributeType.FLOATS, value)
            if all(isinstance(v, str) for v in value):
                return cls(name, AttributeType.STRINGS, value)
        raise TypeError(f"Cannot infer the attribute type of {name!r} from {value!r}")

    def as_int(self) -> int:
        return self._checked(AttributeType.INT)

    def as_ints(self) -> tuple[int, ...]:
        return self._checked(AttributeType.INTS)

    def _checked(self, expected: AttributeType) -> Any:
        if self.type != expected:
            raise TypeError(
                f"Attribute {self.name!r} is of type {self.type}, not {expected}"
            )
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attr):
            return False
        if self.name != other.name or self.type != other.type:
            return False
        if self.type == AttributeType.TENSOR:
            return bool(
                self.value.dtype == other.value.dtype
                and np.array_equal(self.value, other.value)
            )
        return self.value == other.value

    def __hash__(self) -> int:
        if self.type == AttributeType.TENSOR:
            return hash((self.name, self.type, self.value.shape, self.value.tobytes()))
        return hash((self.name, self.type, self.value))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {self.type!r}, {self.value!r})"

    def __str__(self) -> str:
        return str(self.value)


def _normalize_attr_value(name: str, attr_type: AttributeType, value: Any) -> Any:
    if attr_type == AttributeType.TENSOR:
        if not isinstance(value, np.ndarray):
            raise TypeError(
                f"Attribute {name!r} expects a numpy array, got {type(value).__name__}"
            )
        array = np.array(value, copy=True)
        array.setflags(write=False)
        return array
    if attr_type in _OPAQUE_ATTR_TYPES:
        if value is not None:
            raise TypeError(
                f"Attribute {name!r} of type {attr_type} carries no value, got {value!r}"
            )
        return None
    if attr_type not in _ATTR_PYTHON_TYPES:
        raise TypeError(f"Unsupported attribute type {attr_type} for {name!r}")
    allowed = _ATTR_PYTHON_TYPES[attr_type]
    if attr_type in (AttributeType.FLOAT, AttributeType.INT, AttributeType.STRING):
        if isinstance(value, bool) or not isinstance(value, allowed):
            raise TypeError(f"Attribute {name!r} of type {attr_type} got {value!r}")
        if attr_type == AttributeType.STRING:
            return value
        return float(value) if attr_type == AttributeType.FLOAT else int(value)
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise TypeError(
            f"Attribute {name!r} of type {attr_type} expects a sequence, got {value!r}"
        )
    items = tuple(value)
    for item in items:
        if isinstance(item, bool) or not isinstance(item, allowed):
            raise TypeError(f"Attribute {name!r} of type {attr_type} got element {item!r}")
    if attr_type == AttributeType.FLOATS:
        return tuple(float(item) for item in items)
    if attr_type == AttributeType.STRINGS:
        return items
    return tuple(int(item) for item in items)


@dataclasses.dataclass(frozen=True)
class OperatorInvocation:
    """One operator node as seen by type and shape inference.

    Attributes:
        op_type: The operator name, e.g. ``"GivenTensorFill"``.
        inputs: Per-input type information. ``None`` marks an omitted
            optional input.
        attributes: Attributes bound on the node, keyed by name.
        num_outputs: Number of output slots to populate.
        outputs: Output knowledge already declared on the node (e.g. from a
            serialized graph). Defaults to unknown for every output.
        domain: The operator domain. ``""`` is the default ONNX domain.
        name: The node name, if any.
    """

    op_type: str
    inputs: Sequence[TensorTypeInfo | None] = ()
    attributes: Mapping[str, Attr] | Sequence[Attr] = dataclasses.field(
        default_factory=dict
    )
    num_outputs: int = 1
    outputs: Sequence[TensorTypeInfo] | None = None
    domain: str = ""
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        if isinstance(self.attributes, Mapping):
            attrs = dict(self.attributes)
            for key, attr in attrs.items():
                if key != attr.name:
                    raise ValueError(
                        f"Attribute key {key!r} does not match attribute name {attr.name!r}"
                    )
        else:
            attrs = {}
            for attr in self.attributes:
                if attr.name in attrs:
                    raise ValueError(
                        f"Duplicate attribute {attr.name!r} on operator {self.op_type!r}"
                    )
                attrs[attr.name] = attr
        object.__setattr__(self, "attributes", types.MappingProxyType(attrs))

        if self.num_outputs < 0:
            raise ValueError(f"num_outputs must be non-negative, got {self.num_outputs}")
        if self.outputs is None:
            outputs = tuple(TensorTypeInfo() for _ in range(self.num_outputs))
        else:
            outputs = tuple(self.outputs)
            if len(outputs) != self.num_outputs:
                raise ValueError(
                    f"Expected {self.num_outputs} declared outputs, got {len(outputs)}"
                )
        object.__setattr__(self, "outputs", outputs)

    def __hash__(self) -> int:
        return hash(
            (
                self.domain,
                self.op_type,
                self.name,
                self.inputs,
                tuple(sorted(self.attributes.items())),
                self.outputs,
            )
        )

    @property
    def op_id(self) -> str:
        """The operator identifier, e.g. ``"GivenTensorFill"`` or ``"com.x::Op"``."""
        return f"{self.domain}::{self.op_type}" if self.domain else self.op_type
