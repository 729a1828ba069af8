# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Inference context and error types."""

from __future__ import annotations

__all__ = [
    "ConstraintViolation",
    "InferenceContext",
    "InferenceError",
    "InvalidOpUsageError",
    "ShapeInferenceError",
    "merge_shapes",
]

from typing import TYPE_CHECKING, Any

from onnx_exp import _core
from onnx_exp._enums import DataType

if TYPE_CHECKING:
    from onnx_exp import schemas


class InferenceError(Exception):
    """Type and shape inference failed for one operator node.

    Attributes:
        op_type: The operator type (e.g. ``"GivenTensorFill"``).
        reason: Human-readable description of the error.
        node_name: The name of the node (or ``None`` if unnamed or unknown).
        domain: The operator domain.
    """

    def __init__(
        self,
        op_type: str,
        reason: str,
        *,
        node_name: str | None = None,
        domain: str = "",
    ) -> None:
        self.op_type = op_type
        self.reason = reason
        self.node_name = node_name
        self.domain = domain
        super().__init__(str(self))

    def __str__(self) -> str:
        op_id = f"{self.domain}::{self.op_type}" if self.domain else self.op_type
        node_desc = f" (node {self.node_name!r})" if self.node_name else ""
        return f"{op_id}{node_desc}: {self.reason}"


class ShapeInferenceError(InferenceError):
    """A shape is out of domain or contradicts what is already known."""


class ConstraintViolation(InferenceError):
    """An element type is outside the allowed set of its type constraint."""


class InvalidOpUsageError(InferenceError):
    """The node does not match the arity of its schema."""


def _dims_conflict(dim1: int | _core.SymbolicDim, dim2: int | _core.SymbolicDim) -> bool:
    """Check if two dimensions conflict (both concrete but different values)."""
    if isinstance(dim1, int) and isinstance(dim2, int):
        return dim1 != dim2
    return False


def _more_specific(
    existing: int | _core.SymbolicDim, inferred: int | _core.SymbolicDim
) -> int | _core.SymbolicDim:
    """Pick the more specific dimension.

    Specificity order: concrete int > named symbolic > unknown (None)
    """
    if isinstance(existing, int):
        return existing
    if isinstance(inferred, int):
        return inferred
    if existing.value is None:
        return inferred
    return existing


def merge_shapes(existing: _core.Shape | None, inferred: _core.Shape) -> _core.Shape:
    """Merge an inferred shape into what is already known.

    Unknown dimensions are refined; concrete dimensions are never replaced.

    Raises:
        ValueError: If the ranks differ or two concrete dimensions disagree.
    """
    if existing is None:
        return inferred
    if existing.rank() != inferred.rank():
        raise ValueError(f"rank mismatch: existing {existing} vs inferred {inferred}")
    for i, (e_dim, i_dim) in enumerate(zip(existing, inferred)):
        if _dims_conflict(e_dim, i_dim):
            raise ValueError(
                f"dimension {i} conflicts: existing {e_dim} vs inferred {i_dim}"
            )
    return _core.Shape(_more_specific(e, i) for e, i in zip(existing, inferred))


class InferenceContext:
    """The view one inference rule has of one operator node.

    Inputs and attributes are read-only. Outputs are written through
    :meth:`set_output_dtype` and :meth:`set_output_shape`; the writes are
    staged and only become visible through :meth:`finalize`, so a failing
    rule leaves no partial result behind.

    Attributes:
        invocation: The node being inferred.
        schema: The schema of the operator, if known.
    """

    def __init__(
        self,
        invocation: _core.OperatorInvocation,
        schema: schemas.OpSchema | None = None,
    ) -> None:
        self.invocation = invocation
        self.schema = schema
        self._dtypes: list[DataType | None] = [out.dtype for out in invocation.outputs]
        self._shapes: list[_core.Shape | None] = [out.shape for out in invocation.outputs]

    @property
    def op_type(self) -> str:
        return self.invocation.op_type

    @property
    def num_inputs(self) -> int:
        return len(self.invocation.inputs)

    @property
    def num_outputs(self) -> int:
        return self.invocation.num_outputs

    def error(
        self, reason: str, error_type: type[InferenceError] = ShapeInferenceError
    ) -> InferenceError:
        """Create an error attributed to this node."""
        return error_type(
            self.invocation.op_type,
            reason,
            node_name=self.invocation.name,
            domain=self.invocation.domain,
        )

    def get_input_type(self, index: int) -> _core.TensorTypeInfo | None:
        """Type information of an input, or ``None`` if the input is absent."""
        if 0 <= index < len(self.invocation.inputs):
            return self.invocation.inputs[index]
        return None

    def get_input_dtype(self, index: int) -> DataType | None:
        input_type = self.get_input_type(index)
        return input_type.dtype if input_type is not None else None

    def get_input_shape(self, index: int) -> _core.Shape | None:
        input_type = self.get_input_type(index)
        return input_type.shape if input_type is not None else None

    def has_input_shape(self, index: int) -> bool:
        return self.get_input_shape(index) is not None

    def get_attribute(self, name: str) -> _core.Attr | None:
        """The attribute bound on the node, without schema defaults."""
        return self.invocation.attributes.get(name)

    def get_attribute_value(self, name: str, default: Any = None) -> Any:
        """The value of an attribute, falling back to the schema default, then ``default``."""
        attr = self.invocation.attributes.get(name)
        if attr is not None:
            return attr.value
        if self.schema is not None:
            param = self.schema.get_attribute(name)
            if param is not None and param.default is not None:
                return param.default.value
        return default

    def get_output_dtype(self, index: int) -> DataType | None:
        self._check_output_index(index)
        return self._dtypes[index]

    def get_output_shape(self, index: int) -> _core.Shape | None:
        self._check_output_index(index)
        return self._shapes[index]

    def set_output_dtype(self, index: int, dtype: DataType) -> None:
        """Set the element type of an output.

        Raises:
            ShapeInferenceError: If the output already has a different type.
        """
        self._check_output_index(index)
        existing = self._dtypes[index]
        if existing is not None and existing != dtype:
            raise self.error(
                f"Output {index} type conflict: existing {existing} vs inferred {dtype}"
            )
        self._dtypes[index] = dtype

    def set_output_shape(self, index: int, shape: _core.Shape) -> None:
        """Set the shape of an output, refining unknown dimensions.

        Raises:
            ShapeInferenceError: If the shape contradicts the known shape.
        """
        self._check_output_index(index)
        try:
            self._shapes[index] = merge_shapes(self._shapes[index], shape)
        except ValueError as e:
            raise self.error(f"Output {index} shape conflict: {e}") from e

    def _check_output_index(self, index: int) -> None:
        if not 0 <= index < self.invocation.num_outputs:
            raise self.error(
                f"Output index {index} out of range for "
                f"{self.invocation.num_outputs} output(s)",
                InvalidOpUsageError,
            )

    def finalize(self) -> tuple[_core.TensorTypeInfo, ...]:
        """The inferred output types, one per output slot."""
        return tuple(
            _core.TensorTypeInfo(dtype, shape)
            for dtype, shape in zip(self._dtypes, self._shapes)
        )
