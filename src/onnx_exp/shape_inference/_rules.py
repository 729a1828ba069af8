# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Propagation helpers and the inference rules schemas can name."""

from __future__ import annotations

__all__ = [
    "CustomRule",
    "InferenceRule",
    "PropagateFromFirstInput",
    "PropagateShapeFromAttribute",
    "propagate_elem_type",
    "propagate_shape",
    "propagate_shape_and_type_from_first_input",
    "propagate_shape_from_attribute",
    "read_shape_attribute",
]

import dataclasses
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from onnx_exp import _core
from onnx_exp._enums import AttributeType
from onnx_exp.shape_inference import _context


def propagate_elem_type(
    ctx: _context.InferenceContext, input_index: int = 0, output_index: int = 0
) -> None:
    """Copy the element type of an input to an output.

    Does nothing if the input or its element type is unknown.
    """
    dtype = ctx.get_input_dtype(input_index)
    if dtype is None:
        return
    ctx.set_output_dtype(output_index, dtype)


def propagate_shape(
    ctx: _context.InferenceContext, input_index: int = 0, output_index: int = 0
) -> None:
    """Copy the shape of an input to an output, if the input shape is known."""
    shape = ctx.get_input_shape(input_index)
    if shape is None:
        return
    ctx.set_output_shape(output_index, shape)


def propagate_shape_and_type_from_first_input(ctx: _context.InferenceContext) -> None:
    """Output 0 has the element type and shape of input 0.

    This is the rule for element-wise operators, which change neither the rank
    nor the extents of their input.
    """
    propagate_elem_type(ctx, 0, 0)
    propagate_shape(ctx, 0, 0)


def read_shape_attribute(ctx: _context.InferenceContext, attribute_name: str) -> list[int]:
    """Read an INTS attribute that specifies a shape.

    Raises:
        ShapeInferenceError: If the attribute is missing, is not of type INTS,
            or contains a negative value.
    """
    attr = ctx.get_attribute(attribute_name)
    if attr is None:
        raise ctx.error(f"Attribute {attribute_name!r} should specify a shape")
    if attr.type != AttributeType.INTS:
        raise ctx.error(
            f"Attribute {attribute_name!r} should be of type INTS, got {attr.type}"
        )
    dims = list(attr.as_ints())
    for dim in dims:
        if dim < 0:
            raise ctx.error("Negative values are not allowed in a shape specification")
    return dims


def propagate_shape_from_attribute(
    ctx: _context.InferenceContext, attribute_name: str, output_index: int = 0
) -> None:
    """Set the shape of an output literally from an INTS attribute.

    Raises:
        ShapeInferenceError: See :func:`read_shape_attribute`.
    """
    dims = read_shape_attribute(ctx, attribute_name)
    ctx.set_output_shape(output_index, _core.Shape(dims))


@runtime_checkable
class InferenceRule(Protocol):
    """A type and shape inference strategy attached to a schema."""

    def infer(self, ctx: _context.InferenceContext) -> None:
        """Infer output types and shapes, raising an InferenceError on failure."""
        ...


@dataclasses.dataclass(frozen=True)
class PropagateFromFirstInput:
    """Element-wise rule: output 0 mirrors input 0."""

    def infer(self, ctx: _context.InferenceContext) -> None:
        propagate_shape_and_type_from_first_input(ctx)


@dataclasses.dataclass(frozen=True)
class PropagateShapeFromAttribute:
    """Output shape taken from an INTS attribute.

    Attributes:
        attribute_name: Name of the attribute holding the shape.
        output_index: The output to set.
        dtype_from_input: Input to copy the element type from, or ``None``.
    """

    attribute_name: str
    output_index: int = 0
    dtype_from_input: int | None = 0

    def infer(self, ctx: _context.InferenceContext) -> None:
        if self.dtype_from_input is not None:
            propagate_elem_type(ctx, self.dtype_from_input, self.output_index)
        propagate_shape_from_attribute(ctx, self.attribute_name, self.output_index)


@dataclasses.dataclass(frozen=True)
class CustomRule:
    """Operator specific inference logic.

    Attributes:
        func: The inference function.
        name: A name for display, defaults to the function name.
    """

    func: Callable[[_context.InferenceContext], None]
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", getattr(self.func, "__name__", "custom"))

    def infer(self, ctx: _context.InferenceContext) -> None:
        self.func(ctx)
