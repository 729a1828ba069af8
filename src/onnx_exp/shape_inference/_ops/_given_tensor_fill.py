# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Schema and shape inference for the GivenTensorFill operator."""

from __future__ import annotations

__all__ = [
    "GIVEN_TENSOR_FILL",
    "infer_given_tensor_fill",
]

from onnx_exp import _core, schemas
from onnx_exp._enums import AttributeType, SupportLevel
from onnx_exp.shape_inference import _context, _registry, _rules
from onnx_exp.shape_inference._ops._constraints import FLOAT_TENSORS


def _typed_attribute(
    ctx: _context.InferenceContext, name: str, attr_type: AttributeType
) -> _core.Attr | None:
    attr = ctx.get_attribute(name)
    if attr is not None and attr.type != attr_type:
        raise ctx.error(f"Attribute {name!r} should be of type {attr_type}, got {attr.type}")
    return attr


def infer_given_tensor_fill(ctx: _context.InferenceContext) -> None:
    """Infer the type and shape of the filled tensor.

    The ``shape`` attribute wins when present. With ``input_as_shape`` set, the
    input holds the shape at run time, so the output shape stays unknown.
    Otherwise the output has the input's shape followed by ``extra_shape``.
    """
    _rules.propagate_elem_type(ctx, 0, 0)

    if ctx.get_attribute("shape") is not None:
        _rules.propagate_shape_from_attribute(ctx, "shape", 0)
        return

    input_as_shape = _typed_attribute(ctx, "input_as_shape", AttributeType.INT)
    if input_as_shape is not None and input_as_shape.as_int() != 0:
        # Dynamic shape
        return

    extra_shape_attr = _typed_attribute(ctx, "extra_shape", AttributeType.INTS)
    extra_shape = extra_shape_attr.as_ints() if extra_shape_attr is not None else ()

    input_shape = ctx.get_input_shape(0)
    if input_shape is None:
        return
    dims = list(input_shape.dims)
    for extra_dim in extra_shape:
        if extra_dim < 0:
            raise ctx.error("Negative values are not allowed in a shape specification")
        dims.append(extra_dim)
    ctx.set_output_shape(0, _core.Shape(dims))


GIVEN_TENSOR_FILL = _registry.registry.register(
    schemas.OpSchema(
        "GivenTensorFill",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        inputs=(
            schemas.Parameter(
                "shape",
                FLOAT_TENSORS,
                required=False,
                description="The shape of filled tensor",
            ),
        ),
        outputs=(schemas.Parameter("X", FLOAT_TENSORS, description="The filled tensor"),),
        attributes=(
            schemas.attribute("values", AttributeType.FLOATS),
            schemas.attribute("shape", AttributeType.INTS),
            schemas.attribute("input_as_shape", AttributeType.INT),
            schemas.attribute("extra_shape", AttributeType.INTS),
        ),
        inference=_rules.CustomRule(infer_given_tensor_fill),
        known_issues=(
            "The type constraint T only allows float tensors, so an integer shape "
            "tensor passed with input_as_shape=1 is rejected",
        ),
    )
)
