# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Rule-based type and shape inference for operator nodes.

Each registered :class:`~onnx_exp.schemas.OpSchema` names an inference rule.
Given a node's input types, shapes and attributes, the rule computes the
element type and shape of every output, or leaves them unresolved when the
available information does not determine them.

Example::

    import onnx_exp as ox
    from onnx_exp.shape_inference import infer_invocation

    node = ox.OperatorInvocation(
        "GivenTensorFill",
        inputs=[ox.TensorTypeInfo(ox.DataType.FLOAT, ox.Shape([4]))],
        attributes=[ox.Attr.from_value("extra_shape", [2, 3])],
    )
    (output,) = infer_invocation(node)  # float[4,2,3]

Registering a custom operator::

    from onnx_exp.shape_inference import CustomRule, registry

    def infer_my_op(ctx):
        propagate_elem_type(ctx, 0, 0)
        ...

    registry.register(OpSchema("MyOp", domain="com.custom", ...,
                               inference=CustomRule(infer_my_op)))
"""

from __future__ import annotations

__all__ = [
    # Main API
    "infer",
    "infer_invocation",
    # Context and errors
    "ConstraintViolation",
    "InferenceContext",
    "InferenceError",
    "InvalidOpUsageError",
    "ShapeInferenceError",
    # Rules
    "CustomRule",
    "InferenceRule",
    "PropagateFromFirstInput",
    "PropagateShapeFromAttribute",
    "propagate_elem_type",
    "propagate_shape",
    "propagate_shape_and_type_from_first_input",
    "propagate_shape_from_attribute",
    # Checks
    "check_inputs",
    "check_outputs",
    # Registry
    "OpSchemaRegistry",
    "registry",
    # Utilities
    "merge_shapes",
]

# Import ops to ensure they are registered (but don't expose publicly)
from onnx_exp.shape_inference import _ops  # noqa: F401
from onnx_exp.shape_inference._checker import check_inputs, check_outputs
from onnx_exp.shape_inference._context import (
    ConstraintViolation,
    InferenceContext,
    InferenceError,
    InvalidOpUsageError,
    ShapeInferenceError,
    merge_shapes,
)
from onnx_exp.shape_inference._engine import infer, infer_invocation
from onnx_exp.shape_inference._registry import OpSchemaRegistry, registry
from onnx_exp.shape_inference._rules import (
    CustomRule,
    InferenceRule,
    PropagateFromFirstInput,
    PropagateShapeFromAttribute,
    propagate_elem_type,
    propagate_shape,
    propagate_shape_and_type_from_first_input,
    propagate_shape_from_attribute,
)


def __set_module() -> None:
    """Set the module of all functions in this module to this public module."""
    global_dict = globals()
    for name in __all__:
        obj = global_dict[name]
        if hasattr(obj, "__module__"):
            obj.__module__ = __name__


__set_module()
