# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Run type and shape inference for a single operator node."""

from __future__ import annotations

__all__ = [
    "infer",
    "infer_invocation",
]

import logging

from onnx_exp import _core, schemas
from onnx_exp.shape_inference import _checker, _context, _registry

logger = logging.getLogger(__name__)


def infer(ctx: _context.InferenceContext) -> tuple[_core.TensorTypeInfo, ...]:
    """Apply the schema's inference rule to a context.

    Args:
        ctx: A fresh context for the node. Its schema selects the rule.

    Returns:
        The finalized output types. Outputs the rule could not determine stay
        unresolved.

    Raises:
        InferenceError: If the rule fails. Nothing is published in that case.
    """
    schema = ctx.schema
    if schema is not None and schema.inference is not None:
        schema.inference.infer(ctx)
    return ctx.finalize()


def infer_invocation(
    invocation: _core.OperatorInvocation,
    schema: schemas.OpSchema | None = None,
    *,
    registry: _registry.OpSchemaRegistry | None = None,
    opset_version: int | None = None,
    check_types: bool = True,
) -> tuple[_core.TensorTypeInfo, ...]:
    """Check a node against its schema and infer its output types and shapes.

    Args:
        invocation: The node to infer.
        schema: The schema to use. Looked up in ``registry`` when not given.
        registry: The schema registry. Defaults to the global registry.
        opset_version: Opset version used for the schema lookup.
        check_types: Whether to validate arity, attributes and element types
            before and after inference.

    Returns:
        One :class:`TensorTypeInfo` per output.

    Raises:
        InvalidOpUsageError: If no schema is known or the arity is wrong.
        ConstraintViolation: If an element type is not allowed.
        ShapeInferenceError: If inference fails.
    """
    if schema is None:
        registry = registry if registry is not None else _registry.registry
        schema = registry.get(invocation.domain, invocation.op_type, opset_version)
        if schema is None:
            raise _context.InvalidOpUsageError(
                invocation.op_type,
                "No schema registered for this operator",
                node_name=invocation.name,
                domain=invocation.domain,
            )

    if check_types:
        _checker.check_inputs(schema, invocation)

    ctx = _context.InferenceContext(invocation, schema)
    outputs = infer(ctx)

    if check_types:
        _checker.check_outputs(schema, invocation, outputs)

    logger.debug(
        "Inferred %s: %s",
        invocation.op_id,
        ", ".join(str(output) for output in outputs),
    )
    return outputs
