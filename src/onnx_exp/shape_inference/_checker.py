# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Validate an operator invocation against its schema."""

from __future__ import annotations

__all__ = [
    "check_inputs",
    "check_outputs",
]

import logging
from collections.abc import Sequence

from onnx_exp import _core, schemas
from onnx_exp._enums import DataType
from onnx_exp.shape_inference import _context

logger = logging.getLogger(__name__)


def _error(
    invocation: _core.OperatorInvocation,
    reason: str,
    error_type: type[_context.InferenceError],
) -> _context.InferenceError:
    return error_type(
        invocation.op_type, reason, node_name=invocation.name, domain=invocation.domain
    )


def _violation(
    schema: schemas.OpSchema, invocation: _core.OperatorInvocation, reason: str
) -> _context.InferenceError:
    if schema.known_issues:
        logger.warning(
            "Constraint violation on %s, which has known schema issues: %s",
            invocation.op_id,
            "; ".join(schema.known_issues),
        )
    return _error(invocation, reason, _context.ConstraintViolation)


def _check_arity(schema: schemas.OpSchema, invocation: _core.OperatorInvocation) -> None:
    num_inputs = len(invocation.inputs)
    if num_inputs < schema.min_inputs:
        raise _error(
            invocation,
            f"Expected at least {schema.min_inputs} input(s), got {num_inputs}",
            _context.InvalidOpUsageError,
        )
    if schema.max_inputs is not None and num_inputs > schema.max_inputs:
        raise _error(
            invocation,
            f"Expected at most {schema.max_inputs} input(s), got {num_inputs}",
            _context.InvalidOpUsageError,
        )
    for i, input_type in enumerate(invocation.inputs):
        param = schema.input_param(i)
        if input_type is None and param is not None and param.required and not param.variadic:
            raise _error(
                invocation,
                f"Required input {param.name!r} (index {i}) is missing",
                _context.InvalidOpUsageError,
            )

    num_outputs = invocation.num_outputs
    if num_outputs < schema.min_outputs or (
        schema.max_outputs is not None and num_outputs > schema.max_outputs
    ):
        bound = (
            f"{schema.min_outputs}"
            if schema.min_outputs == schema.max_outputs
            else f"{schema.min_outputs} to {schema.max_outputs or 'any'}"
        )
        raise _error(
            invocation,
            f"Expected {bound} output(s), got {num_outputs}",
            _context.InvalidOpUsageError,
        )


def _check_attributes(schema: schemas.OpSchema, invocation: _core.OperatorInvocation) -> None:
    attributes = schema.attributes_map
    for name, attr in invocation.attributes.items():
        param = attributes.get(name)
        if param is None:
            if schema.allow_unchecked_attributes:
                continue
            raise _error(
                invocation,
                f"Unrecognized attribute {name!r}",
                _context.ShapeInferenceError,
            )
        if attr.type != param.type:
            raise _error(
                invocation,
                f"Attribute {name!r} should be of type {param.type}, got {attr.type}",
                _context.ShapeInferenceError,
            )
    for param in schema.attributes:
        if param.required and param.name not in invocation.attributes:
            raise _error(
                invocation,
                f"Required attribute {param.name!r} is missing",
                _context.ShapeInferenceError,
            )


def _check_types(
    schema: schemas.OpSchema,
    invocation: _core.OperatorInvocation,
    outputs: Sequence[_core.TensorTypeInfo],
) -> None:
    """Check element types against the allowed sets and bind the type variables.

    Every tensor bound to the same type variable must carry the same element type.
    """
    bindings: dict[str, tuple[DataType, str]] = {}

    def check(param: schemas.Parameter | None, dtype: DataType | None, where: str) -> None:
        if param is None or dtype is None:
            return
        constraint = param.type_constraint
        if not constraint.allows(dtype):
            raise _violation(
                schema,
                invocation,
                f"{where} ({param.name!r}) has type tensor({dtype.short_name()}), "
                f"which is not in the allowed set of {constraint}",
            )
        bound = bindings.get(constraint.name)
        if bound is None:
            bindings[constraint.name] = (dtype, where)
        elif bound[0] != dtype:
            raise _violation(
                schema,
                invocation,
                f"Type parameter {constraint.name!r} bound to different types: "
                f"{bound[0]} in {bound[1]} and {dtype} in {where}",
            )

    for i, input_type in enumerate(invocation.inputs):
        if input_type is not None:
            check(schema.input_param(i), input_type.dtype, f"Input {i}")
    for i, output_type in enumerate(outputs):
        check(schema.output_param(i), output_type.dtype, f"Output {i}")


def check_inputs(schema: schemas.OpSchema, invocation: _core.OperatorInvocation) -> None:
    """Validate a node against its schema before running inference.

    Raises:
        InvalidOpUsageError: On an input or output count mismatch.
        ShapeInferenceError: On an unknown, mistyped or missing attribute.
        ConstraintViolation: If an input or declared output element type is not
            allowed by its type constraint.
    """
    _check_arity(schema, invocation)
    _check_attributes(schema, invocation)
    _check_types(schema, invocation, invocation.outputs)


def check_outputs(
    schema: schemas.OpSchema,
    invocation: _core.OperatorInvocation,
    outputs: Sequence[_core.TensorTypeInfo],
) -> None:
    """Validate inferred output element types against the schema.

    Raises:
        ConstraintViolation: If an inferred element type is not allowed.
    """
    _check_types(schema, invocation, outputs)
