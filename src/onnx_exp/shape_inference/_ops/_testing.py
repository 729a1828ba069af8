# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Common test infrastructure for op-level shape inference tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from onnx_exp import _core
from onnx_exp._enums import DataType
from onnx_exp.shape_inference import _engine


def ts(
    dtype: DataType | None = None,
    shape: Sequence[int | str | None] | None = None,
) -> _core.TensorTypeInfo:
    """Create a :class:`TensorTypeInfo` from a dtype and a shape list.

    This is a concise helper for specifying input / expected-output type-and-shape
    in parameterized tests.

    Examples::

        ts(DataType.FLOAT, [3, 4])          # float[3,4]
        ts(DataType.FLOAT, ["batch", 128])  # float[batch,128]
        ts(DataType.FLOAT)                  # float, shape unknown
        ts()                                # nothing known

    Args:
        dtype: Element data type.  ``None`` means unset.
        shape: Shape dimensions.  ``None`` means unknown rank (unset).
    """
    shape_ = _core.Shape(shape) if shape is not None else None
    return _core.TensorTypeInfo(dtype, shape_)


def run_shape_inference(
    op_type: str,
    inputs: Sequence[_core.TensorTypeInfo | None],
    attributes: Mapping[str, Any] | None = None,
    *,
    num_outputs: int = 1,
    domain: str = "",
    check_types: bool = True,
) -> list[_core.TensorTypeInfo]:
    """Run the registered inference rule for an op and return output types/shapes.

    Args:
        op_type: Operator type (e.g. ``"Scale"``).
        inputs: Per-input specs (use :func:`ts` to build them). ``None`` marks
            an omitted optional input.
        attributes: Node attributes as plain Python values, converted with
            :meth:`Attr.from_value`, or :class:`Attr` instances.
        num_outputs: Number of outputs to create.
        domain: Operator domain.
        check_types: Whether to validate the node against its schema.

    Returns:
        A list of :class:`TensorTypeInfo`, one per output.
    """
    attrs = [
        value if isinstance(value, _core.Attr) else _core.Attr.from_value(name, value)
        for name, value in (attributes or {}).items()
    ]
    invocation = _core.OperatorInvocation(
        op_type,
        inputs=inputs,
        attributes=attrs,
        num_outputs=num_outputs,
        domain=domain,
    )
    return list(_engine.infer_invocation(invocation, check_types=check_types))
