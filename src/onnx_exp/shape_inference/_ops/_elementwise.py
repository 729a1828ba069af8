# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Schemas of the experimental element-wise operators."""

from __future__ import annotations

__all__ = [
    "SCALE",
    "SCALED_TANH",
    "THRESHOLDED_RELU",
]

from onnx_exp import schemas
from onnx_exp._enums import AttributeType, SupportLevel
from onnx_exp.shape_inference import _registry, _rules
from onnx_exp.shape_inference._ops._constraints import FLOAT_TENSORS

_reg = _registry.registry.register

THRESHOLDED_RELU = _reg(
    schemas.OpSchema(
        "ThresholdedRelu",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        doc=(
            "ThresholdedRelu takes one input data (Tensor<T>) and produces one output data\n"
            "(Tensor<T>) where the rectified linear function, y = x for x > alpha, y = 0\n"
            "otherwise, is applied to the tensor elementwise."
        ),
        inputs=(schemas.Parameter("X", FLOAT_TENSORS, description="Input tensor"),),
        outputs=(schemas.Parameter("Y", FLOAT_TENSORS, description="Output tensor"),),
        attributes=(
            schemas.attribute(
                "alpha", AttributeType.FLOAT, 1.0, description="Threshold value"
            ),
        ),
        inference=_rules.PropagateFromFirstInput(),
    )
)

SCALED_TANH = _reg(
    schemas.OpSchema(
        "ScaledTanh",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        doc=(
            "Calculates the scaled hyperbolic tangent of the given input tensor "
            "element-wise,\nalpha * tanh(beta * x)."
        ),
        inputs=(schemas.Parameter("input", FLOAT_TENSORS, description="Input tensor"),),
        outputs=(
            schemas.Parameter(
                "output",
                FLOAT_TENSORS,
                description=(
                    "The scaled hyperbolic tangent values of the input tensor "
                    "computed element-wise"
                ),
            ),
        ),
        attributes=(
            schemas.attribute("alpha", AttributeType.FLOAT, description="Scaling value"),
            schemas.attribute("beta", AttributeType.FLOAT, description="Scaling value"),
        ),
        inference=_rules.PropagateFromFirstInput(),
    )
)

SCALE = _reg(
    schemas.OpSchema(
        "Scale",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        doc=(
            "Scale takes one input data (Tensor<float>) and produces one output data\n"
            "(Tensor<float>) whose value is the input data tensor scaled element-wise."
        ),
        inputs=(
            schemas.Parameter("input", FLOAT_TENSORS, description="Input data to be scaled"),
        ),
        outputs=(
            schemas.Parameter(
                "output", FLOAT_TENSORS, description="Output data after scaling"
            ),
        ),
        attributes=(
            schemas.attribute(
                "scale", AttributeType.FLOAT, 1.0, description="The scale to apply."
            ),
        ),
        inference=_rules.PropagateFromFirstInput(),
    )
)
