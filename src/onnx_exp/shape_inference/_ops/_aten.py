# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Schema of the ATen passthrough operator.

ATen forwards to arbitrary ATen kernels, so nothing is known about its outputs.
"""

from __future__ import annotations

__all__ = [
    "ATEN",
]

from onnx_exp import schemas
from onnx_exp._enums import SupportLevel
from onnx_exp.shape_inference import _registry

_T = schemas.TypeConstraintParam.from_type_strings(
    "T",
    [
        "tensor(bool)",
        "tensor(int32)",
        "tensor(int64)",
        "tensor(float16)",
        "tensor(float)",
        "tensor(double)",
    ],
    "Constrain output types to bool, int32, int64, float16, float, double tensors.",
)

ATEN = _registry.registry.register(
    schemas.OpSchema(
        "ATen",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        doc=(
            "Experimental allowing ATen operations to be accessed directly from Caffe2\n"
            "to allow for quick prototyping when ONNX is missing standard versions of\n"
            "and op"
        ),
        inputs=(schemas.Parameter("input", _T, variadic=True, description="Arbitrary input"),),
        outputs=(
            schemas.Parameter("output", _T, variadic=True, description="Arbitrary output"),
        ),
        allow_unchecked_attributes=True,
    )
)
