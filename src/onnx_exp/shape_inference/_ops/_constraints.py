# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Type constraints shared by the experimental operators."""

from __future__ import annotations

__all__ = [
    "FLOAT_TENSORS",
]

from onnx_exp import schemas

FLOAT_TENSORS = schemas.TypeConstraintParam.from_type_strings(
    "T",
    ["tensor(float16)", "tensor(float)", "tensor(double)"],
    "Constrain input and output types to float tensors.",
)
