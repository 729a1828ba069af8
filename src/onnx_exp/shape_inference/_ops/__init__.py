# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Experimental operator schemas.

This module imports all operator modules to ensure their schemas are
registered with the global registry.
"""

# Import to trigger registration
from onnx_exp.shape_inference._ops import _aten
from onnx_exp.shape_inference._ops import _dynamic_slice
from onnx_exp.shape_inference._ops import _elementwise
from onnx_exp.shape_inference._ops import _given_tensor_fill
from onnx_exp.shape_inference._ops import _gru_unit
from onnx_exp.shape_inference._ops._given_tensor_fill import infer_given_tensor_fill

__all__ = [
    "infer_given_tensor_fill",
    # Modules (imported to trigger registration)
    "_aten",
    "_dynamic_slice",
    "_elementwise",
    "_given_tensor_fill",
    "_gru_unit",
]
