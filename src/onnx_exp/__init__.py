# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Experimental ONNX operator schemas with type and shape inference."""

__all__ = [
    # Modules
    "graph",
    "schemas",
    "shape_inference",
    # Enums
    "AttributeType",
    "DataType",
    "SupportLevel",
    # Data model
    "Attr",
    "OperatorInvocation",
    "Shape",
    "SymbolicDim",
    "TensorTypeInfo",
    # Schemas
    "AttributeParameter",
    "OpSchema",
    "Parameter",
    "TypeConstraintParam",
    # Graph
    "Graph",
    "GraphInferenceResult",
    "Node",
    "infer_graph",
]

from onnx_exp import graph, schemas, shape_inference
from onnx_exp._core import Attr, OperatorInvocation, Shape, SymbolicDim, TensorTypeInfo
from onnx_exp._enums import AttributeType, DataType, SupportLevel
from onnx_exp.graph import Graph, GraphInferenceResult, Node, infer_graph
from onnx_exp.schemas import AttributeParameter, OpSchema, Parameter, TypeConstraintParam

__version__ = "0.1.0"


def __set_module() -> None:
    """Set the module of all functions in this module to this public module."""
    global_dict = globals()
    for name in __all__:
        obj = global_dict[name]
        if hasattr(obj, "__module__") and not isinstance(obj, type(graph)):
            obj.__module__ = __name__


__set_module()
