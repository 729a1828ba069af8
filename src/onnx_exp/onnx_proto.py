# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Conversion between ONNX protobuf models and the in-memory graph.

Example::

    import onnx
    from onnx_exp import onnx_proto

    model = onnx.load("model.onnx")
    result = onnx_proto.infer_model(model, policy="collect")
    onnx.save(result.model, "model_inferred.onnx")
"""

from __future__ import annotations

__all__ = [
    "ModelInferenceResult",
    "attr_from_proto",
    "dtype_from_onnx",
    "graph_from_model",
    "infer_model",
    "to_value_info",
    "type_info_from_value_info",
]

import dataclasses
import logging

import onnx
import onnx.helper
import onnx.numpy_helper

from onnx_exp import _core, graph as _graph
from onnx_exp._enums import AttributeType, DataType
from onnx_exp.shape_inference import _context, _registry

logger = logging.getLogger(__name__)


def dtype_from_onnx(elem_type: int) -> DataType | None:
    """Convert an ONNX ``TensorProto.DataType`` value.

    ``UNDEFINED`` maps to None. Element types this package does not know map
    to None with a warning, so the value is treated as having an unknown type.
    """
    if elem_type == onnx.TensorProto.UNDEFINED:
        return None
    try:
        return DataType(elem_type)
    except ValueError:
        logger.warning("Unsupported ONNX element type %d; treating it as unknown", elem_type)
        return None


def type_info_from_value_info(value_info: onnx.ValueInfoProto) -> _core.TensorTypeInfo:
    """Read the tensor type of a ``ValueInfoProto``.

    Dimensions with a ``dim_value`` become ints, ``dim_param`` becomes a named
    symbolic dimension and anything else an anonymous one.
    """
    if not value_info.type.HasField("tensor_type"):
        return _core.TensorTypeInfo()
    tensor_type = value_info.type.tensor_type
    dtype = dtype_from_onnx(tensor_type.elem_type)
    if not tensor_type.HasField("shape"):
        return _core.TensorTypeInfo(dtype)
    dims: list[int | str | None] = []
    for dim in tensor_type.shape.dim:
        if dim.HasField("dim_value"):
            dims.append(dim.dim_value)
        elif dim.HasField("dim_param"):
            dims.append(dim.dim_param)
        else:
            dims.append(None)
    return _core.TensorTypeInfo(dtype, _core.Shape(dims))


def attr_from_proto(attr: onnx.AttributeProto) -> _core.Attr:
    """Convert an ``AttributeProto``.

    Graph, tensor list, sparse tensor and type proto attributes are kept by
    name and type without their payload.

    Raises:
        TypeError: If the attribute type is ``UNDEFINED``.
    """
    if attr.type == onnx.AttributeProto.FLOAT:
        return _core.Attr(attr.name, AttributeType.FLOAT, attr.f)
    if attr.type == onnx.AttributeProto.INT:
        return _core.Attr(attr.name, AttributeType.INT, attr.i)
    if attr.type == onnx.AttributeProto.STRING:
        return _core.Attr(attr.name, AttributeType.STRING, attr.s.decode("utf-8"))
    if attr.type == onnx.AttributeProto.FLOATS:
        return _core.Attr(attr.name, AttributeType.FLOATS, list(attr.floats))
    if attr.type == onnx.AttributeProto.INTS:
        return _core.Attr(attr.name, AttributeType.INTS, list(attr.ints))
    if attr.type == onnx.AttributeProto.STRINGS:
        return _core.Attr(
            attr.name, AttributeType.STRINGS, [s.decode("utf-8") for s in attr.strings]
        )
    if attr.type == onnx.AttributeProto.TENSOR:
        return _core.Attr(attr.name, AttributeType.TENSOR, onnx.numpy_helper.to_array(attr.t))
    if attr.type == onnx.AttributeProto.UNDEFINED:
        raise TypeError(f"Attribute {attr.name!r} has no type")
    return _core.Attr(attr.name, AttributeType(attr.type), None)


def to_value_info(name: str, type_info: _core.TensorTypeInfo) -> onnx.ValueInfoProto:
    """Create a ``ValueInfoProto`` for a value."""
    shape = None
    if type_info.shape is not None:
        shape = [
            dim if isinstance(dim, int) else dim.value for dim in type_info.shape.dims
        ]
    elem_type = type_info.dtype if type_info.dtype is not None else onnx.TensorProto.UNDEFINED
    return onnx.helper.make_tensor_value_info(name, int(elem_type), shape)


def graph_from_model(model: onnx.ModelProto) -> _graph.Graph:
    """Build a :class:`~onnx_exp.graph.Graph` from the main graph of a model.

    Initializers are treated as graph inputs with their dtype and shape.
    Every attribute is kept, so the checker sees attributes a schema does not
    declare.
    """
    graph = model.graph
    inputs: dict[str, _core.TensorTypeInfo] = {}
    for initializer in graph.initializer:
        inputs[initializer.name] = _core.TensorTypeInfo(
            dtype_from_onnx(initializer.data_type), _core.Shape(initializer.dims)
        )
    for value_info in graph.input:
        if value_info.name not in inputs:
            inputs[value_info.name] = type_info_from_value_info(value_info)

    value_info = {
        info.name: type_info_from_value_info(info)
        for info in (*graph.value_info, *graph.output)
    }

    nodes = []
    for node in graph.node:
        attributes = [attr_from_proto(attr) for attr in node.attribute]
        nodes.append(
            _graph.Node(
                node.op_type,
                inputs=list(node.input),
                outputs=list(node.output),
                attributes=attributes,
                domain=node.domain,
                name=node.name or None,
            )
        )

    return _graph.Graph(
        nodes,
        inputs=inputs,
        outputs=[output.name for output in graph.output],
        value_info=value_info,
        opset_imports={opset.domain: opset.version for opset in model.opset_import},
        name=graph.name or None,
    )


@dataclasses.dataclass(frozen=True)
class ModelInferenceResult:
    """The outcome of :func:`infer_model`.

    Attributes:
        model: A copy of the input model with inferred types written back.
        errors: Errors recorded in ``"collect"`` mode.
    """

    model: onnx.ModelProto
    errors: tuple[_context.InferenceError, ...] = ()


def infer_model(
    model: onnx.ModelProto,
    *,
    registry: _registry.OpSchemaRegistry | None = None,
    policy: _graph.InferencePolicy = "strict",
    warn_on_missing: bool = True,
) -> ModelInferenceResult:
    """Run type and shape inference on an ONNX model.

    The input model is not modified. Graph outputs are updated in place in
    the copy; other inferred values are written to ``graph.value_info``.
    Values nothing is known about are left out.

    Raises:
        InferenceError: In ``"strict"`` mode, the first inference error.
    """
    g = graph_from_model(model)
    result = _graph.infer_graph(
        g, registry=registry, policy=policy, warn_on_missing=warn_on_missing
    )

    inferred = onnx.ModelProto()
    inferred.CopyFrom(model)
    outputs = set(g.outputs)
    for i, output in enumerate(inferred.graph.output):
        type_info = result.values.get(output.name)
        if type_info is not None and not type_info.is_unresolved():
            inferred.graph.output[i].CopyFrom(to_value_info(output.name, type_info))

    existing = {info.name: i for i, info in enumerate(inferred.graph.value_info)}
    for node in g.nodes:
        for name in node.outputs:
            if not name or name in outputs:
                continue
            type_info = result.values.get(name)
            if type_info is None or type_info.is_unresolved():
                continue
            if name in existing:
                value_info = inferred.graph.value_info[existing[name]]
                value_info.CopyFrom(to_value_info(name, type_info))
            else:
                inferred.graph.value_info.append(to_value_info(name, type_info))

    return ModelInferenceResult(inferred, result.errors)
