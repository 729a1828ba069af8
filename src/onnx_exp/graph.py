# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Graph-level type and shape inference.

Nodes are inferred in topological order. Each node reads the finalized,
immutable outputs of its producers and publishes its own outputs once its
inference has completed.
"""

from __future__ import annotations

__all__ = [
    "Graph",
    "GraphInferenceResult",
    "InferencePolicy",
    "Node",
    "infer_graph",
]

import concurrent.futures
import dataclasses
import logging
import types
from collections.abc import Mapping, Sequence
from typing import Literal

from onnx_exp import _core
from onnx_exp.shape_inference import _context, _engine, _registry

logger = logging.getLogger(__name__)

InferencePolicy = Literal["strict", "collect"]
"""How :func:`infer_graph` handles inference errors.

* ``"strict"``: Raise the first error.
* ``"collect"``: Record every error, leave the outputs of the failing node
    unresolved and continue with the rest of the graph.
"""


@dataclasses.dataclass(frozen=True)
class Node:
    """An operator node referring to its inputs and outputs by value name.

    Attributes:
        op_type: The operator type.
        inputs: Names of the input values. ``""`` marks an omitted optional input.
        outputs: Names of the output values.
        attributes: Attributes bound on the node.
        domain: The operator domain.
        name: The node name.
    """

    op_type: str
    inputs: Sequence[str] = ()
    outputs: Sequence[str] = ()
    attributes: Sequence[_core.Attr] = ()
    domain: str = ""
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "attributes", tuple(self.attributes))

    def __str__(self) -> str:
        op_id = f"{self.domain}::{self.op_type}" if self.domain else self.op_type
        name = f" {self.name!r}" if self.name else ""
        return f"{op_id}{name}({', '.join(self.inputs)}) -> ({', '.join(self.outputs)})"


@dataclasses.dataclass(frozen=True)
class Graph:
    """A computation graph.

    Attributes:
        nodes: The nodes, in any order.
        inputs: Graph inputs and initializers with what is known about them.
        outputs: Names of the graph outputs.
        value_info: Declared type information of intermediate values and
            outputs, refined by inference.
        opset_imports: Mapping from domain to opset version.
        name: The graph name.
    """

    nodes: Sequence[Node]
    inputs: Mapping[str, _core.TensorTypeInfo] = dataclasses.field(default_factory=dict)
    outputs: Sequence[str] = ()
    value_info: Mapping[str, _core.TensorTypeInfo] = dataclasses.field(default_factory=dict)
    opset_imports: Mapping[str, int] = dataclasses.field(default_factory=dict)
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "inputs", types.MappingProxyType(dict(self.inputs)))
        object.__setattr__(
            self, "value_info", types.MappingProxyType(dict(self.value_info))
        )
        object.__setattr__(
            self, "opset_imports", types.MappingProxyType(dict(self.opset_imports))
        )

    def opset_version(self, domain: str) -> int | None:
        """The opset version imported for a domain, or None if not imported."""
        if domain in self.opset_imports:
            return self.opset_imports[domain]
        if domain == "ai.onnx":
            return self.opset_imports.get("")
        return None

    def levels(self) -> list[list[Node]]:
        """Group the nodes into topological levels.

        Every node of a level only depends on graph inputs and on nodes of
        earlier levels. Nodes keep their relative order within a level.

        Raises:
            ValueError: If a value has more than one producer, an input is not
                defined anywhere, or the graph has a cycle.
        """
        return [[self.nodes[index] for index in level] for level in self._level_indices()]

    def _level_indices(self) -> list[list[int]]:
        producers: dict[str, int] = {}
        for index, node in enumerate(self.nodes):
            for output in node.outputs:
                if not output:
                    continue
                if output in producers or output in self.inputs:
                    raise ValueError(f"Value {output!r} is defined more than once")
                producers[output] = index

        pending = [0] * len(self.nodes)
        successors: list[list[int]] = [[] for _ in self.nodes]
        for index, node in enumerate(self.nodes):
            deps = set()
            for input_name in node.inputs:
                if not input_name or input_name in self.inputs:
                    continue
                if input_name not in producers:
                    raise ValueError(f"Input {input_name!r} of node {node} is not defined")
                deps.add(producers[input_name])
            pending[index] = len(deps)
            for dep in deps:
                successors[dep].append(index)

        levels: list[list[int]] = []
        ready = [index for index, count in enumerate(pending) if count == 0]
        visited = 0
        while ready:
            levels.append(ready)
            visited += len(ready)
            next_ready = []
            for index in ready:
                for successor in successors[index]:
                    pending[successor] -= 1
                    if pending[successor] == 0:
                        next_ready.append(successor)
            ready = sorted(next_ready)
        if visited != len(self.nodes):
            cycle = ", ".join(
                str(self.nodes[index]) for index, count in enumerate(pending) if count > 0
            )
            raise ValueError(f"The graph contains a cycle involving: {cycle}")
        return levels


@dataclasses.dataclass(frozen=True)
class GraphInferenceResult:
    """The outcome of :func:`infer_graph`.

    Attributes:
        values: Type information of every value in the graph.
        errors: Errors recorded in ``"collect"`` mode, in node order.
    """

    values: Mapping[str, _core.TensorTypeInfo]
    errors: tuple[_context.InferenceError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


def _invocation(
    node: Node, values: Mapping[str, _core.TensorTypeInfo], graph: Graph
) -> _core.OperatorInvocation:
    inputs = [values.get(name, _core.TensorTypeInfo()) if name else None for name in node.inputs]
    outputs = [graph.value_info.get(name, _core.TensorTypeInfo()) for name in node.outputs]
    return _core.OperatorInvocation(
        node.op_type,
        inputs=inputs,
        attributes=node.attributes,
        num_outputs=len(node.outputs),
        outputs=outputs,
        domain=node.domain,
        name=node.name,
    )


def infer_graph(
    graph: Graph,
    *,
    registry: _registry.OpSchemaRegistry | None = None,
    policy: InferencePolicy = "strict",
    warn_on_missing: bool = True,
    max_workers: int | None = None,
) -> GraphInferenceResult:
    """Infer the type and shape of every value in the graph.

    Args:
        graph: The graph to process.
        registry: The schema registry. Defaults to the global registry.
        policy: How to handle inference errors.
        warn_on_missing: If True, log a warning for operators without a
            registered schema. Their outputs stay unresolved.
        max_workers: When greater than 1, nodes of the same topological level
            are inferred on a thread pool of this size.

    Returns:
        The type information of all values and the recorded errors.

    Raises:
        InferenceError: In ``"strict"`` mode, the first error encountered.
        ValueError: If the graph is malformed.
    """
    registry = registry if registry is not None else _registry.registry
    values: dict[str, _core.TensorTypeInfo] = dict(graph.inputs)
    errors: list[tuple[int, _context.InferenceError]] = []
    warned_ops: set[tuple[str, str]] = set()

    def run(node: Node, known: Mapping[str, _core.TensorTypeInfo]):
        invocation = _invocation(node, known, graph)
        schema = registry.get(node.domain, node.op_type, graph.opset_version(node.domain))
        if schema is None:
            return invocation.outputs, None
        try:
            return _engine.infer_invocation(invocation, schema), None
        except _context.InferenceError as e:
            return invocation.outputs, e

    executor = (
        concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
        if max_workers is not None and max_workers > 1
        else None
    )
    try:
        for level in graph._level_indices():
            nodes = [graph.nodes[index] for index in level]
            if executor is not None:
                # Workers only see finalized outputs of earlier levels
                snapshot = types.MappingProxyType(dict(values))
                results = list(executor.map(lambda node: run(node, snapshot), nodes))
            else:
                results = [run(node, values) for node in nodes]

            for index, node, (outputs, error) in zip(level, nodes, results):
                key = (node.domain, node.op_type)
                if not registry.has(*key) and warn_on_missing and key not in warned_ops:
                    logger.warning(
                        "No schema registered for %s::%s",
                        node.domain or "ai.onnx",
                        node.op_type,
                    )
                    warned_ops.add(key)
                if error is not None:
                    if policy == "strict":
                        raise error
                    logger.warning("Type and shape inference failed: %s", error)
                    errors.append((index, error))
                for name, output in zip(node.outputs, outputs):
                    if name:
                        values[name] = output
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    errors.sort(key=lambda item: item[0])
    return GraphInferenceResult(
        types.MappingProxyType(values), tuple(error for _, error in errors)
    )
