# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Declarative operator schemas.

A schema names an operator, enumerates its inputs, outputs and attributes,
constrains the element types its inputs and outputs may carry, and names the
rule used to infer output types and shapes.
"""

from __future__ import annotations

__all__ = [
    "AttributeParameter",
    "OpSchema",
    "Parameter",
    "TypeConstraintParam",
    "attribute",
]

import dataclasses
from collections.abc import Collection, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from onnx_exp import _core
from onnx_exp._enums import AttributeType, DataType, SupportLevel

if TYPE_CHECKING:
    from onnx_exp.shape_inference._rules import InferenceRule


@dataclasses.dataclass(frozen=True)
class TypeConstraintParam:
    """Type constraint for a parameter.

    Attributes:
        name: Name of the type constraint, e.g. ``"T"``.
        allowed_types: Allowed element types.
        description: Description of the type constraint.
    """

    name: str
    allowed_types: frozenset[DataType]
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_types", frozenset(self.allowed_types))

    def __str__(self) -> str:
        allowed_types_str = " | ".join(
            sorted(f"tensor({dtype.short_name()})" for dtype in self.allowed_types)
        )
        return f"{self.name}={allowed_types_str}"

    def allows(self, dtype: DataType) -> bool:
        return dtype in self.allowed_types

    @classmethod
    def from_type_strings(
        cls, name: str, type_strs: Iterable[str], description: str = ""
    ) -> TypeConstraintParam:
        """Create a constraint from ONNX type strings such as ``"tensor(float)"``."""
        return cls(name, frozenset(_get_type_from_str(s) for s in type_strs), description)

    @classmethod
    def any_tensor(cls, name: str, description: str = "") -> TypeConstraintParam:
        return cls(
            name,
            frozenset(dtype for dtype in DataType if dtype != DataType.UNDEFINED),
            description,
        )


def _get_type_from_str(type_str: str) -> DataType:
    """Converts a type string like ``tensor(float)`` into a :class:`DataType`.

    Raises:
        ValueError: If the string is not a tensor type string.
    """
    type_str = type_str.strip()
    if not type_str.startswith("tensor(") or not type_str.endswith(")"):
        raise ValueError(f"Unknown type string: {type_str!r}")
    return DataType.from_short_name(type_str[len("tensor(") : -1])


@dataclasses.dataclass(frozen=True)
class Parameter:
    """A formal input or output of an operator.

    Attributes:
        name: Name of the parameter.
        type_constraint: The type constraint the tensor must satisfy.
        required: Whether the parameter must be provided. ``False`` marks an
            optional input.
        variadic: Whether the parameter may be repeated. Only the last
            parameter of a list can be variadic.
        description: Description of the parameter.
    """

    name: str
    type_constraint: TypeConstraintParam
    required: bool = True
    variadic: bool = False
    description: str = ""

    def __str__(self) -> str:
        suffix = "..." if self.variadic else ""
        optional = "?" if not self.required else ""
        return f"{self.name}{optional}: {self.type_constraint.name}{suffix}"

    @property
    def min_arity(self) -> int:
        return 1 if self.required else 0


@dataclasses.dataclass(frozen=True)
class AttributeParameter:
    """A formal attribute of an operator.

    Attributes:
        name: Name of the attribute.
        type: Expected attribute type.
        required: Whether the attribute must be bound on every node.
        default: Value used when the attribute is absent, if any.
        description: Description of the attribute.
    """

    name: str
    type: AttributeType
    required: bool = False
    default: _core.Attr | None = None
    description: str = ""

    def __str__(self) -> str:
        type_str = self.type.name
        if self.has_default():
            return f"{self.name}: {type_str} = {self.default}"
        return f"{self.name}: {type_str}"

    def has_default(self) -> bool:
        return self.default is not None


@dataclasses.dataclass(frozen=True)
class OpSchema:
    """The immutable registration record of one operator version.

    Attributes:
        name: Operator name.
        domain: Operator domain, ``""`` for the default domain.
        since_version: First opset version this schema applies to.
        support_level: Whether the operator is common or experimental.
        doc: Documentation of the operator.
        inputs: Formal inputs, in order.
        outputs: Formal outputs, in order.
        attributes: Formal attributes.
        type_constraints: Type constraints referenced by inputs and outputs.
        inference: The type and shape inference rule. ``None`` leaves every
            output unresolved.
        allow_unchecked_attributes: Accept attributes not listed in
            :attr:`attributes`.
        known_issues: Known inconsistencies in the schema, reported alongside
            constraint violations.
    """

    name: str
    domain: str = ""
    since_version: int = 1
    support_level: SupportLevel = SupportLevel.COMMON
    doc: str = ""
    inputs: tuple[Parameter, ...] = ()
    outputs: tuple[Parameter, ...] = ()
    attributes: tuple[AttributeParameter, ...] = ()
    inference: InferenceRule | None = None
    allow_unchecked_attributes: bool = False
    known_issues: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "known_issues", tuple(self.known_issues))
        for kind, params in (("input", self.inputs), ("output", self.outputs)):
            for param in params[:-1]:
                if param.variadic:
                    raise ValueError(
                        f"{self.name}: only the last {kind} can be variadic, "
                        f"but {param.name!r} is"
                    )
        names = [attr.name for attr in self.attributes]
        if len(set(names)) != len(names):
            raise ValueError(f"{self.name}: duplicate attribute names in {names}")

    def __str__(self) -> str:
        inputs = ", ".join(str(param) for param in self.inputs)
        outputs = ", ".join(str(param) for param in self.outputs)
        op_id = f"{self.domain}::{self.name}" if self.domain else self.name
        return f"{op_id}-{self.since_version}({inputs}) -> ({outputs})"

    @property
    def type_constraints(self) -> tuple[TypeConstraintParam, ...]:
        """Distinct type constraints referenced by inputs and outputs, in order."""
        seen: dict[str, TypeConstraintParam] = {}
        for param in (*self.inputs, *self.outputs):
            seen.setdefault(param.type_constraint.name, param.type_constraint)
        return tuple(seen.values())

    @property
    def attributes_map(self) -> Mapping[str, AttributeParameter]:
        return {attr.name: attr for attr in self.attributes}

    def get_attribute(self, name: str) -> AttributeParameter | None:
        return self.attributes_map.get(name)

    @property
    def min_inputs(self) -> int:
        return _min_count(self.inputs)

    @property
    def max_inputs(self) -> int | None:
        """Maximum number of inputs, or ``None`` if the last input is variadic."""
        return _max_count(self.inputs)

    @property
    def min_outputs(self) -> int:
        return _min_count(self.outputs)

    @property
    def max_outputs(self) -> int | None:
        return _max_count(self.outputs)

    def input_param(self, index: int) -> Parameter | None:
        return _param_at(self.inputs, index)

    def output_param(self, index: int) -> Parameter | None:
        return _param_at(self.outputs, index)


def _min_count(params: Collection[Parameter]) -> int:
    # Optional inputs may be omitted only as a trailing group
    count = 0
    for i, param in enumerate(params):
        if param.min_arity:
            count = i + 1
    return count


def _max_count(params: tuple[Parameter, ...]) -> int | None:
    if params and params[-1].variadic:
        return None
    return len(params)


def _param_at(params: tuple[Parameter, ...], index: int) -> Parameter | None:
    if index < 0:
        return None
    if index < len(params):
        return params[index]
    if params and params[-1].variadic:
        return params[-1]
    return None


def attribute(
    name: str,
    type: AttributeType,
    default: Any = None,
    *,
    required: bool = False,
    description: str = "",
) -> AttributeParameter:
    """Shorthand for an :class:`AttributeParameter` with a plain default value."""
    default_attr = _core.Attr(name, type, default) if default is not None else None
    return AttributeParameter(name, type, required, default_attr, description)
