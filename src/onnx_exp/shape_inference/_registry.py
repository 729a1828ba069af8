# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Registry of operator schemas."""

from __future__ import annotations

__all__ = [
    "OpSchemaRegistry",
    "registry",
]

import logging
from collections.abc import Iterator

from onnx_exp import schemas

logger = logging.getLogger(__name__)


class OpSchemaRegistry:
    """Registry mapping operators to their schemas.

    Schemas are registered by ``(domain, name)`` and their ``since_version``.
    When looking up a schema, the registry falls back to the closest lower
    ``since_version`` if an exact match is not found.

    Example::

        from onnx_exp.shape_inference import registry

        registry.register(OpSchema("MyOp", since_version=1, ...))

        schema = registry.get("", "MyOp", version=13)
    """

    def __init__(self) -> None:
        # {(domain, name): [(since_version, schema), ...]}
        # Sorted by since_version descending for efficient lookup
        self._schemas: dict[tuple[str, str], list[tuple[int, schemas.OpSchema]]] = {}

    def register(self, schema: schemas.OpSchema) -> schemas.OpSchema:
        """Register a schema.

        Returns:
            The registered schema.

        Raises:
            ValueError: If a schema with the same domain, name and since_version
                is already registered.
        """
        key = (schema.domain, schema.name)
        versions = self._schemas.setdefault(key, [])
        if any(since == schema.since_version for since, _ in versions):
            raise ValueError(
                f"Schema {schema.domain or 'ai.onnx'}::{schema.name} "
                f"version {schema.since_version} is already registered"
            )
        versions.append((schema.since_version, schema))
        versions.sort(key=lambda x: x[0], reverse=True)

        logger.debug(
            "Registered schema for %s::%s (since_version=%s)",
            schema.domain or "ai.onnx",
            schema.name,
            schema.since_version,
        )
        return schema

    def get(
        self,
        domain: str,
        name: str,
        version: int | None = None,
    ) -> schemas.OpSchema | None:
        """Get the schema of an operator.

        Args:
            domain: Operator domain.
            name: Operator name.
            version: Opset version to look up. ``None`` returns the latest schema.

        Returns:
            The schema with the highest ``since_version`` not above ``version``,
            or None if not found.
        """
        versions = self._schemas.get((domain, name))
        if not versions:
            return None
        if version is None:
            return versions[0][1]
        # List is sorted by since_version descending, so first match is most specific
        for since_version, schema in versions:
            if since_version <= version:
                return schema
        return None

    def has(self, domain: str, name: str) -> bool:
        """Check if any schema is registered for an operator."""
        return (domain, name) in self._schemas

    def clear(self) -> None:
        """Clear all registered schemas (mainly for testing)."""
        self._schemas.clear()

    def __iter__(self) -> Iterator[schemas.OpSchema]:
        for key in sorted(self._schemas):
            for _, schema in reversed(self._schemas[key]):
                yield schema

    def __len__(self) -> int:
        return sum(len(versions) for versions in self._schemas.values())


# Global registry instance
registry = OpSchemaRegistry()
