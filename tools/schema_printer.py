#!/usr/bin/env python
# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""This script prints the registered operator schemas in a tabular format.

Usage:
    python schema_printer.py [--experimental-only] [--no_wrap] [--doc]

Example:
    python schema_printer.py --no_wrap > schemas.txt
"""

from __future__ import annotations

import argparse

import tabulate

import onnx_exp as ox
from onnx_exp.shape_inference import registry


def _format_params(params: tuple[ox.Parameter, ...]) -> str:
    return "\n".join(str(param) for param in params)


def _format_rule(schema: ox.OpSchema) -> str:
    if schema.inference is None:
        return "-"
    name = getattr(schema.inference, "name", "")
    return name or type(schema.inference).__name__


def _create_schema_row(schema: ox.OpSchema, doc: bool) -> list[str]:
    row = [
        schema.name if not schema.domain else f"{schema.domain}::{schema.name}",
        str(schema.since_version),
        schema.support_level.name,
        _format_params(schema.inputs),
        _format_params(schema.outputs),
        "\n".join(str(attr) for attr in schema.attributes),
        "\n".join(str(constraint) for constraint in schema.type_constraints),
        _format_rule(schema),
    ]
    if doc:
        row.append(schema.doc)
    return row


def _create_header_row(doc: bool) -> list[str]:
    header = [
        "Op",
        "Since",
        "Support",
        "Inputs",
        "Outputs",
        "Attrs",
        "Type constraints",
        "Inference",
    ]
    if doc:
        header.append("Doc")
    return header


def main(experimental_only: bool, wrap: bool, doc: bool) -> None:
    schemas = [
        schema
        for schema in registry
        if not experimental_only or schema.support_level == ox.SupportLevel.EXPERIMENTAL
    ]
    print(f"Schemas: {len(schemas)}")
    rows = [_create_schema_row(schema, doc) for schema in schemas]
    print(
        tabulate.tabulate(
            rows,
            headers=_create_header_row(doc),
            tablefmt="grid",
            maxcolwidths=None if not wrap else 40,
        )
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print the registered operator schemas.")
    parser.add_argument(
        "--experimental-only",
        action="store_true",
        help="Only print experimental operators.",
    )
    parser.add_argument(
        "--no_wrap",
        action="store_true",
        help="Do not wrap long columns.",
    )
    parser.add_argument(
        "--doc",
        action="store_true",
        help="Include the operator documentation.",
    )
    args = parser.parse_args()
    main(args.experimental_only, not args.no_wrap, args.doc)
