#!/usr/bin/env python3
# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Run type and shape inference on an ONNX model and save the result.

Usage:
    python infer_model.py model.onnx model_inferred.onnx [--collect] [--verbose]
"""

import argparse
import logging
import sys

import onnx

from onnx_exp import onnx_proto
from onnx_exp.shape_inference import InferenceError


def main():
    """Infer the value types of an ONNX model."""
    parser = argparse.ArgumentParser(
        description="Run type and shape inference on an ONNX model"
    )
    parser.add_argument("input", help="Input ONNX model path")
    parser.add_argument("output", help="Output ONNX model path")
    parser.add_argument(
        "--collect",
        action="store_true",
        help="Report every inference error instead of stopping at the first one",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log the inferred type of every node",
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    print(f"Loading model from {args.input}...")
    try:
        model = onnx.load(args.input)
    except Exception as e:
        print(f"Error loading model: {e}", file=sys.stderr)
        return 1

    print("Running type and shape inference...")
    try:
        result = onnx_proto.infer_model(
            model, policy="collect" if args.collect else "strict"
        )
    except InferenceError as e:
        print(f"Inference failed: {e}", file=sys.stderr)
        return 1

    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)

    print(f"Saving inferred model to {args.output}...")
    try:
        onnx.save(result.model, args.output)
    except Exception as e:
        print(f"Error saving model: {e}", file=sys.stderr)
        return 1

    print("Inference complete!")
    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
