# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for the ATen operator schema."""

from __future__ import annotations

import unittest

import onnx_exp as ox
from onnx_exp.shape_inference import _context
from onnx_exp.shape_inference._ops._testing import run_shape_inference, ts

FLOAT = ox.DataType.FLOAT
STRING = ox.DataType.STRING


class ATenTest(unittest.TestCase):
    def test_outputs_are_unresolved(self):
        actual = run_shape_inference(
            "ATen",
            [ts(FLOAT, [2, 3]), ts(FLOAT, [3])],
            {"operator": [1], "alpha": 0.5},
            num_outputs=2,
        )
        self.assertEqual(actual, [ts(), ts()])

    def test_any_attribute_is_accepted(self):
        actual = run_shape_inference("ATen", [ts(FLOAT)], {"whatever": 3})
        self.assertEqual(actual, [ts()])

    def test_string_input_violates_constraint(self):
        with self.assertRaises(_context.ConstraintViolation):
            run_shape_inference("ATen", [ts(STRING, [1])])

    def test_schema_is_variadic(self):
        schema = ox.shape_inference.registry.get("", "ATen")
        self.assertIsNone(schema.max_inputs)
        self.assertIsNone(schema.max_outputs)
        self.assertIsNone(schema.inference)


if __name__ == "__main__":
    unittest.main()
