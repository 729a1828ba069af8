# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for GRUUnit shape inference."""

from __future__ import annotations

import unittest

import onnx_exp as ox
from onnx_exp.shape_inference import _context
from onnx_exp.shape_inference._ops._testing import run_shape_inference, ts

FLOAT = ox.DataType.FLOAT
DOUBLE = ox.DataType.DOUBLE


class GRUUnitTest(unittest.TestCase):
    def test_hidden_has_shape_of_hidden_prev(self):
        actual = run_shape_inference(
            "GRUUnit",
            [ts(FLOAT, ["N", 16]), ts(FLOAT, ["N", 48]), ts(FLOAT, ["N"]), ts(FLOAT, [])],
            {"drop_states": 1},
        )
        self.assertEqual(actual, [ts(FLOAT, ["N", 16])])

    def test_unknown_hidden_prev_shape(self):
        actual = run_shape_inference(
            "GRUUnit", [ts(DOUBLE), ts(DOUBLE), ts(DOUBLE), ts(DOUBLE)]
        )
        self.assertEqual(actual, [ts(DOUBLE)])

    def test_all_four_inputs_are_required(self):
        with self.assertRaises(_context.InvalidOpUsageError):
            run_shape_inference("GRUUnit", [ts(FLOAT, [2, 4])] * 3)

    def test_mixed_float_types_violate_constraint(self):
        with self.assertRaises(_context.ConstraintViolation):
            run_shape_inference(
                "GRUUnit", [ts(FLOAT), ts(DOUBLE), ts(FLOAT), ts(FLOAT)]
            )


if __name__ == "__main__":
    unittest.main()
