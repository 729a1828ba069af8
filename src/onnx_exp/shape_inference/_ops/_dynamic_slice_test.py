# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for DynamicSlice shape inference."""

from __future__ import annotations

import unittest

import onnx_exp as ox
from onnx_exp.shape_inference import _context
from onnx_exp.shape_inference._ops._testing import run_shape_inference, ts

FLOAT = ox.DataType.FLOAT
INT32 = ox.DataType.INT32
INT64 = ox.DataType.INT64


class DynamicSliceTest(unittest.TestCase):
    def test_rank_is_kept_and_dims_are_unknown(self):
        actual = run_shape_inference(
            "DynamicSlice", [ts(FLOAT, [10, 20, 30]), ts(INT64, [2]), ts(INT64, [2])]
        )
        self.assertEqual(actual, [ts(FLOAT, [None, None, None])])

    def test_with_axes(self):
        actual = run_shape_inference(
            "DynamicSlice",
            [ts(INT32, ["n", 4]), ts(INT32, [1]), ts(INT32, [1]), ts(INT32, [1])],
        )
        self.assertEqual(actual, [ts(INT32, [None, None])])

    def test_unknown_data_shape(self):
        actual = run_shape_inference(
            "DynamicSlice", [ts(FLOAT), ts(INT64, [1]), ts(INT64, [1])]
        )
        self.assertEqual(actual, [ts(FLOAT)])

    def test_float_indices_violate_constraint(self):
        with self.assertRaises(_context.ConstraintViolation):
            run_shape_inference(
                "DynamicSlice", [ts(FLOAT, [3]), ts(FLOAT, [1]), ts(FLOAT, [1])]
            )

    def test_mixed_index_types_violate_constraint(self):
        with self.assertRaises(_context.ConstraintViolation):
            run_shape_inference(
                "DynamicSlice", [ts(FLOAT, [3]), ts(INT32, [1]), ts(INT64, [1])]
            )

    def test_doc_describes_index_clamping_and_examples(self):
        doc = ox.shape_inference.registry.get("", "DynamicSlice").doc
        self.assertIn("before the end of that\ndimension", doc)
        self.assertIn("`INT_MAX`", doc)
        self.assertIn("Example 2:", doc)
        self.assertTrue(doc.rstrip().endswith("]"))


if __name__ == "__main__":
    unittest.main()
