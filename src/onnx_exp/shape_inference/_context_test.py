# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Tests for InferenceContext and merge_shapes."""

from __future__ import annotations

import unittest

import onnx_exp as ox
from onnx_exp.shape_inference import _context
from onnx_exp.shape_inference._ops._testing import ts

FLOAT = ox.DataType.FLOAT
DOUBLE = ox.DataType.DOUBLE


def _make_context(inputs=(), outputs=None, num_outputs=1, attributes=(), schema=None):
    invocation = ox.OperatorInvocation(
        "TestOp",
        inputs=inputs,
        attributes=attributes,
        num_outputs=num_outputs,
        outputs=outputs,
        name="node_0",
    )
    return _context.InferenceContext(invocation, schema)


class MergeShapesTest(unittest.TestCase):
    def test_existing_none_returns_inferred(self):
        self.assertEqual(_context.merge_shapes(None, ox.Shape([1, 2])), [1, 2])

    def test_unknown_dims_are_refined(self):
        merged = _context.merge_shapes(ox.Shape([None, 2, "n"]), ox.Shape([1, None, 3]))
        self.assertEqual(merged, [1, 2, 3])

    def test_named_dim_is_kept_over_unknown(self):
        merged = _context.merge_shapes(ox.Shape(["batch"]), ox.Shape([None]))
        self.assertEqual(merged, ["batch"])

    def test_concrete_dims_are_never_replaced(self):
        merged = _context.merge_shapes(ox.Shape([1, 2]), ox.Shape(["a", "b"]))
        self.assertEqual(merged, [1, 2])

    def test_rank_mismatch_raises(self):
        with self.assertRaisesRegex(ValueError, "rank mismatch"):
            _context.merge_shapes(ox.Shape([1, 2]), ox.Shape([1]))

    def test_conflicting_dims_raise(self):
        with self.assertRaisesRegex(ValueError, "conflicts"):
            _context.merge_shapes(ox.Shape([1, 2]), ox.Shape([1, 3]))


class InferenceErrorTest(unittest.TestCase):
    def test_str_includes_node_and_reason(self):
        error = _context.ShapeInferenceError("GivenTensorFill", "bad shape", node_name="n0")
        self.assertEqual(str(error), "GivenTensorFill (node 'n0'): bad shape")

    def test_str_includes_domain(self):
        error = _context.ConstraintViolation("MyOp", "bad type", domain="com.custom")
        self.assertEqual(str(error), "com.custom::MyOp: bad type")

    def test_error_kinds_share_a_base_class(self):
        for error_type in (
            _context.ShapeInferenceError,
            _context.ConstraintViolation,
            _context.InvalidOpUsageError,
        ):
            self.assertTrue(issubclass(error_type, _context.InferenceError))


class InferenceContextTest(unittest.TestCase):
    def test_input_accessors(self):
        ctx = _make_context(inputs=[ts(FLOAT, [2, 3]), None, ts()])
        self.assertEqual(ctx.num_inputs, 3)
        self.assertEqual(ctx.get_input_dtype(0), FLOAT)
        self.assertEqual(ctx.get_input_shape(0), [2, 3])
        self.assertIsNone(ctx.get_input_type(1))
        self.assertIsNone(ctx.get_input_dtype(2))
        self.assertFalse(ctx.has_input_shape(2))
        self.assertIsNone(ctx.get_input_type(5))

    def test_get_attribute_value_falls_back_to_schema_default(self):
        schema = ox.OpSchema(
            "TestOp", attributes=(ox.schemas.attribute("alpha", ox.AttributeType.FLOAT, 1.0),)
        )
        ctx = _make_context(schema=schema)
        self.assertIsNone(ctx.get_attribute("alpha"))
        self.assertEqual(ctx.get_attribute_value("alpha"), 1.0)
        self.assertEqual(ctx.get_attribute_value("beta", 2.0), 2.0)

    def test_get_attribute_value_prefers_bound_attribute(self):
        ctx = _make_context(attributes=[ox.Attr.from_value("alpha", 0.5)])
        self.assertEqual(ctx.get_attribute_value("alpha", 1.0), 0.5)

    def test_outputs_start_from_declared_types(self):
        ctx = _make_context(outputs=[ts(FLOAT, ["n"])])
        self.assertEqual(ctx.get_output_dtype(0), FLOAT)
        self.assertEqual(ctx.get_output_shape(0), ["n"])

    def test_set_output_dtype_conflict_raises(self):
        ctx = _make_context(outputs=[ts(FLOAT)])
        ctx.set_output_dtype(0, FLOAT)
        with self.assertRaisesRegex(_context.ShapeInferenceError, "type conflict"):
            ctx.set_output_dtype(0, DOUBLE)

    def test_set_output_shape_refines_declared_shape(self):
        ctx = _make_context(outputs=[ts(FLOAT, ["n", None])])
        ctx.set_output_shape(0, ox.Shape([4, 5]))
        self.assertEqual(ctx.finalize(), (ts(FLOAT, [4, 5]),))

    def test_set_output_shape_conflict_raises(self):
        ctx = _make_context(outputs=[ts(FLOAT, [4])])
        with self.assertRaisesRegex(_context.ShapeInferenceError, "Output 0 shape conflict"):
            ctx.set_output_shape(0, ox.Shape([5]))

    def test_output_index_out_of_range_raises(self):
        ctx = _make_context(num_outputs=1)
        with self.assertRaises(_context.InvalidOpUsageError):
            ctx.set_output_dtype(1, FLOAT)

    def test_error_is_attributed_to_the_node(self):
        ctx = _make_context()
        error = ctx.error("something is off")
        self.assertIsInstance(error, _context.ShapeInferenceError)
        self.assertEqual(error.node_name, "node_0")
        self.assertEqual(error.op_type, "TestOp")

    def test_writes_are_invisible_to_the_invocation(self):
        ctx = _make_context(num_outputs=2)
        ctx.set_output_dtype(0, FLOAT)
        self.assertEqual(ctx.invocation.outputs, (ts(), ts()))
        self.assertEqual(ctx.finalize(), (ts(FLOAT), ts()))


if __name__ == "__main__":
    unittest.main()
