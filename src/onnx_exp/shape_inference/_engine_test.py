# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Tests for single-node inference."""

from __future__ import annotations

import unittest

import onnx_exp as ox
from onnx_exp.shape_inference import _context, _engine, _registry, _rules
from onnx_exp.shape_inference._ops._testing import ts

FLOAT = ox.DataType.FLOAT
DOUBLE = ox.DataType.DOUBLE
INT32 = ox.DataType.INT32

_T = ox.TypeConstraintParam.from_type_strings("T", ["tensor(float)", "tensor(double)"])


def _failing_rule(ctx: _context.InferenceContext) -> None:
    _rules.propagate_elem_type(ctx, 0, 0)
    raise ctx.error("boom")


class InferInvocationTest(unittest.TestCase):
    def setUp(self):
        self.registry = _registry.OpSchemaRegistry()
        self.registry.register(
            ox.OpSchema(
                "Twice",
                domain="com.test",
                inputs=(ox.Parameter("X", _T),),
                outputs=(ox.Parameter("Y", _T), ox.Parameter("Z", _T)),
                inference=_rules.CustomRule(self._infer_twice),
            )
        )
        self.registry.register(
            ox.OpSchema(
                "Twice",
                domain="com.test",
                since_version=2,
                inputs=(ox.Parameter("X", _T),),
                outputs=(ox.Parameter("Y", _T), ox.Parameter("Z", _T)),
            )
        )

    @staticmethod
    def _infer_twice(ctx: _context.InferenceContext) -> None:
        for i in range(2):
            _rules.propagate_elem_type(ctx, 0, i)
            _rules.propagate_shape(ctx, 0, i)

    def _invocation(self, *inputs, outputs=None):
        return ox.OperatorInvocation(
            "Twice", inputs=inputs, num_outputs=2, outputs=outputs, domain="com.test"
        )

    def test_uses_registered_rule(self):
        outputs = _engine.infer_invocation(
            self._invocation(ts(FLOAT, [2])), registry=self.registry, opset_version=1
        )
        self.assertEqual(outputs, (ts(FLOAT, [2]), ts(FLOAT, [2])))

    def test_schema_without_rule_leaves_outputs_unresolved(self):
        outputs = _engine.infer_invocation(
            self._invocation(ts(FLOAT, [2])), registry=self.registry, opset_version=2
        )
        self.assertEqual(outputs, (ts(), ts()))

    def test_unknown_operator_raises(self):
        invocation = ox.OperatorInvocation("Nope", domain="com.test")
        with self.assertRaisesRegex(_context.InvalidOpUsageError, "No schema registered"):
            _engine.infer_invocation(invocation, registry=self.registry)

    def test_disallowed_input_type_raises(self):
        with self.assertRaises(_context.ConstraintViolation):
            _engine.infer_invocation(self._invocation(ts(INT32)), registry=self.registry)

    def test_check_types_false_skips_validation(self):
        outputs = _engine.infer_invocation(
            self._invocation(ts(INT32)), registry=self.registry, opset_version=1, check_types=False
        )
        self.assertEqual(outputs, (ts(INT32), ts(INT32)))

    def test_declared_outputs_are_refined(self):
        invocation = self._invocation(
            ts(FLOAT, [2, 3]), outputs=[ts(FLOAT, ["n", None]), ts()]
        )
        outputs = _engine.infer_invocation(invocation, registry=self.registry, opset_version=1)
        self.assertEqual(outputs, (ts(FLOAT, [2, 3]), ts(FLOAT, [2, 3])))

    def test_conflict_with_declared_output_raises(self):
        invocation = self._invocation(ts(FLOAT, [2]), outputs=[ts(DOUBLE), ts()])
        with self.assertRaises(_context.InferenceError):
            _engine.infer_invocation(invocation, registry=self.registry, opset_version=1)

    def test_inference_is_idempotent(self):
        invocation = self._invocation(ts(FLOAT, ["batch", 4]))
        first = _engine.infer_invocation(invocation, registry=self.registry, opset_version=1)
        second = _engine.infer_invocation(invocation, registry=self.registry, opset_version=1)
        self.assertEqual(first, second)

    def test_failing_rule_publishes_nothing(self):
        schema = ox.OpSchema(
            "Fail",
            inputs=(ox.Parameter("X", _T),),
            outputs=(ox.Parameter("Y", _T),),
            inference=_rules.CustomRule(_failing_rule),
        )
        invocation = ox.OperatorInvocation("Fail", inputs=[ts(FLOAT)])
        ctx = _context.InferenceContext(invocation, schema)
        with self.assertRaisesRegex(_context.ShapeInferenceError, "boom"):
            _engine.infer(ctx)
        self.assertEqual(invocation.outputs, (ts(),))


if __name__ == "__main__":
    unittest.main()
