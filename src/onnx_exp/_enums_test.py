# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import unittest

import onnx
import parameterized

from onnx_exp import _enums


class DataTypeTest(unittest.TestCase):
    def test_enums_match_onnx_values(self):
        self.assertEqual(_enums.DataType.FLOAT, onnx.TensorProto.FLOAT)
        self.assertEqual(_enums.DataType.UINT8, onnx.TensorProto.UINT8)
        self.assertEqual(_enums.DataType.INT32, onnx.TensorProto.INT32)
        self.assertEqual(_enums.DataType.INT64, onnx.TensorProto.INT64)
        self.assertEqual(_enums.DataType.STRING, onnx.TensorProto.STRING)
        self.assertEqual(_enums.DataType.BOOL, onnx.TensorProto.BOOL)
        self.assertEqual(_enums.DataType.FLOAT16, onnx.TensorProto.FLOAT16)
        self.assertEqual(_enums.DataType.DOUBLE, onnx.TensorProto.DOUBLE)
        self.assertEqual(_enums.DataType.BFLOAT16, onnx.TensorProto.BFLOAT16)
        self.assertEqual(_enums.DataType.FLOAT8E4M3FN, onnx.TensorProto.FLOAT8E4M3FN)
        self.assertEqual(_enums.DataType.FLOAT8E5M2FNUZ, onnx.TensorProto.FLOAT8E5M2FNUZ)

    def test_attribute_types_match_onnx_values(self):
        for attr_type in _enums.AttributeType:
            self.assertEqual(
                attr_type, getattr(onnx.AttributeProto, attr_type.name), attr_type.name
            )

    @parameterized.parameterized.expand(
        [
            ("float", _enums.DataType.FLOAT),
            ("double", _enums.DataType.DOUBLE),
            ("float16", _enums.DataType.FLOAT16),
            ("int64", _enums.DataType.INT64),
            ("bool", _enums.DataType.BOOL),
            ("float8e4m3fn", _enums.DataType.FLOAT8E4M3FN),
            ("int4", _enums.DataType.INT4),
        ]
    )
    def test_short_name_round_trip(self, short_name: str, dtype: _enums.DataType):
        self.assertEqual(dtype.short_name(), short_name)
        self.assertEqual(_enums.DataType.from_short_name(short_name), dtype)

    def test_every_data_type_has_a_short_name(self):
        for dtype in _enums.DataType:
            self.assertIs(_enums.DataType.from_short_name(dtype.short_name()), dtype)

    def test_from_short_name_raises_for_unknown_name(self):
        with self.assertRaises(ValueError):
            _enums.DataType.from_short_name("float128")

    def test_repr_and_str(self):
        self.assertEqual(repr(_enums.DataType.FLOAT), "FLOAT")
        self.assertEqual(str(_enums.AttributeType.INTS), "INTS")


if __name__ == "__main__":
    unittest.main()
