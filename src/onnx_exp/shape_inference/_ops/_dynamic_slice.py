# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Schema and shape inference for the DynamicSlice operator."""

from __future__ import annotations

__all__ = [
    "DYNAMIC_SLICE",
    "infer_dynamic_slice",
]

from onnx_exp import _core, schemas
from onnx_exp._enums import SupportLevel
from onnx_exp.shape_inference import _context, _registry, _rules

_T = schemas.TypeConstraintParam.any_tensor(
    "T", "Constrain input and output types to all tensor types."
)
_TIND = schemas.TypeConstraintParam.from_type_strings(
    "Tind", ["tensor(int32)", "tensor(int64)"], "Constrain indices to integer types"
)


_DOC = """\
Produces a slice of the input tensor along multiple axes. Similar to numpy:
https://docs.scipy.org/doc/numpy/reference/arrays.indexing.html
Slices uses `axes`, `starts` and `ends` inputs to specify the start and end
dimension for each axis in the list of axes, it uses this information to
slice the input `data` tensor. If a negative value is passed for any of the
start or end indices, it represent number of elements before the end of that
dimension. If the value passed to start or end is larger than the `n` (the
number of elements in this dimension), it represents `n`. For slicing to the
end of a dimension with unknown size, it is recommended to pass in `INT_MAX`.
If `axes` are omitted, they are set to `[0, ..., ndim-1]`.
Example 1:
  data = [
      [1, 2, 3, 4],
      [5, 6, 7, 8],
  ]
  axes = [0, 1]
  starts = [1, 0]
  ends = [2, 3]
  result = [
      [5, 6, 7],
  ]
Example 2:
  data = [
      [1, 2, 3, 4],
      [5, 6, 7, 8],
  ]
  starts = [0, 1]
  ends = [-1, 1000]
  result = [
      [2, 3, 4],
  ]
"""


def infer_dynamic_slice(ctx: _context.InferenceContext) -> None:
    """The output keeps the element type and rank of ``data``.

    ``starts`` and ``ends`` are only known at run time, so every output
    dimension is unknown.
    """
    _rules.propagate_elem_type(ctx, 0, 0)
    data_shape = ctx.get_input_shape(0)
    if data_shape is None:
        return
    ctx.set_output_shape(0, _core.Shape([None] * data_shape.rank()))


DYNAMIC_SLICE = _registry.registry.register(
    schemas.OpSchema(
        "DynamicSlice",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        doc=_DOC,
        inputs=(
            schemas.Parameter("data", _T, description="Tensor of data to extract slices from."),
            schemas.Parameter(
                "starts",
                _TIND,
                description="1-D tensor of starting indices of corresponding axis in `axes`",
            ),
            schemas.Parameter(
                "ends",
                _TIND,
                description=(
                    "1-D tensor of ending indices (exclusive) of corresponding axis in axes"
                ),
            ),
            schemas.Parameter(
                "axes",
                _TIND,
                required=False,
                description="1-D tensor of axes that `starts` and `ends` apply to.",
            ),
        ),
        outputs=(schemas.Parameter("output", _T, description="Sliced data tensor."),),
        inference=_rules.CustomRule(infer_dynamic_slice),
    )
)
