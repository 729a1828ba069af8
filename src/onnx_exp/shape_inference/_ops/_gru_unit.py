# Copyright (c) ONNX Project Contributors
# SPDX-License-Identifier: Apache-2.0
"""Schema and shape inference for the GRUUnit operator."""

from __future__ import annotations

__all__ = [
    "GRU_UNIT",
    "infer_gru_unit",
]

from onnx_exp import schemas
from onnx_exp._enums import AttributeType, SupportLevel
from onnx_exp.shape_inference import _context, _registry, _rules
from onnx_exp.shape_inference._ops._constraints import FLOAT_TENSORS


def infer_gru_unit(ctx: _context.InferenceContext) -> None:
    """The new hidden state has the type and shape (N x D) of ``hidden_prev``."""
    _rules.propagate_elem_type(ctx, 0, 0)
    _rules.propagate_shape(ctx, 0, 0)


GRU_UNIT = _registry.registry.register(
    schemas.OpSchema(
        "GRUUnit",
        since_version=1,
        support_level=SupportLevel.EXPERIMENTAL,
        doc=(
            "GRUUnit computes the activations of a standard GRU,\n"
            "in a sequence-length aware fashion.\n"
            "Concretely, given the (fused) inputs X (TxNxD), the previous hidden\n"
            "state (NxD), and the sequence lengths (N), computes the GRU\n"
            "activations, avoiding computation if the input is invalid (as in, the\n"
            "value at X[t][n] >= seqLengths[n]."
        ),
        inputs=(
            schemas.Parameter(
                "hidden_prev", FLOAT_TENSORS, description="The previous GRU hidden state."
            ),
            schemas.Parameter(
                "gates",
                FLOAT_TENSORS,
                description=(
                    "Unactivated gate outputs from forget, update, "
                    "and output gates, pre-activation."
                ),
            ),
            schemas.Parameter(
                "seq_lengths",
                FLOAT_TENSORS,
                description=(
                    "Array of sequence lengths.  "
                    "len(seq_lengths) should equal batch size N."
                ),
            ),
            schemas.Parameter(
                "t", FLOAT_TENSORS, description="The timestep for this operation."
            ),
        ),
        outputs=(
            schemas.Parameter(
                "hidden",
                FLOAT_TENSORS,
                description="The new GRU hidden state calculated by this op.",
            ),
        ),
        attributes=(
            schemas.attribute(
                "drop_states",
                AttributeType.INT,
                description=(
                    "Bool to determine if hidden state is zeroes or passed "
                    "along for timesteps past the given sequence_length."
                ),
            ),
        ),
        inference=_rules.CustomRule(infer_gru_unit),
    )
)
