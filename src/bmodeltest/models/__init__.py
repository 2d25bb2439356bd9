"""Reversible-jump nucleotide model sets and their rate-group structure."""

from bmodeltest.models.model_set import (
    ModelSet,
    NAMED_MODELS,
    enumerate_layouts,
    layout_from_id,
    layout_to_id,
    model_label,
)
from bmodeltest.models.nucleotides import (
    RATE_CLASSES,
    TRANSITION_POSITIONS,
    TRANSVERSION_POSITIONS,
)
from bmodeltest.models.structure import ModelStructure, RevJumpModelService

__all__ = [
    "ModelSet",
    "NAMED_MODELS",
    "enumerate_layouts",
    "layout_from_id",
    "layout_to_id",
    "model_label",
    "RATE_CLASSES",
    "TRANSITION_POSITIONS",
    "TRANSVERSION_POSITIONS",
    "ModelStructure",
    "RevJumpModelService",
]
