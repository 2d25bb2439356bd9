"""
Model sets for the reversible-jump nucleotide substitution model.

A model assigns each of the six reversible rate classes to a rate group.
Layouts are kept in restricted-growth form (first class in group 0, each
new group takes the next free index) so that every partition of the six
classes has exactly one layout, and every layout packs into a base-10
model ID with one digit per rate class:

    layout [0, 1, 0, 0, 1, 0]  <->  model ID 121121 (HKY)
"""

from enum import Enum
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from bmodeltest.exceptions import InvalidInput
from bmodeltest.models.nucleotides import (
    N_RATE_CLASSES,
    TRANSITION_POSITIONS,
)


Layout = Tuple[int, ...]

NAMED_MODELS: Dict[int, str] = {
    111111: "JC69/F81",
    121121: "K80/HKY",
    121131: "TN93",
    123321: "K81",
    123341: "TIM",
    123421: "TVM",
    123456: "SYM/GTR",
}


class ModelSet(Enum):
    """Which family of models the model indicator ranges over."""

    ALL_REVERSIBLE = "allreversible"
    """All 203 partitions of the six rate classes."""

    TRANSITION_TRANSVERSION_SPLIT = "transitionTransversionSplit"
    """JC69 plus the 30 models that never mix transitions and transversions."""

    NAMED_EXTENDED = "namedExtended"
    """JC69, HKY, TN93, K81, TIM, TVM and GTR."""

    NAMED_SIMPLE = "namedSimple"
    """JC69, HKY, TN93 and GTR."""

    @classmethod
    def parse(cls, value) -> "ModelSet":
        """Accept a member, its value or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).lower() in (member.value.lower(), member.name.lower()):
                return member
        choices = ", ".join(m.value for m in cls)
        raise InvalidInput(
            f"Unknown model set '{value}'. Choose one of: {choices}",
            context={"model_set": value},
        )


def layout_to_id(layout: Sequence[int]) -> int:
    """Pack a layout into its model ID, most significant digit first."""
    model_id = 0
    for group in layout:
        model_id = model_id * 10 + (group + 1)
    return model_id


def is_restricted_growth(layout: Sequence[int]) -> bool:
    """True if the layout numbers its groups in order of first appearance."""
    next_group = 0
    for group in layout:
        if group > next_group or group < 0:
            return False
        if group == next_group:
            next_group += 1
    return True


def layout_from_id(model_id: int) -> Layout:
    """
    Unpack a model ID into its layout.

    Raises:
        InvalidInput: If the ID does not have six digits in 1..6 forming a
            restricted-growth layout
    """
    digits = str(model_id)
    if len(digits) != N_RATE_CLASSES or not digits.isdigit():
        raise InvalidInput(
            f"Model ID {model_id} does not have {N_RATE_CLASSES} digits",
            context={"model_id": model_id},
        )
    layout = tuple(int(d) - 1 for d in digits)
    if not is_restricted_growth(layout):
        raise InvalidInput(
            f"Model ID {model_id} is not a valid rate-group layout",
            context={"model_id": model_id},
        )
    return layout


def _restricted_growth_layouts(length: int) -> List[Layout]:
    layouts: List[Layout] = []

    def extend(prefix: List[int], n_groups: int) -> None:
        if len(prefix) == length:
            layouts.append(tuple(prefix))
            return
        for group in range(n_groups + 1):
            extend(prefix + [group], max(n_groups, group + 1))

    extend([0], 1)
    return layouts


def splits_transitions(layout: Sequence[int]) -> bool:
    """True if no rate group holds both a transition and a transversion."""
    transition_groups = {layout[k] for k in TRANSITION_POSITIONS}
    transversion_groups = {
        layout[k] for k in range(N_RATE_CLASSES) if k not in TRANSITION_POSITIONS
    }
    return not (transition_groups & transversion_groups)


@lru_cache(maxsize=None)
def enumerate_layouts(model_set: ModelSet) -> Tuple[Layout, ...]:
    """
    All layouts of a model set, ordered by group count then model ID.

    Args:
        model_set: Which family of models to enumerate

    Returns:
        Tuple of layouts
    """
    model_set = ModelSet.parse(model_set)
    candidates = _restricted_growth_layouts(N_RATE_CLASSES)

    if model_set is ModelSet.ALL_REVERSIBLE:
        layouts = candidates
    elif model_set is ModelSet.TRANSITION_TRANSVERSION_SPLIT:
        layouts = [
            layout for layout in candidates
            if max(layout) == 0 or splits_transitions(layout)
        ]
    elif model_set is ModelSet.NAMED_EXTENDED:
        layouts = [layout_from_id(model_id) for model_id in NAMED_MODELS]
    else:
        layouts = [
            layout_from_id(model_id)
            for model_id in (111111, 121121, 121131, 123456)
        ]

    return tuple(sorted(layouts, key=lambda layout: (max(layout), layout_to_id(layout))))


def model_label(model_id: int) -> Optional[str]:
    """Conventional name of a model, if it has one."""
    return NAMED_MODELS.get(model_id)
