"""Rate-group structure of each model and the service that enumerates them."""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Sequence, Tuple

from bmodeltest.exceptions import InvalidInput
from bmodeltest.models.model_set import (
    Layout,
    ModelSet,
    enumerate_layouts,
    layout_from_id,
    layout_to_id,
    model_label,
)
from bmodeltest.models.nucleotides import N_RATE_CLASSES, TRANSITION_POSITIONS


@dataclass(frozen=True)
class ModelStructure:
    """
    Rate-group structure of one model.

    Attributes:
        model_id: Packed model ID (e.g. 121121)
        layout: Group index of each of the six rate classes
        group_count: Number K of independent rate groups
        multiplicities: Number of rate classes in each group (length K, sums to 6)
        transition_groups: Groups found at the transition positions of the layout
    """

    model_id: int
    layout: Layout
    group_count: int
    multiplicities: Tuple[int, ...]
    transition_groups: FrozenSet[int]

    @classmethod
    def from_layout(
        cls,
        layout: Sequence[int],
        transition_positions: Sequence[int] = TRANSITION_POSITIONS,
    ) -> "ModelStructure":
        """
        Build the structure of a layout.

        Args:
            layout: Group index per rate class
            transition_positions: Layout positions holding transitions

        Returns:
            ModelStructure
        """
        layout = tuple(int(g) for g in layout)
        if len(layout) != N_RATE_CLASSES:
            raise InvalidInput(
                f"Expected {N_RATE_CLASSES} rate classes, got {len(layout)}",
                context={"layout": layout},
            )
        group_count = max(layout) + 1
        multiplicities = tuple(layout.count(g) for g in range(group_count))
        if 0 in multiplicities:
            raise InvalidInput(
                f"Layout {layout} leaves a rate group empty",
                context={"layout": layout},
            )
        return cls(
            model_id=layout_to_id(layout),
            layout=layout,
            group_count=group_count,
            multiplicities=multiplicities,
            transition_groups=frozenset(layout[k] for k in transition_positions),
        )

    @classmethod
    def from_id(cls, model_id: int) -> "ModelStructure":
        """Build the structure of a packed model ID."""
        return cls.from_layout(layout_from_id(model_id))

    def is_transition_group(self, group: int) -> bool:
        """Whether rates of this group get the transition prior."""
        return group in self.transition_groups

    @property
    def label(self) -> str:
        return model_label(self.model_id) or str(self.model_id)

    def __repr__(self) -> str:
        return (
            f"ModelStructure({self.model_id}, K={self.group_count}, "
            f"multiplicities={list(self.multiplicities)})"
        )


class RevJumpModelService:
    """
    Enumerates the models of one model set and answers structure queries.

    The sampler's model indicator is an index into `model_ids()`; everything
    else is keyed by packed model ID.

    Attributes:
        model_set: Model family being enumerated
    """

    def __init__(self, model_set: ModelSet = ModelSet.TRANSITION_TRANSVERSION_SPLIT):
        self.model_set = ModelSet.parse(model_set)
        self._structures: Dict[int, ModelStructure] = {}
        for layout in enumerate_layouts(self.model_set):
            structure = ModelStructure.from_layout(layout)
            self._structures[structure.model_id] = structure
        self._ids: List[int] = list(self._structures)

    def model_ids(self) -> List[int]:
        """Model IDs in enumeration order."""
        return list(self._ids)

    def model_count(self) -> int:
        return len(self._ids)

    def model_id_at(self, index: int) -> int:
        """Model ID of a sampler indicator value."""
        if not 0 <= index < len(self._ids):
            raise InvalidInput(
                f"Model indicator {index} out of range [0, {len(self._ids)})",
                context={"index": index, "model_set": self.model_set.value},
            )
        return self._ids[index]

    def index_of(self, model_id: int) -> int:
        return self._ids.index(self.structure(model_id).model_id)

    def structure(self, model_id: int) -> ModelStructure:
        """
        Look up the structure of a model.

        Raises:
            InvalidInput: If the model is not part of this model set
        """
        try:
            return self._structures[model_id]
        except KeyError:
            raise InvalidInput(
                f"Model {model_id} is not in model set '{self.model_set.value}'",
                context={"model_id": model_id, "model_set": self.model_set.value},
            ) from None

    def group_count(self, model_id: int) -> int:
        return self.structure(model_id).group_count

    def multiplicities(self, model_id: int) -> Tuple[int, ...]:
        return self.structure(model_id).multiplicities

    def layout(self, model_id: int) -> Layout:
        return self.structure(model_id).layout

    def nested_pairs(self) -> List[Tuple[int, int]]:
        """
        Pairs (parent, child) where child splits exactly one group of parent.

        Both models must belong to this set. Used by graph renderers to draw
        the nesting of models.
        """
        pairs = []
        for parent in self._structures.values():
            for child in self._structures.values():
                if child.group_count != parent.group_count + 1:
                    continue
                if _refines(child.layout, parent.layout):
                    pairs.append((parent.model_id, child.model_id))
        return pairs

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, model_id: int) -> bool:
        return model_id in self._structures

    def __repr__(self) -> str:
        return f"RevJumpModelService({self.model_set.value}, models={len(self._ids)})"


def _refines(child: Layout, parent: Layout) -> bool:
    """True if every group of child lies inside a single group of parent."""
    owner: Dict[int, int] = {}
    for c, p in zip(child, parent):
        if owner.setdefault(c, p) != p:
            return False
    return True
