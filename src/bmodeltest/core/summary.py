"""
Credible-set summaries of model-indicator traces.

Given a trace of the model indicator, the summary answers: which models
carry the posterior mass? Models are ranked by how often the sampler
visited them and accumulated until their joint support reaches the
threshold (95% by default). Those models form the 95% HPD set; the
remaining models with non-negligible support are listed as a tail.

Supports are reported in percent of the post burn-in samples.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from bmodeltest.core.trace import Trace, discretise
from bmodeltest.exceptions import InvalidInput

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 95.0
DEFAULT_TAIL_CUTOFF = 0.1
# Graph nodes scaled at or below this fraction of the mean size are drawn small
SMALL_NODE_SCALE = 0.1


@dataclass(frozen=True)
class CredibleSetEntry:
    """
    One row of the report.

    Attributes:
        model_id: Discrete model ID
        support: Percentage of samples in this model
        cumulative: Percentage of samples in this and all higher-ranked models
        in_credible_set: Whether the model belongs to the HPD set
    """

    model_id: int
    support: float
    cumulative: float
    in_credible_set: bool


@dataclass
class CredibleSetReport:
    """
    Summary of one trace.

    Attributes:
        label: Trace label
        n_samples: Trace length
        threshold: Credible-set threshold in percent
        entries: HPD models, most supported first, followed by tail models
        frequencies: Model ID -> sample count
        max_tail_support: Largest support (%) among models drawn as small nodes
    """

    label: str
    n_samples: int
    threshold: float
    entries: List[CredibleSetEntry]
    frequencies: Dict[int, int] = field(repr=False)
    max_tail_support: float = 0.0

    @property
    def credible_set(self) -> List[int]:
        """Model IDs inside the credible set, most supported first."""
        return [e.model_id for e in self.entries if e.in_credible_set]

    @property
    def tail(self) -> List[CredibleSetEntry]:
        return [e for e in self.entries if not e.in_credible_set]

    @property
    def credible_support(self) -> float:
        """Cumulative support (%) of the credible set."""
        inside = [e for e in self.entries if e.in_credible_set]
        return inside[-1].cumulative if inside else 0.0

    def to_dict(self) -> Dict:
        return {
            "label": self.label,
            "n_samples": self.n_samples,
            "threshold": self.threshold,
            "credible_set": self.credible_set,
            "credible_support": self.credible_support,
            "max_tail_support": self.max_tail_support,
            "entries": [asdict(e) for e in self.entries],
            "frequencies": {str(k): v for k, v in sorted(self.frequencies.items())},
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"CredibleSetReport({self.label!r}, n={self.n_samples}, "
            f"{self.threshold:g}% set={self.credible_set})"
        )


def frequency_table(model_ids: Iterable[int]) -> Dict[int, int]:
    """
    Count occurrences of each model ID.

    Keys appear in order of first occurrence.
    """
    table: Dict[int, int] = {}
    for model_id in model_ids:
        model_id = int(model_id)
        table[model_id] = table.get(model_id, 0) + 1
    return table


def rank_models(table: Dict[int, int]) -> List[int]:
    """Model IDs by descending count; ties go to the smaller model ID."""
    return sorted(table, key=lambda model_id: (-table[model_id], model_id))


def max_tail_support(
    table: Dict[int, int],
    n_samples: int,
    model_ids: Optional[Iterable[int]] = None,
) -> float:
    """
    Largest support (%) among models whose graph node is drawn small.

    Node sizes are sqrt(frequency) scaled by 1.5 times the mean
    sqrt(frequency) of the observed models. Nodes at or below
    SMALL_NODE_SCALE are small.

    Args:
        table: Model ID -> count
        n_samples: Trace length
        model_ids: Nodes of the graph (all models of the model set); defaults
            to the observed models

    Returns:
        Support in percent, 0 if no node is small
    """
    observed = np.sqrt(np.array(list(table.values()), dtype=float) / n_samples)
    scale = 1.5 * observed.sum() / len(observed)
    candidates = table.keys() if model_ids is None else model_ids

    largest = 0.0
    for model_id in candidates:
        count = table.get(model_id, 0)
        size = np.sqrt(count / n_samples) / scale
        if size <= SMALL_NODE_SCALE:
            largest = max(largest, 100.0 * count / n_samples)
    return largest


class TraceSummarizer:
    """
    Builds credible-set reports from model-indicator traces.

    The summarizer holds only its settings; every report is computed from
    the trace passed in, so one instance can serve many traces and threads.

    Attributes:
        threshold: Default credible-set threshold in percent, in (0, 100]
        tail_cutoff: Tail models need more support (%) than this to be listed
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        tail_cutoff: float = DEFAULT_TAIL_CUTOFF,
    ):
        self.threshold = _check_threshold(threshold)
        if not tail_cutoff >= 0:
            raise InvalidInput(
                f"Tail cutoff must be non-negative, got {tail_cutoff}",
                context={"tail_cutoff": tail_cutoff},
            )
        self.tail_cutoff = float(tail_cutoff)

    def summarize(
        self,
        trace: Union[Trace, Sequence[float], np.ndarray],
        label: Optional[str] = None,
        threshold: Optional[float] = None,
        model_ids: Optional[Iterable[int]] = None,
    ) -> CredibleSetReport:
        """
        Summarize a trace into its credible set.

        Args:
            trace: Trace or raw samples
            label: Report label (defaults to the trace label)
            threshold: Override of the summarizer threshold, in (0, 100]
            model_ids: All models of the model set, for max_tail_support

        Returns:
            CredibleSetReport

        Raises:
            InvalidInput: If the trace is empty or the threshold is out of range
        """
        threshold = self.threshold if threshold is None else _check_threshold(threshold)
        if not isinstance(trace, Trace):
            trace = Trace.from_samples(trace, label=label or "trace")
        label = label or trace.label
        n = len(trace)

        table = frequency_table(discretise(trace.samples))
        ranking = rank_models(table)

        entries: List[CredibleSetEntry] = []
        cumulative = 0
        i = 0
        # HPD block: stop once the cumulative share reaches the threshold
        while i < len(ranking) and 100.0 * cumulative < threshold * n:
            model_id = ranking[i]
            cumulative += table[model_id]
            entries.append(_entry(model_id, table[model_id], cumulative, n, True))
            i += 1

        for model_id in ranking[i:]:
            cumulative += table[model_id]
            support = 100.0 * table[model_id] / n
            if support > self.tail_cutoff:
                entries.append(_entry(model_id, table[model_id], cumulative, n, False))

        report = CredibleSetReport(
            label=label,
            n_samples=n,
            threshold=threshold,
            entries=entries,
            frequencies=table,
            max_tail_support=max_tail_support(table, n, model_ids),
        )
        logger.debug(
            f"{label}: {len(table)} models visited, "
            f"{len(report.credible_set)} in {threshold:g}% HPD set"
        )
        return report


def summarize(
    trace: Union[Trace, Sequence[float], np.ndarray],
    label: Optional[str] = None,
    threshold: float = DEFAULT_THRESHOLD,
    model_ids: Optional[Iterable[int]] = None,
) -> CredibleSetReport:
    """Shortcut for TraceSummarizer(threshold).summarize(trace, label)."""
    return TraceSummarizer(threshold).summarize(trace, label=label, model_ids=model_ids)


def _entry(model_id: int, count: int, cumulative: int, n: int, inside: bool) -> CredibleSetEntry:
    return CredibleSetEntry(
        model_id=model_id,
        support=100.0 * count / n,
        cumulative=100.0 * cumulative / n,
        in_credible_set=inside,
    )


def _check_threshold(threshold: float) -> float:
    threshold = float(threshold)
    if not 0.0 < threshold <= 100.0:
        raise InvalidInput(
            f"Threshold must be a percentage in (0, 100], got {threshold}",
            context={"threshold": threshold},
        )
    return threshold
