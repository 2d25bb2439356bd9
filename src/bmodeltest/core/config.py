"""Settings for analysing a trace log."""

from dataclasses import dataclass, field

from bmodeltest.core.summary import DEFAULT_TAIL_CUTOFF, DEFAULT_THRESHOLD
from bmodeltest.exceptions import InvalidInput
from bmodeltest.models.model_set import ModelSet


@dataclass
class AnalyserConfig:
    """
    Configuration of a trace log analysis.

    Attributes:
        prefix: Columns whose label starts with this are model-indicator traces
        burnin: Percentage of the log to disregard as burn-in
        model_set: Model set used by the run that produced the log
        threshold: Credible-set threshold in percent
        tail_cutoff: Minimum support (%) for tail models to be listed
    """

    prefix: str = "substmodel"
    burnin: int = 10
    model_set: ModelSet = field(default=ModelSet.TRANSITION_TRANSVERSION_SPLIT)
    threshold: float = DEFAULT_THRESHOLD
    tail_cutoff: float = DEFAULT_TAIL_CUTOFF

    def __post_init__(self):
        if self.burnin >= 100:
            raise InvalidInput(
                "burnin is a percentage and should be smaller than 100",
                context={"burnin": self.burnin},
            )
        if self.burnin < 0:
            self.burnin = 0
        if not 0 < self.threshold <= 100:
            raise InvalidInput(
                f"Threshold must be a percentage in (0, 100], got {self.threshold}",
                context={"threshold": self.threshold},
            )
        if not self.tail_cutoff >= 0:
            raise InvalidInput(
                f"Tail cutoff must be non-negative, got {self.tail_cutoff}",
                context={"tail_cutoff": self.tail_cutoff},
            )
        self.model_set = ModelSet.parse(self.model_set)
