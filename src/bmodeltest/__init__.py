"""
bmodeltest: model averaging summaries for reversible-jump nucleotide models.

Summarizes posterior traces of the substitution-model indicator into
credible sets and evaluates the prior on substitution rates.
"""

__version__ = "0.1.0"

from bmodeltest.exceptions import (
    BModelTestError,
    ConsistencyError,
    InvalidInput,
    UnsupportedPriorType,
)
from bmodeltest.models import ModelSet, ModelStructure, RevJumpModelService
from bmodeltest.core import (
    AnalyserConfig,
    CredibleSetReport,
    RatePriorEvaluator,
    RatePriorType,
    Trace,
    TraceSummarizer,
    load_traces,
    rate_log_density,
    summarize,
)

__all__ = [
    "BModelTestError",
    "ConsistencyError",
    "InvalidInput",
    "UnsupportedPriorType",
    "ModelSet",
    "ModelStructure",
    "RevJumpModelService",
    "AnalyserConfig",
    "CredibleSetReport",
    "RatePriorEvaluator",
    "RatePriorType",
    "Trace",
    "TraceSummarizer",
    "load_traces",
    "rate_log_density",
    "summarize",
    "__version__",
]
