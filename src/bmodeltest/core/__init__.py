"""Trace summaries and rate priors for reversible-jump substitution models."""

from bmodeltest.core.trace import Trace, discretise, load_traces, round_model_id
from bmodeltest.core.summary import (
    CredibleSetEntry,
    CredibleSetReport,
    TraceSummarizer,
    frequency_table,
    max_tail_support,
    rank_models,
    summarize,
)
from bmodeltest.core.distributions import (
    ParametricDistribution,
    exponential,
    gamma,
    log_normal,
    normal,
    uniform,
)
from bmodeltest.core.rate_prior import (
    RatePriorEvaluator,
    RatePriorType,
    check_rate_sum,
    rate_log_density,
)
from bmodeltest.core.config import AnalyserConfig

__all__ = [
    "Trace",
    "discretise",
    "load_traces",
    "round_model_id",
    "CredibleSetEntry",
    "CredibleSetReport",
    "TraceSummarizer",
    "frequency_table",
    "max_tail_support",
    "rank_models",
    "summarize",
    "ParametricDistribution",
    "exponential",
    "gamma",
    "log_normal",
    "normal",
    "uniform",
    "RatePriorEvaluator",
    "RatePriorType",
    "check_rate_sum",
    "rate_log_density",
    "AnalyserConfig",
]
