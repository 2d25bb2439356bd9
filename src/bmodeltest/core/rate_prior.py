"""
Prior on the rates of the reversible-jump substitution model.

Under model M the six reversible rates collapse into K groups; the sampler
carries one rate per group, constrained so that

    sum_i multiplicity[i] * rate[i] == 6

Three priors are supported:

1. AS_SCALED_DIRICHLET: Dirichlet on the rates scaled to sum to 6.
   log P = lnGamma(K) + sum_i log(multiplicity[i]) - K log(6)
2. ON_RATES: the same parametric distribution on every group rate.
3. ON_TRANSITIONS_AND_TRANSVERSIONS: one distribution on groups holding a
   transition (AG, CT), another on the rest.

Evaluation is stateless: each call reads the rates and model it is given
and returns a log-density, so the evaluator can be shared across sampler
threads.
"""

import logging
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np
from scipy.special import gammaln

from bmodeltest.core.distributions import ParametricDistribution, exponential, log_normal
from bmodeltest.exceptions import ConsistencyError, InvalidInput, UnsupportedPriorType
from bmodeltest.models.nucleotides import N_RATE_CLASSES
from bmodeltest.models.structure import ModelStructure, RevJumpModelService

logger = logging.getLogger(__name__)

RATE_SUM_TOLERANCE = 1e-6

# Spellings used by BEAST XML from bModelTest analyses
PRIOR_TYPE_ALIASES = {
    "onTransitionsAndTraversals": "onTransitionsAndTransversions",
}


class RatePriorType(Enum):
    """Parameterization of the rate prior."""

    AS_SCALED_DIRICHLET = "asScaledDirichlet"
    """Dirichlet prior on rates ensuring they sum to 6."""

    ON_RATES = "onRates"
    """Parametric distribution on rates."""

    ON_TRANSITIONS_AND_TRANSVERSIONS = "onTransitionsAndTransversions"
    """Separate parametric distributions on transition and transversion rates."""

    @classmethod
    def parse(cls, value) -> "RatePriorType":
        """
        Accept a member, its value, its name or a BEAST alias.

        Raises:
            UnsupportedPriorType: For anything else
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            value = PRIOR_TYPE_ALIASES.get(value, value)
            for member in cls:
                if value in (member.value, member.name) or value.lower() == member.value.lower():
                    return member
        choices = ", ".join(m.value for m in cls)
        raise UnsupportedPriorType(
            f"Unsupported rate prior type {value!r}. Choose one of: {choices}",
            context={"prior_type": value},
        )


def check_rate_sum(
    rates: Union[Sequence[float], np.ndarray],
    structure: ModelStructure,
    tolerance: float = RATE_SUM_TOLERANCE,
) -> float:
    """
    Verify that the multiplicity-weighted rates add up to 6.

    Returns:
        The weighted sum

    Raises:
        InvalidInput: If there are fewer rates than rate groups
        ConsistencyError: If the weighted sum is off by more than tolerance
    """
    rates = _group_rates(rates, structure)
    weighted = float(np.dot(structure.multiplicities, rates))
    # NaN rates fail this test as well
    if not abs(weighted - N_RATE_CLASSES) <= tolerance:
        raise ConsistencyError(
            f"Rates do not add to {N_RATE_CLASSES:.5f} for model "
            f"{structure.model_id}: weighted sum is {weighted:.8f}",
            context={"model_id": structure.model_id, "weighted_sum": weighted},
        )
    return weighted


def rate_log_density(
    rates: Union[Sequence[float], np.ndarray],
    structure: ModelStructure,
    prior_type: Union[RatePriorType, str],
    dist: Optional[ParametricDistribution] = None,
    trans_dist: Optional[ParametricDistribution] = None,
    check_consistency: bool = True,
) -> float:
    """
    Log prior density of the group rates of one model.

    Args:
        rates: One rate per rate group (extra trailing values are ignored)
        structure: Rate-group structure of the current model
        prior_type: Which parameterization to use
        dist: Prior on rates (transversion rates for the split prior);
            exponential(1) if omitted
        trans_dist: Prior on transition rates; log-normal(1, 1.25) if omitted
        check_consistency: Verify the weighted sum-to-6 constraint first

    Returns:
        Log density, -inf if a rate falls outside a distribution's support

    Raises:
        UnsupportedPriorType: If prior_type is not recognised
        ConsistencyError: If the rates violate the sum constraint
    """
    prior_type = RatePriorType.parse(prior_type)
    group_rates = _group_rates(rates, structure)
    if check_consistency:
        check_rate_sum(group_rates, structure)

    if prior_type is RatePriorType.AS_SCALED_DIRICHLET:
        K = structure.group_count
        log_p = float(gammaln(K))
        log_p += float(np.sum(np.log(structure.multiplicities)))
        log_p -= K * np.log(N_RATE_CLASSES)
        return log_p

    dist = dist or exponential(1.0)
    if prior_type is RatePriorType.ON_RATES:
        return sum(dist.log_density(x - dist.offset) for x in group_rates)

    trans_dist = trans_dist or log_normal(1.0, 1.25)
    log_p = 0.0
    for group, x in enumerate(group_rates):
        d = trans_dist if structure.is_transition_group(group) else dist
        log_p += d.log_density(x - d.offset)
    return log_p


class RatePriorEvaluator:
    """
    Rate prior bound to a model set and a choice of distributions.

    Missing distributions are filled in once, at construction, with a
    warning: exponential(1) for rates/transversions and log-normal(1, 1.25)
    for transitions.

    Attributes:
        models: Model service resolving model IDs to their structure
        prior_type: Parameterization of the prior
        dist: Prior on rates, or on transversion rates for the split prior
        trans_dist: Prior on transition rates (split prior only)
        check_consistency: Verify the sum-to-6 constraint on every call
    """

    def __init__(
        self,
        models: Optional[RevJumpModelService] = None,
        prior_type: Union[RatePriorType, str] = RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS,
        dist: Optional[ParametricDistribution] = None,
        trans_dist: Optional[ParametricDistribution] = None,
        check_consistency: bool = True,
    ):
        self.models = models or RevJumpModelService()
        self.prior_type = RatePriorType.parse(prior_type)
        self.dist = dist
        self.trans_dist = trans_dist
        self.check_consistency = check_consistency

        if self.prior_type is RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS:
            if self.trans_dist is None:
                logger.warning("Setting transitions rate prior to log-normal(1, 1.25)")
                self.trans_dist = log_normal(1.0, 1.25)
            if self.dist is None:
                logger.warning("Setting transversion rate prior to exponential(1)")
                self.dist = exponential(1.0)
        elif self.prior_type is RatePriorType.ON_RATES:
            if self.dist is None:
                logger.warning("Setting rate prior to exponential(1)")
                self.dist = exponential(1.0)

    def log_density(self, rates: Union[Sequence[float], np.ndarray], model_id: int) -> float:
        """Log prior density of rates under the model with this packed ID."""
        return rate_log_density(
            rates,
            self.models.structure(model_id),
            self.prior_type,
            dist=self.dist,
            trans_dist=self.trans_dist,
            check_consistency=self.check_consistency,
        )

    def log_density_at(self, rates: Union[Sequence[float], np.ndarray], indicator: int) -> float:
        """Log prior density with the model given by the sampler's indicator."""
        return self.log_density(rates, self.models.model_id_at(indicator))

    __call__ = log_density

    def __repr__(self) -> str:
        return (
            f"RatePriorEvaluator({self.prior_type.value}, dist={self.dist}, "
            f"trans_dist={self.trans_dist})"
        )


def _group_rates(rates, structure: ModelStructure) -> np.ndarray:
    rates = np.asarray(rates, dtype=float).ravel()
    if rates.size < structure.group_count:
        raise InvalidInput(
            f"Model {structure.model_id} has {structure.group_count} rate groups "
            f"but only {rates.size} rates were given",
            context={"model_id": structure.model_id, "n_rates": int(rates.size)},
        )
    return rates[:structure.group_count]
