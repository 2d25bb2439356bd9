import logging

import numpy as np
import pytest
from scipy import stats

from bmodeltest.core.distributions import exponential, uniform
from bmodeltest.core.rate_prior import (
    RatePriorEvaluator,
    RatePriorType,
    check_rate_sum,
    rate_log_density,
)
from bmodeltest.exceptions import ConsistencyError, InvalidInput, UnsupportedPriorType
from bmodeltest.models.model_set import ModelSet
from bmodeltest.models.structure import ModelStructure, RevJumpModelService

LOGNORMAL = stats.lognorm(s=1.25, scale=np.exp(1.0))


def test_scaled_dirichlet_single_group_is_zero():
    jc = ModelStructure.from_id(111111)
    assert jc.multiplicities == (6,)

    log_p = rate_log_density([1.0], jc, RatePriorType.AS_SCALED_DIRICHLET)

    assert log_p == pytest.approx(0.0, abs=1e-12)


def test_scaled_dirichlet_uses_multiplicities():
    hky = ModelStructure.from_id(121121)
    log_p = rate_log_density([1.2, 0.6], hky, RatePriorType.AS_SCALED_DIRICHLET)
    # lnGamma(2) + log 4 + log 2 - 2 log 6
    assert log_p == pytest.approx(np.log(8.0 / 36.0))

    gtr = ModelStructure.from_id(123456)
    log_p = rate_log_density(np.ones(6), gtr, RatePriorType.AS_SCALED_DIRICHLET)
    assert log_p == pytest.approx(np.log(120.0) - 6 * np.log(6.0))


def test_on_rates_with_exponential():
    gtr = ModelStructure.from_id(123456)
    log_p = rate_log_density([1.0] * 6, gtr, RatePriorType.ON_RATES, dist=exponential(1.0))
    assert log_p == pytest.approx(-6.0)


def test_on_rates_defaults_to_exponential():
    hky = ModelStructure.from_id(121121)
    log_p = rate_log_density([1.2, 0.6], hky, "onRates")
    assert log_p == pytest.approx(-1.8)


def test_on_rates_subtracts_offset_once():
    gtr = ModelStructure.from_id(123456)
    log_p = rate_log_density([1.0] * 6, gtr, RatePriorType.ON_RATES, dist=exponential(1.0, offset=0.5))
    assert log_p == pytest.approx(-3.0)


def test_out_of_support_rates_give_minus_infinity():
    gtr = ModelStructure.from_id(123456)
    log_p = rate_log_density([1.0] * 6, gtr, RatePriorType.ON_RATES, dist=exponential(1.0, offset=2.0))
    assert np.isneginf(log_p)


def test_transition_prior_applies_to_transition_positions():
    # TIM: AG -> group 1, CT -> group 3, transversions in groups 0 and 2
    tim = ModelStructure.from_id(123341)
    rates = [1.0, 1.0, 0.5, 2.0]
    assert check_rate_sum(rates, tim) == pytest.approx(6.0)

    log_p = rate_log_density(rates, tim, RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS)

    expected = LOGNORMAL.logpdf(1.0) + LOGNORMAL.logpdf(2.0) - 1.0 - 0.5
    assert log_p == pytest.approx(expected)


def test_transition_prior_follows_groups_not_indices():
    # Transitions in groups 2 and 4 of a custom layout; a uniform(0, 1.5) on
    # transversions would be -inf if it were applied to the 2.0 rate
    structure = ModelStructure.from_layout((0, 2, 1, 3, 4, 0), transition_positions=(1, 4))
    assert structure.transition_groups == frozenset({2, 4})
    rates = [0.75, 1.0, 2.0, 1.0, 0.5]
    assert check_rate_sum(rates, structure) == pytest.approx(6.0)

    log_p = rate_log_density(
        rates,
        structure,
        RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS,
        dist=uniform(0.0, 1.5),
        trans_dist=exponential(1.0),
    )

    expected = -2.0 - 0.5 + 3 * np.log(1 / 1.5)
    assert log_p == pytest.approx(expected)


def test_consistency_error_when_rates_do_not_sum_to_six():
    structure = ModelStructure.from_id(123425)
    assert structure.multiplicities == (1, 2, 1, 1, 1)

    ok = [1.0, 1.0, 1.0, 1.0, 1.0]
    assert check_rate_sum(ok, structure) == pytest.approx(6.0)
    assert check_rate_sum([1.0, 1.0 + 2e-7, 1.0, 1.0, 1.0], structure) == pytest.approx(6.0)

    bad = [1.0, 1.1, 1.0, 1.0, 1.0]
    with pytest.raises(ConsistencyError):
        rate_log_density(bad, structure, RatePriorType.ON_RATES)
    with pytest.raises(ConsistencyError):
        rate_log_density(bad, structure, RatePriorType.AS_SCALED_DIRICHLET)

    log_p = rate_log_density(bad, structure, RatePriorType.ON_RATES, check_consistency=False)
    assert log_p == pytest.approx(-5.1)


def test_nan_rates_fail_the_consistency_check():
    hky = ModelStructure.from_id(121121)
    with pytest.raises(ConsistencyError):
        check_rate_sum([np.nan, 1.0], hky)
    with pytest.raises(ConsistencyError):
        rate_log_density([np.nan, 1.0], hky, RatePriorType.ON_RATES)


def test_too_few_rates():
    with pytest.raises(InvalidInput):
        rate_log_density([6.0], ModelStructure.from_id(121121), RatePriorType.ON_RATES)


def test_trailing_rates_are_ignored():
    hky = ModelStructure.from_id(121121)
    short = rate_log_density([1.2, 0.6], hky, RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS)
    padded = rate_log_density([1.2, 0.6, 9, 9, 9, 9], hky, RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS)
    assert short == pytest.approx(padded)


@pytest.mark.parametrize("prior_type", ["bogus", 42, None, "onTransitionsAndTraversals2"])
def test_unsupported_prior_type(prior_type):
    with pytest.raises(UnsupportedPriorType):
        rate_log_density([1.0], ModelStructure.from_id(111111), prior_type)
    with pytest.raises(UnsupportedPriorType):
        RatePriorEvaluator(prior_type=prior_type)


def test_parse_prior_type():
    assert RatePriorType.parse("onRates") is RatePriorType.ON_RATES
    assert RatePriorType.parse("AS_SCALED_DIRICHLET") is RatePriorType.AS_SCALED_DIRICHLET
    assert RatePriorType.parse("ontransitionsandtransversions") is (
        RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS
    )
    # BEAST spelling from bModelTest XML
    assert RatePriorType.parse("onTransitionsAndTraversals") is (
        RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS
    )


def test_evaluator_installs_and_logs_defaults(caplog):
    with caplog.at_level(logging.WARNING, logger="bmodeltest.core.rate_prior"):
        evaluator = RatePriorEvaluator()

    assert "log-normal(1, 1.25)" in caplog.text
    assert "exponential(1)" in caplog.text
    assert evaluator.prior_type is RatePriorType.ON_TRANSITIONS_AND_TRANSVERSIONS

    log_p = evaluator.log_density([1.2, 0.6], 121121)
    assert log_p == pytest.approx(LOGNORMAL.logpdf(0.6) - 1.2)


def test_evaluator_keeps_given_distributions(caplog):
    dist = exponential(2.0)
    with caplog.at_level(logging.WARNING, logger="bmodeltest.core.rate_prior"):
        evaluator = RatePriorEvaluator(prior_type="onRates", dist=dist)

    assert caplog.text == ""
    assert evaluator.dist is dist
    assert evaluator.trans_dist is None


def test_evaluator_by_indicator():
    evaluator = RatePriorEvaluator(
        RevJumpModelService(ModelSet.TRANSITION_TRANSVERSION_SPLIT),
        prior_type=RatePriorType.AS_SCALED_DIRICHLET,
    )
    assert evaluator.log_density_at([1.0], 0) == pytest.approx(0.0, abs=1e-12)
    assert evaluator([1.2, 0.6], 121121) == pytest.approx(np.log(8.0 / 36.0))
    with pytest.raises(InvalidInput):
        evaluator.log_density([1.0, 1.0], 111121)


def test_evaluator_is_stateless_between_calls():
    evaluator = RatePriorEvaluator(prior_type="onRates", dist=exponential(1.0))
    rates = np.array([1.2, 0.6])

    first = evaluator.log_density(rates, 121121)
    evaluator.log_density(np.ones(6), 123456)

    assert evaluator.log_density(rates, 121121) == first
    np.testing.assert_array_equal(rates, [1.2, 0.6])
