import json

import numpy as np
import pytest

from bmodeltest.core.summary import (
    TraceSummarizer,
    frequency_table,
    max_tail_support,
    rank_models,
    summarize,
)
from bmodeltest.core.trace import Trace, discretise
from bmodeltest.exceptions import InvalidInput


def test_small_trace_needs_all_models_for_95_percent():
    report = summarize([0, 0, 0, 1, 1, 2], label="substmodel")

    assert report.frequencies == {0: 3, 1: 2, 2: 1}
    assert report.credible_set == [0, 1, 2]
    cumulative = [e.cumulative for e in report.entries]
    assert cumulative == pytest.approx([50.0, 100 * 5 / 6, 100.0])
    supports = [e.support for e in report.entries]
    assert supports == pytest.approx([50.0, 100 * 2 / 6, 100 / 6])
    assert report.credible_support == pytest.approx(100.0)
    assert report.tail == []


def test_frequency_counts_sum_to_trace_length():
    rng = np.random.default_rng(1)
    samples = rng.normal(loc=3.0, scale=2.0, size=500)

    table = frequency_table(discretise(samples))

    assert sum(table.values()) == 500


@pytest.mark.parametrize("threshold", [10.0, 50.0, 80.0, 95.0, 99.0, 100.0])
def test_credible_set_stops_at_first_crossing(threshold):
    rng = np.random.default_rng(7)
    samples = rng.choice([111111, 121121, 121131, 123456], size=400, p=[0.1, 0.6, 0.25, 0.05])

    report = TraceSummarizer(threshold).summarize(samples)

    inside = [e for e in report.entries if e.in_credible_set]
    assert inside[-1].cumulative >= threshold
    before = inside[-2].cumulative if len(inside) > 1 else 0.0
    assert before < threshold


def test_ties_go_to_smaller_model_id():
    assert rank_models({5: 2, 3: 2, 9: 4}) == [9, 3, 5]

    report = TraceSummarizer(50.0).summarize([5, 5, 3, 3])
    assert report.credible_set == [3]


def test_tail_lists_models_above_cutoff():
    samples = [1] * 960 + [2] * 39 + [3]

    report = summarize(samples, threshold=95.0)

    assert report.credible_set == [1]
    tail = report.tail
    # model 3 has exactly 0.1% support and is not listed
    assert [e.model_id for e in tail] == [2]
    assert tail[0].support == pytest.approx(3.9)
    assert tail[0].cumulative == pytest.approx(99.9)
    assert not tail[0].in_credible_set


def test_max_tail_support_uses_small_nodes():
    table = {1: 960, 2: 39, 3: 1}

    assert max_tail_support(table, 1000) == pytest.approx(0.1)
    # unobserved models are small nodes with zero support
    assert max_tail_support(table, 1000, model_ids=[1, 2, 3, 4]) == pytest.approx(0.1)
    assert max_tail_support({0: 2, 1: 2}, 4) == 0.0


def test_max_tail_support_is_attached_to_each_report():
    summarizer = TraceSummarizer()
    first = summarizer.summarize([1] * 960 + [2] * 39 + [3])
    second = summarizer.summarize([0, 0, 1, 1])

    assert first.max_tail_support == pytest.approx(0.1)
    assert second.max_tail_support == 0.0
    assert summarizer.summarize([1] * 960 + [2] * 39 + [3]).max_tail_support == first.max_tail_support


def test_rounding_feeds_the_frequency_table():
    report = summarize([0.4, 0.6, 1.49, 1.5, -0.5])
    assert report.frequencies == {0: 2, 1: 2, 2: 1}


def test_invalid_input():
    with pytest.raises(InvalidInput):
        summarize([])
    for threshold in (0.0, -5.0, 100.5, float("nan")):
        with pytest.raises(InvalidInput):
            summarize([1, 2, 3], threshold=threshold)
    with pytest.raises(InvalidInput):
        TraceSummarizer(threshold=0)
    for cutoff in (-0.5, float("nan")):
        with pytest.raises(InvalidInput):
            TraceSummarizer(tail_cutoff=cutoff)


def test_zero_tail_cutoff_lists_every_tail_model():
    report = TraceSummarizer(95.0, tail_cutoff=0.0).summarize([1] * 960 + [2] * 39 + [3])
    assert [e.model_id for e in report.tail] == [2, 3]


def test_samples_beyond_int64_are_rejected():
    with pytest.raises(InvalidInput):
        summarize([1.0, 1e19])
    with pytest.raises(InvalidInput):
        discretise([-1e19])


def test_report_serialises_to_json():
    trace = Trace.from_samples([121121] * 8 + [123456] * 2, label="substmodel.s:dna")

    report = TraceSummarizer().summarize(trace, model_ids=[111111, 121121, 123456])
    data = json.loads(report.to_json())

    assert data["label"] == "substmodel.s:dna"
    assert data["n_samples"] == 10
    assert data["credible_set"] == [121121, 123456]
    assert data["frequencies"] == {"121121": 8, "123456": 2}
    assert data["entries"][0] == {
        "model_id": 121121,
        "support": 80.0,
        "cumulative": 80.0,
        "in_credible_set": True,
    }
