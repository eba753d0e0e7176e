"""
Tests for precision_triggers.evaluator module.
"""
import pytest

from precision_triggers.constants import Metric, RunMode
from precision_triggers.evaluator import TriggerEvaluator
from precision_triggers.messages import RecordingSink
from precision_triggers.settings import TriggerSettings


def _settings(**kwargs):
    params = dict(n_batches=20, n_max_batches=100, n_inactive=10,
                  run_mode=RunMode.FIXED_SOURCE)
    params.update(kwargs)
    return TriggerSettings(**params)


class TestCadence:
    def test_reference_schedule(self, flux_problem, sink):
        settings = _settings(n_batches=10, n_inactive=0, batch_interval=5, n_max_batches=23)
        evaluator = TriggerEvaluator(flux_problem, settings, sink)
        checked = [b for b in range(1, 31) if evaluator.should_check(b)]
        assert checked == [10, 15, 20, 23, 25, 30]
        assert [b for b in checked if b <= 23] == [10, 15, 20, 23]

    def test_below_minimum_is_noop(self, flux_problem, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(batch_interval=1), sink)
        assert evaluator.evaluate(19) is None
        assert sink.records == []
        assert evaluator.history == []

    def test_interval_one_when_predicting(self, flux_problem, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(), sink)
        assert evaluator.n_batch_interval == 1
        assert evaluator.should_check(20)
        assert evaluator.should_check(21)

    def test_inactive_triggers(self, flux_problem, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(trigger_active=False), sink)
        assert not evaluator.should_check(20)
        assert evaluator.evaluate(20) is None

    def test_non_master_is_noop(self, flux_problem, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(), sink, is_master=False)
        assert evaluator.evaluate(20) is None
        assert sink.records == []


class TestReporting:
    def test_satisfied_message(self, flux_problem, flux_tally, sink, set_bin):
        set_bin(flux_tally, 0, 0, [1.0, 1.1])
        evaluator = TriggerEvaluator(flux_problem, _settings(), sink)
        result = evaluator.evaluate(20)
        assert result.satisfied
        assert sink.messages == ["Triggers satisfied for batch 20"]
        assert result.predicted_batches is None

    def test_unsatisfied_tally_message(self, flux_problem, flux_tally, sink, set_bin):
        set_bin(flux_tally, 0, 0, [1.0, 3.0])
        evaluator = TriggerEvaluator(flux_problem, _settings(batch_interval=5), sink)
        evaluator.evaluate(20)
        assert sink.messages == ["Triggers unsatisfied, max unc./thresh. is 2 for flux in tally 1"]

    def test_unsatisfied_eigenvalue_message(self, flux_problem, sink):
        flux_problem.set_keff_trigger(Metric.STANDARD_DEVIATION, 0.01)
        settings = _settings(batch_interval=5, run_mode=RunMode.EIGENVALUE)
        evaluator = TriggerEvaluator(flux_problem, settings, sink)
        evaluator.evaluate(20, keff=(1.0, 0.025))
        assert sink.messages == ["Triggers unsatisfied, max unc./thresh. is 2.5 for eigenvalue"]
        assert "tally" not in sink.messages[0]


class TestPrediction:
    @pytest.fixture
    def unsatisfied(self, flux_tally, set_bin):
        set_bin(flux_tally, 0, 0, [1.0, 3.0])        # ratio exactly 2
        return flux_tally

    def test_reference_prediction(self, flux_problem, unsatisfied, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(), sink)
        result = evaluator.evaluate(20)
        assert result.predicted_batches == 51
        assert sink.messages[-1] == "The estimated number of batches is 51"
        assert sink.warnings == []

    def test_prediction_sets_next_check(self, flux_problem, unsatisfied, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(), sink)
        evaluator.evaluate(20)
        assert evaluator.n_batch_interval == 31
        assert not evaluator.should_check(21)
        assert evaluator.should_check(51)

    def test_prediction_beyond_max_warns(self, flux_problem, unsatisfied, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(n_max_batches=40), sink)
        result = evaluator.evaluate(20)
        assert result.predicted_batches == 51
        assert sink.warnings == ["The estimated number of batches is 51 -- greater than max batches."]

    def test_max_batches_always_checked(self, flux_problem, unsatisfied, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(n_max_batches=40), sink)
        evaluator.evaluate(20)
        assert evaluator.should_check(40)

    def test_no_prediction_with_fixed_interval(self, flux_problem, unsatisfied, sink):
        evaluator = TriggerEvaluator(flux_problem, _settings(batch_interval=5), sink)
        result = evaluator.evaluate(20)
        assert result.predicted_batches is None
        assert evaluator.n_batch_interval == 5
        assert len(sink.records) == 1

    def test_history_kept(self, flux_problem, unsatisfied):
        evaluator = TriggerEvaluator(flux_problem, _settings(batch_interval=5), RecordingSink())
        evaluator.evaluate(20)
        evaluator.evaluate(25)
        assert [r.batch for r in evaluator.history] == [20, 25]
