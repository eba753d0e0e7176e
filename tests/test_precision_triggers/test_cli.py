"""
Tests for precision_triggers.cli and precision_triggers.report modules.
"""
import json

import pytest

from precision_triggers.cli import main


@pytest.fixture
def problem_file(problem_dict, tmp_path):
    path = tmp_path / "problem.json"
    path.write_text(json.dumps(problem_dict))
    return path


class TestMain:
    def test_writes_results(self, problem_file, tmp_path):
        out = tmp_path / "out" / "results.json"
        status = main([str(problem_file), "-o", str(out), "-q", "--max-batches", "400"])
        data = json.loads(out.read_text())
        assert status == (0 if data['satisfied'] else 1)
        assert data['settings']['max_batches'] == 400
        assert data['evaluations']

    def test_fixed_interval_override(self, problem_file, tmp_path):
        out = tmp_path / "results.json"
        main([str(problem_file), "-o", str(out), "-q", "--interval", "3", "--max-batches", "11"])
        data = json.loads(out.read_text())
        assert data['settings']['batch_interval'] == 3
        batches = [e['batch'] for e in data['evaluations']]
        assert all(b in (5, 8, 11) for b in batches)
        assert all(e['predicted_batches'] is None for e in data['evaluations'])

    def test_plot(self, problem_file, tmp_path):
        pytest.importorskip("matplotlib")
        plot = tmp_path / "history.png"
        main([str(problem_file), "-o", str(tmp_path / "r.json"), "-q", "--plot", str(plot)])
        assert plot.exists()
        assert plot.stat().st_size > 0
