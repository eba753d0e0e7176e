"""
Tests for precision_triggers.messages module.
"""
from precision_triggers.messages import ConsoleSink, RecordingSink, MESSAGE, WARNING


class TestConsoleSink:
    def test_verbose_prints_messages(self, capsys):
        ConsoleSink().message("Triggers satisfied for batch 3")
        assert "Triggers satisfied for batch 3" in capsys.readouterr().out

    def test_quiet_suppresses_messages_not_warnings(self, capsys):
        sink = ConsoleSink(verbose=False)
        sink.message("hidden")
        sink.warning("shown")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "WARNING: shown" in out


class TestRecordingSink:
    def test_order_and_levels(self):
        sink = RecordingSink()
        sink.message("a")
        sink.warning("b")
        sink.message("c")
        assert sink.records == [(MESSAGE, "a"), (WARNING, "b"), (MESSAGE, "c")]
        assert sink.messages == ["a", "c"]
        assert sink.warnings == ["b"]
