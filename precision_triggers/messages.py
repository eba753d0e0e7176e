"""Message sinks for trigger status output."""
from abc import ABC, abstractmethod

MESSAGE = "message"
WARNING = "warning"


class MessageSink(ABC):
    """Receives plain-text status lines from the trigger evaluator."""

    @abstractmethod
    def message(self, text: str):
        pass

    @abstractmethod
    def warning(self, text: str):
        pass


class ConsoleSink(MessageSink):
    """Print to stdout; warnings are always shown, messages only when verbose."""

    def __init__(self, verbose=True):
        self.verbose = verbose

    def message(self, text):
        if self.verbose:
            print(f"  {text}")

    def warning(self, text):
        print(f"  WARNING: {text}")


class RecordingSink(MessageSink):
    """Keep (level, text) pairs in order of arrival."""

    def __init__(self):
        self.records = []

    def message(self, text):
        self.records.append((MESSAGE, text))

    def warning(self, text):
        self.records.append((WARNING, text))

    @property
    def messages(self):
        return [text for level, text in self.records if level == MESSAGE]

    @property
    def warnings(self):
        return [text for level, text in self.records if level == WARNING]
