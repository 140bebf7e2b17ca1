import threading

from contractfuzz.models import Verdict, VerdictStatus


class VerdictCollector:
    """
    Buffered reporter. Thread-safe and never blocks on I/O, so executors
    running in a pool can report concurrently.
    """

    def __init__(self, on_verdict=None):
        self._lock = threading.Lock()
        self._verdicts: list[Verdict] = []
        self.on_verdict = on_verdict

    def report(self, verdict: Verdict) -> None:
        with self._lock:
            self._verdicts.append(verdict)
        if self.on_verdict:
            self.on_verdict(verdict)

    @property
    def verdicts(self) -> list[Verdict]:
        with self._lock:
            return list(self._verdicts)

    def by_status(self, status: VerdictStatus) -> list[Verdict]:
        return [v for v in self.verdicts if v.status == status]

    def __len__(self) -> int:
        with self._lock:
            return len(self._verdicts)
