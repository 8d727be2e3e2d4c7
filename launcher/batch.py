from concurrent.futures import Executor, Future, wait
from dataclasses import dataclass
from typing import List

from client.dispatcher import Dispatcher
from synth.synthesizer import EventSynthesizer


@dataclass(frozen=True)
class BatchOutcome:
    success: int = 0
    failure: int = 0
    untracked: int = 0  # fire-and-forget sends

    @property
    def total(self) -> int:
        return self.success + self.failure + self.untracked

    def __add__(self, other: "BatchOutcome") -> "BatchOutcome":
        return BatchOutcome(self.success + other.success,
                            self.failure + other.failure,
                            self.untracked + other.untracked)


class PendingBatch:
    """A batch whose sends are in flight. result() blocks until every one has resolved."""
    def __init__(self, futures: List[Future], track_outcomes: bool):
        self.futures = futures
        self.track_outcomes = track_outcomes

    def result(self) -> BatchOutcome:
        wait(self.futures)
        if not self.track_outcomes:
            for f in self.futures:
                f.result()  # surface defects, ignore outcomes
            return BatchOutcome(untracked=len(self.futures))
        ok = sum(1 for f in self.futures if f.result())
        return BatchOutcome(success=ok, failure=len(self.futures) - ok)


class BatchRunner:
    """
    Fans n synthesize+send operations out to the worker's thread pool.
    Events are synthesized in the calling thread so the rng sequence stays deterministic.
    """
    def __init__(self, synthesizer: EventSynthesizer, dispatcher: Dispatcher,
                 executor: Executor, track_outcomes: bool = True):
        self.synthesizer = synthesizer
        self.dispatcher = dispatcher
        self.executor = executor
        self.track_outcomes = track_outcomes

    def submit_batch(self, n: int) -> PendingBatch:
        events = [self.synthesizer.synthesize() for _ in range(n)]
        futures = [self.executor.submit(self.dispatcher.send, e) for e in events]
        return PendingBatch(futures, self.track_outcomes)

    def run_batch(self, n: int) -> BatchOutcome:
        return self.submit_batch(n).result()
