import queue
from concurrent.futures import ThreadPoolExecutor

import pytest

from client.dispatcher import Dispatcher
from common.config import RunConfig
from common.messages import DONE
from helpers import SlowDispatcher, StubDispatcher, mount
from launcher import worker as worker_mod
from launcher.batch import BatchOutcome, BatchRunner
from launcher.worker import WorkerLoop, run_worker
from synth.rng import SeededRandom
from synth.schemas import get_schema
from synth.synthesizer import EventSynthesizer


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TimedRunner:
    """Runner stub: each settled batch advances the fake clock by `step`."""
    track_outcomes = True

    def __init__(self, clock, step):
        self.clock = clock
        self.step = step
        self.sizes = []

    def submit_batch(self, n):
        self.sizes.append(n)
        runner = self

        class Pending:
            def result(self):
                runner.clock.now += runner.step
                return BatchOutcome(success=n)

        return Pending()


@pytest.fixture
def executor():
    with ThreadPoolExecutor(max_workers=64) as ex:
        yield ex


def real_runner(dispatcher, executor):
    rng = SeededRandom(5)
    return BatchRunner(EventSynthesizer(get_schema("shopping_mall", rng), rng), dispatcher, executor)


@pytest.mark.parametrize("target,batch,conc", [(1000, 150, 4), (7, 3, 2), (600, 150, 4), (1, 150, 4)])
def test_count_mode_hits_quota_exactly(target, batch, conc, executor):
    dispatcher = StubDispatcher(fail_every=7)
    loop = WorkerLoop(1, real_runner(dispatcher, executor), per_worker_target=target,
                      batch_size=batch, concurrent_batches=conc)
    result = loop.run()
    assert result.sent == target
    assert result.ok + result.fail == target
    assert dispatcher.calls == target
    assert result.fail == target // 7


def test_iteration_batches_run_concurrently(executor):
    dispatcher = SlowDispatcher(delay=0.1)
    result = WorkerLoop(1, real_runner(dispatcher, executor), per_worker_target=80,
                        batch_size=10, concurrent_batches=4).run()
    assert result.sent == 80
    # every send of an iteration overlaps, and the next iteration waits for them
    assert dispatcher.peak == 10 * 4
    assert dispatcher.in_flight == 0


def test_count_mode_batch_sizing():
    clock = FakeClock()
    runner = TimedRunner(clock, 0.1)
    WorkerLoop(1, runner, per_worker_target=1000, batch_size=150,
               concurrent_batches=4, clock=clock).run()
    assert runner.sizes == [150, 150, 150, 150, 150, 150, 100]


def test_zero_target_sends_nothing():
    clock = FakeClock()
    runner = TimedRunner(clock, 0.1)
    result = WorkerLoop(3, runner, per_worker_target=0, clock=clock).run()
    assert runner.sizes == []
    assert (result.ok, result.fail, result.sent) == (0, 0, 0)
    assert result.rps == 0.0
    assert result.success_ratio == 0.0


def test_duration_mode_stops_at_iteration_boundary():
    clock = FakeClock()
    runner = TimedRunner(clock, 0.25)
    loop = WorkerLoop(2, runner, duration=1.0, batch_size=10, concurrent_batches=2, clock=clock)
    result = loop.run()
    assert loop.iterations == 2
    assert runner.sizes == [10, 10, 10, 10]
    assert result.sent == 40
    assert result.duration == pytest.approx(1.0)


def test_duration_mode_may_overshoot():
    clock = FakeClock()
    runner = TimedRunner(clock, 0.3)
    result = WorkerLoop(2, runner, duration=1.0, batch_size=10, concurrent_batches=2,
                        clock=clock).run()
    # full-size batches every iteration, no throttling near the deadline
    assert runner.sizes == [10] * 4
    assert result.duration == pytest.approx(1.2)
    assert result.rps == pytest.approx(40 / 1.2)


def test_progress_is_monotonic(caplog):
    clock = FakeClock()
    runner = TimedRunner(clock, 0.1)
    with caplog.at_level("INFO", logger="launcher.worker"):
        WorkerLoop(4, runner, per_worker_target=50, batch_size=10,
                   concurrent_batches=2, clock=clock).run()
    sent = [int(r.getMessage().split("progress: ")[1].split("/")[0])
            for r in caplog.records if "progress:" in r.getMessage()]
    assert sent == [20, 40, 50]


def test_run_worker_reports_once(monkeypatch):
    class OfflineDispatcher(Dispatcher):
        def __init__(self, *args, **kw):
            super().__init__(*args, **kw)
            mount(self, lambda n, req: 500 if n % 10 == 0 else 200)

    monkeypatch.setattr(worker_mod, "Dispatcher", OfflineDispatcher)
    monkeypatch.setattr(worker_mod, "configure_logging", lambda level: None)
    config = RunConfig(total_requests=1200, workers=4, batch_size=50, concurrent_batches=2,
                       base_seed=1234, retry_on_status=False)
    channel = queue.Queue()
    result = run_worker(1, config, channel)

    msg = channel.get_nowait()
    assert channel.empty()
    assert msg["type"] == DONE
    assert msg["worker_id"] == 1
    assert msg["sent"] == 300
    assert msg["ok"] + msg["fail"] == 300
    assert msg["fail"] == 30
    assert result.sent == 300
    assert msg["latency_avg_ms"] is not None


def test_run_worker_fire_and_forget(monkeypatch):
    class OfflineDispatcher(Dispatcher):
        def __init__(self, *args, **kw):
            super().__init__(*args, **kw)
            self.adapter = mount(self, lambda n, req: 503)

    created = []

    def factory(*args, **kw):
        d = OfflineDispatcher(*args, **kw)
        created.append(d)
        return d

    monkeypatch.setattr(worker_mod, "Dispatcher", factory)
    monkeypatch.setattr(worker_mod, "configure_logging", lambda level: None)
    config = RunConfig(total_requests=100, workers=1, batch_size=25, concurrent_batches=2,
                       base_seed=1, track_outcomes=False)
    channel = queue.Queue()
    run_worker(1, config, channel)
    msg = channel.get_nowait()
    assert (msg["ok"], msg["fail"], msg["sent"]) == (0, 0, 100)
    # no retries without outcome tracking
    assert created[0].adapter.calls == 100


def test_finish_logs_status_breakdown(monkeypatch, caplog):
    class OfflineDispatcher(Dispatcher):
        def __init__(self, *args, **kw):
            super().__init__(*args, **kw)
            mount(self, lambda n, req: 500 if n % 10 == 0 else 200)

    monkeypatch.setattr(worker_mod, "Dispatcher", OfflineDispatcher)
    monkeypatch.setattr(worker_mod, "configure_logging", lambda level: None)
    config = RunConfig(total_requests=100, workers=1, batch_size=10, concurrent_batches=2,
                       base_seed=3, retry_on_status=False)
    with caplog.at_level("INFO", logger="launcher.worker"):
        run_worker(1, config, queue.Queue())
    assert "status codes: {200: 90, 500: 10} | transport errors: none" in caplog.text
