"""
One worker: owns its rng, client pool, connection pool and thread pool, and
pushes batch groups until its share of the run is done.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from client.dispatcher import Dispatcher
from common.config import RunConfig, configure_logging
from common.messages import WorkerResult, create_done_message
from launcher.batch import BatchOutcome, BatchRunner, PendingBatch
from synth.rng import SeededRandom
from synth.schemas import get_schema
from synth.synthesizer import EventSynthesizer
from utils.metrics import Metrics

logger = logging.getLogger(__name__)


class WorkerLoop:
    """
    Count mode (duration == 0): stop exactly at per_worker_target sends.
    Duration mode: stop at the first iteration boundary past the deadline;
    every iteration schedules full batches, so the last one may overshoot.
    """
    def __init__(self, worker_id: int, runner: BatchRunner, *, per_worker_target: int = 0,
                 duration: float = 0.0, batch_size: int = 150, concurrent_batches: int = 4,
                 metrics: Optional[Metrics] = None, clock: Callable[[], float] = time.monotonic):
        self.worker_id = worker_id
        self.runner = runner
        self.per_worker_target = per_worker_target
        self.duration = duration
        self.batch_size = batch_size
        self.concurrent_batches = concurrent_batches
        self.metrics = metrics
        self.clock = clock

        self.sent = 0
        self.ok = 0
        self.fail = 0
        self.iterations = 0
        self.start = None

    @property
    def is_time_based(self) -> bool:
        return self.duration > 0

    def elapsed(self) -> float:
        return self.clock() - self.start

    def _settle(self, pending: List[PendingBatch]):
        outcome = sum((p.result() for p in pending), BatchOutcome())
        self.ok += outcome.success
        self.fail += outcome.failure
        self.iterations += 1

    def _count_iteration(self):
        pending = []
        for _ in range(self.concurrent_batches):
            remaining = self.per_worker_target - self.sent
            if remaining <= 0:
                break
            size = min(self.batch_size, remaining)
            self.sent += size
            pending.append(self.runner.submit_batch(size))
        self._settle(pending)

    def _duration_iteration(self):
        pending = [self.runner.submit_batch(self.batch_size) for _ in range(self.concurrent_batches)]
        self.sent += self.batch_size * self.concurrent_batches
        self._settle(pending)

    def _log_progress(self):
        elapsed = self.elapsed()
        rps = self.sent / elapsed if elapsed > 0 else 0.0
        if self.is_time_based:
            logger.info("[Worker %d] progress(time): sent=%d ok=%d fail=%d rps=%.0f remaining=%.1fs",
                        self.worker_id, self.sent, self.ok, self.fail, rps,
                        max(0.0, self.duration - elapsed))
        else:
            logger.info("[Worker %d] progress: %d/%d ok=%d fail=%d rps=%.0f",
                        self.worker_id, self.sent, self.per_worker_target,
                        self.ok, self.fail, rps)

    def run(self) -> WorkerResult:
        if self.is_time_based:
            logger.info("[Worker %d] started | duration mode | target %.0fs", self.worker_id, self.duration)
        else:
            logger.info("[Worker %d] started | count mode | target %d requests",
                        self.worker_id, self.per_worker_target)

        self.start = self.clock()
        if self.is_time_based:
            while self.elapsed() < self.duration:
                self._duration_iteration()
                self._log_progress()
        else:
            while self.sent < self.per_worker_target:
                self._count_iteration()
                self._log_progress()

        return self._finish()

    def _finish(self) -> WorkerResult:
        duration = self.elapsed()
        latency_avg = latency_p95 = None
        stats = self.metrics.summary() if self.metrics is not None else None
        if stats is not None and stats["latency"]["avg"] is not None:
            latency_avg = round(stats["latency"]["avg"] * 1000, 1)
            latency_p95 = round(stats["latency"]["p95"] * 1000, 1)

        result = WorkerResult(self.worker_id, self.ok, self.fail, self.sent, duration,
                              latency_avg, latency_p95)
        if self.runner.track_outcomes:
            logger.info("[Worker %d] done | %.1fs | success=%.2f%% ok=%d fail=%d avg_rps=%.0f",
                        self.worker_id, duration, result.success_ratio * 100,
                        self.ok, self.fail, result.rps)
        else:
            logger.info("[Worker %d] done | %.1fs | sent=%d (untracked) avg_rps=%.0f",
                        self.worker_id, duration, self.sent, result.rps)
        if stats is not None and (stats["status_codes"] or stats["transport_errors"]):
            logger.info("[Worker %d] status codes: %s | transport errors: %s", self.worker_id,
                        dict(sorted(stats["status_codes"].items())),
                        stats["transport_errors"] or "none")
        return result


def build_worker(worker_id: int, config: RunConfig, executor: ThreadPoolExecutor):
    """Wire one worker's private rng, schema, dispatcher and loop."""
    rng = SeededRandom(config.base_seed + worker_id)
    logger.info("[Worker %d] seed %d", worker_id, rng.seed)
    schema = get_schema(config.schema, rng, config.client_pool_size, config.reuse_probability)
    metrics = Metrics()
    dispatcher = Dispatcher(
        config.endpoint,
        # fire-and-forget: one attempt, nobody is counting
        retry_limit=config.retry_limit if config.track_outcomes else 0,
        retry_backoff=config.retry_backoff_sec,
        retry_on_status=config.retry_on_status,
        success_status_max=config.success_status_max,
        timeout=config.request_timeout_sec,
        max_sockets=config.pool_size,
        metrics=metrics,
        log_failures=config.track_outcomes,
    )
    runner = BatchRunner(EventSynthesizer(schema, rng), dispatcher, executor, config.track_outcomes)
    loop = WorkerLoop(
        worker_id,
        runner,
        per_worker_target=config.per_worker_target,
        duration=config.duration_sec,
        batch_size=config.batch_size,
        concurrent_batches=config.concurrent_batches,
        metrics=metrics,
    )
    return loop, dispatcher


def run_worker(worker_id: int, config: RunConfig, channel) -> WorkerResult:
    """Process entry point. Puts exactly one done message on channel."""
    configure_logging(config.log_level)
    with ThreadPoolExecutor(max_workers=config.in_flight_limit,
                            thread_name_prefix=f"worker{worker_id}") as executor:
        loop, dispatcher = build_worker(worker_id, config, executor)
        try:
            result = loop.run()
        finally:
            dispatcher.close()
    channel.put(create_done_message(result))
    return result
