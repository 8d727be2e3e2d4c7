"""
Spawns the worker processes and folds their terminal messages into one summary.
Only collect() touches the aggregate, and only from the parent process.
"""
import logging
import multiprocessing
import queue
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from common.config import RunConfig
from common.messages import LEGACY_WORKER_ID, WorkerResult, parse_done_message
from launcher.worker import run_worker

logger = logging.getLogger(__name__)


class WorkerTimeout(RuntimeError):
    def __init__(self, missing: Sequence[int]):
        self.missing = list(missing)
        super().__init__(f"No terminal message from worker(s) {self.missing}")


@dataclass
class RunSummary:
    workers: int = 0
    total_ok: int = 0
    total_fail: int = 0
    total_sent: int = 0
    elapsed: float = 0.0     # longest worker duration (workers run side by side)
    wall_time: float = 0.0
    latency_avg_ms: Optional[float] = None
    latency_p95_ms: Optional[float] = None
    results: List[WorkerResult] = field(default_factory=list)

    @property
    def total_tried(self) -> int:
        return self.total_ok + self.total_fail

    @property
    def success_rate(self) -> float:
        """Percent."""
        return self.total_ok / self.total_tried * 100 if self.total_tried else 0.0

    @property
    def rps(self) -> float:
        return self.total_sent / self.elapsed if self.elapsed > 0 else 0.0

    def add(self, result: WorkerResult):
        self.results.append(result)
        self.workers += 1
        self.total_ok += result.ok
        self.total_fail += result.fail
        self.total_sent += result.sent
        self.elapsed = max(self.elapsed, result.duration)

        timed = [r for r in self.results if r.latency_avg_ms is not None and r.ok]
        if timed:
            self.latency_avg_ms = round(sum(r.latency_avg_ms * r.ok for r in timed) /
                                        sum(r.ok for r in timed), 1)
            self.latency_p95_ms = max(r.latency_p95_ms for r in timed)

    def print_summary(self):
        print("\n=== Run Summary ===")
        print(f"Workers: {self.workers}  Elapsed: {self.elapsed:.2f}s  Wall: {self.wall_time:.2f}s")
        print(f"Sent: {self.total_sent}  avg RPS: {self.rps:.0f}")
        if self.total_tried:
            print(f"Total ok: {self.total_ok}")
            print(f"Total fail: {self.total_fail}")
            print(f"Success rate: {self.success_rate:.2f}%")
        else:
            print("Outcomes not tracked (fire-and-forget)")
        if self.latency_avg_ms is not None:
            print(f"Latency: avg={self.latency_avg_ms} ms  worst p95={self.latency_p95_ms} ms")


class Coordinator:
    def __init__(self, config: RunConfig, target: Callable = run_worker):
        self.config = config
        self.target = target
        self.procs: List[multiprocessing.Process] = []

    @property
    def worker_ids(self) -> List[int]:
        return list(range(1, self.config.workers + 1))

    def start(self):
        channel = multiprocessing.Queue()
        for wid in self.worker_ids:
            p = multiprocessing.Process(target=self.target, args=(wid, self.config, channel),
                                        name=f"eventstorm-worker-{wid}")
            p.start()
            self.procs.append(p)
        return channel

    def collect(self, channel, worker_ids: Sequence[int],
                timeout: Optional[float] = None) -> RunSummary:
        """
        Fold exactly one terminal message per worker. With timeout=None this waits
        forever, so a worker that dies before reporting blocks the run.
        """
        summary = RunSummary()
        expected = set(worker_ids)
        seen = set()
        legacy = 0
        deadline = time.monotonic() + timeout if timeout is not None else None

        while len(seen) + legacy < len(expected):
            wait = None
            if deadline is not None:
                wait = max(0.0, deadline - time.monotonic())
            try:
                msg = channel.get(timeout=wait)
            except queue.Empty:
                raise WorkerTimeout(sorted(expected - seen)) from None

            result = parse_done_message(msg)
            if result is None:
                logger.warning("Ignoring unexpected message: %r", msg)
                continue
            if result.worker_id == LEGACY_WORKER_ID:
                legacy += 1
            elif result.worker_id in seen:
                logger.warning("Ignoring duplicate result from worker %d", result.worker_id)
                continue
            elif result.worker_id not in expected:
                logger.warning("Ignoring result from unknown worker %d", result.worker_id)
                continue
            else:
                seen.add(result.worker_id)
            summary.add(result)
            logger.info("Worker %d reported (%d/%d)", result.worker_id, summary.workers, len(expected))
        return summary

    def run(self) -> RunSummary:
        cfg = self.config
        if cfg.is_time_based:
            print(f"[Launcher] duration mode: {cfg.duration_sec:.0f}s ({cfg.duration_sec / 60:.1f} min)")
        else:
            print(f"[Launcher] count mode: {cfg.total_requests} requests "
                  f"({cfg.per_worker_target} per worker)")
        print(f"[Launcher] endpoint: {cfg.endpoint}")
        print(f"[Launcher] starting {cfg.workers} workers | schema={cfg.schema} "
              f"batch={cfg.batch_size}x{cfg.concurrent_batches} seed={cfg.base_seed}")

        t0 = time.monotonic()
        channel = self.start()
        try:
            summary = self.collect(channel, self.worker_ids, cfg.worker_timeout_sec)
        except WorkerTimeout:
            for p in self.procs:
                if p.is_alive():
                    p.terminate()
            raise
        finally:
            for p in self.procs:
                p.join()
        summary.wall_time = time.monotonic() - t0
        summary.print_summary()
        return summary
