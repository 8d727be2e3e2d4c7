import threading, statistics, time
from collections import Counter
from typing import Optional

class Metrics:
    """Per-worker send metrics. Written from many dispatch threads, so every update takes the lock."""
    def __init__(self):
        self.lock = threading.Lock()
        self.latencies = []         # seconds, successful sends only
        self.status_codes = Counter()
        self.errors = Counter()     # transport error class name -> count
        self.ok_count = 0
        self.fail_count = 0
        self.t0 = time.time()

    def record_send(self, dt: float, ok: bool, status: Optional[int] = None):
        with self.lock:
            if status is not None:
                self.status_codes[status] += 1
            if ok:
                self.latencies.append(dt)
                self.ok_count += 1
            else:
                self.fail_count += 1

    def record_error(self, exc: BaseException):
        with self.lock:
            self.errors[type(exc).__name__] += 1

    def _stats(self, xs):
        if not xs:
            return {"avg": None, "p95": None}
        xs_sorted = sorted(xs)
        p95_idx = max(0, int(0.95 * (len(xs_sorted)-1)))
        return {"avg": statistics.mean(xs_sorted), "p95": xs_sorted[p95_idx]}

    def summary(self):
        with self.lock:
            elapsed = time.time() - self.t0
            return {
                "elapsed_sec": elapsed,
                "count": self.ok_count,
                "errors": self.fail_count,
                "throughput": self.ok_count / elapsed if elapsed > 0 else 0.0,
                "latency": self._stats(self.latencies),
                "status_codes": dict(self.status_codes),
                "transport_errors": dict(self.errors),
            }
