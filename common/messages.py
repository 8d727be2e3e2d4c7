from dataclasses import dataclass
from typing import Any, Dict, Optional

DONE = "done"
# message type used by the older cluster launchers; still accepted
LEGACY_DONE = "successCount"
TERMINAL_TYPES = (DONE, LEGACY_DONE)
# legacy messages carry no worker id
LEGACY_WORKER_ID = -1


@dataclass(frozen=True)
class WorkerResult:
    """Final tally of one worker. Built once, when its loop ends."""
    worker_id: int
    ok: int
    fail: int
    sent: int
    duration: float  # seconds
    latency_avg_ms: Optional[float] = None
    latency_p95_ms: Optional[float] = None

    @property
    def attempts(self) -> int:
        return self.ok + self.fail

    @property
    def rps(self) -> float:
        return self.sent / self.duration if self.duration > 0 else 0.0

    @property
    def success_ratio(self) -> float:
        return self.ok / self.attempts if self.attempts else 0.0


def create_done_message(result: WorkerResult) -> Dict[str, Any]:
    """Wraps a worker's final tally into the message sent to the coordinator."""
    return {
        "type": DONE,
        "worker_id": result.worker_id,
        "ok": result.ok,
        "fail": result.fail,
        "sent": result.sent,
        "duration": result.duration,
        "latency_avg_ms": result.latency_avg_ms,
        "latency_p95_ms": result.latency_p95_ms,
    }


def parse_done_message(msg: Dict[str, Any]) -> Optional[WorkerResult]:
    """Returns None for anything that is not a terminal worker message."""
    if not isinstance(msg, dict) or msg.get("type") not in TERMINAL_TYPES:
        return None
    ok, fail = int(msg.get("ok", 0)), int(msg.get("fail", 0))
    return WorkerResult(
        worker_id=int(msg.get("worker_id", LEGACY_WORKER_ID)),
        ok=ok,
        fail=fail,
        sent=int(msg.get("sent", ok + fail)),
        duration=float(msg.get("duration", 0.0)),
        latency_avg_ms=msg.get("latency_avg_ms"),
        latency_p95_ms=msg.get("latency_p95_ms"),
    )
