import json, logging, time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from utils.metrics import Metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    ok: bool
    attempts: int
    status: Optional[int] = None   # None -> last attempt failed in transport

    def __bool__(self) -> bool:
        return self.ok


class Dispatcher:
    """
    POSTs one event per send() to the endpoint over a keep-alive connection pool.

    A send makes at most 1 + retry_limit attempts, sleeping retry_backoff
    seconds between them. Transport errors are always retried; non-success
    status codes only when retry_on_status is set.
    """
    def __init__(self, endpoint: str, *, retry_limit: int = 2, retry_backoff: float = 0.01,
                 retry_on_status: bool = True, success_status_max: int = 300,
                 timeout: float = 30.0, max_sockets: int = 600,
                 metrics: Optional[Metrics] = None, log_failures: bool = True):
        self.endpoint = endpoint
        self.retry_limit = retry_limit
        self.retry_backoff = retry_backoff
        self.retry_on_status = retry_on_status
        self.success_status_max = success_status_max
        self.timeout = timeout
        self.metrics = metrics
        self.log_failures = log_failures

        self.session = requests.Session()
        # pool_block: never open more than max_sockets connections to the endpoint
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max_sockets,
                              pool_block=True, max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def is_success(self, status: int) -> bool:
        return 200 <= status < self.success_status_max

    def encode(self, event: Dict[str, Any]) -> bytes:
        return json.dumps(event, ensure_ascii=False).encode("utf-8")

    def send(self, event: Dict[str, Any]) -> DispatchResult:
        body = self.encode(event)
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }
        status = None
        attempt = 0
        t0 = time.time()
        while attempt <= self.retry_limit:
            if attempt:
                time.sleep(self.retry_backoff)
            attempt += 1
            try:
                # .content drains the body so the connection goes back to the pool
                resp = self.session.post(self.endpoint, data=body, headers=headers, timeout=self.timeout)
                resp.content
            except requests.exceptions.RequestException as e:
                status = None
                if self.metrics:
                    self.metrics.record_error(e)
                logger.debug("attempt %d/%d failed: %s", attempt, self.retry_limit + 1, e)
                continue

            status = resp.status_code
            if self.is_success(status):
                self._record(t0, True, status)
                return DispatchResult(True, attempt, status)
            logger.debug("attempt %d/%d got status %d", attempt, self.retry_limit + 1, status)
            if not self.retry_on_status:
                break

        if self.log_failures:
            if status is None:
                logger.warning("Request failed after %d attempt(s): transport error", attempt)
            else:
                logger.warning("Request failed after %d attempt(s): status %d", attempt, status)
        self._record(t0, False, status)
        return DispatchResult(False, attempt, status)

    def _record(self, t0: float, ok: bool, status: Optional[int]):
        if self.metrics:
            self.metrics.record_send(time.time() - t0, ok, status)

    def close(self):
        self.session.close()
