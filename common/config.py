"""
Run configuration: positional CLI args + environment variables.

Usage examples:

# 100k requests against the local collector
python -m launcher.run_launcher

# 5 minutes of traffic against another endpoint
python -m launcher.run_launcher http://example.com/api/analytics/collect 0 300

# fire-and-forget, 4 workers, simple schema
TRACK_OUTCOMES=0 WORKERS=4 EVENT_SCHEMA=auto_click python -m launcher.run_launcher
"""
import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import List, Mapping, Optional
from urllib.parse import urlparse

import psutil

DEFAULT_ENDPOINT = "http://localhost:8080/api/analytics/collect"
DEFAULT_TOTAL = 100_000
DEFAULT_WORKERS = 12
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class RunConfig:
    endpoint: str = DEFAULT_ENDPOINT
    total_requests: int = DEFAULT_TOTAL
    duration_sec: float = 0.0
    batch_size: int = 150
    concurrent_batches: int = 4
    workers: int = DEFAULT_WORKERS
    schema: str = "shopping_mall"
    base_seed: int = 0
    client_pool_size: int = 1000
    reuse_probability: Optional[float] = None  # None -> schema default
    retry_limit: int = 2
    retry_backoff_sec: float = 0.01
    retry_on_status: bool = True
    success_status_max: int = 300
    track_outcomes: bool = True
    request_timeout_sec: float = 30.0
    max_sockets: Optional[int] = None
    worker_timeout_sec: Optional[float] = None
    log_level: str = "INFO"

    @property
    def is_time_based(self) -> bool:
        return self.duration_sec > 0

    @property
    def per_worker_target(self) -> int:
        return self.total_requests // self.workers

    @property
    def in_flight_limit(self) -> int:
        return self.batch_size * self.concurrent_batches

    @property
    def pool_size(self) -> int:
        return self.max_sockets or self.in_flight_limit

    def validate(self) -> "RunConfig":
        scheme = urlparse(self.endpoint).scheme
        if scheme not in ("http", "https"):
            raise ConfigError(f"Endpoint must be an http(s) URL, got '{self.endpoint}'")
        for name in ("batch_size", "concurrent_batches", "workers", "client_pool_size"):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1")
        if self.total_requests < 0 or self.duration_sec < 0:
            raise ConfigError("total requests and duration must not be negative")
        if self.retry_limit < 0:
            raise ConfigError("retry_limit must be >= 0")
        if self.retry_backoff_sec < 0:
            raise ConfigError("retry backoff must not be negative")
        if self.reuse_probability is not None and not 0.0 <= self.reuse_probability <= 1.0:
            raise ConfigError("client reuse probability must be within 0..1")
        if self.success_status_max <= 200:
            raise ConfigError("success_status_max must be > 200")
        if self.worker_timeout_sec is not None and self.worker_timeout_sec <= 0:
            raise ConfigError("worker timeout must be > 0")
        if self.max_sockets is not None and self.max_sockets < 1:
            raise ConfigError("max_sockets must be >= 1")
        # checked here, not in the worker: a worker that dies early never reports
        from synth.schemas import SCHEMAS
        if self.schema not in SCHEMAS:
            raise ConfigError(f"Unknown event schema '{self.schema}' (choose from {sorted(SCHEMAS)})")
        return self


def _int(raw: str, what: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{what} must be an integer (got '{raw}')") from None


def _float(raw: str, what: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{what} must be a number (got '{raw}')") from None


def _flag(raw: str) -> bool:
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


def _workers(raw: str) -> int:
    if raw.strip().lower() == "auto":
        return psutil.cpu_count(logical=True) or 1
    return _int(raw, "WORKERS")


def load_config(argv: Optional[List[str]] = None,
                environ: Optional[Mapping[str, str]] = None) -> RunConfig:
    """
    argv: [endpoint_url] [total_requests_or_0] [duration_seconds_or_0]
    Everything else comes from environment variables.
    """
    argv = sys.argv[1:] if argv is None else argv
    env = os.environ if environ is None else environ

    endpoint = argv[0] if len(argv) > 0 and argv[0] else DEFAULT_ENDPOINT
    # 0 means "use the default", like an omitted argument
    total = _int(argv[1], "total requests") if len(argv) > 1 else 0
    duration = _int(argv[2], "duration seconds") if len(argv) > 2 else 0

    reuse = env.get("CLIENT_REUSE_PROB")
    max_sockets = env.get("MAX_SOCKETS")
    worker_timeout = env.get("WORKER_TIMEOUT_SEC")

    cfg = RunConfig(
        endpoint=endpoint,
        total_requests=total or DEFAULT_TOTAL,
        duration_sec=float(duration),
        batch_size=_int(env.get("BATCH_SIZE", "150"), "BATCH_SIZE"),
        concurrent_batches=_int(env.get("CONCURRENT_BATCHES", "4"), "CONCURRENT_BATCHES"),
        workers=_workers(env.get("WORKERS", str(DEFAULT_WORKERS))),
        schema=env.get("EVENT_SCHEMA", "shopping_mall"),
        base_seed=_int(env["SEED"], "SEED") if env.get("SEED") else int(time.time() * 1000),
        client_pool_size=_int(env.get("CLIENT_POOL_SIZE", "1000"), "CLIENT_POOL_SIZE"),
        reuse_probability=_float(reuse, "CLIENT_REUSE_PROB") if reuse else None,
        retry_limit=_int(env.get("RETRY_LIMIT", "2"), "RETRY_LIMIT"),
        retry_backoff_sec=_float(env.get("RETRY_BACKOFF_MS", "10"), "RETRY_BACKOFF_MS") / 1000.0,
        retry_on_status=_flag(env.get("RETRY_ON_STATUS", "1")),
        success_status_max=_int(env.get("SUCCESS_STATUS_MAX", "300"), "SUCCESS_STATUS_MAX"),
        track_outcomes=_flag(env.get("TRACK_OUTCOMES", "1")),
        request_timeout_sec=_float(env.get("REQUEST_TIMEOUT_SEC", "30"), "REQUEST_TIMEOUT_SEC"),
        max_sockets=_int(max_sockets, "MAX_SOCKETS") if max_sockets else None,
        worker_timeout_sec=_float(worker_timeout, "WORKER_TIMEOUT_SEC") if worker_timeout else None,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
    return cfg.validate()


def configure_logging(level: str = "INFO") -> None:
    # force=True: replaces whatever root handlers the process already has
    logging.basicConfig(
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )
