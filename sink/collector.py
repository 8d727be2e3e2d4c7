"""
Local analytics collector: a stand-in endpoint for dry runs of the launcher.
Counts what it receives and can be told to fail a share of requests.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
import json, os, random
from collections import Counter
from threading import Lock

app = FastAPI()

# Share of requests answered with 503 (0..1), to exercise the retry path
FAIL_RATE = float(os.environ.get("SINK_FAIL_RATE", 0))

counts: Counter = Counter()
rejected = 0
failed = 0
lock = Lock()


def reset():
    global rejected, failed
    with lock:
        counts.clear()
        rejected = 0
        failed = 0


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/analytics/collect")
async def collect(request: Request):
    global rejected, failed
    if FAIL_RATE > 0 and random.random() < FAIL_RATE:
        with lock:
            failed += 1
        return JSONResponse(status_code=503, content={"status": "unavailable"})

    try:
        event = json.loads(await request.body())
    except ValueError:
        event = None
    if not isinstance(event, dict) or not event.get("event_name"):
        with lock:
            rejected += 1
        raise HTTPException(status_code=422, detail="expected a JSON object with event_name")

    with lock:
        counts[event["event_name"]] += 1
    return {"status": "ok"}


@app.get("/stats")
async def stats():
    with lock:
        return {
            "received": sum(counts.values()),
            "by_event": dict(counts),
            "rejected": rejected,
            "failed": failed,
        }
