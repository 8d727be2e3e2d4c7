"""
Usage examples:

# collector on the default port (8080)
python -m sink.run_sink

# on another port, failing 5% of requests with 503
SINK_FAIL_RATE=0.05 python -m sink.run_sink 9000
"""
import uvicorn
import sys
import os

def main():
    # First positional arg wins, then SINK_PORT, then 8080.
    if len(sys.argv) > 1:
        try:
            port = int(sys.argv[1])
        except ValueError:
            raise RuntimeError("First argument must be the sink port (e.g. 8080)")
    else:
        port = int(os.environ.get("SINK_PORT", 8080))

    host = os.environ.get("SINK_HOST", "0.0.0.0")
    uvicorn.run("sink.collector:app", host=host, port=port, reload=False, access_log=False)

if __name__ == "__main__":
    main()
