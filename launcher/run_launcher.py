"""
Usage examples:

# 100k requests (default) against the local collector sink
python -m launcher.run_launcher

# 100k requests against a given endpoint
python -m launcher.run_launcher http://example.com/api/analytics/collect

# 5 minutes / 1 hour of traffic
python -m launcher.run_launcher http://example.com/api/analytics/collect 0 300
python -m launcher.run_launcher http://example.com/api/analytics/collect 0 3600
"""
import sys

from common.config import ConfigError, configure_logging, load_config
from launcher.coordinator import Coordinator


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        config = load_config(argv)
    except ConfigError as e:
        print(f"[Launcher] config error: {e}", file=sys.stderr)
        print("Usage: eventstorm [endpoint_url] [total_requests_or_0] [duration_seconds_or_0]",
              file=sys.stderr)
        return 2

    configure_logging(config.log_level)
    Coordinator(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
