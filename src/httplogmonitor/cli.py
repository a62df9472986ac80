import argparse
import asyncio
import logging
import signal
import sys

from httplogmonitor.config import ConfigValidationError, env_overrides, load_config
from httplogmonitor.pipeline import Pipeline
from httplogmonitor.tailer import FatalResourceError

STOP_SIGNALS = ("SIGHUP", "SIGINT", "SIGTERM", "SIGQUIT")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="httplogmonitor",
        description="Watch an HTTP access log: periodic traffic summaries and a high traffic alert.",
    )
    p.add_argument("-f", dest="log_file", help="Path to the log file.")
    p.add_argument("-i", dest="summary_interval_s", type=float, help="Interval between summary displays (seconds).")
    p.add_argument("-p", dest="poll_interval_s", type=float, help="Polling interval (seconds).")
    p.add_argument("-w", dest="monitor_window_s", type=float, help="Monitoring window (seconds).")
    p.add_argument("-t", dest="alert_threshold", type=int, help="Alerting threshold (hits per second).")
    p.add_argument("-n", dest="top_sections", type=int, help="How many most hit sections to display.")
    p.add_argument("-v", dest="verbose", action="store_true", default=None,
                   help="Be verbose (show the regular average traffic).")
    p.add_argument("--log-level", dest="log_level", help="Diagnostics log level (stderr).")
    return p


async def _serve(pipeline: Pipeline) -> None:
    loop = asyncio.get_running_loop()
    for name in STOP_SIGNALS:
        sig = getattr(signal, name, None)
        if sig is not None:
            loop.add_signal_handler(sig, pipeline.cancel)
    await pipeline.run()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    values = env_overrides()
    values.update({k: v for k, v in vars(args).items() if v is not None})

    try:
        cfg = load_config(**values)
    except ConfigValidationError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(_serve(Pipeline(cfg)))
    except FatalResourceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print("\nStopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
