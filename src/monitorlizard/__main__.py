"""CLI entry point for the monitorlizard relay monitor.

Runs continuously with a Prometheus metrics server until SIGINT/SIGTERM, or
performs a single measurement cycle with ``--once``. Relay URLs given on the
command line are monitored when the configuration file lists no endpoints.

Examples:
    ```bash
    python -m monitorlizard wss://relay.damus.io wss://nos.lol
    python -m monitorlizard --config config/monitor.yaml --once
    python -m monitorlizard --log-level DEBUG
    ```
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any

from monitorlizard.core import ConfigurationError, start_metrics_server
from monitorlizard.core.logger import Logger, StructuredFormatter
from monitorlizard.core.yaml import load_yaml
from monitorlizard.services.monitor import Monitor


DEFAULT_CONFIG = Path("config") / "monitor.yaml"

logger = Logger("cli")


async def run_monitor(service: Monitor, *, once: bool) -> int:
    """Run the monitor in one-shot or continuous mode.

    Returns:
        Exit code: 0 for success, 1 for failure.
    """
    # One-shot mode: single cycle, no metrics server
    if once:
        try:
            async with service:
                await service.run_once()
            logger.info("monitor_completed")
            return 0
        except Exception as e:  # Intentionally broad: CLI error boundary for one-shot mode
            logger.error("monitor_failed", error=str(e))
            return 1

    # Continuous mode: metrics server + indefinite operation
    metrics_config = service.config.metrics
    metrics_server = await start_metrics_server(metrics_config)

    if metrics_config.enabled:
        logger.info(
            "metrics_server_started",
            host=metrics_config.host,
            port=metrics_config.port,
            path=metrics_config.path,
        )

    def handle_signal(sig: signal.Signals) -> None:
        logger.info("shutdown_signal", signal=sig.name)
        service.request_shutdown()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        async with service:
            await service.run()
        return 0
    except Exception as e:  # Intentionally broad: CLI error boundary for continuous mode
        logger.error("monitor_failed", error=str(e))
        return 1
    finally:
        await metrics_server.stop()
        if metrics_config.enabled:
            logger.info("metrics_server_stopped")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="monitorlizard",
        description="NIP-66 relay latency monitor",
    )

    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="Relay URLs to monitor when the config lists no endpoints",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Config path (default: {DEFAULT_CONFIG})",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Publish startup events, measure every endpoint once and exit",
    )

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Install a ``StructuredFormatter`` on the root handler.

    Output from both ``Logger`` and plain ``logging.getLogger()`` calls is
    unified as ``level name message key=value ...``.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict, returning ``{}`` if the file does not exist."""
    if not path.exists():
        logger.warning("config_not_found", path=str(path))
        return {}
    return load_yaml(path)


async def main(argv: list[str] | None = None) -> int:
    """Parse arguments, build the monitor and run it."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        service = Monitor.from_dict(_load_yaml_dict(args.config), urls=args.urls)
    except (ConfigurationError, ValueError) as e:
        logger.error("config_invalid", error=str(e))
        return 1

    try:
        return await run_monitor(service, once=args.once)
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
