"""Command-line entry point: one lookup run, then exit."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any

from dockmqtt.config import DockConfig, parse_broker
from dockmqtt.exceptions import DockConfigError
from dockmqtt.runner import DockRunner

_LOG = logging.getLogger("dockmqtt")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dockmqtt",
        description="Read retained VIN / vehicle ID from MQTT and write them with the dock MAC to files.",
    )
    parser.add_argument("--broker", help="Broker as tcp://host:port, host:port or host")
    parser.add_argument("--vin-topic", help="Topic carrying the retained VIN")
    parser.add_argument("--vehicle-id-topic", help="Topic carrying the retained vehicle ID")
    parser.add_argument("--wait", type=float, help="Seconds to wait for retained messages")
    parser.add_argument("--output-dir", help="Directory for the result files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.broker:
        overrides["broker_host"], overrides["broker_port"] = parse_broker(args.broker)
    if args.vin_topic:
        overrides["vin_topic"] = args.vin_topic
    if args.vehicle_id_topic:
        overrides["vehicle_id_topic"] = args.vehicle_id_topic
    if args.wait is not None:
        overrides["wait_seconds"] = args.wait
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    return overrides


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = DockConfig.from_env(**_overrides(args))
    except DockConfigError as exc:
        _LOG.error("Invalid configuration: %s", exc)
        return 2

    identity = asyncio.run(DockRunner(config).run_async())
    _LOG.info("Results written to %s (status=%s)", config.output_dir, identity.status)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
