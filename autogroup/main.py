from __future__ import annotations

import argparse
import asyncio
import logging

from .config import load_config
from .icons import StaticIconProvider
from .manager import AggregateGroupManager
from .notifiers.factory import build_notifiers
from .notifiers.message import build_event_message
from .replay import ReplayHost, load_scenario, run_scenario


async def main() -> None:
    args = _parse_args()
    try:
        config = load_config(args.config)
        notifiers = build_notifiers(config)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Invalid config {args.config}: {exc}") from exc
    _configure_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not args.dry_run and not notifiers:
        raise SystemExit(
            "At least one notifier is required unless --dry-run is set. "
            "Set notify entries in config.yaml."
        )

    host = ReplayHost()
    manager = AggregateGroupManager(
        host, config=config.grouping, icon_provider=StaticIconProvider(config.icons)
    )
    try:
        events = load_scenario(args.scenario)
        host_events = run_scenario(manager, host, events)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Could not replay scenario {args.scenario}: {exc}") from exc

    delivered = 0
    for event in host_events:
        message = build_event_message(event)
        if args.dry_run:
            logger.info("[dry-run] %s %s", message.operation, message.payload)
            continue
        sent = True
        for notifier in notifiers:
            try:
                success = await notifier.send(message)
            except Exception as exc:
                logger.error("Notifier failed for %s: %s", message.operation, exc)
                success = False
            sent = sent and success
        if sent:
            delivered += 1

    if args.dry_run:
        logger.info("Dry-run complete: %s events from %s scenario steps", len(host_events), len(events))
    else:
        logger.info("Replay complete: %s events, %s delivered", len(host_events), delivered)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Notification autogrouping replay")
    parser.add_argument("--config", default="./config.yaml")
    parser.add_argument("--scenario", required=True, help="YAML list of notification events")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
