"""Protean Engine runner for the cellar domain.

In production ``event_processing`` is async, so event handlers (order
broadcasts, cart reminder scheduling) run in Engine workers fed by the
broker rather than inside the request's unit of work.

Usage:
    python src/server.py
    python src/server.py --test-mode    # Drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool = False):
    from cellar.domain import cellar

    cellar.init()
    engine = Engine(cellar, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Cellar Engine runner")
    parser.add_argument("--test-mode", action="store_true", help="Process pending messages and exit")
    args = parser.parse_args()

    asyncio.run(run(args.test_mode))


if __name__ == "__main__":
    main()
