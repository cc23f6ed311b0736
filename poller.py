import argparse
import asyncio
import logging
import sys
from typing import Any, List, Optional

import httpx

from config import parse_duration
from exceptions import ConfigError

logger = logging.getLogger(__name__)

API_URL = "http://localhost:8080"
LOCATION_PATH = "/location/get"


async def poll_locations(
    base_url: str = API_URL,
    interval: float = 3.0,
    count: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[List[Any]]:
    """Poll the location endpoint like a map UI would. Returns every snapshot received."""
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(base_url=base_url, timeout=10.0)

    received: List[List[Any]] = []
    previous = None
    polls = 0
    try:
        while count is None or polls < count:
            if polls:
                await asyncio.sleep(interval)
            polls += 1
            try:
                resp = await client.get(LOCATION_PATH)
            except httpx.HTTPError as e:
                logger.warning("Poll %d failed: %s", polls, e)
                continue
            if resp.status_code != 200:
                logger.warning("Poll %d: HTTP %d %s", polls, resp.status_code, resp.text)
                continue

            try:
                vehicles = resp.json()
            except ValueError as e:
                logger.warning("Poll %d: response is not JSON: %s", polls, e)
                continue
            if not isinstance(vehicles, list):
                logger.warning("Poll %d: expected a list of vehicles, got %s", polls, type(vehicles).__name__)
                continue
            received.append(vehicles)
            logger.info(
                "Poll %d: %d vehicles%s",
                polls,
                len(vehicles),
                "" if vehicles != previous else " (unchanged)",
            )
            previous = vehicles
    finally:
        if owns_client:
            await client.aclose()
    return received


def _interval(value: str) -> float:
    try:
        return parse_duration(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll a running location mock server")
    parser.add_argument("--url", default=API_URL)
    parser.add_argument("--interval", type=_interval, default=3.0, help="time between polls, e.g. 3s or 500ms")
    parser.add_argument("--count", type=int, help="stop after this many polls")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(name)s: %(message)s', stream=sys.stdout)
    try:
        asyncio.run(poll_locations(args.url, args.interval, args.count))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
