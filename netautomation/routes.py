"""Collect routing tables from devices and check for expected prefixes."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

EXPECTED_ROUTES = ("198.51.100.0/32", "198.51.100.1/32", "198.51.100.2/32")

_IPV4_PREFIX = re.compile(r"(\d{1,3}\.){3}\d{1,3}/\d{1,2}", re.ASCII)

log = logging.getLogger(__name__)


def extract_ipv4_prefixes(text: str) -> list[str]:
    """Return every IPv4 prefix written in the text, in order."""
    return [match.group(0) for match in _IPV4_PREFIX.finditer(text)]


def routes_from_nvue(payload: Mapping[str, Any]) -> list[str]:
    """Return the prefixes keyed in an NVUE route table."""
    return list(payload)


def routes_from_table(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    """Join the NETWORK and MASK columns of parsed route rows."""
    return [f"{row['NETWORK']}/{row['MASK']}" for row in rows]


@dataclass
class RouteReport:
    """Which expected routes a device has and which it lacks."""

    device: str
    found: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def check_routes(
    device: str, routes: Iterable[str], expected: Iterable[str] = EXPECTED_ROUTES
) -> RouteReport:
    """Compare a device's routes with the expected ones."""
    log.info("Checking %s routes", device)
    wanted = dict.fromkeys(expected, False)
    found: list[str] = []
    for route in routes:
        if route in wanted:
            log.info("Route %s found on %s", route, device)
            if not wanted[route]:
                found.append(route)
            wanted[route] = True
    missing = [route for route, seen in wanted.items() if not seen]
    for route in missing:
        log.info("! Route %s NOT found on %s", route, device)
    return RouteReport(device=device, found=found, missing=missing)


def check_all(
    collectors: Mapping[str, Callable[[], Iterable[str]]],
    expected: Iterable[str] = EXPECTED_ROUTES,
) -> dict[str, RouteReport]:
    """Collect routes from all devices concurrently and check each of them.

    A device whose collector fails is logged and left out of the result.
    """
    collectors = dict(collectors)
    expected = tuple(expected)
    if not collectors:
        return {}
    with ThreadPoolExecutor(max_workers=len(collectors)) as pool:
        futures = {
            device: pool.submit(lambda c=collect: list(c()))
            for device, collect in collectors.items()
        }
    reports: dict[str, RouteReport] = {}
    for device, future in futures.items():
        try:
            routes = future.result()
        except Exception as exc:
            log.warning("failed to collect routes for %s: %s", device, exc)
            continue
        reports[device] = check_routes(device, routes, expected)
    return reports