"""Command-line client for the lookup service."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import Optional
from urllib.parse import urlencode, urlsplit

import requests

log = logging.getLogger(__name__)


def build_url(
    server: str = "localhost:8080",
    lookup: str = "domain",
    value: str = "",
    check: bool = False,
) -> str:
    """Build the request URL for a lookup or a health check."""
    base = f"http://{server}{'/check' if check else '/lookup'}"
    parts = urlsplit(base)
    if not parts.netloc:
        raise ValueError(f"invalid server address: {server!r}")
    parts.port  # raises ValueError on a malformed port
    return f"{base}?{urlencode({lookup: value})}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    parser = argparse.ArgumentParser(description="Query the lookup service.")
    parser.add_argument("-server", "--server", default="localhost:8080",
                        help="HTTP server URL")
    parser.add_argument("-check", "--check", action="store_true",
                        help="healthcheck flag")
    parser.add_argument("-lookup", "--lookup", default="domain",
                        help="lookup data [mac, ip, domain]")
    parser.add_argument("query", nargs="*")
    args = parser.parse_args(argv)

    if len(args.query) != 1 and not args.check:
        log.info("must provide exactly one query argument")
        return 0

    value = args.query[0] if args.query else ""
    try:
        url = build_url(args.server, args.lookup, value, args.check)
        response = requests.get(url)
    except (ValueError, requests.RequestException) as exc:
        log.error("%s", exc)
        return 1
    sys.stdout.write(response.text)
    sys.stdout.flush()
    return 0