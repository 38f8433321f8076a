"""WHOIS queries that follow referrals starting from the IANA server."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import socket
from collections.abc import Callable, Sequence
from typing import Optional

WHOIS_IANA = "whois.iana.org"
WHOIS_PORT = 43

log = logging.getLogger(__name__)


class WhoisError(Exception):
    """A WHOIS server could not be reached or read."""


def find_refer(text: str) -> Optional[str]:
    """Return the server named on the first "refer: " line, if any."""
    for raw in text.split("\n"):
        line = raw.removesuffix("\r")
        if not line or line.startswith("#"):
            continue
        if "refer: " in line:
            parts = line.split()
            if len(parts) != 2:
                return None
            return parts[1]
    return None


def whois_lookup(query: str, server: str, port: int = WHOIS_PORT) -> str:
    """Send one query to a WHOIS server over IPv4 and return its whole answer."""
    log.info("whoisLookup %s@%s", query, server)
    try:
        addresses = socket.getaddrinfo(server, port, socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise WhoisError(f"ResolveTCPAddr failed: {exc}") from exc
    family, kind, proto, _, address = addresses[0]
    chunks = []
    try:
        with socket.socket(family, kind, proto) as conn:
            conn.connect(address)
            conn.sendall((query + "\r\n").encode())
            while chunk := conn.recv(4096):
                chunks.append(chunk)
    except OSError as exc:
        raise WhoisError(f"lookup at {server}:{port} failed: {exc}") from exc
    return b"".join(chunks).decode("utf-8", errors="replace")


def resolve(
    query: str,
    server: str = WHOIS_IANA,
    lookup: Callable[[str, str], str] = whois_lookup,
) -> str:
    """Query the server and follow referrals until an answer has none."""
    while True:
        response = lookup(query, server)
        refer = find_refer(response)
        if refer is None:
            return response
        server = refer


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    parser = argparse.ArgumentParser(description="Look up a WHOIS record.")
    parser.add_argument("-query", "--query", default="", help="whois query")
    args = parser.parse_args(argv)

    if not args.query:
        log.error("Please provide -query flag")
        return 1

    try:
        ipaddress.ip_address(args.query)
    except ValueError:
        pass
    else:
        log.info("query recognized as IP")

    try:
        answer = resolve(args.query)
    except WhoisError as exc:
        log.error("lookup failed: %s", exc)
        return 1
    log.info("%s", answer)
    return 0