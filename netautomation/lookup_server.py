"""HTTP service answering MAC vendor and WHOIS lookups."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlsplit

import requests

from netautomation.macdb import download, lookup_vendor, parse_manuf
from netautomation.whois import WhoisError, resolve

log = logging.getLogger(__name__)


def _incorrect(values: Sequence[str]) -> str:
    return f"incorrect query [{' '.join(values)}]"


@dataclass
class LookupService:
    """Answers lookup queries from a vendor database and a WHOIS resolver."""

    mac_db: Mapping[str, str] = field(default_factory=dict)
    resolver: Callable[[str], str] = resolve

    def get_mac(self, values: Sequence[str]) -> str:
        if len(values) != 1:
            return _incorrect(values)
        try:
            vendor = lookup_vendor(self.mac_db, values[0])
        except ValueError:
            return "Failed to parse MAC"
        if vendor is None:
            return "result not found\n"
        return vendor

    def get_whois(self, values: Sequence[str]) -> str:
        if len(values) != 1:
            return _incorrect(values)
        return self.resolver(values[0])

    def lookup(self, query: Mapping[str, Sequence[str]]) -> str:
        """Answer a parsed query string; the last parameter decides."""
        response = ""
        for key, values in query.items():
            if key in ("ip", "domain"):
                response = self.get_whois(values)
            elif key == "mac":
                response = self.get_mac(values)
            else:
                response = f"query {json.dumps(key, ensure_ascii=False)} not recognized"
        return response


class _LookupHTTPServer(ThreadingHTTPServer):
    def __init__(self, address: tuple[str, int], service: LookupService) -> None:
        super().__init__(address, _LookupHandler)
        self.service = service


class _LookupHandler(BaseHTTPRequestHandler):
    server: _LookupHTTPServer

    def _dispatch(self) -> None:
        url = urlsplit(self.path)
        if url.path == "/lookup":
            query = parse_qs(url.query, keep_blank_values=True)
            log.info("Incoming %s", query)
            self._reply(200, self.server.service.lookup(query))
        elif url.path == "/check":
            self._reply(200, "OK\n")
        else:
            self._reply(404, "404 page not found\n")

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _dispatch

    def _reply(self, status: int, body: str) -> None:
        data = body.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        log.info(format, *args)


def create_server(
    service: LookupService, host: str = "0.0.0.0", port: int = 8080
) -> ThreadingHTTPServer:
    """Bind an HTTP server serving /lookup and /check."""
    return _LookupHTTPServer((host, port), service)


def _load_mac_db(source: str) -> dict[str, str]:
    path = Path(source)
    if path.is_file():
        with path.open(encoding="utf-8", errors="replace") as handle:
            return parse_manuf(handle)
    return download(source)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    parser = argparse.ArgumentParser(description="Serve MAC and WHOIS lookups.")
    parser.add_argument(
        "-manuf", "--manuf", required=True,
        help="URL or path of the manufacturer database",
    )
    parser.add_argument("-host", "--host", default="0.0.0.0")
    parser.add_argument("-port", "--port", type=int, default=8080)
    args = parser.parse_args(argv)

    try:
        mac_db = _load_mac_db(args.manuf)
    except (OSError, requests.RequestException) as exc:
        log.error("Failed to download mac DB: %s", exc)
        return 1
    log.info("macDB initialized")

    try:
        server = create_server(LookupService(mac_db), args.host, args.port)
    except OSError as exc:
        log.error("%s", exc)
        return 1
    with server:
        log.info("Starting web server at %s:%d", args.host, args.port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
        except WhoisError as exc:
            log.error("lookup failed: %s", exc)
            return 1
    return 0