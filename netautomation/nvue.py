"""Push a BGP leaf configuration to a device through its NVUE REST API."""

from __future__ import annotations

import argparse
import base64
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any, Optional
from urllib.parse import quote, urlencode

import requests
import yaml

from netautomation.config_model import Model, Peer, load_model

DEFAULT_NVUE_PORT = 8765
_DEFAULT_PASSWORD = "password"
_APPLY_BODY = (
    b'{"state": "apply", "auto-prompt": '
    b'{"ays": "ays_yes", "ignore_fail": "ignore_fail_yes"}} '
)
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

log = logging.getLogger(__name__)


class NvueError(Exception):
    """The device returned something the client cannot use."""


def _neighbor(peer: Peer) -> dict[str, Any]:
    entry: dict[str, Any] = {}
    if peer.asn:
        entry["remote-as"] = peer.asn
    entry["type"] = "numbered"
    return entry


def _interface(kind: str, prefix: str) -> dict[str, Any]:
    return {"ip": {"address": {prefix: {}}}, "type": kind}


def build_nvue_config(model: Model) -> dict[str, Any]:
    """Build the NVUE configuration document for the model."""
    interfaces = {"lo": _interface("loopback", f"{model.loopback.ip}/32")}
    for uplink in model.uplinks:
        interfaces[uplink.name] = _interface("swp", uplink.prefix)

    router_bgp: dict[str, Any] = {}
    if model.asn:
        router_bgp["autonomous-system"] = model.asn
    if model.loopback.ip:
        router_bgp["router-id"] = model.loopback.ip

    neighbors = {peer.ip: _neighbor(peer) for peer in model.peers}
    vrf_bgp: dict[str, Any] = {
        "address-family": {
            "ipv4-unicast": {
                "enable": "on",
                "redistribute": {"connected": {"enable": "on"}},
            }
        },
        "enable": "on",
    }
    if neighbors:
        vrf_bgp["neighbor"] = dict(sorted(neighbors.items()))

    return {
        "interface": dict(sorted(interfaces.items())),
        "router": {"bgp": router_bgp},
        "vrf": {"default": {"router": {"bgp": vrf_bgp}}},
    }


def _escape_html(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(char, char) for char in text)


def _encode(config: dict[str, Any]) -> bytes:
    text = json.dumps(config, ensure_ascii=False, separators=(",", ":"))
    return (_escape_html(text) + "\n").encode("utf-8")


def basic_token(username: str, password: str) -> str:
    """Return the credentials for HTTP Basic authentication."""
    return base64.b64encode(f"{username}:{password}".encode()).decode("ascii")


class NvueClient:
    """Revision-based configuration over the NVUE API."""

    def __init__(
        self,
        hostname: str,
        token: str,
        port: int = DEFAULT_NVUE_PORT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = f"https://{hostname}:{port}"
        self.token = token
        if session is None:
            session = requests.Session()
            session.verify = False
        self._session = session

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": "Basic " + self.token,
        }

    def create_revision(self) -> str:
        """Open a candidate revision and return its identifier."""
        response = self._session.post(
            self.url + "/nvue_v1/revision", headers=self._headers
        )
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            for key in payload:
                return key
        raise NvueError("unexpected createRevision error")

    def patch_config(self, revision: str, config: dict[str, Any]) -> None:
        """Store the configuration in the candidate revision."""
        address = self.url + "/nvue_v1/?" + urlencode({"rev": revision})
        self._session.patch(address, data=_encode(config), headers=self._headers)

    def apply_revision(self, revision: str) -> str:
        """Apply the candidate revision and return the device's answer."""
        address = self.url + "/nvue_v1/revision/" + quote(revision, safe="$&+,:;=@")
        response = self._session.patch(
            address, data=_APPLY_BODY, headers=self._headers
        )
        return response.text


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    parser = argparse.ArgumentParser(description="Configure a device over NVUE.")
    parser.add_argument("-device", "--device", default="clab-netgo-cvx",
                        help="Device Hostname")
    parser.add_argument("-username", "--username", default="cumulus",
                        help="Username")
    parser.add_argument("-password", "--password", default=_DEFAULT_PASSWORD,
                        help="Password")
    parser.add_argument("-input", "--input", default="input.yml",
                        help="Device model file")
    args = parser.parse_args(argv)

    try:
        with open(args.input, encoding="utf-8") as source:
            model = load_model(source)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        log.error("failed to read input: %s", exc)
        return 1

    config = build_nvue_config(model)
    log.info("Generated config: %s", json.dumps(config, indent=1, ensure_ascii=False))

    client = NvueClient(args.device, basic_token(args.username, args.password))
    try:
        revision = client.create_revision()
        log.info("Created revisionID: %s", revision)
        client.patch_config(revision, config)
        sys.stdout.write(client.apply_revision(revision))
        sys.stdout.flush()
    except (requests.RequestException, NvueError) as exc:
        log.error("%s", exc)
        return 1
    return 0