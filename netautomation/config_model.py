"""Device data model for a BGP leaf and rendering of its CLI configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any

import jinja2
import yaml

log = logging.getLogger(__name__)

# The two spaces after the peer loop opening tag are part of the output.
_CEOS_TEMPLATE = """
!
configure
!
ip routing
!
{%- for uplink in model.uplinks %}
interface {{ uplink.name }}
  no switchport
  ip address {{ uplink.prefix }}
!
{%- endfor %}
interface Loopback0
  ip address {{ model.loopback.ip }}/32
!
router bgp {{ model.asn }}
  router-id {{ model.loopback.ip }}
{%- for peer in model.peers %}\x20\x20
  neighbor {{ peer.ip }} remote-as {{ peer.asn }}
{%- endfor %}
  redistribute connected
!
"""

_SRL_TEMPLATE = """
enter candidate
{%- for uplink in model.uplinks %}
set / interface {{ uplink.name }} subinterface 0 ipv4 address {{ uplink.prefix }}
set / network-instance default interface {{ uplink.name }}.0
{%- endfor %}
set / interface system0 subinterface 0 ipv4 address {{ model.loopback.ip }}/32
set / network-instance default interface system0.0
set / routing-policy policy all default-action accept
set / network-instance default protocols bgp autonomous-system {{ model.asn }}
set / network-instance default protocols bgp router-id {{ model.loopback.ip }}
set / network-instance default protocols bgp group EBGP
set / network-instance default protocols bgp group EBGP export-policy all
set / network-instance default protocols bgp group EBGP import-policy all
{%- for peer in model.peers %}
set / network-instance default protocols bgp neighbor {{ peer.ip }} peer-as {{ peer.asn }}
set / network-instance default protocols bgp neighbor {{ peer.ip }} peer-group EBGP
{%- endfor %}
set / network-instance default protocols bgp ipv4-unicast admin-state enable
commit now
quit
"""

_ENV = jinja2.Environment(
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
    autoescape=False,
)
_CEOS = _ENV.from_string(_CEOS_TEMPLATE)
_SRL = _ENV.from_string(_SRL_TEMPLATE)


@dataclass
class Link:
    """An uplink interface and the prefix configured on it."""

    name: str = ""
    prefix: str = ""


@dataclass
class Peer:
    """A BGP neighbour."""

    ip: str = ""
    asn: int = 0


@dataclass
class Addr:
    ip: str = ""


@dataclass
class Model:
    """Desired state of a leaf: uplinks, BGP peers, local ASN and loopback."""

    uplinks: list[Link] = field(default_factory=list)
    peers: list[Peer] = field(default_factory=list)
    asn: int = 0
    loopback: Addr = field(default_factory=Addr)


def _str(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"{name}: expected a string, got {value!r}")


def _int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name}: expected an integer, got {value!r}")
    return value


def _mapping(value: Any, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{name}: expected a mapping, got {value!r}")
    return value


def _items(value: Any, name: str) -> list[Mapping[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{name}: expected a list, got {value!r}")
    return [_mapping(item, name) for item in value]


def load_model(stream: IO) -> Model:
    """Read a device model from a YAML document."""
    document = _mapping(yaml.safe_load(stream), "model")
    loopback = _mapping(document.get("loopback"), "loopback")
    return Model(
        uplinks=[
            Link(name=_str(item.get("name"), "name"), prefix=_str(item.get("prefix"), "prefix"))
            for item in _items(document.get("uplinks"), "uplinks")
        ],
        peers=[
            Peer(ip=_str(item.get("ip"), "ip"), asn=_int(item.get("asn"), "asn"))
            for item in _items(document.get("peers"), "peers")
        ],
        asn=_int(document.get("asn"), "asn"),
        loopback=Addr(ip=_str(loopback.get("ip"), "ip")),
    )


def render_ceos(model: Model) -> str:
    """Render the EOS CLI configuration for the model."""
    config = _CEOS.render(model=model)
    log.info("Generated config: %s", config)
    return config


def render_srl(model: Model) -> str:
    """Render the SR Linux CLI session configuring the model."""
    return _SRL.render(model=model)