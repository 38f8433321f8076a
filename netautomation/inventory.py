"""Router inventories read from YAML, JSON and XML, and written as XML."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import IO, Any, Union
from xml.etree import ElementTree

import yaml

_UINT16_MAX = 0xFFFF
_DIGITS = re.compile(r"[0-9]+")
_XML_ESCAPES = {
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}


@dataclass
class Router:
    """Connection details of a router."""

    hostname: str = ""
    platform: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    strict_key: bool = False


@dataclass
class Host:
    """A router identified by address and autonomous system number."""

    hostname: str = ""
    ip: str = ""
    asn: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.asn <= _UINT16_MAX:
            raise ValueError(f"ASN out of range: {self.asn}")


@dataclass
class Inventory:
    routers: list[Union[Router, Host]] = field(default_factory=list)


Getter = Callable[[Mapping[str, Any], str], Any]


def _exact_get(mapping: Mapping[str, Any], key: str) -> Any:
    return mapping.get(key)


def _folded_get(mapping: Mapping[str, Any], key: str) -> Any:
    if key in mapping:
        return mapping[key]
    return next(
        (value for name, value in mapping.items() if str(name).lower() == key),
        None,
    )


def _to_str(value: Any, name: str, lenient: bool) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if lenient:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
    raise ValueError(f"{name}: expected a string, got {value!r}")


def _to_uint16(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name}: expected an integer, got {value!r}")
    if not 0 <= value <= _UINT16_MAX:
        raise ValueError(f"{name}: value out of range: {value}")
    return value


def _to_bool(value: Any, name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{name}: expected a boolean, got {value!r}")
    return value


def _entries(document: Any, get: Getter) -> list[Mapping[str, Any]]:
    if document is None:
        return []
    if not isinstance(document, Mapping):
        raise ValueError("inventory document must be a mapping")
    routers = get(document, "router")
    if routers is None:
        return []
    if not isinstance(routers, list):
        raise ValueError("'router' must be a list")
    entries = []
    for entry in routers:
        if entry is None:
            entry = {}
        if not isinstance(entry, Mapping):
            raise ValueError(f"router entry must be a mapping, got {entry!r}")
        entries.append(entry)
    return entries


def _host(entry: Mapping[str, Any], get: Getter, lenient: bool) -> Host:
    return Host(
        hostname=_to_str(get(entry, "hostname"), "hostname", lenient),
        ip=_to_str(get(entry, "ip"), "ip", lenient),
        asn=_to_uint16(get(entry, "asn"), "asn"),
    )


def load_router_inventory(stream: IO) -> Inventory:
    """Read router connection details from a YAML document."""
    document = yaml.safe_load(stream)
    return Inventory(
        routers=[
            Router(
                hostname=_to_str(entry.get("hostname"), "hostname", True),
                platform=_to_str(entry.get("platform"), "platform", True),
                username=_to_str(entry.get("username"), "username", True),
                password=_to_str(entry.get("password"), "password", True),
                strict_key=_to_bool(entry.get("strictkey"), "strictkey"),
            )
            for entry in _entries(document, _exact_get)
        ]
    )


def load_yaml(stream: IO) -> Inventory:
    """Read an inventory of hosts from YAML."""
    document = yaml.safe_load(stream)
    return Inventory(
        routers=[_host(e, _exact_get, True) for e in _entries(document, _exact_get)]
    )


def load_json(stream: IO) -> Inventory:
    """Read an inventory of hosts from JSON; keys match case-insensitively."""
    document = json.load(stream)
    return Inventory(
        routers=[_host(e, _folded_get, False) for e in _entries(document, _folded_get)]
    )


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


def _char_data(element: ElementTree.Element) -> str:
    return "".join([element.text or ""] + [child.tail or "" for child in element])


def _xml_asn(text: str) -> int:
    if not text:
        return 0
    stripped = text.strip()
    if not _DIGITS.fullmatch(stripped):
        raise ValueError(f"asn: invalid number {text!r}")
    return _to_uint16(int(stripped), "asn")


def load_xml(stream: IO) -> Inventory:
    """Read an inventory of hosts from XML with <router> children of the root."""
    root = ElementTree.parse(stream).getroot()
    hosts = []
    for element in root:
        if _local_name(element.tag) != "router":
            continue
        values = {"hostname": "", "ip": "", "asn": ""}
        for child in element:
            name = _local_name(child.tag)
            if name in values:
                values[name] = _char_data(child)
        hosts.append(
            Host(
                hostname=values["hostname"],
                ip=values["ip"],
                asn=_xml_asn(values["asn"]),
            )
        )
    return Inventory(routers=hosts)


def _escape(text: str) -> str:
    return "".join(_XML_ESCAPES.get(char, char) for char in text)


def to_xml(inventory: Inventory) -> str:
    """Serialise an inventory of hosts as compact XML."""
    parts = ["<Inventory>"]
    for host in inventory.routers:
        if not isinstance(host, Host):
            raise TypeError(f"only Host entries can be written as XML: {host!r}")
        parts.append(
            "<router>"
            f"<hostname>{_escape(host.hostname)}</hostname>"
            f"<ip>{_escape(host.ip)}</ip>"
            f"<asn>{host.asn}</asn>"
            "</router>"
        )
    parts.append("</Inventory>")
    return "".join(parts)