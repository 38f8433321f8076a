"""Vendor lookup by MAC address from a manufacturer (OUI) database."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Optional, Union

import requests

_HEX2 = re.compile(r"[0-9A-Fa-f]{2}")
_HEX4 = re.compile(r"[0-9A-Fa-f]{4}")
_MAC_LENGTHS = (6, 8, 20)
_DOWNLOAD_TIMEOUT = 60


def parse_manuf(lines: Union[str, Iterable[str]]) -> dict[str, str]:
    """Map prefixes to vendor names from tab-separated three-field lines."""
    if isinstance(lines, str):
        lines = lines.split("\n")
    db: dict[str, str] = {}
    for raw in lines:
        line = raw.removesuffix("\n").removesuffix("\r")
        if not line or line.startswith("#"):
            continue
        parts = line.split("\t")
        if len(parts) != 3 or not parts[0] or not parts[2]:
            continue
        db[parts[0]] = parts[2]
    return db


def download(url: str) -> dict[str, str]:
    """Fetch and parse a manufacturer database."""
    response = requests.get(url, timeout=_DOWNLOAD_TIMEOUT)
    return parse_manuf(response.text)


def _parse_mac(text: str) -> bytes:
    if len(text) >= 14:
        if text[2] in ":-":
            groups = text.split(text[2])
            if len(groups) in _MAC_LENGTHS and all(_HEX2.fullmatch(g) for g in groups):
                return bytes.fromhex("".join(groups))
        elif text[4] == ".":
            groups = text.split(".")
            if 2 * len(groups) in _MAC_LENGTHS and all(
                _HEX4.fullmatch(g) for g in groups
            ):
                return bytes.fromhex("".join(groups))
    raise ValueError(f"invalid MAC address: {text}")


def oui_of(mac: str) -> str:
    """Return the upper-case, colon-separated first three bytes of a MAC."""
    return ":".join(f"{byte:02X}" for byte in _parse_mac(mac)[:3])


def lookup_vendor(db: Mapping[str, str], mac: str) -> Optional[str]:
    """Return the vendor owning the MAC's prefix, or None."""
    return db.get(oui_of(mac))