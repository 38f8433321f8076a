"""IP address arithmetic, masks, prefix parsing and a prefix range set."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterable, Iterator
from typing import Union

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

_V4_MAPPED = 0xFFFF << 32
_PREFIX_LENGTH = re.compile(r"[0-9]+")


def _address(ip: Union[str, Address]) -> Address:
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return ip
    return ipaddress.ip_address(ip)


def _network(network: Union[str, Network]) -> Network:
    if isinstance(network, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return network
    return ipaddress.ip_network(network, strict=False)


def _sort_key(ip: Address) -> int:
    value = int(ip)
    return value + _V4_MAPPED if ip.version == 4 else value


def increment_ip(ip: Union[str, Address], count: int) -> Address:
    """Return the address count places after ip."""
    if count < 0:
        raise ValueError(f"increment must not be negative: {count}")
    return _address(ip) + count


def next_ip(ip: Union[str, Address]) -> Address:
    """Return the address right after ip."""
    return increment_ip(ip, 1)


def delta_ip(a: Union[str, Address], b: Union[str, Address]) -> int:
    """Return the distance between two addresses of the same family."""
    first, second = _address(a), _address(b)
    if first.version != second.version:
        raise ValueError("addresses belong to different families")
    return abs(int(first) - int(second))


def compare_ips(a: Union[str, Address], b: Union[str, Address]) -> int:
    """Return -1, 0 or 1 as a sorts before, with or after b."""
    first, second = _sort_key(_address(a)), _sort_key(_address(b))
    return (first > second) - (first < second)


def sort_ips(ips: Iterable[Union[str, Address]]) -> list[Address]:
    """Return the addresses in ascending order; IPv4 sorts as IPv4-mapped."""
    return sorted((_address(ip) for ip in ips), key=_sort_key)


def usable_count(network: Union[str, Network]) -> int:
    """Count usable addresses; IPv4 excludes network and broadcast below /31."""
    net = _network(network)
    if net.version == 4 and net.prefixlen < 31:
        return net.num_addresses - 2
    return net.num_addresses


def first_address(network: Union[str, Network]) -> Address:
    """Return the first usable address of the network."""
    net = _network(network)
    if net.version == 4 and net.prefixlen < 31:
        return net.network_address + 1
    return net.network_address


def last_address(network: Union[str, Network]) -> Address:
    """Return the last usable address of the network."""
    net = _network(network)
    if net.version == 4 and net.prefixlen < 31:
        return net.broadcast_address - 1
    return net.broadcast_address


def _usable(network: Network, size: int, offset: int) -> Iterator[Address]:
    available = usable_count(network) - offset
    if available <= 0:
        return
    count = min(size, available) if size > 0 else available
    start = first_address(network) + offset
    for step in range(count):
        yield start + step


def enumerate_hosts(
    network: Union[str, Network], size: int, offset: int
) -> list[Address]:
    """List up to size usable addresses starting offset places into the network.

    A size of zero lists every remaining usable address.
    """
    if size < 0 or offset < 0:
        raise ValueError("size and offset must not be negative")
    return list(_usable(_network(network), size, offset))


def cidr_mask(ones: int, bits: int) -> bytes:
    """Return the netmask with the given number of leading one bits."""
    if bits not in (32, 128) or not 0 <= ones <= bits:
        raise ValueError(f"invalid mask /{ones} for {bits}-bit addresses")
    return (((1 << ones) - 1) << (bits - ones)).to_bytes(bits // 8, "big")


def parse_cidr(text: str) -> tuple[Address, Network]:
    """Split "address/length" into the address and its network."""
    _, slash, length = text.partition("/")
    if not slash or not _PREFIX_LENGTH.fullmatch(length):
        raise ValueError(f"invalid CIDR address: {text}")
    interface = ipaddress.ip_interface(text)
    return interface.ip, interface.network


class PrefixRanger:
    """A set of networks answering which of them hold an address."""

    def __init__(self) -> None:
        self._networks: dict[Network, None] = {}

    def __len__(self) -> int:
        return len(self._networks)

    def insert(self, network: Union[str, Network]) -> None:
        """Add a network; host bits are masked off and duplicates merged."""
        self._networks[_network(network)] = None

    def contains(self, ip: Union[str, Address]) -> bool:
        """Tell whether any stored network holds the address."""
        address = _address(ip)
        return any(address in net for net in self._networks)

    def containing_networks(self, ip: Union[str, Address]) -> list[Network]:
        """Return the networks holding the address, least specific first."""
        address = _address(ip)
        return sorted(
            (net for net in self._networks if address in net),
            key=lambda net: net.prefixlen,
        )