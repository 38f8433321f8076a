import ipaddress

import pytest

from netautomation.addressing import (
    PrefixRanger,
    cidr_mask,
    compare_ips,
    delta_ip,
    enumerate_hosts,
    first_address,
    increment_ip,
    last_address,
    next_ip,
    parse_cidr,
    sort_ips,
    usable_count,
)

A = ipaddress.ip_address


def test_ip_arithmetic():
    ip = "192.0.2.1"
    nxt = next_ip(ip)
    incr = increment_ip(nxt, 19)
    assert nxt == A("192.0.2.2")
    assert incr == A("192.0.2.21")
    assert delta_ip(ip, incr) == 20
    assert delta_ip(incr, ip) == 20
    assert compare_ips(ip, incr) == -1
    assert compare_ips(incr, ip) == 1
    assert compare_ips(ip, ip) == 0


def test_sort_ips():
    ips = ["192.0.2.21", "192.0.2.2", "192.0.2.1"]
    assert sort_ips(ips) == [A("192.0.2.1"), A("192.0.2.2"), A("192.0.2.21")]


def test_sort_ips_v4_before_higher_v6():
    result = sort_ips(["2001:db8::1", "192.0.2.1"])
    assert result == [A("192.0.2.1"), A("2001:db8::1")]


def test_delta_ip_rejects_mixed_families():
    with pytest.raises(ValueError):
        delta_ip("192.0.2.1", "2001:db8::1")


def test_increment_ip_overflow():
    with pytest.raises(ValueError):
        next_ip("255.255.255.255")


def test_ipv4_network():
    net = "198.51.100.0/24"
    assert usable_count(net) == 254
    assert enumerate_hosts(net, 3, 0) == [
        A("198.51.100.1"),
        A("198.51.100.2"),
        A("198.51.100.3"),
    ]
    assert first_address(net) == A("198.51.100.1")
    assert last_address(net) == A("198.51.100.254")


def test_enumerate_all_matches_count():
    net = "198.51.100.0/24"
    hosts = enumerate_hosts(net, 0, 0)
    assert len(hosts) == usable_count(net)
    assert hosts[0] == first_address(net)
    assert hosts[-1] == last_address(net)


def test_enumerate_past_end_is_empty():
    assert enumerate_hosts("198.51.100.0/24", 5, 1000) == []


def test_point_to_point_network_has_no_reserved_addresses():
    assert usable_count("192.0.2.0/31") == 2
    assert first_address("192.0.2.0/31") == A("192.0.2.0")


def test_ipv6_network():
    net = ipaddress.ip_network("2001:db8::/32")
    assert usable_count(net) == net.num_addresses
    assert first_address(net) == net.network_address
    assert enumerate_hosts(net, 2, 1024) == [
        increment_ip(first_address(net), 1024),
        increment_ip(first_address(net), 1025),
    ]


def test_cidr_mask():
    assert cidr_mask(31, 32) == bytes([0b11111111, 0b11111111, 0b11111111, 0b11111110])
    assert cidr_mask(64, 128).hex() == "ffffffffffffffff0000000000000000"


@pytest.mark.parametrize("ones, bits", [(33, 32), (-1, 32), (8, 24)])
def test_cidr_mask_invalid(ones, bits):
    with pytest.raises(ValueError):
        cidr_mask(ones, bits)


def test_parse_cidr():
    addr, net = parse_cidr("192.0.2.1/24")
    assert str(addr) == "192.0.2.1"
    assert str(net) == "192.0.2.0/24"
    addr6, net6 = parse_cidr("2001:db8:a0b:12f0::1/32")
    assert str(addr6) == "2001:db8:a0b:12f0::1"
    assert str(net6) == "2001:db8::/32"


@pytest.mark.parametrize(
    "text", ["192.0.2.1", "192.0.2.1/33", "192.0.2.1/255.255.255.0", "bogus/24"]
)
def test_parse_cidr_invalid(text):
    with pytest.raises(ValueError):
        parse_cidr(text)


def test_prefix_contains():
    pf = ipaddress.ip_network("192.0.2.0/24")
    assert pf.network_address == A("192.0.2.0") and pf.prefixlen == 24
    ranger = PrefixRanger()
    ranger.insert(pf)
    assert ranger.contains("192.0.2.18") is True
    assert ranger.contains("198.51.100.3") is False
    ranger6 = PrefixRanger()
    ranger6.insert("2001:db8::/32")
    assert ranger6.contains("2600::") is False
    assert ranger6.contains("2001:db8:F00D::CAFE") is True


def test_prefix_ranger():
    ranger = PrefixRanger()
    for prefix in [
        "100.64.0.0/16",
        "127.0.0.0/8",
        "172.16.0.0/16",
        "192.0.2.0/24",
        "192.0.2.0/24",
        "192.0.2.0/25",
        "192.0.2.127/25",
    ]:
        ranger.insert(prefix)
    assert len(ranger) == 5
    assert ranger.contains("127.0.0.1") is True
    assert [str(n) for n in ranger.containing_networks("192.0.2.18")] == [
        "192.0.2.0/24",
        "192.0.2.0/25",
    ]
    assert ranger.containing_networks("2001:db8::1") == []


def test_private_ipv6_address():
    addr6, _ = parse_cidr("FC02:F00D::1/64")
    assert addr6.is_private is True
    addr4, _ = parse_cidr("192.0.2.1/24")
    assert addr4.is_global is False