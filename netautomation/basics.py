"""Small building blocks: naming helpers, byte filters, TCP header bits,
HTTP status classes, device models and concurrent device polling."""

from __future__ import annotations

import enum
import itertools
import json
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import BinaryIO, Protocol

_WORD_BYTES = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
)
_HEADER_LENGTH_OFFSET = 13
_FLAGS_OFFSET = 14
_SYN_MASK = 0x02


def suffix_generator() -> Callable[[], str]:
    """Return a callable yielding "01", "02", ... on successive calls."""
    counter = itertools.count(1)
    return lambda: f"{next(counter):02d}"


def generate_name(base: str, suffix: str) -> str:
    """Join a base name and a suffix with a dash."""
    return "-".join((base, suffix))


def process_device(get_name: Callable[[str, str], str], ip: str) -> str:
    """Build a device name from the base "device" and an address."""
    return get_name("device", ip)


def join_octets(*args: str) -> str:
    """Join address octets with dots."""
    return ".".join(args)


def _separates(byte: int) -> bool:
    return byte < 0x80 and byte not in _WORD_BYTES


def title_bytes(data: bytes) -> bytes:
    """Upper-case the first ASCII letter of every word."""
    result = bytearray()
    after_separator = True
    for byte in data:
        if after_separator and 0x61 <= byte <= 0x7A:
            result.append(byte - 0x20)
        else:
            result.append(byte)
        after_separator = _separates(byte)
    return bytes(result)


class TitleReader:
    """Binary reader that title-cases each chunk read from its source."""

    def __init__(self, src: BinaryIO) -> None:
        self._src = src

    def read(self, size: int = -1) -> bytes:
        return title_bytes(self._src.read(size))


class StatusClass(enum.Enum):
    UNKNOWN = "Unknown"
    SERVER_ERROR = "Server Error"
    CLIENT_ERROR = "Client Error"
    REDIRECT = "Redirect"
    SUCCESS = "Success"
    INFORMATIONAL = "Informational"
    INCORRECT = "Incorrect"


_STATUS_THRESHOLDS = (
    (600, StatusClass.UNKNOWN),
    (500, StatusClass.SERVER_ERROR),
    (400, StatusClass.CLIENT_ERROR),
    (300, StatusClass.REDIRECT),
    (200, StatusClass.SUCCESS),
    (100, StatusClass.INFORMATIONAL),
)


def classify_status(code: int) -> StatusClass:
    """Classify an HTTP status code."""
    return next(
        (cls for threshold, cls in _STATUS_THRESHOLDS if code >= threshold),
        StatusClass.INCORRECT,
    )


def set_header_length(header: bytes, words: int) -> bytes:
    """Return a copy of the header with the length (in 32-bit words) set."""
    if not 0 <= words <= 0xFF:
        raise ValueError(f"header words must fit in a byte: {words}")
    updated = bytearray(header)
    updated[_HEADER_LENGTH_OFFSET] |= (words << 4) & 0xFF
    return bytes(updated)


def set_syn(header: bytes) -> bytes:
    """Return a copy of the header with the SYN flag set."""
    updated = bytearray(header)
    updated[_FLAGS_OFFSET] |= _SYN_MASK
    return bytes(updated)


def syn_flag_set(header: bytes) -> bool:
    """Tell whether the SYN flag is set."""
    return (header[_FLAGS_OFFSET] & _SYN_MASK) != 0


def header_words(header: bytes) -> int:
    """Return the header length in 32-bit words."""
    return header[_HEADER_LENGTH_OFFSET] >> 4


@dataclass
class Device:
    name: str

    def generate_name(self) -> None:
        """Prefix the name with "device-"."""
        self.name = "device-" + self.name


class _NetworkDevice(Protocol):
    def uptime(self) -> int: ...


@dataclass
class CiscoIOS:
    hostname: str = ""
    platform: str = ""

    def uptime(self) -> int:
        return 1


@dataclass
class CiscoNXOS:
    hostname: str = ""
    platform: str = ""
    aci: bool = False

    def uptime(self) -> int:
        return 2


def last_to_reboot(first: _NetworkDevice, second: _NetworkDevice) -> bool:
    """Tell whether the first device has been up for less time."""
    return first.uptime() < second.uptime()


def get_config(device: str) -> str:
    """Return the connection message for a device."""
    return f"Connected to device {json.dumps(device, ensure_ascii=False)}"


def connect(devices: Iterable[str]) -> Iterator[str]:
    """Poll devices concurrently, yielding messages as they complete."""
    devices = list(devices)
    if not devices:
        return
    with ThreadPoolExecutor(max_workers=len(devices)) as pool:
        futures = [pool.submit(get_config, device) for device in devices]
        for future in as_completed(futures):
            yield future.result()