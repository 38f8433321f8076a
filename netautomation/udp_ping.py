"""UDP probe echo server and a client measuring latency and loss."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import signal
import socket
import struct
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

LISTEN_ADDR = "0.0.0.0"
LISTEN_PORT = 32767
PROBE_SIZE = 9
MAX_READ_BUFFER = 425984
RETRY_TIMEOUT = 5.0
PROBE_INTERVAL = 1.0

_POLL = 0.2
_FORMAT = struct.Struct(">Bq")
_INT64_MIN, _INT64_MAX = -(1 << 63), (1 << 63) - 1

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Probe:
    """A sequence number and a send time in Unix milliseconds."""

    seq_num: int
    send_ts: int

    def __post_init__(self) -> None:
        if not 0 <= self.seq_num <= 0xFF:
            raise ValueError(f"sequence number out of range: {self.seq_num}")
        if not _INT64_MIN <= self.send_ts <= _INT64_MAX:
            raise ValueError(f"timestamp out of range: {self.send_ts}")

    def pack(self) -> bytes:
        return _FORMAT.pack(self.seq_num, self.send_ts)

    @classmethod
    def unpack(cls, data: bytes) -> "Probe":
        if len(data) < PROBE_SIZE:
            raise ValueError(f"probe needs {PROBE_SIZE} bytes, got {len(data)}")
        seq_num, send_ts = _FORMAT.unpack_from(data)
        return cls(seq_num, send_ts)


@dataclass
class LossTracker:
    """Counts lost probes from the sequence numbers that arrive."""

    next_seq: int = 0
    lost: int = 0

    def observe(self, seq: int) -> int:
        """Record an arriving sequence number and return the loss count."""
        if seq < self.next_seq:
            log.info("Out of order packet seq/expected: %d/%d", seq, self.next_seq)
            self.lost -= 1
        elif seq > self.next_seq:
            log.info("Out of order packet seq/expected: %d/%d", seq, self.next_seq)
            self.lost += seq - self.next_seq
            self.next_seq = seq
        self.next_seq = (self.next_seq + 1) & 0xFF
        return self.lost


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def serve(sock: socket.socket, stop: threading.Event) -> None:
    """Echo every datagram back to its sender until stop is set."""
    timeout = sock.gettimeout() or RETRY_TIMEOUT
    log.info("Starting the UDP ping server")
    while not stop.is_set():
        sock.settimeout(timeout)
        try:
            data, address = sock.recvfrom(MAX_READ_BUFFER)
        except OSError as exc:
            log.info("failed to ReadFromUDP: %s", exc)
            continue
        log.info("Received a probe from %s:%d", address[0], address[1])
        if not data:
            log.info("Received packet with 0 length")
            continue
        sent = sock.sendto(data, address)
        if sent != len(data):
            log.info("could not send the full packet")
    log.info("Shutting down UDP server")


def _receive(sock: socket.socket, tracker: LossTracker, stop: threading.Event) -> None:
    log.info("Starting UDP ping receive loop")
    while not stop.is_set():
        try:
            data = sock.recv(PROBE_SIZE)
        except socket.timeout:
            continue
        except OSError:
            return
        try:
            probe = Probe.unpack(data)
        except ValueError:
            return
        log.info("Received probe %d", probe.seq_num)
        tracker.observe(probe.seq_num)
        log.info("E2E latency: %d ms", _now_ms() - probe.send_ts)
        log.info("Lost packets: %d", tracker.lost)


def run_client(
    server: str,
    port: int,
    stop: threading.Event,
    interval: float = PROBE_INTERVAL,
) -> LossTracker:
    """Send a probe every interval until stop is set; return the loss record."""
    family = socket.AF_INET6 if ipaddress.ip_address(server).version == 6 else socket.AF_INET
    tracker = LossTracker()
    with socket.socket(family, socket.SOCK_DGRAM) as sock:
        sock.connect((server, port))
        sock.settimeout(_POLL)
        receiver = threading.Thread(
            target=_receive, args=(sock, tracker, stop), daemon=True
        )
        log.info("Starting UDP ping client")
        receiver.start()
        seq = 0
        while not stop.wait(interval):
            log.info("Sending probe %d", seq)
            sock.send(Probe(seq, _now_ms()).pack())
            seq = (seq + 1) & 0xFF
        log.info("Shutting down UDP client")
        receiver.join()
    return tracker


def _stop_on_signals(stop: threading.Event) -> None:
    def handler(signum, frame):
        log.info("Received syscall: %s", signal.Signals(signum).name)
        stop.set()

    for name in ("SIGTERM", "SIGINT", "SIGHUP"):
        sig = getattr(signal, name, None)
        if sig is not None:
            signal.signal(sig, handler)


def server_main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    parser = argparse.ArgumentParser(description="UDP ping echo server.")
    parser.add_argument("-port", "--port", type=int, default=LISTEN_PORT,
                        help="UDP listen port")
    args = parser.parse_args(argv)

    stop = threading.Event()
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.bind((LISTEN_ADDR, args.port))
        except OSError as exc:
            log.error("failed to listen on %s:%d: %s", LISTEN_ADDR, args.port, exc)
            return 1
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, MAX_READ_BUFFER)
        except OSError as exc:
            log.error("failed to SetReadBuffer: %s", exc)
            return 1
        _stop_on_signals(stop)
        serve(sock, stop)
    return 0


def client_main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    parser = argparse.ArgumentParser(description="UDP ping client.")
    parser.add_argument("-server", "--server", default="127.0.0.1", help="UDP server IP")
    parser.add_argument("-port", "--port", type=int, default=LISTEN_PORT,
                        help="UDP server port")
    args = parser.parse_args(argv)

    stop = threading.Event()
    _stop_on_signals(stop)
    try:
        run_client(args.server, args.port, stop)
    except (OSError, ValueError) as exc:
        log.error("UDP client failed: %s", exc)
        return 1
    return 0