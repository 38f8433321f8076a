import socket
import threading

import pytest

from netautomation.udp_ping import PROBE_SIZE, LossTracker, Probe, run_client, serve


def _bound_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(0.05)
    return sock


def _start_server(stop):
    sock = _bound_socket()
    thread = threading.Thread(target=serve, args=(sock, stop), daemon=True)
    thread.start()
    return sock, thread


def test_probe_wire_format():
    assert Probe(1, 2).pack() == b"\x01" + b"\x00" * 7 + b"\x02"


def test_probe_size():
    assert len(Probe(200, 1_650_000_000_000).pack()) == PROBE_SIZE


@pytest.mark.parametrize("seq,ts", [(0, 0), (255, -5), (17, 1_650_000_000_000)])
def test_probe_round_trip(seq, ts):
    probe = Probe(seq, ts)
    assert Probe.unpack(probe.pack()) == probe


def test_probe_unpack_short():
    with pytest.raises(ValueError):
        Probe.unpack(b"\x00" * 8)


def test_probe_rejects_large_sequence():
    with pytest.raises(ValueError):
        Probe(256, 0)


def test_tracker_in_order():
    tracker = LossTracker()
    for seq in range(5):
        tracker.observe(seq)
    assert tracker.lost == 0
    assert tracker.next_seq == 5


def test_tracker_gap_and_late_arrival():
    tracker = LossTracker()
    tracker.observe(0)
    assert tracker.observe(3) == 2
    assert tracker.next_seq == 4
    assert tracker.observe(1) == 1


def test_tracker_wraps_without_loss():
    tracker = LossTracker()
    for seq in [*range(256), 0]:
        tracker.observe(seq)
    assert tracker.lost == 0


def test_serve_echoes_probe():
    stop = threading.Event()
    server = _bound_socket()
    address = server.getsockname()
    sent = Probe(42, 1_650_000_000_000)
    received = []

    def _client():
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as client:
                client.settimeout(2)
                client.sendto(sent.pack(), address)
                received.append(client.recv(64))
        finally:
            stop.set()

    thread = threading.Thread(target=_client, daemon=True)
    thread.start()
    try:
        serve(server, stop)
    finally:
        stop.set()
        thread.join(2)
        server.close()
    assert len(received) == 1
    echoed = Probe.unpack(received[0])
    assert echoed == sent
    assert echoed.pack() == sent.pack()


def test_run_client_against_server():
    server_stop = threading.Event()
    server, thread = _start_server(server_stop)
    client_stop = threading.Event()
    timer = threading.Timer(0.4, client_stop.set)
    try:
        port = server.getsockname()[1]
        timer.start()
        tracker = run_client("127.0.0.1", port, client_stop, 0.05)
    finally:
        timer.cancel()
        client_stop.set()
        server_stop.set()
        thread.join(2)
        server.close()
    assert tracker.lost == 0
    assert tracker.next_seq >= 1