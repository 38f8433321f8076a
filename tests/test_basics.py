import io

import pytest

from netautomation.basics import (
    CiscoIOS,
    CiscoNXOS,
    Device,
    StatusClass,
    TitleReader,
    classify_status,
    connect,
    generate_name,
    get_config,
    header_words,
    join_octets,
    last_to_reboot,
    process_device,
    set_header_length,
    set_syn,
    suffix_generator,
    syn_flag_set,
    title_bytes,
)


def test_suffix_generators_are_independent():
    first = suffix_generator()
    assert f"device-{first()}" == "device-01"
    assert f"device-{first()}" == "device-02"
    second = suffix_generator()
    assert f"device-{second()}" == "device-01"


def test_generate_name():
    assert generate_name("device", "01") == "device-01"


def test_process_device_uses_callback():
    assert process_device(generate_name, "192.0.2.1") == "device-192.0.2.1"


def test_join_octets():
    assert join_octets("127", "1") == "127.1"
    ip = ["192", "0", "2", "1"]
    assert join_octets(*ip) == "192.0.2.1"


def test_title_reader_reads_whole_stream():
    reader = TitleReader(io.BytesIO(b"network automation with go"))
    assert reader.read() == b"Network Automation With Go"


def test_title_reader_titles_each_chunk():
    raw = b"network automation with go"
    reader = TitleReader(io.BytesIO(raw))
    chunks = iter(lambda: reader.read(4), b"")
    expected = [title_bytes(raw[start:start + 4]) for start in range(0, len(raw), 4)]
    assert list(chunks) == expected


def test_title_bytes_keeps_length_and_empty():
    assert title_bytes(b"") == b""
    data = b"a_b c-d 9x"
    result = title_bytes(data)
    assert len(result) == len(data)
    assert result.lower() == data.lower()


@pytest.mark.parametrize(
    "code, expected",
    [
        (304, StatusClass.REDIRECT),
        (200, StatusClass.SUCCESS),
        (404, StatusClass.CLIENT_ERROR),
        (503, StatusClass.SERVER_ERROR),
        (101, StatusClass.INFORMATIONAL),
        (600, StatusClass.UNKNOWN),
        (42, StatusClass.INCORRECT),
    ],
)
def test_classify_status(code, expected):
    assert classify_status(code) is expected


def test_status_labels():
    assert classify_status(304).value == "Redirect"
    assert classify_status(500).value == "Server Error"


def test_tcp_header_fields():
    header = set_syn(set_header_length(bytes(20), 5))
    assert header[13] == 0b01010000
    assert header[14] == 0b00000010
    assert syn_flag_set(header) is True
    assert header_words(header) == 5


def test_tcp_header_untouched_copy():
    original = bytes(20)
    set_syn(original)
    assert syn_flag_set(original) is False
    assert header_words(original) == 0


def test_header_length_rejects_oversized():
    with pytest.raises(ValueError):
        set_header_length(bytes(20), 256)


def test_device_generate_name():
    d1 = Device(name="r1")
    assert d1.name == "r1"
    d2 = Device(name="r2")
    d2.generate_name()
    assert d2.name == "device-r2"


def test_last_to_reboot():
    ios = CiscoIOS()
    nexus = CiscoNXOS()
    assert ios.uptime() == 1
    assert nexus.uptime() == 2
    assert last_to_reboot(ios, nexus) is True
    assert last_to_reboot(nexus, ios) is False


def test_get_config_message():
    assert get_config("leaf01") == 'Connected to device "leaf01"'


def test_connect_yields_every_device():
    devices = ["leaf01", "leaf02", "spine01"]
    assert sorted(connect(devices)) == sorted(get_config(d) for d in devices)


def test_connect_empty():
    assert list(connect([])) == []