import threading
import urllib.error
import urllib.request

import pytest

from netautomation.lookup_server import LookupService, create_server

DB = {"02:00:00": "Example Networks"}


def _resolver(query):
    return f"whois for {query}"


@pytest.fixture
def service():
    return LookupService(mac_db=DB, resolver=_resolver)


@pytest.fixture
def base_url(service):
    server = create_server(service, "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def _get(url):
    with urllib.request.urlopen(url, timeout=5) as response:
        return response.read().decode()


def _status(url):
    try:
        with urllib.request.urlopen(url, timeout=5) as response:
            return response.status
    except urllib.error.HTTPError as err:
        return err.code


def test_get_mac_found(service):
    assert service.get_mac(["02:00:00:11:22:33"]) == "Example Networks"


def test_get_mac_unparsable(service):
    assert service.get_mac(["not-a-mac"]) == "Failed to parse MAC"


def test_get_mac_unknown(service):
    assert service.get_mac(["02:00:09:11:22:33"]) == "result not found\n"


def test_get_mac_needs_one_value(service):
    assert service.get_mac(["a", "b"]) == "incorrect query [a b]"


def test_get_whois_uses_resolver(service):
    assert service.get_whois(["example.com"]) == _resolver("example.com")


def test_lookup_routes_keys(service):
    assert service.lookup({"ip": ["192.0.2.1"]}) == _resolver("192.0.2.1")
    assert service.lookup({"domain": ["example.com"]}) == _resolver("example.com")
    assert service.lookup({"mac": ["02:00:00:11:22:33"]}) == "Example Networks"


def test_lookup_unknown_key(service):
    assert service.lookup({"foo": ["x"]}) == 'query "foo" not recognized'


def test_lookup_empty(service):
    assert service.lookup({}) == ""


def test_http_check(base_url):
    assert _get(base_url + "/check") == "OK\n"


def test_http_lookup(base_url):
    assert _get(base_url + "/lookup?mac=02:00:00:11:22:33") == "Example Networks"
    assert _get(base_url + "/lookup?domain=example.com") == _resolver("example.com")


def test_http_unknown_path(base_url):
    assert _status(base_url + "/other") == 404
    assert _status(base_url + "/check") == 200