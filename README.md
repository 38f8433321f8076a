# netautomation

A small toolkit for everyday network automation jobs:

- **Inventories**: load router inventories from YAML, JSON or XML, and
  write host inventories back out as XML (`netautomation.inventory`).
- **IP addressing**: step through addresses, compare and sort them, count
  and list the usable hosts of a network, build CIDR masks, parse
  `address/length` strings, and find which stored prefixes contain an
  address (`netautomation.addressing`).
- **Lookups**: whois queries that follow `refer:` lines from server to
  server, MAC vendor lookups from a manuf-style OUI table, and a small HTTP
  service that answers both (`netautomation.whois`, `netautomation.macdb`,
  `netautomation.lookup_server`, `netautomation.lookup_client`).
- **UDP ping**: an echo server and a probing client that reports latency
  and lost packets (`netautomation.udp_ping`).
- **Device configuration**: render BGP leaf configuration for EOS-style
  and SR Linux-style CLIs from one YAML model, or build an NVUE JSON
  document and push it over HTTPS (`netautomation.config_model`,
  `netautomation.nvue`).
- **State checks**: one-step closed-loop enforcement of a gRPC service's
  state, and a route checker that confirms expected prefixes are present on
  each device (`netautomation.closed_loop`, `netautomation.routes`).
- **Basics**: naming helpers, a title-casing reader, HTTP status classes,
  TCP header bit helpers and concurrent polling (`netautomation.basics`),
  and `netautomation.ping.send()`.

## Installing

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Commands

| Command | What it does |
| --- | --- |
| `netauto-whois --query NAME` | Run a whois query from `whois.iana.org`, following referrals |
| `netauto-lookup-server --manuf SOURCE` | Load the OUI table from a file path or URL, then serve `/lookup` (`ip`, `mac`, `domain`) and `/check` on `--host`/`--port` (default `0.0.0.0:8080`) |
| `netauto-lookup-client [--server HOST:PORT] [--lookup ip\|mac\|domain] QUERY` | Query a running lookup server; `--check` asks `/check` instead |
| `netauto-udp-ping-server [--port N]` | Echo UDP datagrams back to their sender (default port 32767) |
| `netauto-udp-ping-client [--server IP] [--port N]` | Send one probe a second and log latency and lost packets |
| `netauto-nvue [--device HOST] [--username U] [--password P] [--input FILE]` | Build an NVUE configuration from a YAML model, store it in a new revision and apply it |

Every command takes `--help` and lists its options. The single-dash forms
(`-query`, `-server`, ...) are accepted too. `netauto-nvue` connects on port
8765 and does not verify the device's TLS certificate.

## Using the library

```python
from netautomation.ping import send
from netautomation.basics import generate_name, join_octets, suffix_generator

send()                              # "pong"
generate_name("device", "01")       # "device-01"
join_octets("192", "0", "2", "1")   # "192.0.2.1"

suffix = suffix_generator()
suffix(), suffix()                  # "01", "02"
```

Checking which prefixes cover an address:

```python
from netautomation.addressing import PrefixRanger

ranger = PrefixRanger()
for prefix in ("127.0.0.0/8", "192.0.2.0/24", "192.0.2.0/25"):
    ranger.insert(prefix)

ranger.contains("127.0.0.1")             # True
ranger.containing_networks("192.0.2.18") # the /24 then the /25
```

Rendering device configuration from a model file:

```python
from netautomation.config_model import load_model, render_ceos, render_srl

with open("input.yml") as stream:
    model = load_model(stream)

print(render_ceos(model))
print(render_srl(model))
```

The model file lists the uplinks (`name`, `prefix`), the BGP peers
(`ip`, `asn`), the local `asn` and the `loopback` address (`ip`).
`netautomation.nvue.build_nvue_config(model)` turns the same model into an
NVUE document.

Looking up the vendor of a MAC address from a manuf-style table:

```python
from netautomation.macdb import parse_manuf, lookup_vendor

with open("manuf") as lines:
    db = parse_manuf(lines)

lookup_vendor(db, "00:00:5E:00:53:01")  # vendor name, or None
```

Checking routes collected from several devices:

```python
from netautomation.routes import check_all, extract_ipv4_prefixes

reports = check_all({"leaf1": lambda: extract_ipv4_prefixes(table_text)})
reports["leaf1"].missing   # expected prefixes the device lacks
```

## What it does not do

The package does not open SSH or CLI sessions to devices. The closed-loop
functions (`get_config`, `get_oper`, `reconcile`) take any object with a
`send_command(command)` method returning the output text, and `reconcile`
pushes configuration through an `apply_config` callable that the caller
supplies. Likewise `check_all` runs the route collectors it is given; it
does not fetch routing tables itself. `render_ceos` and `render_srl` return
configuration text and do not send it anywhere.