"""Network automation toolkit: inventories, IP addressing, whois and MAC lookups, UDP ping, configuration rendering and state checks."""

__version__ = "0.1.0"