[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netautomation"
version = "0.1.0"
description = "Network automation toolkit: inventories, IP addressing, whois and MAC lookups, UDP ping, device config rendering and state checks"
requires-python = ">=3.10"
keywords = [
    "network",
    "automation",
    "inventory",
    "ip",
    "cidr",
    "whois",
    "oui",
    "bgp",
    "nvue",
    "udp-ping",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
    "jinja2>=3.1",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
netauto-whois = "netautomation.whois:main"
netauto-lookup-server = "netautomation.lookup_server:main"
netauto-lookup-client = "netautomation.lookup_client:main"
netauto-udp-ping-server = "netautomation.udp_ping:server_main"
netauto-udp-ping-client = "netautomation.udp_ping:client_main"
netauto-nvue = "netautomation.nvue:main"

[tool.hatch.build.targets.wheel]
packages = ["netautomation"]

[tool.hatch.build.targets.sdist]
include = [
    "netautomation",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
