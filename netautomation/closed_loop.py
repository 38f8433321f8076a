"""Closed-loop enforcement of a gRPC service's state on a network device."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol, Union

import jinja2

GRPC_STATUS_CLI = "show grpc status"
_BACKUP_LAYOUT = "%m-%d-%Y_%H-%M"

_TRANSPORT = re.compile(r"transport.*")
_PORT = re.compile(r"listening-port.*")
_TLS = re.compile(r"TLS.*")
_FAMILY = re.compile(r"access-family.*")

_ENV = jinja2.Environment(
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
    autoescape=False,
)

log = logging.getLogger(__name__)


class ClosedLoopError(Exception):
    """A step of the enforcement loop failed."""


class Driver(Protocol):
    def send_command(self, command: str) -> str: ...


def _last_field(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    return (match.group(0) if match else "").split(" ")[-1]


@dataclass
class Service:
    """Desired or observed state of a management service."""

    name: str = ""
    port: str = ""
    af: str = ""
    insecure: bool = False
    cli: str = ""
    config: str = ""

    def gen_config(self, template_dir: Union[str, Path] = ".") -> str:
        """Return the service configuration, rendering <name>.template if needed."""
        if self.config:
            return self.config
        path = Path(template_dir) / f"{self.name}.template"
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ClosedLoopError(
                f"failed to read template file for {self.name}: {exc}"
            ) from exc
        try:
            return _ENV.from_string(source).render(**asdict(self))
        except jinja2.TemplateError as exc:
            raise ClosedLoopError(
                f"failed to parse template for {self.name}: {exc}"
            ) from exc

    def parse_oper(self, output: str) -> "Service":
        """Read the observed service state from the device's status output."""
        if self.name != "grpc":
            raise ValueError(f"service {self.name} not supported")
        return Service(
            name=_last_field(_TRANSPORT, output),
            port=_last_field(_PORT, output),
            af="ipv4" if _last_field(_FAMILY, output) == "tcp4" else "ipv6",
            insecure=_last_field(_TLS, output) != "enabled",
            cli=GRPC_STATUS_CLI,
        )

    def state_hash(self) -> str:
        """Digest of the service state; the rendered config is not part of it."""
        state = [self.name, self.port, self.af, self.insecure, self.cli]
        return hashlib.sha256(json.dumps(state).encode("utf-8")).hexdigest()


@dataclass
class DeviceInfo:
    """Command output captured from a device at a point in time."""

    device: str
    output: str
    timestamp: datetime = field(default_factory=datetime.now)

    def filename(self) -> str:
        return f"{self.device}_{self.timestamp.strftime(_BACKUP_LAYOUT)}_EST.cfg"

    def save(self, directory: Union[str, Path] = "backups") -> Path:
        """Write the output to a file in the directory and return its path."""
        path = Path(directory) / self.filename()
        try:
            with path.open("w", encoding="utf-8") as handle:
                handle.write(self.output)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            raise ClosedLoopError(
                f"failed to write 'show run' file for {self.device}: {exc}"
            ) from exc
        return path


def _run(driver: Driver, hostname: str, command: str) -> DeviceInfo:
    try:
        output = driver.send_command(command)
    except Exception as exc:
        raise ClosedLoopError(
            f"failed to send '{command}' for {hostname}: {exc}"
        ) from exc
    return DeviceInfo(device=hostname, output=output)


def get_config(driver: Driver, hostname: str) -> DeviceInfo:
    """Capture the running configuration of a device."""
    return _run(driver, hostname, "show run")


def get_oper(driver: Driver, hostname: str, service: Service) -> DeviceInfo:
    """Capture the operational status of a service."""
    return _run(driver, hostname, service.cli)


def reconcile(
    driver: Driver,
    hostname: str,
    intent: Service,
    apply_config: Callable[[str], None],
    template_dir: Union[str, Path] = ".",
) -> bool:
    """Run one loop iteration; push the config and return True on drift."""
    observed = intent.parse_oper(get_oper(driver, hostname, intent).output)
    log.info(
        "Operational state from device: service: %s addr-family: %s port: %s TLS: %s",
        observed.name, observed.af, observed.port, not observed.insecure,
    )
    if observed.state_hash() == intent.state_hash():
        return False
    config = intent.gen_config(template_dir)
    intent.config = config
    log.info("Configuring device %s", hostname)
    apply_config(config)
    return True