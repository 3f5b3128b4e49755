"""Host inventory models."""

import ipaddress
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import FrozenSet, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .settings import MeshSettings

HOST_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.-]{0,252}$")


class Address(BaseModel):
    """An IP address together with the domain name it is known by."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    ip: str = Field(..., description="IPv4 or IPv6 address")
    domain: str = Field(..., description="Domain the address belongs to")

    @field_validator("ip")
    @classmethod
    def validate_ip(cls, value: str) -> str:
        return str(ipaddress.ip_address(value.strip()))

    @property
    def is_ipv6(self) -> bool:
        return ipaddress.ip_address(self.ip).version == 6


class SSHTarget(BaseModel):
    """How to reach a host for deployment."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    user: str = Field(..., description="Remote login user")
    host: Optional[str] = Field(None, description="SSH host name (defaults to the host id)")
    port: int = Field(default=22, ge=1, le=65535, description="SSH port")
    sudo_cmd: str = Field(default="sudo", description="Privilege escalation command")
    reload_cmd: Optional[str] = Field(None, description="Command reloading the WireGuard interface")
    conf_dir: Optional[str] = Field(None, description="Remote WireGuard config directory")


class HostRecord(BaseModel):
    """
    One mesh member as declared in the inventory.

    ``exclude_peers`` is one-directional: it only affects this host's own
    peer list.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    id: str = Field(..., description="Unique host identifier")
    lan: Optional[Address] = Field(None, description="LAN address, present iff the host sits in the LAN")
    internet: Optional[Address] = Field(None, description="Public address, present iff internet-facing")
    mesh: Address = Field(..., alias="wg0", description="Mesh-internal address")
    os: str = Field(default="Linux", description="Operating system name")
    exclude_peers: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Host ids this host never peers with"
    )
    ssh: Optional[SSHTarget] = Field(None, description="Deployment access descriptor")

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not HOST_ID_RE.match(value):
            raise ValueError(f"invalid host id {value!r} (allowed: A-Z a-z 0-9 . -)")
        return value

    @property
    def in_lan(self) -> bool:
        return self.lan is not None

    @property
    def has_internet(self) -> bool:
        return self.internet is not None

    @property
    def is_reachable(self) -> bool:
        """A host must have at least one of a LAN or an internet address."""
        return self.in_lan or self.has_internet

    @property
    def fqdn(self) -> str:
        """Mesh name used in config comment headers."""
        return f"{self.id}.{self.mesh.domain}"


class Inventory(Mapping):
    """
    Immutable, ordered mapping of host id to HostRecord.

    Iteration follows the order hosts were declared in.
    """

    def __init__(self, hosts: Mapping, settings: Optional[MeshSettings] = None):
        self._hosts = MappingProxyType(dict(hosts))
        self.settings = settings or MeshSettings()

    def __getitem__(self, host_id: str) -> HostRecord:
        return self._hosts[host_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._hosts)

    def __len__(self) -> int:
        return len(self._hosts)

    def __repr__(self) -> str:
        return f"Inventory({list(self._hosts)!r})"

    @classmethod
    def from_records(cls, records, settings: Optional[MeshSettings] = None) -> "Inventory":
        """Build an inventory from HostRecords, keeping their order."""
        return cls({record.id: record for record in records}, settings)
