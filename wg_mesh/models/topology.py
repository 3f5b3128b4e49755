"""Value types produced by topology resolution."""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .inventory import Address


@dataclass(frozen=True)
class Direct:
    """The peer has an address the local host dials."""
    address: Address


@dataclass(frozen=True)
class BehindNAT:
    """No endpoint is configured locally; the peer initiates."""


@dataclass(frozen=True)
class Excluded:
    """The peer is excluded and is not a peer at all."""


ReachabilityClass = Union[Direct, BehindNAT, Excluded]


@dataclass(frozen=True)
class Reachability:
    """Directional relationship between a host and one of its peers."""
    reachability_class: ReachabilityClass
    keepalive_required: bool = False

    @property
    def is_excluded(self) -> bool:
        return isinstance(self.reachability_class, Excluded)


@dataclass(frozen=True)
class PeerDescriptor:
    """Rendering-ready data for one [Peer] stanza."""
    host_id: str
    mesh: Address
    public_key: str
    preshared_key: str
    allowed_ips: str
    reachability: ReachabilityClass
    keepalive_required: bool = False

    @property
    def fqdn(self) -> str:
        return f"{self.host_id}.{self.mesh.domain}"

    @property
    def endpoint(self) -> Optional[Address]:
        if isinstance(self.reachability, Direct):
            return self.reachability.address
        return None


@dataclass(frozen=True)
class ConfigDocument:
    """One host's complete WireGuard configuration."""
    host_id: str
    mesh: Address
    private_key: str
    listen_port: int
    keepalive_interval: int
    address: Optional[str] = None
    peers: Tuple[PeerDescriptor, ...] = field(default_factory=tuple)

    @property
    def fqdn(self) -> str:
        return f"{self.host_id}.{self.mesh.domain}"
