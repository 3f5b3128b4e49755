"""Data models for the mesh generator."""

from .settings import MeshSettings
from .inventory import Address, SSHTarget, HostRecord, Inventory
from .topology import (
    Direct,
    BehindNAT,
    Excluded,
    ReachabilityClass,
    Reachability,
    PeerDescriptor,
    ConfigDocument,
)

__all__ = [
    "MeshSettings",
    "Address",
    "SSHTarget",
    "HostRecord",
    "Inventory",
    "Direct",
    "BehindNAT",
    "Excluded",
    "ReachabilityClass",
    "Reachability",
    "PeerDescriptor",
    "ConfigDocument",
]
