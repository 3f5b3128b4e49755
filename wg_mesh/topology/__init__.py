"""Mesh topology resolution."""

from .reachability import classify
from .builder import build_peers, host_cidr, peer_ids

__all__ = ["classify", "build_peers", "host_cidr", "peer_ids"]
