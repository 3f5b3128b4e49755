"""Per-host peer list construction."""

import ipaddress
import logging
from typing import List

from ..crypto import KeyStore
from ..models import HostRecord, Inventory, PeerDescriptor
from .reachability import classify

logger = logging.getLogger(__name__)


def host_cidr(ip: str) -> str:
    """Single-host network for an address (/32 or /128)."""
    address = ipaddress.ip_address(ip)
    return str(ipaddress.ip_network(f"{address}/{address.max_prefixlen}"))


def peer_ids(local: HostRecord, inventory: Inventory) -> List[str]:
    """Inventory hosts ``local`` peers with, in inventory order."""
    return [
        host_id for host_id in inventory
        if host_id != local.id and host_id not in local.exclude_peers
    ]


def build_peers(local: HostRecord, inventory: Inventory, keystore: KeyStore) -> List[PeerDescriptor]:
    """
    Build the ordered peer descriptors of one host.

    Exclusion is applied from ``local``'s perspective only.

    Args:
        local: Host whose peers are resolved
        inventory: Full mesh inventory
        keystore: Source of public and preshared keys

    Returns:
        Peer descriptors in inventory order
    """
    peers = []
    for host_id in peer_ids(local, inventory):
        peer = inventory[host_id]
        reachability = classify(local, peer)
        if reachability.is_excluded:
            continue

        peers.append(PeerDescriptor(
            host_id=peer.id,
            mesh=peer.mesh,
            public_key=keystore.ensure_keypair(peer.id).public_key,
            preshared_key=keystore.ensure_preshared_key(local.id, peer.id),
            allowed_ips=host_cidr(peer.mesh.ip),
            reachability=reachability.reachability_class,
            keepalive_required=reachability.keepalive_required,
        ))

    logger.debug(f"{local.id}: {len(peers)} peers ({', '.join(p.host_id for p in peers)})")
    return peers
