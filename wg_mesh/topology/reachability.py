"""Directional reachability between two mesh hosts."""

from ..errors import InvalidHostRecord
from ..models import BehindNAT, Direct, Excluded, HostRecord, Reachability


def _require_reachable(host: HostRecord) -> None:
    if not host.is_reachable:
        raise InvalidHostRecord("host has neither a LAN nor an internet address", host_id=host.id)


def classify(local: HostRecord, peer: HostRecord) -> Reachability:
    """
    Classify how ``local`` reaches ``peer``.

    Hosts on the same side of the LAN boundary, and peers that are only
    internet-facing, are dialed directly. A peer that sits in a LAN the
    local host is not part of is behind NAT and has to initiate itself.
    Only a LAN host dialing out to an internet-only peer keeps the tunnel
    alive.

    Args:
        local: Host whose config is being built
        peer: Other mesh member

    Returns:
        Reachability: classification and keepalive flag
    """
    if peer.id in local.exclude_peers:
        return Reachability(Excluded())

    _require_reachable(local)
    _require_reachable(peer)

    keepalive = local.in_lan and not peer.in_lan

    if peer.in_lan == local.in_lan or not peer.in_lan:
        address = peer.lan or peer.internet
        if address is None:
            # Neither host is in the LAN, so the peer must be internet-facing
            raise InvalidHostRecord("host has no internet address", host_id=peer.id)
        return Reachability(Direct(address), keepalive)

    return Reachability(BehindNAT(), keepalive)
