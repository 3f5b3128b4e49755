"""Rendering of configuration documents to wg-quick syntax."""

from typing import List

from ..models import Address, ConfigDocument, PeerDescriptor

NAT_COMMENT = "# Due to NAT no Endpoint configured"


def format_endpoint(address: Address, port: int) -> str:
    """host:port, with IPv6 addresses in brackets."""
    if address.is_ipv6:
        return f"[{address.ip}]:{port}"
    return f"{address.ip}:{port}"


def _interface_lines(document: ConfigDocument) -> List[str]:
    lines = [
        "[Interface]",
        f"# {document.fqdn}",
    ]
    if document.address is not None:
        lines.append(f"Address = {document.address}")
    lines += [
        f"PrivateKey = {document.private_key}",
        f"ListenPort = {document.listen_port}",
    ]
    return lines


def _peer_lines(peer: PeerDescriptor, document: ConfigDocument) -> List[str]:
    lines = [
        "[Peer]",
        f"# {peer.fqdn}",
        f"PublicKey = {peer.public_key}",
        f"PresharedKey = {peer.preshared_key}",
    ]

    endpoint = peer.endpoint
    if endpoint is None:
        lines.append(NAT_COMMENT)
    else:
        lines.append(f"Endpoint = {format_endpoint(endpoint, document.listen_port)}")

    lines.append(f"AllowedIPs = {peer.allowed_ips}")
    if peer.keepalive_required:
        lines.append(f"PersistentKeepalive = {document.keepalive_interval}")
    return lines


def render_wg_conf(document: ConfigDocument) -> str:
    """
    Render a document as a wg-quick config file.

    Args:
        document: Config document

    Returns:
        Config text: one [Interface] stanza, then one [Peer] stanza per peer
    """
    stanzas = [_interface_lines(document)]
    stanzas += [_peer_lines(peer, document) for peer in document.peers]
    return "\n\n".join("\n".join(stanza) for stanza in stanzas) + "\n"
