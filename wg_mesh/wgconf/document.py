"""Assembly of a host's configuration document."""

from typing import Optional, Sequence

from ..crypto import KeyPair
from ..models import ConfigDocument, HostRecord, MeshSettings, PeerDescriptor


def build_document(
    local: HostRecord,
    peers: Sequence[PeerDescriptor],
    own_keys: KeyPair,
    settings: Optional[MeshSettings] = None,
) -> ConfigDocument:
    """
    Assemble the interface block and peer blocks of one host.

    Args:
        local: Host the document is for
        peers: Peer descriptors, in rendering order
        own_keys: The host's own keypair
        settings: Mesh settings (defaults if None)

    Returns:
        ConfigDocument: Structured, not yet rendered config
    """
    settings = settings or MeshSettings()
    address = None if settings.omits_address(local.os) else local.mesh.ip

    return ConfigDocument(
        host_id=local.id,
        mesh=local.mesh,
        private_key=own_keys.private_key,
        listen_port=settings.listen_port,
        keepalive_interval=settings.keepalive_interval,
        address=address,
        peers=tuple(peers),
    )
