"""Mesh-wide settings."""

from pathlib import Path
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field


class MeshSettings(BaseModel):
    """
    Settings shared by every host of the mesh.

    Defaults can be overridden by the inventory's ``mesh:`` section and
    then by command line options.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    interface: str = Field(default="wg0", description="WireGuard interface name")
    listen_port: int = Field(default=56709, ge=1, le=65535, description="UDP port used by every host")
    keepalive_interval: int = Field(default=25, ge=1, description="PersistentKeepalive seconds")
    no_address_platforms: FrozenSet[str] = Field(
        default_factory=lambda: frozenset({"OpenBSD"}),
        description="Operating systems whose config must not carry an Address directive"
    )
    keys_dir: Path = Field(default=Path("keys"), description="Local key material directory")
    dist_dir: Path = Field(default=Path("dist"), description="Rendered config output directory")
    remote_conf_dir: str = Field(default="/etc/wireguard", description="Default remote config directory")
    ssh_timeout: float = Field(default=10.0, gt=0, description="SSH connect timeout (seconds)")

    def omits_address(self, operating_system: str) -> bool:
        """Check whether a platform lacks the Address directive."""
        platforms = {p.lower() for p in self.no_address_platforms}
        return operating_system.lower() in platforms

    def artifact_path(self, host_id: str) -> Path:
        """Local path of the rendered config for a host."""
        return self.dist_dir / host_id / "etc" / "wireguard" / f"{self.interface}.conf"
