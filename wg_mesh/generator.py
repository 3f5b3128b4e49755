"""Generate, install and clean mesh configurations."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .crypto import FileKeyStorage, KeyStore, NaclKeyGenerator
from .crypto.storage import open_restricted
from .errors import DeploymentFailure, KeyStorageIO
from .inventory import select_hosts
from .models import ConfigDocument, Inventory
from .topology import build_peers
from .wgconf import build_document, render_wg_conf

logger = logging.getLogger(__name__)


@dataclass
class DeploymentReport:
    """Outcome of an install run."""
    installed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class MeshGenerator:
    """
    Drives config generation for an inventory.

    Responsibilities:
    - Build every selected host's document before writing any file
    - Write one rendered config per host, overwriting older ones
    - Hand rendered configs to the deployer, isolating per-host failures
    - Wipe generated keys and configs on clean
    """

    def __init__(self, inventory: Inventory, keystore: Optional[KeyStore] = None, deployer=None):
        """
        Initialize generator.

        Args:
            inventory: Validated, frozen inventory
            keystore: Key store (file storage under settings.keys_dir if None)
            deployer: Object with ``deploy(host, artifact)`` (needed for install)
        """
        self.inventory = inventory
        self.settings = inventory.settings
        self.keystore = keystore or KeyStore(
            FileKeyStorage(self.settings.keys_dir, self.settings.interface),
            NaclKeyGenerator(),
        )
        self.deployer = deployer

    def check_tools(self) -> None:
        """Fail fast if the key generation capability is unavailable."""
        self.keystore.generator.check_available()

    def build(self, host_id: str) -> ConfigDocument:
        """
        Build one host's config document.

        Args:
            host_id: Host to build for

        Returns:
            ConfigDocument
        """
        local = self.inventory[host_id]
        peers = build_peers(local, self.inventory, self.keystore)
        own_keys = self.keystore.ensure_keypair(local.id)
        return build_document(local, peers, own_keys, self.settings)

    def artifact_path(self, host_id: str) -> Path:
        return self.settings.artifact_path(host_id)

    def write(self, document: ConfigDocument) -> Path:
        """
        Render and write one document.

        Args:
            document: Document to write

        Returns:
            Path of the written config
        """
        path = self.artifact_path(document.host_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open_restricted(path) as f:
                f.write(render_wg_conf(document))
        except OSError as e:
            raise KeyStorageIO(f"Cannot write {path}: {e}", host_id=document.host_id) from e
        return path

    def generate(self, hosts: Optional[Iterable[str]] = None) -> List[Path]:
        """
        Generate configs for the selected hosts.

        Args:
            hosts: Host ids to generate for (all if None)

        Returns:
            Paths of the written configs
        """
        self.check_tools()
        selected = select_hosts(self.inventory, hosts)

        documents = [self.build(record.id) for record in selected]

        paths = []
        for document in documents:
            path = self.write(document)
            logger.info(f"Generated {path} ({len(document.peers)} peers)")
            paths.append(path)
        return paths

    def install(self, hosts: Optional[Iterable[str]] = None) -> DeploymentReport:
        """
        Upload and install configs, continuing past per-host failures.

        Args:
            hosts: Host ids to install on (all if None)

        Returns:
            DeploymentReport
        """
        if self.deployer is None:
            raise ValueError("No deployer configured")

        report = DeploymentReport()
        for record in select_hosts(self.inventory, hosts):
            try:
                self.deployer.deploy(record, self.artifact_path(record.id))
            except DeploymentFailure as e:
                logger.error(f"Deployment failed: {e}")
                report.failed[record.id] = str(e)
            else:
                report.installed.append(record.id)
        return report

    def clean(self) -> None:
        """Remove all generated key material and configs."""
        self.keystore.clean()

        dist_dir = self.settings.dist_dir
        if dist_dir.exists():
            try:
                shutil.rmtree(dist_dir)
            except OSError as e:
                raise KeyStorageIO(f"Cannot remove {dist_dir}: {e}") from e
            logger.info(f"Removed generated configs {dist_dir}")
