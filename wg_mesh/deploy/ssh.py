"""Upload and install rendered configs over SSH."""

import logging
import posixpath
import shlex
from pathlib import Path
from typing import Optional

import paramiko

from ..errors import DeploymentFailure
from ..models import HostRecord, MeshSettings

logger = logging.getLogger(__name__)


def install_script(
    filename: str,
    conf_dir: str,
    sudo_cmd: str,
    reload_cmd: str,
) -> str:
    """
    Shell script that moves an uploaded config into place and reloads.

    Args:
        filename: Name of the uploaded file in the login directory
        conf_dir: Remote WireGuard config directory
        sudo_cmd: Privilege escalation prefix (may be empty)
        reload_cmd: Interface reload command

    Returns:
        Script text, run with ``sh -e``
    """
    sudo = f"{sudo_cmd} " if sudo_cmd else ""
    conf_dir_q = shlex.quote(conf_dir)
    target_q = shlex.quote(posixpath.join(conf_dir, filename))
    return "\n".join([
        f"if [ ! -d {conf_dir_q} ]; then",
        f"  {sudo}mkdir -p {conf_dir_q}",
        "fi",
        f"{sudo}chmod 700 {conf_dir_q}",
        f"{sudo}mv -v {shlex.quote(filename)} {target_q}",
        f"{sudo}chmod 600 {target_q}",
        f"{sudo}{reload_cmd}",
        "",
    ])


class SSHDeployer:
    """
    Copies one config file to a host and installs it.

    Uses the local SSH agent and default key files for authentication.
    """

    def __init__(self, settings: Optional[MeshSettings] = None, client_factory=paramiko.SSHClient):
        """
        Initialize deployer.

        Args:
            settings: Mesh settings (timeouts, default paths)
            client_factory: Callable returning a paramiko-compatible client
        """
        self.settings = settings or MeshSettings()
        self.client_factory = client_factory

    def _connect(self, host: HostRecord):
        ssh = host.ssh
        client = self.client_factory()
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        client.connect(
            hostname=ssh.host or host.id,
            port=ssh.port,
            username=ssh.user,
            timeout=self.settings.ssh_timeout,
        )
        return client

    def deploy(self, host: HostRecord, artifact: Path) -> None:
        """
        Upload a rendered config, install it and reload the interface.

        Args:
            host: Target host
            artifact: Local rendered config

        Raises:
            DeploymentFailure: on any failure for this host
        """
        ssh = host.ssh
        if ssh is None:
            raise DeploymentFailure("no 'ssh' section in inventory", host_id=host.id)
        if not ssh.reload_cmd:
            raise DeploymentFailure("no 'reload_cmd' configured", host_id=host.id)

        artifact = Path(artifact)
        if not artifact.is_file():
            raise DeploymentFailure(f"config {artifact} not generated yet", host_id=host.id)

        conf_dir = ssh.conf_dir or self.settings.remote_conf_dir
        script = install_script(artifact.name, conf_dir, ssh.sudo_cmd, ssh.reload_cmd)

        try:
            client = self._connect(host)
        except (paramiko.SSHException, OSError) as e:
            raise DeploymentFailure(f"SSH connection failed: {e}", host_id=host.id) from e

        try:
            logger.info(f"Uploading {artifact} to {host.id}:.")
            sftp = client.open_sftp()
            try:
                sftp.put(str(artifact), artifact.name)
                sftp.chmod(artifact.name, 0o600)
            finally:
                sftp.close()

            logger.info(f"Installing WireGuard config on {host.id}")
            stdin, stdout, stderr = client.exec_command("sh -e", timeout=self.settings.ssh_timeout * 6)
            stdin.write(script)
            stdin.channel.shutdown_write()

            output = stdout.read().decode('utf-8', errors='replace').strip()
            errors = stderr.read().decode('utf-8', errors='replace').strip()
            status = stdout.channel.recv_exit_status()
            if output:
                logger.debug(f"{host.id}: {output}")
            if status != 0:
                raise DeploymentFailure(
                    f"install script exited with status {status}: {errors}",
                    host_id=host.id
                )
        except (paramiko.SSHException, OSError) as e:
            raise DeploymentFailure(f"SSH session failed: {e}", host_id=host.id) from e
        finally:
            client.close()

        logger.info(f"Installed WireGuard config on {host.id}")
