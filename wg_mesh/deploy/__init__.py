"""Deployment of rendered configs to mesh hosts."""

from .ssh import SSHDeployer, install_script

__all__ = ["SSHDeployer", "install_script"]
