"""Tests for SSH deployment."""

from unittest import mock

import paramiko
import pytest

from conftest import make_host
from wg_mesh.deploy import SSHDeployer, install_script
from wg_mesh.errors import DeploymentFailure
from wg_mesh.models import SSHTarget


def _fake_client(exit_status=0, stderr=b""):
    client = mock.MagicMock()
    stdin, stdout, err = mock.MagicMock(), mock.MagicMock(), mock.MagicMock()
    stdout.read.return_value = b"renamed 'wg0.conf'"
    stdout.channel.recv_exit_status.return_value = exit_status
    err.read.return_value = stderr
    client.exec_command.return_value = (stdin, stdout, err)
    return client


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "wg0.conf"
    path.write_text("[Interface]\n")
    return path


@pytest.fixture
def host():
    return make_host(
        "f0", "192.168.2.130", lan_ip="192.168.1.130",
        ssh=SSHTarget(user="paul", sudo_cmd="doas", reload_cmd="service wireguard restart",
                      conf_dir="/usr/local/etc/wireguard"),
    )


def test_install_script():
    """Test the remote install steps and their order."""
    script = install_script("wg0.conf", "/etc/wireguard", "doas", "sh /etc/netstart wg0")

    lines = script.splitlines()
    assert lines[0] == "if [ ! -d /etc/wireguard ]; then"
    assert "doas mv -v wg0.conf /etc/wireguard/wg0.conf" in lines
    assert "doas chmod 600 /etc/wireguard/wg0.conf" in lines
    assert lines[-1] == "doas sh /etc/netstart wg0"


def test_install_script_without_sudo():
    """Test that an empty sudo command leaves commands unprefixed."""
    script = install_script("wg0.conf", "/etc/wireguard", "", "wg-quick up wg0")

    assert "\nchmod 700 /etc/wireguard\n" in script


def test_deploy_uploads_and_installs(host, artifact):
    """Test the full upload, install and reload sequence."""
    client = _fake_client()
    deployer = SSHDeployer(client_factory=lambda: client)

    deployer.deploy(host, artifact)

    client.connect.assert_called_once_with(hostname="f0", port=22, username="paul", timeout=10.0)
    sftp = client.open_sftp.return_value
    sftp.put.assert_called_once_with(str(artifact), "wg0.conf")
    stdin = client.exec_command.return_value[0]
    script = stdin.write.call_args[0][0]
    assert "/usr/local/etc/wireguard/wg0.conf" in script
    assert script.rstrip().endswith("doas service wireguard restart")
    client.close.assert_called_once()


def test_deploy_uses_ssh_host_override(artifact):
    """Test connecting to an explicit ssh host name."""
    host = make_host("earth", "10.0.0.1", lan_ip="192.168.1.1",
                     ssh=SSHTarget(user="paul", host="earth.lan", port=2222, reload_cmd="true"))
    client = _fake_client()

    SSHDeployer(client_factory=lambda: client).deploy(host, artifact)

    assert client.connect.call_args.kwargs["hostname"] == "earth.lan"
    assert client.connect.call_args.kwargs["port"] == 2222


def test_deploy_without_ssh_section(artifact):
    """Test that hosts without ssh access cannot be deployed."""
    host = make_host("earth", "10.0.0.1", lan_ip="192.168.1.1")

    with pytest.raises(DeploymentFailure) as exc_info:
        SSHDeployer(client_factory=_fake_client).deploy(host, artifact)
    assert exc_info.value.host_id == "earth"


def test_deploy_missing_artifact(host, tmp_path):
    """Test that install requires a generated config."""
    with pytest.raises(DeploymentFailure):
        SSHDeployer(client_factory=_fake_client).deploy(host, tmp_path / "missing.conf")


def test_deploy_connection_failure(host, artifact):
    """Test that SSH errors become DeploymentFailure."""
    client = _fake_client()
    client.connect.side_effect = paramiko.SSHException("Connection refused")

    with pytest.raises(DeploymentFailure) as exc_info:
        SSHDeployer(client_factory=lambda: client).deploy(host, artifact)
    assert "Connection refused" in str(exc_info.value)


def test_deploy_install_script_failure(host, artifact):
    """Test that a failing remote script is reported and the client closed."""
    client = _fake_client(exit_status=1, stderr=b"doas: Operation not permitted")

    with pytest.raises(DeploymentFailure) as exc_info:
        SSHDeployer(client_factory=lambda: client).deploy(host, artifact)

    assert "Operation not permitted" in str(exc_info.value)
    client.close.assert_called_once()
