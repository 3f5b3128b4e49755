"""Tests for generate, install and clean."""

import pytest

from conftest import MissingToolGenerator, make_host
from wg_mesh.crypto import FileKeyStorage, KeyStore
from wg_mesh.errors import DeploymentFailure, InvalidHostRecord, ToolUnavailable
from wg_mesh.generator import MeshGenerator
from wg_mesh.models import Inventory


class RecordingDeployer:
    """Deployer double that fails for selected hosts."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.deployed = []

    def deploy(self, host, artifact):
        if host.id in self.failing:
            raise DeploymentFailure("connection refused", host_id=host.id)
        self.deployed.append((host.id, artifact))


@pytest.fixture
def mesh(mesh_inventory, keystore):
    return MeshGenerator(mesh_inventory, keystore, RecordingDeployer())


def test_generate_writes_one_config_per_host(mesh, settings):
    """Test the artifact layout under the dist directory."""
    paths = mesh.generate()

    assert paths == [
        settings.dist_dir / host / "etc" / "wireguard" / "wg0.conf"
        for host in ["fishfinger", "blowfish", "f0", "earth"]
    ]
    assert all(path.exists() for path in paths)
    assert paths[0].stat().st_mode & 0o777 == 0o600


def test_generate_content(mesh, settings, keystore):
    """Test that a generated config carries the host's own private key."""
    mesh.generate()

    text = (settings.dist_dir / "earth" / "etc" / "wireguard" / "wg0.conf").read_text()
    assert f"PrivateKey = {keystore.ensure_keypair('earth').private_key}" in text
    assert "# blowfish." not in text
    assert "Address = 192.168.2.200" in text


def test_generate_is_idempotent(mesh, settings, generator):
    """Test that a second run reuses keys and produces identical output."""
    first = [path.read_text() for path in mesh.generate()]
    calls = (generator.keypair_calls, generator.psk_calls)

    second = [path.read_text() for path in mesh.generate()]

    assert first == second
    assert (generator.keypair_calls, generator.psk_calls) == calls


def test_generate_key_counts(mesh, generator):
    """Test that keys are generated once per host and once per linked pair."""
    mesh.generate()

    assert generator.keypair_calls == 4
    # 6 pairs among 4 hosts, all linked from at least one side
    assert generator.psk_calls == 6


def test_generate_host_filter(mesh, settings):
    """Test that only selected hosts get configs written."""
    paths = mesh.generate(["f0"])

    assert len(paths) == 1
    assert not (settings.dist_dir / "earth").exists()
    assert "# earth." in paths[0].read_text()


def test_generate_overwrites(mesh):
    """Test that stale content is replaced."""
    path = mesh.generate(["f0"])[0]
    path.write_text("stale")

    mesh.generate(["f0"])

    assert path.read_text().startswith("[Interface]")


def test_invalid_host_writes_nothing(settings, keystore):
    """Test that one bad record aborts generation before any write."""
    inventory = Inventory.from_records([
        make_host("a", "10.0.0.1", internet_ip="198.51.100.1"),
        make_host("b", "10.0.0.2"),
    ], settings)
    mesh = MeshGenerator(inventory, keystore)

    with pytest.raises(InvalidHostRecord):
        mesh.generate()

    assert not settings.dist_dir.exists()


def test_missing_tool_aborts_before_work(mesh_inventory, settings):
    """Test that an unavailable key generator stops the run immediately."""
    generator = MissingToolGenerator()
    mesh = MeshGenerator(mesh_inventory, KeyStore(FileKeyStorage(settings.keys_dir), generator))

    with pytest.raises(ToolUnavailable):
        mesh.generate()

    assert generator.keypair_calls == 0
    assert not settings.keys_dir.exists()


def test_clean_removes_keys_and_configs(mesh, settings, generator):
    """Test clean followed by generate creates new keys."""
    mesh.generate()
    mesh.clean()

    assert not settings.keys_dir.exists()
    assert not settings.dist_dir.exists()

    mesh.generate()
    assert generator.keypair_calls == 8


def test_install_continues_after_failure(mesh_inventory, keystore):
    """Test that one failing host does not stop the others."""
    deployer = RecordingDeployer(failing=["blowfish"])
    mesh = MeshGenerator(mesh_inventory, keystore, deployer)
    mesh.generate()

    report = mesh.install()

    assert not report.ok
    assert list(report.failed) == ["blowfish"]
    assert report.installed == ["fishfinger", "f0", "earth"]
    assert [host for host, _ in deployer.deployed] == report.installed


def test_install_host_filter(mesh):
    """Test that install honors the host filter."""
    mesh.generate()

    report = mesh.install(["earth"])

    assert report.ok
    assert report.installed == ["earth"]


def test_generate_restricts_existing_config(mesh):
    """Test that an existing readable config is rewritten as 0600."""
    path = mesh.generate(["f0"])[0]
    path.chmod(0o644)

    mesh.generate(["f0"])

    assert path.stat().st_mode & 0o777 == 0o600
