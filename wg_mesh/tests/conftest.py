"""Shared fixtures for the mesh generator tests."""

import threading

import pytest

from wg_mesh.crypto import FileKeyStorage, KeyPair, KeyStore
from wg_mesh.errors import ToolUnavailable
from wg_mesh.models import Address, HostRecord, Inventory, MeshSettings

INVENTORY_YAML = """
hosts:
  fishfinger:
    os: OpenBSD
    internet: {domain: example.org, ip: 46.23.94.99}
    wg0: {domain: wg0.example.org, ip: 192.168.2.110}
  earth:
    os: Linux
    ssh: {user: paul, reload_cmd: systemctl restart wg-quick@wg0}
    lan: {domain: lan.example.org, ip: 192.168.1.200}
    wg0: {domain: wg0.example.org, ip: 192.168.2.200}
    exclude_peers: [fishfinger]
"""


class CountingKeyGenerator:
    """Deterministic key generator that records how often it is called."""

    name = "counting"

    def __init__(self):
        self.keypair_calls = 0
        self.psk_calls = 0
        self.public_key_calls = 0
        self._lock = threading.Lock()

    def check_available(self):
        pass

    def generate_keypair(self):
        with self._lock:
            self.keypair_calls += 1
            n = self.keypair_calls
        private_key = f"priv-{n}"
        return KeyPair(private_key=private_key, public_key=f"pub-of-{private_key}")

    def public_key(self, private_key_b64):
        self.public_key_calls += 1
        return f"pub-of-{private_key_b64}"

    def generate_preshared_key(self):
        with self._lock:
            self.psk_calls += 1
            return f"psk-{self.psk_calls}"


class MissingToolGenerator(CountingKeyGenerator):
    """Generator whose backing tool is not installed."""

    def check_available(self):
        raise ToolUnavailable("WireGuard tool 'wg' not found on PATH")


def make_host(host_id, mesh_ip, lan_ip=None, internet_ip=None, os="Linux", exclude=(), ssh=None):
    """Build a HostRecord with short arguments."""
    return HostRecord(
        id=host_id,
        mesh=Address(ip=mesh_ip, domain="wg0.example.org"),
        lan=Address(ip=lan_ip, domain="lan.example.org") if lan_ip else None,
        internet=Address(ip=internet_ip, domain="example.org") if internet_ip else None,
        os=os,
        exclude_peers=frozenset(exclude),
        ssh=ssh,
    )


@pytest.fixture
def generator():
    return CountingKeyGenerator()


@pytest.fixture
def storage(tmp_path):
    return FileKeyStorage(tmp_path / "keys")


@pytest.fixture
def keystore(storage, generator):
    return KeyStore(storage, generator)


@pytest.fixture
def settings(tmp_path):
    return MeshSettings(keys_dir=tmp_path / "keys", dist_dir=tmp_path / "dist")


@pytest.fixture
def mesh_inventory(settings):
    """Two internet hosts, two LAN hosts; earth excludes blowfish."""
    return Inventory.from_records([
        make_host("fishfinger", "192.168.2.110", internet_ip="46.23.94.99", os="OpenBSD"),
        make_host("blowfish", "192.168.2.111", internet_ip="23.88.35.144", os="OpenBSD"),
        make_host("f0", "192.168.2.130", lan_ip="192.168.1.130", os="FreeBSD"),
        make_host("earth", "192.168.2.200", lan_ip="192.168.1.200", exclude=["blowfish"]),
    ], settings)
