"""Command line interface for the WireGuard mesh generator."""

import logging
import sys
from pathlib import Path

import click

from ..crypto import FileKeyStorage, KeyStore, get_key_generator
from ..deploy import SSHDeployer
from ..errors import MeshError
from ..generator import MeshGenerator
from ..inventory import load_inventory
from ..models import Inventory

logger = logging.getLogger(__name__)


def _split_hosts(ctx, param, value):
    if not value:
        return None
    return [name.strip() for name in value.split(',') if name.strip()]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--inventory', 'inventory_path', default='wireguardmeshgenerator.yaml',
              type=click.Path(path_type=Path), show_default=True, help='Host inventory (YAML)')
@click.option('--keys-dir', type=click.Path(path_type=Path), help='Key material directory')
@click.option('--dist-dir', type=click.Path(path_type=Path), help='Rendered config directory')
@click.option('--keygen', type=click.Choice(['nacl', 'wg']), default='nacl', show_default=True,
              help='Key generation backend')
@click.option('--generate', is_flag=True, help='Generate keys and configs')
@click.option('--install', is_flag=True, help='Upload and install configs on the hosts')
@click.option('--clean', is_flag=True, help='Remove generated keys and configs')
@click.option('--hosts', callback=_split_hosts, help='Comma separated hosts to process (default: all)')
@click.pass_context
def cli(ctx, debug, inventory_path, keys_dir, dist_dir, keygen, generate, install, clean, hosts):
    """WireGuard mesh generator - keys, configs and deployment for a full mesh."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if not (generate or install or clean):
        click.echo(ctx.get_help())
        return

    try:
        inventory = load_inventory(inventory_path)

        overrides = {}
        if keys_dir is not None:
            overrides['keys_dir'] = keys_dir
        if dist_dir is not None:
            overrides['dist_dir'] = dist_dir
        if overrides:
            inventory = Inventory(inventory, inventory.settings.model_copy(update=overrides))
        settings = inventory.settings

        keystore = KeyStore(
            FileKeyStorage(settings.keys_dir, settings.interface),
            get_key_generator(keygen),
        )
        generator = MeshGenerator(inventory, keystore, SSHDeployer(settings))

        if generate:
            generator.check_tools()

        if clean:
            generator.clean()
            click.echo(f"✓ Removed {settings.keys_dir} and {settings.dist_dir}")

        if generate:
            paths = generator.generate(hosts)
            click.echo(f"✓ Generated {len(paths)} configs in {settings.dist_dir}")

        if install:
            report = generator.install(hosts)
            for host_id in report.installed:
                click.echo(f"✓ {host_id}: installed")
            for host_id, reason in report.failed.items():
                click.echo(f"✗ {reason}", err=True)
            if not report.ok:
                sys.exit(1)

    except MeshError as e:
        logger.debug("Fatal error", exc_info=True)
        click.echo(f"✗ {type(e).__name__}: {e}", err=True)
        sys.exit(1)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
