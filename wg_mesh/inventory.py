"""Loading and validation of the host inventory."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import ValidationError

from .errors import InvalidHostRecord
from .models import HostRecord, Inventory, MeshSettings

logger = logging.getLogger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def parse_host(host_id: str, data: Any) -> HostRecord:
    """
    Validate one inventory entry.

    Args:
        host_id: Key of the entry in the ``hosts`` mapping
        data: Raw entry

    Returns:
        HostRecord: Validated, frozen record
    """
    if not isinstance(data, dict):
        raise InvalidHostRecord("entry must be a mapping", host_id=host_id)

    try:
        record = HostRecord(id=str(host_id), **data)
    except ValidationError as e:
        raise InvalidHostRecord(_format_validation_error(e), host_id=host_id) from e
    except TypeError as e:
        raise InvalidHostRecord(str(e), host_id=host_id) from e

    if not record.is_reachable:
        raise InvalidHostRecord("needs a 'lan' or an 'internet' address", host_id=host_id)
    return record


def validate_inventory(inventory: Inventory) -> Inventory:
    """
    Check cross-host consistency of an inventory.

    Args:
        inventory: Inventory to check

    Returns:
        The same inventory
    """
    seen: Dict[str, str] = {}
    for host_id, record in inventory.items():
        if not record.is_reachable:
            raise InvalidHostRecord("needs a 'lan' or an 'internet' address", host_id=host_id)

        other = seen.get(record.mesh.ip)
        if other is not None:
            raise InvalidHostRecord(f"mesh address {record.mesh.ip} already used by {other}", host_id=host_id)
        seen[record.mesh.ip] = host_id

        for excluded in sorted(record.exclude_peers - set(inventory)):
            logger.warning(f"{host_id}: excluded peer '{excluded}' is not in the inventory")
    return inventory


def parse_inventory(data: Any, settings: Optional[MeshSettings] = None) -> Inventory:
    """
    Build an inventory from already parsed YAML data.

    Args:
        data: Document with a ``hosts`` mapping and an optional ``mesh`` mapping
        settings: Base settings; the ``mesh`` section overrides them

    Returns:
        Inventory: Validated inventory
    """
    if not isinstance(data, dict) or not isinstance(data.get("hosts"), dict) or not data["hosts"]:
        raise InvalidHostRecord("inventory must contain a non-empty 'hosts:' mapping")

    settings = settings or MeshSettings()
    overrides = data.get("mesh") or {}
    if overrides:
        try:
            settings = MeshSettings(**{**settings.model_dump(), **overrides})
        except (ValidationError, TypeError) as e:
            raise InvalidHostRecord(f"invalid 'mesh' section: {e}") from e

    records = [parse_host(host_id, entry) for host_id, entry in data["hosts"].items()]
    return validate_inventory(Inventory.from_records(records, settings))


def load_inventory(path: Path, settings: Optional[MeshSettings] = None) -> Inventory:
    """
    Load and validate a YAML inventory file.

    Args:
        path: Inventory file
        settings: Base settings

    Returns:
        Inventory: Frozen, validated inventory
    """
    path = Path(path)
    if not path.exists():
        raise InvalidHostRecord(f"inventory file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidHostRecord(f"cannot parse {path}: {e}") from e

    inventory = parse_inventory(data, settings)
    logger.info(f"Loaded {len(inventory)} hosts from {path}")
    return inventory


def select_hosts(inventory: Inventory, names: Optional[Iterable[str]] = None) -> List[HostRecord]:
    """
    Apply a host filter, keeping inventory order.

    Args:
        inventory: Full inventory
        names: Host ids to keep (all hosts if empty or None)

    Returns:
        Selected host records
    """
    wanted = [name.strip() for name in (names or []) if name.strip()]
    if not wanted:
        return list(inventory.values())

    unknown = [name for name in wanted if name not in inventory]
    if unknown:
        raise InvalidHostRecord(f"unknown hosts: {', '.join(unknown)}")
    return [record for host_id, record in inventory.items() if host_id in wanted]
