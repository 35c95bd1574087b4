"""Workspace snapshot loader.

Loads an exported workspace snapshot (YAML or JSON), validates it with
Pydantic and builds an indexed Topology for the engine.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cableops.errors import (
    DeviceNotFoundError,
    SnapshotLoadError,
    SnapshotValidationError,
)
from cableops.model.topology import Device, SnapshotFile, Topology

logger = logging.getLogger(__name__)


class SnapshotLoader:
    """Loads and validates workspace snapshots.

    Example:
        loader = SnapshotLoader()
        topology = loader.load("office.yaml")
    """

    def load(self, path: Path | str) -> Topology:
        """Load a snapshot from a YAML or JSON file.

        Args:
            path: Path to the snapshot file

        Returns:
            Indexed Topology

        Raises:
            SnapshotLoadError: If the file cannot be read or parsed
            SnapshotValidationError: If the snapshot data is invalid
            DeviceNotFoundError: If a connection references a missing device
        """
        path = Path(path)
        raw_data = self._load_file(path)
        topology = self.load_data(raw_data)
        logger.debug(
            "Loaded snapshot %s: %d devices, %d interfaces, %d connections",
            path,
            topology.device_count,
            len(topology.interfaces),
            topology.connection_count,
        )
        return topology

    def load_data(self, data: dict[str, Any]) -> Topology:
        """Validate already-parsed snapshot data."""
        snapshot = self._validate_snapshot(data)
        return self._build_topology(snapshot)

    def _load_file(self, path: Path) -> dict[str, Any]:
        """Load raw data from file."""
        if not path.exists():
            raise SnapshotLoadError(
                f"Snapshot file not found: {path}",
                {"path": str(path)},
            )

        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except json.JSONDecodeError as e:
            raise SnapshotLoadError(
                f"Invalid JSON in snapshot file: {e}",
                {"path": str(path)},
            ) from e
        except yaml.YAMLError as e:
            raise SnapshotLoadError(
                f"Invalid YAML in snapshot file: {e}",
                {"path": str(path)},
            ) from e
        except OSError as e:
            raise SnapshotLoadError(
                f"Cannot read snapshot file: {e}",
                {"path": str(path)},
            ) from e

        if not isinstance(data, dict):
            raise SnapshotLoadError(
                "Snapshot file must contain a mapping",
                {"path": str(path)},
            )

        return data

    def _validate_snapshot(self, data: dict[str, Any]) -> SnapshotFile:
        """Validate raw data against the SnapshotFile schema."""
        try:
            return SnapshotFile.model_validate(data)
        except ValidationError as e:
            raise SnapshotValidationError(
                f"Snapshot validation failed: {e.error_count()} errors",
                {"errors": e.errors()},
            ) from e

    def _build_topology(self, snapshot: SnapshotFile) -> Topology:
        """Build indexed Topology from validated snapshot data."""
        devices_by_id: dict[str, Device] = {}
        for device in snapshot.devices:
            if device.id in devices_by_id:
                raise SnapshotValidationError(
                    f"Duplicate device id: {device.id}",
                    {"device": device.id},
                )
            devices_by_id[device.id] = device

        # Validate connection references
        for conn in snapshot.connections:
            if conn.device_a_id not in devices_by_id:
                raise DeviceNotFoundError(conn.device_a_id)
            if conn.device_b_id not in devices_by_id:
                raise DeviceNotFoundError(conn.device_b_id)

        # Interfaces of deleted devices are dropped, not fatal
        interfaces = []
        seen: set[tuple[str, int]] = set()
        for iface in snapshot.interfaces:
            if iface.device_id not in devices_by_id:
                logger.debug("Dropping interface of unknown device %s", iface.device_id)
                continue
            if iface.key in seen:
                raise SnapshotValidationError(
                    f"Duplicate interface: {iface.device_id} port {iface.port_number}",
                    {"device": iface.device_id, "port": iface.port_number},
                )
            seen.add(iface.key)
            interfaces.append(iface)

        return Topology(
            devices=devices_by_id,
            interfaces=interfaces,
            connections=snapshot.connections,
        )
