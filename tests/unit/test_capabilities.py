"""Unit tests for the device capability table."""

import pytest
from pydantic import ValidationError

from cableops.errors import ConfigValidationError
from cableops.model.capabilities import (
    DEFAULT_CAPABILITIES,
    DEFAULT_TABLE,
    CapabilityTable,
    DeviceType,
    capabilities_of,
)


class TestDefaultTable:
    """Tests for the built-in capability table."""

    def test_every_type_has_profile(self):
        """Test that every device type maps to a record."""
        for device_type in DeviceType:
            assert device_type in DEFAULT_CAPABILITIES

    def test_router_is_gateway(self):
        """Test the router profile."""
        caps = capabilities_of("router")
        assert caps.layer == 3
        assert caps.is_routing
        assert caps.can_be_gateway
        assert caps.dhcp_capable

    def test_switch_bridges(self):
        """Test the switch profile."""
        caps = capabilities_of(DeviceType.SWITCH)
        assert caps.layer == 2
        assert caps.vlan_support
        assert not caps.per_port_ip
        assert not caps.is_routing

    def test_hub_is_layer_one(self):
        """Test that hubs and patch panels are transparent."""
        assert capabilities_of("hub").layer == 1
        assert capabilities_of("patch-panel").layer == 1

    def test_cloud_profile(self):
        """Test the cloud profile."""
        assert capabilities_of("cloud").is_cloud

    def test_unknown_falls_back_to_pc(self):
        """Test that unknown types resolve to the PC profile."""
        assert capabilities_of("toaster") == capabilities_of("pc")

    def test_aliases(self):
        """Test alias and case normalization."""
        assert capabilities_of("AP") == capabilities_of("access-point")
        assert capabilities_of(" Phone ") == capabilities_of("ip-phone")

    def test_records_are_frozen(self):
        """Test that capability records cannot be mutated."""
        with pytest.raises(ValidationError):
            capabilities_of("router").layer = 2


class TestOverrides:
    """Tests for capability overrides."""

    def test_override_applies(self):
        """Test that overrides produce a new table."""
        table = DEFAULT_TABLE.with_overrides({"switch": {"layer": 3, "can_be_gateway": True}})
        assert table.lookup("switch").is_routing
        assert table.lookup("switch").vlan_support
        assert not DEFAULT_TABLE.lookup("switch").is_routing

    def test_unknown_type_rejected(self):
        """Test that overriding an unknown type fails."""
        with pytest.raises(ConfigValidationError):
            CapabilityTable().with_overrides({"toaster": {"layer": 3}})

    def test_invalid_value_rejected(self):
        """Test that an invalid layer fails validation."""
        with pytest.raises(ConfigValidationError):
            CapabilityTable().with_overrides({"switch": {"layer": 7}})

    def test_unknown_field_rejected(self):
        """Test that unknown capability fields are refused."""
        with pytest.raises(ConfigValidationError):
            CapabilityTable().with_overrides({"switch": {"teleport": True}})
