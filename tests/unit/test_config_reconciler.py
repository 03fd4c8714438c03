"""Unit tests for driver configuration reconciliation."""

import pytest

from qat_plugin.domain.entities import Device, Endpoint
from qat_plugin.domain.services.config_reconciler import (
    ConfigError,
    ConfigReconciler,
    load_device_config,
)
from qat_plugin.domain.value_objects import BusAddress, DeviceId

DEV0 = Device(DeviceId("dev0"), "c6xx", BusAddress("0000:3d:00.0"))
DEV1 = Device(DeviceId("dev1"), "c6xx", BusAddress("0000:3f:00.0"))


@pytest.mark.unit
class TestConfigReconciler:
    """Tests for ConfigReconciler.parse_configs."""

    def test_unpinned_section_across_devices(self, qat_configs, section_factory, general_sections):
        """Same-named sections are merged with one endpoint per device."""
        for dev in (DEV0, DEV1):
            qat_configs.write(dev.device_type, dev.id, general_sections + section_factory("dc1", 2, 0, 1, "false"))

        sections = ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])

        assert list(sections) == ["dc1"]
        dc1 = sections["dc1"]
        assert dc1.pinned is False
        assert dc1.endpoints == [Endpoint(DeviceId("dev0"), 2), Endpoint(DeviceId("dev1"), 2)]
        assert dc1.crypto_engines == 0
        assert dc1.compression_engines == 1

    def test_reserved_sections_skipped(self, qat_configs, general_sections, section_factory):
        """GENERAL and KERNEL sections don't describe workload pools."""
        qat_configs.write("c6xx", "dev0", general_sections + section_factory("SSL", 4, 2, 0))

        sections = ConfigReconciler(qat_configs.path).parse_configs([DEV0])

        assert list(sections) == ["SSL"]

    def test_pin_flag_mismatch(self, qat_configs, section_factory):
        """LimitDevAccess must agree on all devices."""
        qat_configs.write("c6xx", "dev0", section_factory("dc1", 2, 0, 1, "false"))
        qat_configs.write("c6xx", "dev1", section_factory("dc1", 2, 0, 1, "true"))

        with pytest.raises(ConfigError, match="LimitDevAccess must be consistent") as exc_info:
            ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])
        assert exc_info.value.section == "dc1"

    def test_absent_pin_flag_equals_false(self, qat_configs, section_factory):
        qat_configs.write("c6xx", "dev0", section_factory("dc1", 2, 0, 1))
        qat_configs.write("c6xx", "dev1", section_factory("dc1", 2, 0, 1, "0"))

        sections = ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])
        assert sections["dc1"].pinned is False

    def test_unpinned_process_count_mismatch(self, qat_configs, section_factory):
        qat_configs.write("c6xx", "dev0", section_factory("dc1", 2, 0, 1))
        qat_configs.write("c6xx", "dev1", section_factory("dc1", 3, 0, 1))

        with pytest.raises(ConfigError, match='not pinned section "dc1" NumProcesses'):
            ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])

    def test_pinned_process_counts_may_differ(self, qat_configs, section_factory):
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 1, 1, 0, "1"))
        qat_configs.write("c6xx", "dev1", section_factory("SSL", 3, 1, 0, "1"))

        sections = ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])

        assert sections["SSL"].pinned is True
        assert [ep.process_count for ep in sections["SSL"].endpoints] == [1, 3]

    def test_engine_count_mismatch(self, qat_configs, section_factory):
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 1, 1, 0))
        qat_configs.write("c6xx", "dev1", section_factory("SSL", 1, 2, 0))

        with pytest.raises(ConfigError, match="NumberCyInstances and NumberDcInstances must be consistent"):
            ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])

    def test_pinned_section_missing_on_device(self, qat_configs, section_factory):
        """Pinned sections must be defined on every device."""
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 1, 1, 0, "1"))
        qat_configs.write("c6xx", "dev1", section_factory("dc", 1, 0, 1))

        with pytest.raises(ConfigError, match=r"Section \[SSL\] must be defined for all QAT devices"):
            ConfigReconciler(qat_configs.path).parse_configs([DEV0, DEV1])

    def test_missing_required_key(self, qat_configs):
        qat_configs.write("c6xx", "dev0", "[SSL]\nNumberCyInstances = 1\nNumberDcInstances = 0\n")

        with pytest.raises(ConfigError, match="NumProcesses in SSL") as exc_info:
            ConfigReconciler(qat_configs.path).parse_configs([DEV0])
        assert exc_info.value.section == "SSL"

    def test_explicit_zero_is_not_missing(self, qat_configs, section_factory):
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 0, 1, 0))

        sections = ConfigReconciler(qat_configs.path).parse_configs([DEV0])
        assert sections["SSL"].endpoints == [Endpoint(DeviceId("dev0"), 0)]

    def test_invalid_integer(self, qat_configs):
        qat_configs.write(
            "c6xx", "dev0", "[SSL]\nNumberCyInstances = one\nNumberDcInstances = 0\nNumProcesses = 1\n"
        )

        with pytest.raises(ConfigError, match="NumberCyInstances in SSL"):
            ConfigReconciler(qat_configs.path).parse_configs([DEV0])

    def test_invalid_boolean(self, qat_configs, section_factory):
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 1, 1, 0, "maybe"))

        with pytest.raises(ConfigError, match="LimitDevAccess in SSL"):
            ConfigReconciler(qat_configs.path).parse_configs([DEV0])

    @pytest.mark.parametrize("value", ["y", "Y", "t", "TRUE", "On", "1"])
    def test_short_boolean_forms(self, qat_configs, section_factory, value):
        """Single-letter and mixed-case flags are accepted."""
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 1, 1, 0, value))

        sections = ConfigReconciler(qat_configs.path).parse_configs([DEV0])

        assert sections["SSL"].pinned is True

    @pytest.mark.parametrize("value", ["n", "F", "off", "0"])
    def test_short_false_forms(self, qat_configs, section_factory, value):
        qat_configs.write("c6xx", "dev0", section_factory("SSL", 1, 1, 0, value))

        assert ConfigReconciler(qat_configs.path).parse_configs([DEV0])["SSL"].pinned is False

    def test_prefixed_integers(self, qat_configs):
        qat_configs.write(
            "c6xx", "dev0", "[SSL]\nNumberCyInstances = 0x2\nNumberDcInstances = 0\nNumProcesses = 010\n"
        )

        ssl = ConfigReconciler(qat_configs.path).parse_configs([DEV0])["SSL"]

        assert ssl.crypto_engines == 2
        assert ssl.endpoints == [Endpoint(DeviceId("dev0"), 8)]

    def test_missing_file(self, qat_configs):
        with pytest.raises(ConfigError, match="c6xx_dev0.conf") as exc_info:
            ConfigReconciler(qat_configs.path).parse_configs([DEV0])
        assert exc_info.value.path == qat_configs.path / "c6xx_dev0.conf"

    def test_no_devices(self, qat_configs):
        assert ConfigReconciler(qat_configs.path).parse_configs([]) == {}


@pytest.mark.unit
class TestLoadDeviceConfig:
    """Tests for the INI loader."""

    def test_case_sensitive_keys_and_comments(self, tmp_path):
        path = tmp_path / "c6xx_dev0.conf"
        path.write_text(
            "# QAT configuration\n"
            "[SSL]\n"
            "NumberCyInstances = 2 # two crypto instances\n"
            "Cy0Name = \"SSL0\"\n"
            "Cy0Name = \"SSL0\"\n"
        )

        config = load_device_config(path)

        assert config["SSL"]["NumberCyInstances"] == "2"
        assert "numbercyinstances" not in config["SSL"]

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "c6xx_dev0.conf"
        path.write_text("NumProcesses = 1\n")

        with pytest.raises(ConfigError, match="failed to parse device config"):
            load_device_config(path)
