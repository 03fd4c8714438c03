"""Reconcile per-device QAT driver configuration into workload sections.

Every online device has a configuration file `<configDir>/<type>_<id>.conf`.
Each non-reserved INI section describes a pool of user-space processes.
Sections with the same name on several devices are merged into one
Section and checked for consistency:

- LimitDevAccess must agree on all devices.
- NumberCyInstances/NumberDcInstances must agree on all devices.
- Unpinned sections must have the same NumProcesses on all devices.
- Pinned sections (LimitDevAccess=1) must be defined on every device.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

from qat_plugin.domain.entities.device import Device
from qat_plugin.domain.entities.section import Endpoint, Section
from qat_plugin.domain.value_objects.identifiers import DeviceId, SectionName

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESERVED_SECTIONS = frozenset({"GENERAL", "SIOV", "KERNEL", "KERNEL_QAT", configparser.DEFAULTSECT})

KEY_NUM_PROCESSES = "NumProcesses"
KEY_CY_INSTANCES = "NumberCyInstances"
KEY_DC_INSTANCES = "NumberDcInstances"
KEY_LIMIT_DEV_ACCESS = "LimitDevAccess"


class ConfigError(Exception):
    """Driver configuration is unreadable or inconsistent."""

    def __init__(self, message: str, section: Optional[str] = None, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.section = section
        self.path = path


BOOLEAN_STATES = {
    "1": True, "t": True, "true": True, "y": True, "yes": True, "on": True,
    "0": False, "f": False, "false": False, "n": False, "no": False, "off": False,
}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in BOOLEAN_STATES:
        return BOOLEAN_STATES[lowered]
    raise ValueError(f"Not a boolean: {value!r}")


def _parse_int(value: str) -> int:
    """Parse decimal, 0x/0o/0b prefixed or legacy 0-prefixed octal integers."""
    try:
        return int(value, 0)
    except ValueError:
        return int(value, 8)


def _lookup(section: configparser.SectionProxy, key: str, convert: Callable[[str], T]) -> Optional[T]:
    """Read an optional key; None means absent, a parse failure raises."""
    raw = section.get(key)
    if raw is None:
        return None
    try:
        return convert(raw.strip())
    except ValueError as e:
        raise ConfigError(f"Can't parse {key} in {section.name}: {e}", section=section.name) from e


def _require(section: configparser.SectionProxy, key: str, convert: Callable[[str], T]) -> T:
    value = _lookup(section, key, convert)
    if value is None:
        raise ConfigError(f"Can't parse {key} in {section.name}: key is missing", section=section.name)
    return value


def load_device_config(path: Path) -> configparser.ConfigParser:
    """Load a QAT driver configuration file.

    Raises:
        ConfigError: If the file is missing or malformed.
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        inline_comment_prefixes=("#", ";"),
    )
    # Key names are case-sensitive in QAT configuration files
    parser.optionxform = str  # type: ignore[assignment]
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f, source=str(path))
    except (OSError, configparser.Error) as e:
        raise ConfigError(f"failed to parse device config {path}: {e}", path=path) from e
    return parser


class DriverConfig(dict[str, Section]):
    """Sections by name, in first-seen order."""

    def update_from(self, device_id: DeviceId, ini_section: configparser.SectionProxy) -> None:
        """Merge one device's section definition.

        Raises:
            ConfigError: If a key is missing/invalid or the definition is
                inconsistent with other devices.
        """
        name = SectionName(ini_section.name)
        num_processes = _require(ini_section, KEY_NUM_PROCESSES, _parse_int)
        crypto_engines = _require(ini_section, KEY_CY_INSTANCES, _parse_int)
        compression_engines = _require(ini_section, KEY_DC_INSTANCES, _parse_int)
        pinned = bool(_lookup(ini_section, KEY_LIMIT_DEV_ACCESS, _parse_bool))

        endpoint = Endpoint(device_id=device_id, process_count=num_processes)

        old = self.get(name)
        if old is None:
            self[name] = Section(
                name=name,
                crypto_engines=crypto_engines,
                compression_engines=compression_engines,
                pinned=pinned,
                endpoints=[endpoint],
            )
            return

        if old.pinned != pinned:
            raise ConfigError(
                f"Value of LimitDevAccess must be consistent across all devices in {name}",
                section=name,
            )

        if not pinned and old.endpoints[0].process_count != num_processes:
            raise ConfigError(
                f'For not pinned section "{name}" NumProcesses must be equal for all devices',
                section=name,
            )

        if old.crypto_engines != crypto_engines or old.compression_engines != compression_engines:
            raise ConfigError(
                f"NumberCyInstances and NumberDcInstances must be consistent across all devices in {name}",
                section=name,
            )

        old.endpoints.append(endpoint)


class ConfigReconciler:
    """Build the section map for the online devices."""

    def __init__(self, config_dir: Path = Path("/etc")) -> None:
        self._config_dir = Path(config_dir)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def parse_configs(self, devices: list[Device]) -> DriverConfig:
        """Parse and validate the configuration of all devices.

        Args:
            devices: Online devices from this scan cycle.

        Returns:
            Sections keyed by name.

        Raises:
            ConfigError: On unreadable files, bad keys or violated invariants.
        """
        drv_config = DriverConfig()
        dev_num = 0

        for dev in devices:
            config = load_device_config(self._config_dir / dev.config_name)
            dev_num += 1

            for name in config.sections():
                if name in RESERVED_SECTIONS:
                    continue
                logger.debug("Section %s on %s", name, dev.id)
                drv_config.update_from(dev.id, config[name])

        for name, section in drv_config.items():
            if section.pinned and len(section.endpoints) != dev_num:
                raise ConfigError(
                    f"Section [{name}] must be defined for all QAT devices since it contains LimitDevAccess=1",
                    section=name,
                )

        return drv_config
