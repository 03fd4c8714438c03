"""Value objects for the QAT plugin domain."""

from qat_plugin.domain.value_objects.identifiers import (
    SECTION_ENV_PREFIX,
    BusAddress,
    DeviceId,
    DeviceType,
    SectionName,
    create_device_id,
    create_unit_id,
    section_device_type,
    section_env_name,
)

__all__ = [
    "SECTION_ENV_PREFIX",
    "BusAddress",
    "DeviceId",
    "DeviceType",
    "SectionName",
    "create_device_id",
    "create_unit_id",
    "section_device_type",
    "section_env_name",
]
