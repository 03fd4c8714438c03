"""QAT-related type-safe identifiers.

These value objects provide type safety for device and section identifiers
using Python's NewType for zero-runtime overhead.
"""

from __future__ import annotations

from typing import NewType

# Driver instance identifier (e.g., "dev0")
DeviceId = NewType("DeviceId", str)

# PCI bus/device/function, optionally with domain (e.g., "0000:3d:00.0")
BusAddress = NewType("BusAddress", str)

# Workload section name from the driver configuration (e.g., "SSL")
SectionName = NewType("SectionName", str)

# Resource type advertised to the orchestrator (e.g., "cy2_dc0")
DeviceType = NewType("DeviceType", str)

SECTION_ENV_PREFIX = "QAT_SECTION_NAME"


def create_device_id(inst_id: str | int) -> DeviceId:
    """Create a device identifier from a driver instance id."""
    return DeviceId(f"dev{inst_id}")


def create_unit_id(section: str, counter: int) -> str:
    """Create a catalog unit identifier from section name and counter."""
    return f"{section}_{counter}"


def section_device_type(crypto_engines: int, compression_engines: int) -> DeviceType:
    """Create the resource type label for a section's engine counts."""
    return DeviceType(f"cy{crypto_engines}_dc{compression_engines}")


def section_env_name(device_type: str, counter: int) -> str:
    """Create the allocation-order stamped section environment variable."""
    return f"{SECTION_ENV_PREFIX}_{device_type}_{counter}"
