"""Pytest configuration and shared fixtures for QAT plugin tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator, Iterable, Optional, Sequence

import pytest
from prometheus_client import CollectorRegistry

from qat_plugin.domain.entities.device_tree import DeviceTree
from qat_plugin.infrastructure.config import get_config
from qat_plugin.infrastructure.container import Container
from qat_plugin.infrastructure.metrics import MetricsRegistry
from qat_plugin.ports.outbound import CommandError


class FakeSysfs:
    """Builds a sysfs-like tree below a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.sys = root / "sys"

    def write(self, rel: str, content: str) -> Path:
        path = self.sys / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def pci_device(
        self,
        bsf: str,
        numa: Optional[str] = None,
        cpulist: Optional[str] = None,
        uio: Iterable[str] = (),
    ) -> Path:
        """Create a PCI function directory with optional attributes."""
        fields = bsf.split(":")
        device_dir = self.sys / "devices" / f"pci{fields[0]}:{fields[1]}" / bsf
        device_dir.mkdir(parents=True, exist_ok=True)
        if numa is not None:
            (device_dir / "numa_node").write_text(f"{numa}\n")
        if cpulist is not None:
            (device_dir / "local_cpulist").write_text(f"{cpulist}\n")
        (device_dir / "uio").mkdir(exist_ok=True)
        for name in uio:
            (device_dir / "uio" / name).mkdir(exist_ok=True)
        return device_dir

    def symlink(self, link: Path, target: Path) -> Path:
        link.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target, link)
        return link

    def set_iommu(self, *names: str) -> None:
        iommu_dir = self.sys / "class" / "iommu"
        iommu_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            (iommu_dir / name).mkdir(exist_ok=True)


class QATConfigDir:
    """Writes per-device driver configuration files."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.mkdir(parents=True, exist_ok=True)

    def write(self, device_type: str, device_id: str, content: str) -> Path:
        path = self.path / f"{device_type}_{device_id}.conf"
        path.write_text(content)
        return path


class FakeRunner:
    """CommandRunnerPort returning canned output."""

    def __init__(self, output: str = "", error: Optional[Exception] = None) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[str, ...]] = []

    def combined_output(self, args: Sequence[str]) -> str:
        self.calls.append(tuple(args))
        if self.error is not None:
            raise self.error
        return self.output


class RecordingNotifier:
    """NotifierPort that keeps every published tree."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.trees: list[DeviceTree] = []
        self.error = error

    def notify(self, tree: DeviceTree) -> None:
        self.trees.append(tree)
        if self.error is not None:
            raise self.error


def section(name: str, processes: int, cy: int, dc: int, limit_dev_access: Optional[str] = None) -> str:
    """Render an INI workload section."""
    lines = [
        f"[{name}]",
        f"NumberCyInstances = {cy}",
        f"NumberDcInstances = {dc}",
        f"NumProcesses = {processes}",
    ]
    if limit_dev_access is not None:
        lines.append(f"LimitDevAccess = {limit_dev_access}")
    return "\n".join(lines) + "\n"


GENERAL_SECTIONS = """\
[GENERAL]
ServicesEnabled = cy;dc
ConfigVersion = 2

[KERNEL]
NumberCyInstances = 0
NumberDcInstances = 0

"""


@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    """Reset the DI container and cached config around each test."""
    Container.reset()
    get_config.cache_clear()
    yield
    Container.reset()
    get_config.cache_clear()


@pytest.fixture
def fake_root(tmp_path: Path) -> Path:
    """Temporary directory standing in for "/"."""
    root = tmp_path.resolve() / "root"
    root.mkdir()
    return root


@pytest.fixture
def sysfs(fake_root: Path) -> FakeSysfs:
    return FakeSysfs(fake_root)


@pytest.fixture
def qat_configs(tmp_path: Path) -> QATConfigDir:
    return QATConfigDir(tmp_path.resolve() / "etc")


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry."""
    return MetricsRegistry(registry=collector_registry)


@pytest.fixture
def section_factory():
    return section


@pytest.fixture
def general_sections() -> str:
    return GENERAL_SECTIONS


@pytest.fixture
def fake_runner_factory():
    return FakeRunner


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(error=RuntimeError("sink unavailable"))


@pytest.fixture
def command_error() -> CommandError:
    return CommandError("adf_ctl: command not found")


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
