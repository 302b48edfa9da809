"""Test configuration for rpak"""

import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add the source directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from rpak.core.exceptions import InstallError, NotInitializedError
from rpak.core.manifest import ManifestStore
from rpak.core.orchestrator import Orchestrator
from rpak.core.snapshot import PackageStatus
from rpak.core.version_utils import pinned_version, versions_equal

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def plain(text: str) -> str:
    """Strip terminal escape codes from console output"""
    return ANSI_ESCAPE.sub("", text)


class FakeInstaller:
    """In-memory installer: a dict library and a dict of latest versions"""

    def __init__(self, manifest: ManifestStore):
        self.manifest = manifest
        self.library: Dict[str, str] = {}
        self.latest: Dict[str, str] = {}
        self.failing: set = set()
        self.offline = False
        self.calls: List[tuple] = []

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise InstallError(
                f"installation of package '{name}' had non-zero exit status"
            )

    def install_declared(self) -> List[str]:
        self.calls.append(("install_declared",))
        if self.offline:
            raise InstallError("cannot open URL: network is unreachable")
        pinned = []
        for dep in self.manifest.get_dependencies().values():
            version = pinned_version(dep.constraint)
            if version is not None:
                if versions_equal(self.library.get(dep.name), version):
                    continue
                self.install_pinned(dep.name, version)
                pinned.append(dep.name)
            elif dep.name not in self.library:
                self._check(dep.name)
                self.library[dep.name] = self.latest.get(dep.name, "1.0.0")
        return pinned

    def install_pinned(self, name: str, version: str) -> None:
        self.calls.append(("install_pinned", name, version))
        self._check(name)
        self.library[name] = version

    def uninstall(self, name: str) -> None:
        self.calls.append(("uninstall", name))
        self.library.pop(name, None)

    def installed_version(self, name: str) -> Optional[str]:
        return self.library.get(name)

    def is_installed(self, name: str) -> bool:
        return name in self.library


class FakeSnapshot:
    """In-memory lock record tied to a FakeInstaller library"""

    def __init__(self, installer: FakeInstaller, initialized: bool = True):
        self.installer = installer
        self.initialized = initialized
        self.lock: Dict[str, str] = {}
        self.calls: List[tuple] = []

    def is_initialized(self) -> bool:
        return self.initialized

    def status(self) -> List[PackageStatus]:
        if not self.initialized:
            raise NotInitializedError()
        return [
            PackageStatus(name, version, self.installer.library.get(name))
            for name, version in self.lock.items()
        ]

    @staticmethod
    def needs_restore(status: List[PackageStatus]) -> bool:
        return any(entry.missing for entry in status)

    def restore(self) -> None:
        if not self.initialized:
            raise NotInitializedError()
        self.calls.append(("restore",))
        self.installer.library.update(self.lock)

    def clean(self) -> None:
        self.calls.append(("clean",))
        declared = self.installer.manifest.get_dependencies()
        for name in list(self.installer.library):
            if name not in declared:
                del self.installer.library[name]

    def recompute(self) -> None:
        self.calls.append(("recompute",))
        self.lock = dict(self.installer.library)

    def init(self, repos: Optional[str] = None) -> None:
        self.calls.append(("init", repos))
        self.initialized = True


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing"""
    return tmp_path


@pytest.fixture
def sample_description(tmp_path):
    """Create a sample DESCRIPTION file for testing"""
    path = tmp_path / "DESCRIPTION"
    path.write_text(
        "Package: testproject\n"
        "Title: Test Project\n"
        "Version: 0.1.0\n"
        "Imports:\n"
        "    dplyr (>= 1.0.0),\n"
        "    ggplot2\n"
        "Remotes:\n"
        "    tidyverse/ggplot2\n"
        "Encoding: UTF-8\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def empty_description(tmp_path):
    """Create a DESCRIPTION file without dependencies"""
    path = tmp_path / "DESCRIPTION"
    path.write_text("Package: testproject\nVersion: 0.1.0\n", encoding="utf-8")
    return path


@pytest.fixture
def manifest(empty_description):
    return ManifestStore(empty_description.parent)


@pytest.fixture
def installer(manifest):
    return FakeInstaller(manifest)


@pytest.fixture
def snapshot(installer):
    return FakeSnapshot(installer)


@pytest.fixture
def orchestrator(manifest, snapshot, installer):
    return Orchestrator(manifest, snapshot, installer)
