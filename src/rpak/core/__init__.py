# Core functionality for project dependency management
from .manifest import ManifestStore, Dependency, ManifestState
from .environment import DependencyEnvironment
from .snapshot import LibrarySnapshot, PackageStatus
from .installer import Installer
from .orchestrator import Orchestrator, CommandResult, CommandState
from .settings import Settings, load_settings
from .exceptions import (
    RpakError,
    ConfigError,
    ManifestError,
    RscriptError,
    NotInitializedError,
    RestoreError,
    InstallError,
    UnknownPackageError,
    UsageError,
)

__all__ = [
    "ManifestStore",
    "Dependency",
    "ManifestState",
    "DependencyEnvironment",
    "LibrarySnapshot",
    "PackageStatus",
    "Installer",
    "Orchestrator",
    "CommandResult",
    "CommandState",
    "Settings",
    "load_settings",
    "RpakError",
    "ConfigError",
    "ManifestError",
    "RscriptError",
    "NotInitializedError",
    "RestoreError",
    "InstallError",
    "UnknownPackageError",
    "UsageError",
]
