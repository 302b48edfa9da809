"""Command sequencing for init, install, add, remove and update"""

from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import structlog

from .environment import DependencyEnvironment
from .exceptions import InstallError, RestoreError, UnknownPackageError, UsageError
from .installer import Installer
from .manifest import ManifestState, ManifestStore
from .rscript import RscriptRunner
from .settings import DEFAULT_REPOS, Settings
from .snapshot import LibrarySnapshot
from .version_utils import format_constraint, parse_package_spec

logger = structlog.get_logger(__name__)


class CommandState(str, Enum):
    START = "start"
    RESTORED = "restored"
    MUTATED = "mutated"
    SNAPSHOTTED = "snapshotted"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CommandResult:
    """Outcome of a command, for display"""

    command: str
    packages: Dict[str, Optional[str]] = field(default_factory=dict)
    changed: List[str] = field(default_factory=list)
    previous_version: Optional[str] = None
    current_version: Optional[str] = None
    created_manifest: bool = False
    created_lock: bool = False


class Orchestrator:
    """
    Runs each command as a fixed sequence of manifest and adapter calls.

    Every command first brings the library in line with the lock record
    (RESTORED). Mutating commands then change the manifest or the library
    (MUTATED), install what is declared and regenerate the lock record
    (SNAPSHOTTED). If any step after a mutation fails, the manifest is
    put back exactly as it was and the library is restored from the
    untouched lock record before the error propagates (FAILED).
    """

    def __init__(
        self,
        manifest: ManifestStore,
        snapshot: LibrarySnapshot,
        installer: Installer,
        environment: Optional[DependencyEnvironment] = None,
        repos: str = DEFAULT_REPOS,
    ):
        self.manifest = manifest
        self.snapshot = snapshot
        self.installer = installer
        self.environment = environment
        self.repos = repos
        self.state = CommandState.START
        self._log = logger

    @classmethod
    def from_settings(
        cls, project_root: Union[str, Path], settings: Settings
    ) -> "Orchestrator":
        """Wire the real packrat/remotes adapters for a project directory"""
        root = Path(project_root).resolve()
        runner = RscriptRunner(settings.rscript, cwd=root, timeout=settings.timeout)
        environment = DependencyEnvironment(root, runner, repos=settings.repos)
        manifest = ManifestStore(root, project_name=settings.project_name)
        return cls(
            manifest,
            LibrarySnapshot(environment),
            Installer(environment, manifest),
            environment=environment,
            repos=settings.repos,
        )

    def _transition(self, state: CommandState) -> None:
        self._log.debug("state", previous=self.state.value, current=state.value)
        self.state = state

    @contextmanager
    def _command(self, name: str):
        self.state = CommandState.START
        self._log = logger.bind(command=name)
        isolation = self.environment.activated() if self.environment else nullcontext()
        with isolation:
            yield
        self._transition(CommandState.DONE)

    @contextmanager
    def _rollback_on_failure(self, saved: ManifestState):
        try:
            yield
        except (InstallError, RestoreError):
            self._rollback(saved)
            self._transition(CommandState.FAILED)
            raise

    def _rollback(self, saved: ManifestState) -> None:
        self._log.warning("rollback")
        self.manifest.restore_state(saved)
        try:
            self.snapshot.restore()
        except RestoreError as e:
            self._log.warning("rollback_restore_failed", error=str(e))
        self._transition(CommandState.RESTORED)

    def _restore(self) -> None:
        status = self.snapshot.status()
        if self.snapshot.needs_restore(status):
            missing = [entry.name for entry in status if entry.missing]
            self._log.info("library_drift", missing=missing)
            self.snapshot.restore()
        self._transition(CommandState.RESTORED)

    def _sync(self) -> None:
        try:
            self.installer.install_declared()
        except InstallError:
            if self.state is not CommandState.MUTATED:
                self._transition(CommandState.FAILED)
            raise
        self.snapshot.clean()
        self.snapshot.recompute()
        self._transition(CommandState.SNAPSHOTTED)

    def _installed_packages(self) -> Dict[str, Optional[str]]:
        return {
            name: self.installer.installed_version(name)
            for name in self.manifest.get_dependencies()
        }

    def install(self) -> CommandResult:
        """Bring the library in line with the manifest and lock record"""
        with self._command("install"):
            self._restore()
            self._sync()
            result = CommandResult("install", packages=self._installed_packages())
        return result

    def init(self) -> CommandResult:
        """Set up a project, then install it; safe to run again"""
        created_manifest = self.manifest.ensure_exists()
        created_lock = False
        if not self.snapshot.is_initialized():
            self.snapshot.init(self.repos)
            created_lock = True

        result = self.install()
        result.command = "init"
        result.created_manifest = created_manifest
        result.created_lock = created_lock
        return result

    def add(self, tokens: Sequence[str], remotes: Iterable[str] = ()) -> CommandResult:
        """
        Declare packages and install them.

        A 'name@version' token pins the exact version. Pinned packages, and
        every package when remotes are given, are uninstalled first so the
        install step fetches them again.

        Raises:
            UsageError: If no token is given or a token is malformed
            InstallError: After rolling back, if installation fails
            RestoreError: After rolling back, if the library cannot be pruned
                or snapshotted
        """
        specs = [parse_package_spec(token) for token in tokens]
        if not specs:
            raise UsageError("No packages given")
        remotes = list(remotes)

        with self._command("add"):
            self._restore()
            saved = self.manifest.snapshot_state()
            with self._rollback_on_failure(saved):
                self.manifest.add_remotes(remotes)
                for name, version in specs:
                    if version or remotes:
                        self.installer.uninstall(name)
                    self.manifest.set_dependency(name, format_constraint(version))
                self._transition(CommandState.MUTATED)
                self._sync()
            result = CommandResult(
                "add",
                packages=self._installed_packages(),
                changed=[name for name, _ in specs],
            )
        return result

    def remove(
        self, tokens: Sequence[str], remotes: Iterable[str] = ()
    ) -> CommandResult:
        """
        Undeclare packages and let the library be pruned.

        Every name is checked before anything is changed.

        Raises:
            UnknownPackageError: If a name is not declared
            InstallError: After rolling back, if installation fails
            RestoreError: After rolling back, if the library cannot be pruned
                or snapshotted
        """
        names = [parse_package_spec(token)[0] for token in tokens]
        remotes = list(remotes)
        if not names and not remotes:
            raise UsageError("No packages given")

        with self._command("remove"):
            self._restore()
            for name in names:
                if not self.manifest.has_dependency(name):
                    raise UnknownPackageError(name)

            saved = self.manifest.snapshot_state()
            with self._rollback_on_failure(saved):
                for name in names:
                    self.manifest.remove_dependency(name)
                self.manifest.remove_remotes(remotes)
                self._transition(CommandState.MUTATED)
                self._sync()
            result = CommandResult(
                "remove", packages=self._installed_packages(), changed=names
            )
        return result

    def update(self, token: str) -> CommandResult:
        """
        Reinstall a declared package at the newest version its constraint
        allows.

        Raises:
            UnknownPackageError: If the package is not declared
            InstallError: After rolling back, if installation fails
            RestoreError: After rolling back, if the library cannot be pruned
                or snapshotted
        """
        name, version = parse_package_spec(token)
        if version:
            logger.warning("update_ignores_version", name=name, version=version)

        with self._command("update"):
            self._restore()
            if not self.manifest.has_dependency(name):
                raise UnknownPackageError(name)

            previous = self.installer.installed_version(name)
            saved = self.manifest.snapshot_state()
            with self._rollback_on_failure(saved):
                self.installer.uninstall(name)
                self._transition(CommandState.MUTATED)
                self._sync()
            result = CommandResult(
                "update",
                packages=self._installed_packages(),
                changed=[name],
                previous_version=previous,
                current_version=self.installer.installed_version(name),
            )
        return result
