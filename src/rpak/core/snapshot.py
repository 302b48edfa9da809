"""Library snapshot adapter backed by packrat"""

from dataclasses import dataclass
from typing import List, Optional

import structlog

from .environment import DependencyEnvironment
from .exceptions import NotInitializedError, RestoreError, RscriptError
from .rscript import r_string
from .version_utils import versions_equal

logger = structlog.get_logger(__name__)

NA = "NA"

# One tab separated line per locked package: name, locked version, installed version
STATUS_SCRIPT = """\
s <- packrat::status(quiet = TRUE)
if (!is.null(s) && nrow(s) > 0) {
  s <- s[!is.na(s$packrat.version), , drop = FALSE]
  cat(sprintf("%s\\t%s\\t%s\\n", s$package, s$packrat.version, s$library.version), sep = "")
}
"""


@dataclass(frozen=True)
class PackageStatus:
    """Lock record entry and what is actually installed for it"""

    name: str
    locked_version: str
    installed_version: Optional[str]

    @property
    def missing(self) -> bool:
        return not versions_equal(self.installed_version, self.locked_version)


class LibrarySnapshot:
    """Wraps the packrat snapshot/restore subsystem"""

    def __init__(self, environment: DependencyEnvironment):
        self.environment = environment

    def is_initialized(self) -> bool:
        return self.environment.lock_file.exists()

    def _require_initialized(self) -> None:
        if not self.is_initialized():
            raise NotInitializedError(self.environment.project_root)

    def status(self) -> List[PackageStatus]:
        """
        Compare the lock record with the installed library.

        Raises:
            NotInitializedError: If the project has no lock record
            RestoreError: If packrat cannot report status
        """
        self._require_initialized()
        try:
            output = self.environment.run(STATUS_SCRIPT)
        except RscriptError as e:
            raise RestoreError("Failed to read library status", details=e.details)

        result = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) != 3:
                continue
            name, locked, installed = (p.strip() for p in parts)
            result.append(
                PackageStatus(
                    name=name,
                    locked_version=locked,
                    installed_version=None if installed == NA else installed,
                )
            )
        return result

    @staticmethod
    def needs_restore(status: List[PackageStatus]) -> bool:
        return any(entry.missing for entry in status)

    def restore(self) -> None:
        """
        Reinstall the library from the lock record.

        Raises:
            NotInitializedError: If the project was never set up
            RestoreError: For any other restore failure
        """
        self._require_initialized()
        logger.info("library_restore", project=str(self.environment.project_root))
        try:
            self.environment.run(
                "packrat::restore(prompt = FALSE, restart = FALSE)"
            )
        except RscriptError as e:
            raise RestoreError("Failed to restore library", details=e.details)

    def clean(self) -> None:
        """Remove installed packages the project no longer uses"""
        self._require_initialized()
        try:
            self.environment.run("packrat::clean(dry.run = FALSE, force = TRUE)")
        except RscriptError as e:
            raise RestoreError("Failed to clean library", details=e.details)

    def recompute(self) -> None:
        """Regenerate the lock record from the installed library"""
        self._require_initialized()
        logger.info("lock_snapshot", project=str(self.environment.project_root))
        try:
            self.environment.run(
                "packrat::snapshot(prompt = FALSE, ignore.stale = TRUE)"
            )
        except RscriptError as e:
            raise RestoreError("Failed to snapshot library", details=e.details)

    def init(self, repos: Optional[str] = None) -> None:
        """Create packrat's on-disk state for a new project"""
        root = self.environment.project_root
        repos = repos or self.environment.repos
        logger.info("snapshot_init", project=str(root), repos=repos)
        try:
            self.environment.run(
                f"options(repos = c(CRAN = {r_string(repos)}))\n"
                f"packrat::init(project = {r_string(root)}, "
                "infer.dependencies = FALSE, enter = FALSE, restart = FALSE)"
            )
        except RscriptError as e:
            raise RestoreError("Failed to initialize project library", details=e.details)
