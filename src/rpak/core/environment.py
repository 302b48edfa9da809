"""Dependency environment shared by the snapshot and installer adapters"""

from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

import structlog

from .rscript import RscriptRunner, r_string
from .settings import DEFAULT_REPOS

logger = structlog.get_logger(__name__)

PACKRAT_DIR = "packrat"
LOCK_FILE = "packrat.lock"


class DependencyEnvironment:
    """
    Project directory, R interpreter and library isolation state.

    Isolation is off until activate() is called. While it is on, every
    script first switches the R session to the project's private library
    (packrat::on), so installs and removals only touch that library. The
    namespaces the adapters call into are loaded beforehand from the user
    library, since they are not part of the project library.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        runner: Optional[RscriptRunner] = None,
        repos: str = DEFAULT_REPOS,
    ):
        self.project_root = Path(project_root).resolve()
        self.runner = runner or RscriptRunner(cwd=self.project_root)
        self.repos = repos
        self.isolated = False

    @property
    def packrat_dir(self) -> Path:
        return self.project_root / PACKRAT_DIR

    @property
    def lock_file(self) -> Path:
        return self.packrat_dir / LOCK_FILE

    def activate(self) -> None:
        self.isolated = True
        logger.debug("isolation_on", project=str(self.project_root))

    def deactivate(self) -> None:
        self.isolated = False
        logger.debug("isolation_off", project=str(self.project_root))

    @contextmanager
    def activated(self):
        """Turn isolation on for the duration of the block"""
        self.activate()
        try:
            yield self
        finally:
            self.deactivate()

    def prelude(self) -> str:
        lines = [f"options(repos = c(CRAN = {r_string(self.repos)}))"]
        if self.isolated:
            lines.extend(
                [
                    'invisible(loadNamespace("packrat"))',
                    'invisible(loadNamespace("remotes"))',
                    f"packrat::on(project = {r_string(self.project_root)}, "
                    "auto.snapshot = FALSE, print.banner = FALSE)",
                ]
            )
        return "\n".join(lines)

    def run(self, expression: str) -> str:
        """Run an R expression inside this environment"""
        return self.runner.run(f"{self.prelude()}\n{expression}")
