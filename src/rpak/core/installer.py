"""Installer adapter backed by the remotes package"""

from typing import List, Optional

import structlog

from .environment import DependencyEnvironment
from .exceptions import InstallError, RscriptError
from .manifest import ManifestStore
from .rscript import r_string
from .version_utils import pinned_version, versions_equal

logger = structlog.get_logger(__name__)

# Failed builds only raise warnings in R; promote them so Rscript exits non-zero
STRICT = "options(warn = 2)"


class Installer:
    """Installs and removes packages in the project library"""

    def __init__(self, environment: DependencyEnvironment, manifest: ManifestStore):
        self.environment = environment
        self.manifest = manifest

    def _run(self, expression: str) -> str:
        try:
            return self.environment.run(expression)
        except RscriptError as e:
            raise InstallError(e.details or e.message)

    def install_declared(self) -> List[str]:
        """
        Install every declared dependency that is not already satisfied.

        Exact '==' pins go through install_version, everything else
        through install_deps without upgrading what is already there.

        Returns:
            List of packages installed through the pinned path

        Raises:
            InstallError: On any underlying installation failure
        """
        pinned = []
        for dep in self.manifest.get_dependencies().values():
            version = pinned_version(dep.constraint)
            if version is None:
                continue
            if versions_equal(self.installed_version(dep.name), version):
                logger.debug("pin_satisfied", name=dep.name, version=version)
                continue
            self.install_pinned(dep.name, version)
            pinned.append(dep.name)

        logger.info("install_deps", project=str(self.environment.project_root))
        self._run(
            f"{STRICT}\n"
            f"remotes::install_deps(pkgdir = {r_string(self.environment.project_root)}, "
            'dependencies = NA, upgrade = "never")'
        )
        return pinned

    def install_pinned(self, name: str, version: str) -> None:
        """Install an exact version of a package"""
        logger.info("install_pinned", name=name, version=version)
        self._run(
            f"{STRICT}\n"
            f"remotes::install_version({r_string(name)}, version = {r_string(version)}, "
            'upgrade = "never")'
        )

    def uninstall(self, name: str) -> None:
        """Remove a package from the project library; no-op if absent"""
        logger.info("uninstall", name=name)
        self._run(
            "lib <- .libPaths()[1]\n"
            f"if ({r_string(name)} %in% rownames(utils::installed.packages(lib.loc = lib))) "
            f"utils::remove.packages({r_string(name)}, lib = lib)"
        )

    def installed_version(self, name: str) -> Optional[str]:
        """
        Get the installed version of a package

        Returns:
            Version string, or None when the package is absent
        """
        output = self._run(
            "v <- tryCatch(as.character(utils::packageVersion("
            f"{r_string(name)}, lib.loc = .libPaths()[1])), "
            'error = function(e) "")\n'
            "cat(v)"
        )
        return output or None

    def is_installed(self, name: str) -> bool:
        return self.installed_version(name) is not None
