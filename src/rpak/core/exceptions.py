"""Custom exceptions for rpak"""

from typing import Optional


class RpakError(Exception):
    """Base exception for rpak"""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigError(RpakError):
    """Invalid rpak.toml or environment configuration"""

    pass


class ManifestError(RpakError):
    """DESCRIPTION file related errors"""

    pass


class RscriptError(RpakError):
    """Rscript invocation errors"""

    pass


class NotInitializedError(RpakError):
    """Project has no lock record yet; `rpak init` must be run first"""

    def __init__(self, project_root=None):
        where = f" in {project_root}" if project_root else ""
        super().__init__(
            f"No rpak project found{where}. Run 'rpak init' to set one up."
        )


class RestoreError(RpakError):
    """Library could not be restored from the lock record"""

    pass


class InstallError(RpakError):
    """Package installation errors, message passed through from R"""

    pass


class UnknownPackageError(RpakError):
    """Operation target is not declared in the manifest"""

    def __init__(self, name: str):
        super().__init__(f"Package '{name}' is not a declared dependency")
        self.name = name


class UsageError(RpakError):
    """Unparseable command line input"""

    pass
