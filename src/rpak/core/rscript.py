# Rscript operations and utilities
import os
import subprocess
from pathlib import Path
from typing import Optional, Union

import structlog

from .exceptions import RscriptError

logger = structlog.get_logger(__name__)


def r_string(value: Union[str, Path]) -> str:
    """Quote a value as an R string literal"""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class RscriptRunner:
    """Wrapper for the Rscript command line interface."""

    def __init__(
        self,
        rscript: str = "Rscript",
        cwd: Optional[Path] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize Rscript runner.

        Args:
            rscript: Rscript executable name or path
            cwd: Working directory for every script
            timeout: Optional timeout in seconds per script
        """
        self.rscript = rscript
        self.cwd = cwd
        self.timeout = timeout

    def run(self, expression: str) -> str:
        """
        Run an R expression and return its standard output.

        User and site profiles are skipped (--no-init-file) so that no
        .Rprofile can switch library isolation on behind our back.

        Raises:
            RscriptError: If Rscript is missing, times out or exits non-zero
        """
        cmd = [self.rscript, "--no-init-file", "-e", expression]
        env = {**os.environ, "R_PROFILE_USER": ""}
        logger.debug("rscript_run", cwd=str(self.cwd), expression=expression)

        try:
            process = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                cwd=self.cwd,
                env=env,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RscriptError(
                f"Rscript not found: {self.rscript}",
                details="install R or set RPAK_RSCRIPT",
            )
        except subprocess.TimeoutExpired:
            raise RscriptError(
                "Rscript timed out", details=f"after {self.timeout} seconds"
            )

        if process.returncode != 0:
            logger.debug(
                "rscript_failed",
                returncode=process.returncode,
                stderr=process.stderr,
            )
            raise RscriptError(
                "R command failed", details=_error_message(process.stderr)
            )

        return process.stdout.strip()


def _error_message(stderr: str) -> str:
    """Extract the R error message from stderr, keeping it verbatim"""
    lines = [line.rstrip() for line in stderr.strip().splitlines()]
    for i, line in enumerate(lines):
        if line.startswith("Error"):
            return "\n".join(lines[i:])
    return "\n".join(lines) or "unknown error"
