"""Version checker for the rpak package"""

from typing import Optional

import requests
import structlog
from packaging.version import InvalidVersion, Version

from ..ui.console import console

logger = structlog.get_logger(__name__)

PYPI_URL = "https://pypi.org/pypi/rpak/json"


def get_latest_version(timeout: int = 5) -> Optional[str]:
    """Latest rpak release on PyPI, None when it cannot be determined"""
    try:
        response = requests.get(PYPI_URL, timeout=timeout)
        response.raise_for_status()
        return response.json()["info"]["version"]
    except (requests.RequestException, KeyError, ValueError) as e:
        logger.debug("update_check_failed", error=str(e))
        return None


def check_for_updates(current_version: str) -> None:
    """Print a notice when a newer rpak is on PyPI"""
    latest_version = get_latest_version()
    if latest_version is None:
        return

    try:
        newer = Version(latest_version) > Version(current_version)
    except InvalidVersion:
        return

    if newer:
        console.print(
            f"\n[yellow]New version available: [cyan]{latest_version}[/cyan] (current: {current_version})[/yellow]"
        )
        console.print(
            "[yellow]To update, run: [cyan]pipx upgrade rpak[/cyan][/yellow]\n"
        )
