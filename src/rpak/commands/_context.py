"""Per-invocation state shared by all commands"""

from pathlib import Path
from typing import Optional, Union

from ..core.orchestrator import Orchestrator
from ..core.settings import Settings, load_settings


class AppContext:
    """Project directory, settings and a lazily built orchestrator"""

    def __init__(
        self,
        project_root: Union[str, Path],
        settings: Optional[Settings] = None,
        orchestrator: Optional[Orchestrator] = None,
    ):
        self.project_root = Path(project_root)
        self._settings = settings
        self._orchestrator = orchestrator

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings(self.project_root)
        return self._settings

    @property
    def orchestrator(self) -> Orchestrator:
        if self._orchestrator is None:
            self._orchestrator = Orchestrator.from_settings(
                self.project_root, self.settings
            )
        return self._orchestrator
