"""
Windows connector for After Effects.

Runs ``AfterFX.exe -r <script>`` as documented in Adobe's scripting guide.
"""

from __future__ import annotations

from typing import Final

from ...core.base_connector import BaseConnector
from ...core.models import CommandSpec, RunnerSettings

DEFAULT_EXECUTABLE: Final[str] = "AfterFX.exe"
RUN_SCRIPT_FLAG: Final[str] = "-r"


class WindowsConnector(BaseConnector):
    """Sends scripts to After Effects through its executable"""

    def __init__(self, name: str = "windows", settings: RunnerSettings | None = None) -> None:
        super().__init__(name, settings)

    @property
    def executable(self) -> str:
        configured = (self.settings.win_after_effects_exe or "").strip()
        return configured or DEFAULT_EXECUTABLE

    async def build_command(self, script_path: str) -> CommandSpec:
        # Arguments are passed as a list, so the path needs no quoting
        return CommandSpec(command=self.executable, args=[RUN_SCRIPT_FLAG, script_path])
