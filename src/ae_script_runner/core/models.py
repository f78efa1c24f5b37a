"""
Core models for AE Script Runner
"""

from typing import List, Optional

from pydantic import BaseModel, Field

AUTO_TARGET = "auto"
WORKSPACE_PLACEHOLDER = "${workspaceFolder}"


class ResolvedScript(BaseModel):
    """Script file chosen for a single run"""

    path: str = Field(..., description="Absolute path handed to After Effects")
    is_temp: bool = Field(default=False, description="Whether the file is removed after the run")


class CommandSpec(BaseModel):
    """Command line that sends a script to After Effects"""

    command: str
    args: List[str] = Field(default_factory=list)
    target: Optional[str] = Field(default=None, description="Bundle identifier used, macOS only")


class ProcessOutput(BaseModel):
    """Captured output of a finished process"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class RunnerSettings(BaseModel):
    """Options that control how scripts are resolved and sent"""

    save_before_run: bool = True
    temp_file: str = f"{WORKSPACE_PLACEHOLDER}/.vscode/ae-temp-script.jsx"
    execute_file: str = ""
    mac_after_effects_bundle: str = AUTO_TARGET
    win_after_effects_exe: str = ""
    workspace_folders: List[str] = Field(default_factory=list)
    cleanup_delay: float = Field(default=1.0, ge=0)
    execution_timeout: Optional[float] = Field(default=None, gt=0)


class LoggingSettings(BaseModel):
    """Logging configuration"""

    log_level: str = "INFO"
    log_file: Optional[str] = None
    use_json: bool = False


class AppConfig(BaseModel):
    """Complete runner configuration"""

    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class InstallationOption(BaseModel):
    """One entry offered when choosing the After Effects version"""

    label: str
    description: str = ""
    detail: str = ""
    value: str


class RunOutcome(BaseModel):
    """Result of a successful run"""

    script: ResolvedScript
    command: CommandSpec
    message: str
