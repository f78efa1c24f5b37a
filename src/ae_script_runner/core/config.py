"""
YAML configuration for AE Script Runner

The file has a ``runner`` section (``RunnerSettings``) and a ``logging``
section (``LoggingSettings``). Missing keys take their defaults and
``$VAR`` / ``${VAR}`` references are replaced from the environment.
``${workspaceFolder}`` is left for the locator to fill in.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from .env_config import config as env_config
from .error_handling import ValidationError
from .models import WORKSPACE_PLACEHOLDER, AppConfig, LoggingSettings, RunnerSettings

logger = logging.getLogger(__name__)

SECTIONS = ("runner", "logging")
_ENV_REFERENCE = re.compile(r"\$\{(\w+)\}|\$(\w+)")


def expand_env_vars(value: Any) -> Any:
    """Replace environment references in every string of ``value``

    Unset variables are kept verbatim.
    """
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def substitute(match: "re.Match[str]") -> str:
        if match.group(0) == WORKSPACE_PLACEHOLDER:
            return match.group(0)
        return os.environ.get(match.group(1) or match.group(2), match.group(0))

    return _ENV_REFERENCE.sub(substitute, value)


class ConfigManager:
    """Loads, validates and persists the runner configuration"""

    DEFAULT_YAML = """# AE Script Runner Configuration
runner:
  # Save a modified document before sending it to After Effects
  save_before_run: true
  # Where unsaved scripts are written; ${workspaceFolder} is the first workspace folder
  temp_file: "${workspaceFolder}/.vscode/ae-temp-script.jsx"
  # Always run this file instead of the active document
  execute_file: ""
  # macOS bundle identifier, or "auto" to use the newest installation
  mac_after_effects_bundle: "auto"
  # Windows path to AfterFX.exe (defaults to AfterFX.exe on PATH)
  win_after_effects_exe: ""
  workspace_folders: []

logging:
  log_level: "INFO"
"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: YAML file to use. Defaults to ``$AE_RUNNER_CONFIG``,
                then ``~/.ae-script-runner/config.yaml``. Created with
                defaults when missing.

        Raises:
            ValidationError: The file holds invalid values
        """
        self.config_path = str(config_path) if config_path else self.default_path()
        self.app_config: Optional[AppConfig] = None
        self._load_config()

    @staticmethod
    def default_path() -> str:
        if env_config.AE_RUNNER_CONFIG:
            return str(Path(env_config.AE_RUNNER_CONFIG).expanduser())
        return str(Path.home() / ".ae-script-runner" / "config.yaml")

    def _read_file(self) -> Dict[str, Any]:
        path = Path(self.config_path)

        if not path.exists():
            logger.info(f"No config file at {path}, writing defaults")
            self._write_default_file()
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            return {}

        logger.debug(f"Read configuration from {path}")
        return data if isinstance(data, dict) else {}

    def _write_default_file(self) -> None:
        path = Path(self.config_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.DEFAULT_YAML, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write default config to {path}: {e}")
        else:
            logger.info(f"Wrote default configuration to {path}")

    def _load_config(self) -> None:
        raw = self._read_file()

        # Only known sections are read; each one overrides field by field
        sections = {name: raw[name] for name in SECTIONS if isinstance(raw.get(name), dict)}

        try:
            self.app_config = AppConfig(**expand_env_vars(sections))
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid configuration in {self.config_path}: {e}",
                field="config",
                value=self.config_path,
            ) from e

    @property
    def settings(self) -> RunnerSettings:
        return self.app_config.runner

    @property
    def logging_settings(self) -> LoggingSettings:
        return self.app_config.logging

    def get(self, key: str, default: Any = None) -> Any:
        """Runner option ``key``, or ``default`` when there is no such option"""
        return getattr(self.settings, key, default)

    def update(self, key: str, value: Any) -> None:
        """Change one runner option and write the file

        Raises:
            ValidationError: Unknown option or invalid value
        """
        if key not in RunnerSettings.model_fields:
            raise ValidationError(f"Unknown setting: {key}", field=key, value=value)

        try:
            runner = RunnerSettings(**{**self.settings.model_dump(), key: value})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid value for {key}: {value!r}", field=key, value=value) from e

        self.app_config.runner = runner
        logger.info(f"Set {key} = {value!r}")
        self.save()

    def reload(self) -> None:
        self._load_config()

    def save(self) -> None:
        """Write the current configuration back to the YAML file"""
        path = Path(self.config_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.app_config.model_dump(), f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Saved configuration to {path}")

    def __repr__(self) -> str:
        return f"ConfigManager(config_path='{self.config_path}')"
