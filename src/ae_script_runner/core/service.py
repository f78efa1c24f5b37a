"""
Script runner service.

Ties the pieces together for one run: locate the script, build the platform
command, execute it, then schedule removal of any temporary copy. Also
implements choosing which After Effects installation is targeted.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Sequence

from . import process
from .base_connector import BaseConnector
from .cleanup import CleanupScheduler
from .error_handling import (
    DetectionExhaustedError,
    ErrorContext,
    ErrorSeverity,
    NonZeroExitError,
    RunnerError,
    ValidationError,
)
from .host import ActiveDocument, ConfigurationSource, Picker
from .locator import resolve_script_path
from .logging_config import get_logger
from .models import AUTO_TARGET, InstallationOption, RunOutcome, RunnerSettings
from .registry import ConnectorRegistry, default_registry
from ..connectors.macos.detector import read_bundle_identifier
from ..connectors.macos.naming import bundle_id_to_display_name
from ..templates import RunnerTemplates

TARGET_SETTING = "mac_after_effects_bundle"
BROWSE_OPTION = "browse"


class ScriptRunnerService:
    """Runs scripts in After Effects on behalf of a host"""

    def __init__(
        self,
        config: ConfigurationSource,
        registry: Optional[ConnectorRegistry] = None,
        system: Optional[str] = None,
        cleanup: Optional[CleanupScheduler] = None,
    ):
        self.config = config
        self.registry = registry or default_registry()
        self.system = system
        self.cleanup = cleanup or CleanupScheduler()
        self.logger = get_logger(__name__, service="after_effects")

    def get_settings(self) -> RunnerSettings:
        """Current runner options read from the configuration source"""
        settings = getattr(self.config, "settings", None)
        if isinstance(settings, RunnerSettings):
            return settings

        values: dict[str, Any] = {}
        for key in RunnerSettings.model_fields:
            value = self.config.get(key)
            if value is not None:
                values[key] = value
        return RunnerSettings(**values)

    def create_connector(self, settings: Optional[RunnerSettings] = None) -> BaseConnector:
        return self.registry.create_connector(settings or self.get_settings(), self.system)

    # ===== RUN =====
    async def run(
        self,
        document: Optional[ActiveDocument],
        workspace_folders: Optional[Sequence[str]] = None,
    ) -> RunOutcome:
        """Send the active document (or the configured file) to After Effects

        Raises:
            RunnerError: Any failure, with a message meant for the user
        """
        settings = self.get_settings()
        folders = list(workspace_folders) if workspace_folders is not None else settings.workspace_folders
        temp_file_path = None

        try:
            with ErrorContext("run script", service="after_effects"):
                script = await resolve_script_path(settings, document, folders)
                if script.is_temp:
                    temp_file_path = script.path

                connector = self.create_connector(settings)
                command = await connector.build_command(script.path)
                try:
                    await process.execute_command(
                        command.command, command.args, timeout=settings.execution_timeout
                    )
                except NonZeroExitError as e:
                    if connector.supports_version_selection and RunnerTemplates.ERRORS[
                        "app_not_found_marker"
                    ] in str(e):
                        raise await self._missing_application_error(connector) from e
                    raise
        finally:
            # Delay so After Effects has finished reading the file
            if temp_file_path:
                self.cleanup.schedule(temp_file_path, settings.cleanup_delay)

        message = RunnerTemplates.format("success", "sent", name=os.path.basename(script.path))
        self.logger.info(message)
        return RunOutcome(script=script, command=command, message=message)

    async def _missing_application_error(self, connector: BaseConnector) -> RunnerError:
        installed = await connector.detect_installations()
        message = RunnerTemplates.ERRORS["not_found_prefix"]

        if installed:
            message += RunnerTemplates.format("errors", "found_versions", versions=", ".join(installed))
            return RunnerError(message, details={"installed": installed})

        message += RunnerTemplates.ERRORS["none_detected"]
        return DetectionExhaustedError(message, ErrorSeverity.HIGH)

    # ===== VERSION SELECTION =====
    def _version_selection_connector(self) -> BaseConnector:
        connector = self.create_connector()
        if not connector.supports_version_selection:
            raise RunnerError(RunnerTemplates.ERRORS["macos_only"], ErrorSeverity.LOW)
        return connector

    async def list_installations(self) -> list[InstallationOption]:
        """Detected installations with display names and versions"""
        connector = self.create_connector()
        installed = await connector.detect_installations()

        options = []
        for bundle_id in installed:
            version = await connector.get_installation_version(bundle_id)
            options.append(
                InstallationOption(
                    label=bundle_id_to_display_name(bundle_id),
                    description=f"Version {version}" if version else "Installed version",
                    detail=f"Bundle ID: {bundle_id}",
                    value=bundle_id,
                )
            )
        return options

    async def choose_version(self, picker: Picker) -> Optional[str]:
        """Let the user pick the targeted installation

        Returns:
            Confirmation message, or None when the user cancelled
        """
        self._version_selection_connector()

        try:
            installed = await self.list_installations()
        except RunnerError as e:
            raise RunnerError(RunnerTemplates.format("errors", "detect_failed", error=e)) from e

        browse = InstallationOption(value=BROWSE_OPTION, **RunnerTemplates.OPTIONS["browse"])

        if not installed:
            selected = picker.pick([browse], RunnerTemplates.PLACEHOLDERS["none_detected"])
        else:
            auto = InstallationOption(value=AUTO_TARGET, **RunnerTemplates.OPTIONS["auto"])
            selected = picker.pick([auto, browse, *installed], RunnerTemplates.PLACEHOLDERS["choose"])

        if selected is None:
            return None

        if selected.value == BROWSE_OPTION:
            app_path = picker.choose_application(RunnerTemplates.OPTIONS["browse"]["description"])
            if not app_path:
                return None
            return await self.configure_from_app_path(app_path)

        self._set_target(selected.value)
        return RunnerTemplates.format("success", "target_set", name=selected.label)

    def _set_target(self, bundle_id: str) -> None:
        with ErrorContext("save configuration", service="after_effects"):
            self.config.update(TARGET_SETTING, bundle_id)

    async def configure_from_app_path(self, app_path: str) -> str:
        """Target the After Effects bundle at ``app_path``

        Raises:
            ValidationError: The bundle is not a scriptable After Effects
        """
        connector = self._version_selection_connector()

        if "after effects" not in str(app_path).lower():
            raise ValidationError(
                RunnerTemplates.ERRORS["not_after_effects"], field="app_path", value=app_path
            )

        bundle_id = read_bundle_identifier(Path(app_path).expanduser())
        if not bundle_id:
            raise ValidationError(RunnerTemplates.ERRORS["no_bundle_id"], field="app_path", value=app_path)

        if not await connector.verify_installation(bundle_id):
            raise ValidationError(
                RunnerTemplates.ERRORS["not_scriptable"], field="bundle_id", value=bundle_id
            )

        self._set_target(bundle_id)
        return RunnerTemplates.format(
            "success",
            "target_set_with_id",
            name=bundle_id_to_display_name(bundle_id),
            bundle_id=bundle_id,
        )

    async def drain(self) -> None:
        """Wait for scheduled cleanups"""
        await self.cleanup.drain()
