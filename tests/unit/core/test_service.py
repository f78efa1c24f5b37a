"""
Tests for the script runner service
"""

import pytest

from ae_script_runner.core.config import ConfigManager
from ae_script_runner.core.error_handling import (
    DetectionExhaustedError,
    NoActiveDocumentError,
    NonZeroExitError,
    RunnerError,
    UnsupportedPlatformError,
    ValidationError,
)
from ae_script_runner.core.models import RunnerSettings
from ae_script_runner.core.service import BROWSE_OPTION, ScriptRunnerService

from conftest import DictConfigSource, FakeDocument, FakePicker, write_info_plist

APP_NOT_FOUND = "execution error: Application can't be found. (-2700)"


def make_service(system, **values):
    values.setdefault("cleanup_delay", 0)
    return ScriptRunnerService(DictConfigSource(values), system=system)


@pytest.mark.core
class TestRunScript:
    """Locate, send and clean up"""

    @pytest.mark.asyncio
    async def test_saved_document_runs_from_disk(self, tmp_path, command_recorder):
        script = tmp_path / "proj" / "script.jsx"
        service = make_service("Windows", save_before_run=True, execute_file="")

        outcome = await service.run(FakeDocument(file_name=str(script), text="alert(0)"))

        assert command_recorder.calls == [("AfterFX.exe", ["-r", str(script)], None)]
        assert outcome.script.is_temp is False
        assert outcome.message == "Sent script to After Effects: script.jsx"
        assert service.cleanup.pending == 0

    @pytest.mark.asyncio
    async def test_untitled_document_is_written_then_removed(self, tmp_path, command_recorder):
        workspace = tmp_path / "ws"
        workspace.mkdir()
        temp = workspace / ".vscode" / "ae-temp-script.jsx"
        seen = []
        command_recorder.on_call = lambda command, args: seen.append(temp.read_text(encoding="utf-8"))
        service = make_service("Windows")

        outcome = await service.run(FakeDocument(text="alert(1)", dirty=True), [str(workspace)])

        assert seen == ["alert(1)"]
        assert command_recorder.calls[0][1] == ["-r", str(temp)]
        assert outcome.script.is_temp is True
        assert outcome.message == "Sent script to After Effects: ae-temp-script.jsx"

        await service.drain()
        assert not temp.exists()

    @pytest.mark.asyncio
    async def test_configured_workspace_folders_are_used(self, tmp_path, command_recorder):
        service = make_service("Windows", execute_file="main.jsx", workspace_folders=[str(tmp_path)])

        await service.run(None)

        assert command_recorder.calls[0][1] == ["-r", str(tmp_path / "main.jsx")]

    @pytest.mark.asyncio
    async def test_execution_timeout_is_passed_through(self, tmp_path, command_recorder):
        service = make_service("Windows", execute_file=str(tmp_path / "a.jsx"), execution_timeout=30)

        await service.run(None)

        assert command_recorder.calls[0][2] == 30

    @pytest.mark.asyncio
    async def test_process_failure_surfaces_stderr(self, tmp_path, command_recorder):
        command_recorder.error = NonZeroExitError(1, "no such app")
        service = make_service("Windows")

        with pytest.raises(NonZeroExitError) as exc_info:
            await service.run(FakeDocument(text="x"), [str(tmp_path)])

        assert str(exc_info.value) == "no such app"

        # the temporary copy is removed even though the run failed
        await service.drain()
        assert not (tmp_path / ".vscode" / "ae-temp-script.jsx").exists()

    @pytest.mark.asyncio
    async def test_no_document(self, command_recorder):
        with pytest.raises(NoActiveDocumentError):
            await make_service("Windows").run(None)

        assert command_recorder.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, tmp_path, command_recorder):
        with pytest.raises(UnsupportedPlatformError):
            await make_service("Linux").run(FakeDocument(file_name=str(tmp_path / "a.jsx")))

        assert command_recorder.calls == []

    @pytest.mark.asyncio
    async def test_temp_write_failure_is_reported(self, tmp_path, command_recorder):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        service = make_service("Windows", temp_file=str(blocker / "sub" / "run.jsx"))

        with pytest.raises(RunnerError) as exc_info:
            await service.run(FakeDocument(text="x"))

        assert str(exc_info.value).startswith("Failed to run script:")
        assert command_recorder.calls == []

    @pytest.mark.asyncio
    async def test_macos_command(self, tmp_path, command_recorder, scripting_bridge, applications_dir):
        script = tmp_path / "run.jsx"
        service = make_service("Darwin", mac_after_effects_bundle="com.adobe.AfterEffects")

        outcome = await service.run(FakeDocument(file_name=str(script)))

        command, args, _ = command_recorder.calls[0]
        assert command == "osascript"
        assert args[-1].endswith(f"ae.doscriptfile('{script}');")
        assert outcome.command.target == "com.adobe.AfterEffects"

    @pytest.mark.asyncio
    async def test_missing_application_lists_found_versions(
        self, tmp_path, command_recorder, scripting_bridge, applications_dir
    ):
        command_recorder.error = NonZeroExitError(1, APP_NOT_FOUND)
        scripting_bridge.versions["com.adobe.AfterEffects"] = "24.6"
        service = make_service("Darwin", mac_after_effects_bundle="com.adobe.aftereffects.2021")

        with pytest.raises(RunnerError) as exc_info:
            await service.run(FakeDocument(file_name=str(tmp_path / "a.jsx")))

        assert str(exc_info.value) == (
            'Could not find After Effects. Found these versions: com.adobe.AfterEffects. '
            'Try running "choose-version".'
        )
        assert exc_info.value.details["installed"] == ["com.adobe.AfterEffects"]

    @pytest.mark.asyncio
    async def test_missing_application_with_nothing_installed(
        self, tmp_path, command_recorder, scripting_bridge, applications_dir
    ):
        command_recorder.error = NonZeroExitError(1, APP_NOT_FOUND)
        service = make_service("Darwin", mac_after_effects_bundle="com.adobe.aftereffects.2021")

        with pytest.raises(DetectionExhaustedError) as exc_info:
            await service.run(FakeDocument(file_name=str(tmp_path / "a.jsx")))

        assert "No After Effects installations detected" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_other_failures_on_macos_are_unchanged(
        self, tmp_path, command_recorder, scripting_bridge, applications_dir
    ):
        command_recorder.error = NonZeroExitError(1, "execution error: script error (-1)")
        service = make_service("Darwin", mac_after_effects_bundle="com.adobe.AfterEffects")

        with pytest.raises(NonZeroExitError):
            await service.run(FakeDocument(file_name=str(tmp_path / "a.jsx")))

        assert scripting_bridge.calls == []

    def test_settings_from_config_manager(self, config_file):
        service = ScriptRunnerService(ConfigManager(str(config_file)))

        settings = service.get_settings()

        assert isinstance(settings, RunnerSettings)
        assert settings.win_after_effects_exe == "C:/Adobe/AfterFX.exe"


@pytest.mark.core
class TestVersionSelection:
    """Choosing the targeted After Effects installation"""

    @pytest.mark.asyncio
    async def test_list_installations(self, scripting_bridge, applications_dir):
        scripting_bridge.versions.update({
            "com.adobe.AfterEffects.application": "25.1",
            "com.adobe.aftereffects.2022": "22.6",
        })

        options = await make_service("Darwin").list_installations()

        assert [(o.label, o.description, o.detail, o.value) for o in options] == [
            ("After Effects 2025+", "Version 25.1", "Bundle ID: com.adobe.AfterEffects.application",
             "com.adobe.AfterEffects.application"),
            ("After Effects 2022", "Version 22.6", "Bundle ID: com.adobe.aftereffects.2022",
             "com.adobe.aftereffects.2022"),
        ]

    @pytest.mark.asyncio
    async def test_choose_detected_version(self, scripting_bridge, applications_dir):
        scripting_bridge.versions["com.adobe.AfterEffects"] = "24.6"
        service = make_service("Darwin")
        picker = FakePicker(choice="com.adobe.AfterEffects")

        message = await service.choose_version(picker)

        assert message == "After Effects target set to: After Effects 2024"
        assert service.config.updates == [("mac_after_effects_bundle", "com.adobe.AfterEffects")]
        assert [o.value for o in picker.shown[0]] == ["auto", BROWSE_OPTION, "com.adobe.AfterEffects"]

    @pytest.mark.asyncio
    async def test_choose_auto(self, scripting_bridge, applications_dir):
        scripting_bridge.versions["com.adobe.AfterEffects"] = "24.6"
        service = make_service("Darwin", mac_after_effects_bundle="com.adobe.AfterEffects")

        message = await service.choose_version(FakePicker(choice="auto"))

        assert message == "After Effects target set to: Auto-detect (recommended)"
        assert service.config.values["mac_after_effects_bundle"] == "auto"

    @pytest.mark.asyncio
    async def test_cancel_changes_nothing(self, scripting_bridge, applications_dir):
        scripting_bridge.versions["com.adobe.AfterEffects"] = "24.6"
        service = make_service("Darwin")

        assert await service.choose_version(FakePicker(choice=None)) is None
        assert service.config.updates == []

    @pytest.mark.asyncio
    async def test_nothing_detected_offers_browse_only(self, tmp_path, scripting_bridge, applications_dir):
        app = tmp_path / "Elsewhere" / "Adobe After Effects 2026.app"
        write_info_plist(app, "com.adobe.AfterEffects.2026")
        scripting_bridge.versions["com.adobe.AfterEffects.2026"] = "26.0"
        service = make_service("Darwin")
        picker = FakePicker(choice=BROWSE_OPTION, app_path=str(app))

        message = await service.choose_version(picker)

        assert [o.value for o in picker.shown[0]] == [BROWSE_OPTION]
        assert picker.placeholders[0] == "No After Effects installations auto-detected. Browse manually?"
        assert message == "After Effects target set to: After Effects 2026 (com.adobe.AfterEffects.2026)"
        assert service.config.values["mac_after_effects_bundle"] == "com.adobe.AfterEffects.2026"

    @pytest.mark.asyncio
    async def test_browse_cancelled(self, scripting_bridge, applications_dir):
        service = make_service("Darwin")

        assert await service.choose_version(FakePicker(choice=BROWSE_OPTION, app_path=None)) is None
        assert service.config.updates == []

    @pytest.mark.asyncio
    async def test_macos_only(self):
        with pytest.raises(RunnerError) as exc_info:
            await make_service("Windows").choose_version(FakePicker(choice="auto"))

        assert str(exc_info.value) == "Version selection is only available on macOS."


@pytest.mark.core
class TestConfigureFromAppPath:
    """Targeting a specific application bundle"""

    @pytest.mark.asyncio
    async def test_rejects_other_applications(self, tmp_path, scripting_bridge):
        app = tmp_path / "Adobe Photoshop 2025.app"
        write_info_plist(app, "com.adobe.Photoshop")

        with pytest.raises(ValidationError) as exc_info:
            await make_service("Darwin").configure_from_app_path(str(app))

        assert str(exc_info.value) == "Selected application does not appear to be After Effects."

    @pytest.mark.asyncio
    async def test_missing_bundle_identifier(self, tmp_path, scripting_bridge):
        app = tmp_path / "Adobe After Effects 2026.app"
        app.mkdir()

        with pytest.raises(ValidationError) as exc_info:
            await make_service("Darwin").configure_from_app_path(str(app))

        assert str(exc_info.value) == "Could not read bundle identifier from selected application."

    @pytest.mark.asyncio
    async def test_not_scriptable(self, tmp_path, scripting_bridge):
        app = tmp_path / "Adobe After Effects 2026.app"
        write_info_plist(app, "com.adobe.AfterEffects.2026")
        service = make_service("Darwin")

        with pytest.raises(ValidationError) as exc_info:
            await service.configure_from_app_path(str(app))

        assert str(exc_info.value) == "Selected After Effects application is not accessible via scripting."
        assert service.config.updates == []

    @pytest.mark.asyncio
    async def test_persists_to_config_file(self, tmp_path, temp_config_dir, scripting_bridge):
        app = tmp_path / "Adobe After Effects 2026.app"
        write_info_plist(app, "com.adobe.AfterEffects.2026")
        scripting_bridge.versions["com.adobe.AfterEffects.2026"] = "26.0"
        config_path = temp_config_dir / "config.yaml"
        service = ScriptRunnerService(ConfigManager(str(config_path)), system="Darwin")

        await service.configure_from_app_path(str(app))

        assert ConfigManager(str(config_path)).settings.mac_after_effects_bundle == "com.adobe.AfterEffects.2026"

    @pytest.mark.asyncio
    async def test_accepts_bundle_reporting_no_version(self, tmp_path, scripting_bridge):
        app = tmp_path / "Adobe After Effects 2026.app"
        write_info_plist(app, "com.adobe.AfterEffects.2026")
        scripting_bridge.versions["com.adobe.AfterEffects.2026"] = ""
        service = make_service("Darwin")

        message = await service.configure_from_app_path(str(app))

        assert message == "After Effects target set to: After Effects 2026 (com.adobe.AfterEffects.2026)"
        assert scripting_bridge.calls == [("version", "com.adobe.AfterEffects.2026", 5.0)]

    @pytest.mark.asyncio
    async def test_unwritable_configuration_is_reported(self, tmp_path, scripting_bridge):
        class ReadOnlyConfig(DictConfigSource):
            def update(self, key, value):
                raise PermissionError(13, "Permission denied")

        app = tmp_path / "Adobe After Effects 2026.app"
        write_info_plist(app, "com.adobe.AfterEffects.2026")
        scripting_bridge.versions["com.adobe.AfterEffects.2026"] = "26.0"
        service = ScriptRunnerService(ReadOnlyConfig(), system="Darwin")

        with pytest.raises(RunnerError) as exc_info:
            await service.configure_from_app_path(str(app))

        assert str(exc_info.value).startswith("Failed to save configuration:")
        assert "Permission denied" in str(exc_info.value)
