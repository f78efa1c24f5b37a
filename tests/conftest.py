"""
Common test fixtures and configuration for AE Script Runner tests.
"""
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import yaml

from ae_script_runner.core.error_handling import ExecutionTimeoutError
from ae_script_runner.core.models import InstallationOption, ProcessOutput, RunnerSettings

JXA_CALL = re.compile(r"^Application\('(?P<bundle_id>(?:[^'\\]|\\.)*)'\)\.(?P<method>version|running)\(\)$")


@pytest.fixture
def temp_config_dir():
    """Create a temporary directory for config files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config():
    """Sample configuration for testing."""
    return {
        "runner": {
            "save_before_run": False,
            "temp_file": "${workspaceFolder}/build/tmp-script.jsx",
            "execute_file": "",
            "mac_after_effects_bundle": "com.adobe.AfterEffects",
            "win_after_effects_exe": "C:/Adobe/AfterFX.exe",
            "workspace_folders": ["/projects/motion"],
        },
        "logging": {
            "log_level": "DEBUG",
        },
    }


@pytest.fixture
def config_file(temp_config_dir, sample_config):
    """Create a temporary config file."""
    config_path = temp_config_dir / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def settings():
    """Default runner settings with an immediate cleanup."""
    return RunnerSettings(cleanup_delay=0)


class FakeDocument:
    """In-memory stand-in for an editor document."""

    def __init__(
        self,
        file_name: Optional[str] = None,
        text: str = "",
        dirty: bool = False,
        save_error: Optional[Exception] = None,
        save_cleans: bool = True,
    ):
        self._file_name = file_name
        self.text = text
        self.dirty = dirty
        self.save_error = save_error
        self.save_cleans = save_cleans
        self.save_calls = 0

    @property
    def file_name(self) -> Optional[str]:
        return self._file_name

    @property
    def is_untitled(self) -> bool:
        return self._file_name is None

    @property
    def is_dirty(self) -> bool:
        return self.dirty

    def get_text(self) -> str:
        return self.text

    async def save(self) -> bool:
        self.save_calls += 1
        if self.save_error is not None:
            raise self.save_error
        if self.save_cleans:
            self.dirty = False
        return not self.dirty


class DictConfigSource:
    """Configuration source backed by a plain dict."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values = dict(values or {})
        self.updates: List[tuple] = []

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def update(self, key: str, value: Any) -> None:
        self.updates.append((key, value))
        self.values[key] = value


class FakePicker:
    """Picker that answers with preset choices and records what it was shown."""

    def __init__(self, choice: Optional[str] = None, app_path: Optional[str] = None):
        self.choice = choice
        self.app_path = app_path
        self.shown: List[List[InstallationOption]] = []
        self.placeholders: List[str] = []

    def pick(self, options, placeholder):
        self.shown.append(list(options))
        self.placeholders.append(placeholder)
        for option in options:
            if option.value == self.choice:
                return option
        return None

    def choose_application(self, prompt):
        return self.app_path


class FakeScriptingBridge:
    """Answers osascript probes without running osascript.

    ``versions`` maps bundle identifiers to the version they report,
    ``running`` holds identifiers that answer the pulse check and
    ``timeouts`` holds identifiers whose probe times out.
    """

    def __init__(self):
        self.versions: Dict[str, str] = {}
        self.running: set = set()
        self.timeouts: set = set()
        self.calls: List[tuple] = []
        self.expressions: List[str] = []

    async def __call__(self, command, args, timeout=5.0):
        expression = args[-1]
        match = JXA_CALL.match(expression)
        assert command == "osascript" and match, f"unexpected osascript call: {command} {args}"
        self.expressions.append(expression)
        bundle_id = re.sub(r"\\(.)", r"\1", match.group("bundle_id"))
        method = match.group("method")
        self.calls.append((method, bundle_id, timeout))

        if bundle_id in self.timeouts:
            raise ExecutionTimeoutError(command, timeout)

        if method == "version":
            if bundle_id in self.versions:
                return ProcessOutput(returncode=0, stdout=self.versions[bundle_id])
            return ProcessOutput(returncode=1, stderr="execution error: Application can't be found. (-2700)")

        if bundle_id in self.running or bundle_id in self.versions:
            return ProcessOutput(returncode=0, stdout="false")
        return ProcessOutput(returncode=1, stderr="execution error: Application can't be found. (-2700)")

    def probed(self, method: str) -> List[str]:
        return [bundle_id for m, bundle_id, _ in self.calls if m == method]


@pytest.fixture
def scripting_bridge(monkeypatch):
    """Replace osascript probes with a FakeScriptingBridge."""
    bridge = FakeScriptingBridge()
    monkeypatch.setattr("ae_script_runner.core.process.capture_command", bridge)
    return bridge


class CommandRecorder:
    """Records executed commands instead of running them."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None
        self.on_call = None

    async def __call__(self, command, args, timeout=None):
        self.calls.append((command, list(args), timeout))
        if self.on_call is not None:
            self.on_call(command, list(args))
        if self.error is not None:
            raise self.error


@pytest.fixture
def command_recorder(monkeypatch):
    """Replace the process runner with a CommandRecorder."""
    recorder = CommandRecorder()
    monkeypatch.setattr("ae_script_runner.core.process.execute_command", recorder)
    return recorder


def write_info_plist(app_path: Path, bundle_id: str) -> Path:
    """Create a minimal application bundle with an Info.plist."""
    import plistlib

    contents = app_path / "Contents"
    contents.mkdir(parents=True, exist_ok=True)
    info_plist = contents / "Info.plist"
    with open(info_plist, "wb") as f:
        plistlib.dump({"CFBundleIdentifier": bundle_id, "CFBundleShortVersionString": "26.0"}, f)
    return info_plist


@pytest.fixture
def applications_dir(tmp_path, monkeypatch):
    """Point application scanning at an empty temporary folder."""
    from ae_script_runner.core.env_config import config as env_config

    apps = tmp_path / "Applications"
    apps.mkdir()
    monkeypatch.setattr(env_config, "AE_RUNNER_APPLICATIONS_DIR", str(apps))
    return apps
