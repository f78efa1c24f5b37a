"""
macOS connector for After Effects.

After Effects is addressed by bundle identifier and driven through
JavaScript for Automation (``osascript -l JavaScript``). ``doscriptfile``
is used because it works reliably on Apple Silicon Macs.
"""

from __future__ import annotations

from typing import Final

from ...core import process
from ...core.base_connector import BaseConnector
from ...core.error_handling import ExternalProcessError
from ...core.models import AUTO_TARGET, CommandSpec, RunnerSettings
from .detector import (
    KNOWN_PROBE_TIMEOUT,
    SCANNED_PROBE_TIMEOUT,
    InstallationDetector,
    application_call,
    escape_jxa_string,
    jxa_args,
)
from .naming import GENERIC_BUNDLE_ID

FALLBACK_BUNDLE_IDS: Final[list[str]] = [
    GENERIC_BUNDLE_ID,
    "com.adobe.aftereffects.2024",
    "com.adobe.aftereffects.2025",
]
PULSE_TIMEOUT: Final[float] = 3.0


class MacOSConnector(BaseConnector):
    """Sends scripts to After Effects through osascript"""

    supports_version_selection = True

    def __init__(
        self,
        name: str = "macos",
        settings: RunnerSettings | None = None,
        detector: InstallationDetector | None = None,
    ) -> None:
        super().__init__(name, settings)
        self.detector = detector or InstallationDetector(system="Darwin")

    async def detect_installations(self) -> list[str]:
        return await self.detector.detect_all()

    async def get_installation_version(self, bundle_id: str) -> str:
        """Version string reported by ``bundle_id``, empty when unavailable"""
        return await self.detector.probe(bundle_id, timeout=SCANNED_PROBE_TIMEOUT) or ""

    async def verify_installation(self, bundle_id: str) -> bool:
        """Whether ``bundle_id`` accepts scripting requests"""
        return await self.detector.responds(bundle_id, timeout=KNOWN_PROBE_TIMEOUT)

    async def _pulse(self, bundle_id: str) -> bool:
        """Cheap check that the scripting bridge accepts ``bundle_id``"""
        try:
            output = await process.capture_command(
                "osascript", application_call(bundle_id, "running"), timeout=PULSE_TIMEOUT
            )
        except ExternalProcessError as e:
            self.logger.debug("Pulse of %s failed: %s", bundle_id, e)
            return False
        return output.ok

    async def resolve_target(self) -> str:
        """Bundle identifier to address; never fails"""
        bundle_id = (self.settings.mac_after_effects_bundle or "").strip()
        if bundle_id and bundle_id != AUTO_TARGET:
            return bundle_id

        self.logger.info("Auto-detecting After Effects versions...")
        installed = await self.detect_installations()
        if installed:
            self.logger.info(f"Auto-detected After Effects: {installed[0]}")
            return installed[0]

        self.logger.info("Auto-detection failed, trying fallback bundle IDs...")
        for fallback in FALLBACK_BUNDLE_IDS:
            if await self._pulse(fallback):
                self.logger.info(f"Fallback successful: {fallback}")
                return fallback

        self.logger.warning(f"No After Effects installation answered, using {GENERIC_BUNDLE_ID}")
        return GENERIC_BUNDLE_ID

    async def build_command(self, script_path: str) -> CommandSpec:
        bundle_id = await self.resolve_target()
        escaped_path = escape_jxa_string(script_path)
        jxa = (
            f"ae = Application('{escape_jxa_string(bundle_id)}'); "
            f"ae.activate(); "
            f"ae.doscriptfile('{escaped_path}');"
        )
        return CommandSpec(command="osascript", args=jxa_args(jxa), target=bundle_id)
