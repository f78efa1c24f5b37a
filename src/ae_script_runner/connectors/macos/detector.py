"""
Detection of installed After Effects versions on macOS.

Known bundle identifiers are probed through JavaScript for Automation, then
the applications folder is scanned so that releases newer than the known
list are picked up as well.
"""

from __future__ import annotations

import logging
import platform
import plistlib
from pathlib import Path
from typing import Final
from xml.parsers.expat import ExpatError

from ...core import process
from ...core.env_config import config as env_config
from ...core.error_handling import ExternalProcessError
from ...core.models import ProcessOutput
from .naming import GENERIC_BUNDLE_ID, NEWEST_BUNDLE_ID, VERSIONED_BUNDLE_ID

logger = logging.getLogger(__name__)

# Newest first
KNOWN_BUNDLE_IDS: Final[list[str]] = [
    NEWEST_BUNDLE_ID,
    VERSIONED_BUNDLE_ID,
    GENERIC_BUNDLE_ID,
    "com.adobe.aftereffects.2023",
    "com.adobe.aftereffects.2022",
    "com.adobe.aftereffects.2021",
]

APP_NAME_PREFIX: Final[str] = "Adobe After Effects"
KNOWN_PROBE_TIMEOUT: Final[float] = 5.0
SCANNED_PROBE_TIMEOUT: Final[float] = 3.0


def jxa_args(expression: str) -> list[str]:
    """osascript arguments that evaluate a JavaScript for Automation expression"""
    return ["-l", "JavaScript", "-e", expression]


def escape_jxa_string(value: str) -> str:
    """Escape ``value`` for a single-quoted JavaScript string literal"""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def application_call(bundle_id: str, method: str) -> list[str]:
    """osascript arguments calling ``method`` on the application ``bundle_id``"""
    return jxa_args(f"Application('{escape_jxa_string(bundle_id)}').{method}()")


def read_bundle_identifier(app_path: Path) -> str | None:
    """Read CFBundleIdentifier from an application bundle's Info.plist"""
    info_plist = app_path / "Contents" / "Info.plist"
    try:
        with open(info_plist, "rb") as f:
            plist_data = plistlib.load(f)
    except (OSError, ValueError, ExpatError) as e:
        logger.debug("Could not read %s: %s", info_plist, e)
        return None

    if not isinstance(plist_data, dict):
        return None
    bundle_id = plist_data.get("CFBundleIdentifier")
    if isinstance(bundle_id, str) and bundle_id.strip():
        return bundle_id.strip()
    return None


class InstallationDetector:
    """Finds After Effects installations that answer scripting requests."""

    def __init__(self, applications_dir: str | Path | None = None, system: str | None = None) -> None:
        self.applications_dir = Path(applications_dir or env_config.AE_RUNNER_APPLICATIONS_DIR)
        self.system = system or platform.system()

    @property
    def is_macos(self) -> bool:
        return self.system == "Darwin"

    async def _ask_version(self, bundle_id: str, timeout: float) -> ProcessOutput | None:
        try:
            return await process.capture_command(
                "osascript", application_call(bundle_id, "version"), timeout=timeout
            )
        except ExternalProcessError as e:
            logger.debug("Probe of %s failed: %s", bundle_id, e)
            return None

    async def probe(self, bundle_id: str, timeout: float = KNOWN_PROBE_TIMEOUT) -> str | None:
        """Return the version reported by ``bundle_id``, None when it does not answer"""
        output = await self._ask_version(bundle_id, timeout)
        if output is not None and output.ok and output.stdout:
            return output.stdout
        return None

    async def responds(self, bundle_id: str, timeout: float = KNOWN_PROBE_TIMEOUT) -> bool:
        """Whether the version request for ``bundle_id`` exits cleanly, output or not"""
        output = await self._ask_version(bundle_id, timeout)
        return output is not None and output.ok

    def scan_applications(self) -> list[str]:
        """Bundle identifiers of After Effects bundles in the applications folder"""
        discovered: list[str] = []

        try:
            entries = sorted(self.applications_dir.iterdir())
        except OSError as e:
            logger.info("Could not scan %s: %s", self.applications_dir, e)
            return discovered

        for entry in entries:
            if not entry.name.startswith(APP_NAME_PREFIX):
                continue

            # /Applications/Adobe After Effects 2026/Adobe After Effects 2026.app
            bundle_id = read_bundle_identifier(entry / f"{entry.name}.app")
            if bundle_id and bundle_id not in discovered:
                discovered.append(bundle_id)

        return discovered

    async def detect_all(self) -> list[str]:
        """Identifiers of working installations, newest known first

        Returns an empty list on platforms other than macOS.
        """
        if not self.is_macos:
            return []

        installed: list[str] = []

        for bundle_id in KNOWN_BUNDLE_IDS:
            version = await self.probe(bundle_id, timeout=KNOWN_PROBE_TIMEOUT)
            if version:
                installed.append(bundle_id)
                logger.info(f"Found After Effects: {bundle_id} (version: {version})")

        for bundle_id in self.scan_applications():
            if bundle_id in installed:
                continue
            version = await self.probe(bundle_id, timeout=SCANNED_PROBE_TIMEOUT)
            if version:
                installed.append(bundle_id)
                logger.info(f"Discovered working After Effects: {bundle_id} (version: {version})")

        logger.info(f"Total detected After Effects versions: {len(installed)}")
        return installed
