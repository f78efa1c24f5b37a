"""
Runner Message Templates
User-facing messages shared by the runner service and the command line
"""

from typing import Any, Dict


class RunnerTemplates:
    """Templates for run and version selection messages"""

    ERRORS = {
        "run_failed": "Failed to run script in After Effects",
        "app_not_found_marker": "Application can't be found",
        "not_found_prefix": "Could not find After Effects. ",
        "found_versions": 'Found these versions: {versions}. Try running "choose-version".',
        "none_detected": "No After Effects installations detected. Please make sure After Effects is installed.",
        "macos_only": "Version selection is only available on macOS.",
        "not_after_effects": "Selected application does not appear to be After Effects.",
        "no_bundle_id": "Could not read bundle identifier from selected application.",
        "not_scriptable": "Selected After Effects application is not accessible via scripting.",
        "detect_failed": "Failed to detect After Effects versions: {error}",
    }

    SUCCESS = {
        "sent": "Sent script to After Effects: {name}",
        "target_set": "After Effects target set to: {name}",
        "target_set_with_id": "After Effects target set to: {name} ({bundle_id})",
    }

    OPTIONS = {
        "auto": {
            "label": "Auto-detect (recommended)",
            "description": "Automatically use the newest installed version",
            "detail": "Scans for all installed versions and picks the newest",
        },
        "browse": {
            "label": "Browse for After Effects...",
            "description": "Manually select After Effects application",
            "detail": "Use a path to choose a specific installation",
        },
    }

    PLACEHOLDERS = {
        "choose": "Choose After Effects version to target",
        "none_detected": "No After Effects installations auto-detected. Browse manually?",
    }

    @classmethod
    def format(cls, group: str, key: str, **kwargs: Any) -> str:
        """Format a message from one of the template groups"""
        templates: Dict[str, str] = getattr(cls, group.upper())
        return templates[key].format(**kwargs)
