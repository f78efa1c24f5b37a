"""Base connector interface for After Effects scripting targets.

A connector knows how one platform addresses After Effects and turns a
resolved script path into the command line that runs it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .models import CommandSpec, RunnerSettings

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Base class for all platform connectors."""

    # Whether the installed version can be chosen by the user
    supports_version_selection: bool = False

    def __init__(self, name: str, settings: RunnerSettings | None = None) -> None:
        """Initialize the connector.

        Args:
            name: Unique connector identifier
            settings: Runner options, defaults when omitted
        """
        self.name = name
        self.settings = settings or RunnerSettings()
        self.logger = logging.getLogger(f"connector.{name}")

    @abstractmethod
    async def build_command(self, script_path: str) -> CommandSpec:
        """Build the command that makes After Effects run ``script_path``"""

    async def detect_installations(self) -> list[str]:
        """Return identifiers of working installations (override if supported)"""
        return []

    async def get_installation_version(self, identifier: str) -> str:
        """Version reported by an installation, empty when unknown"""
        return ""

    async def verify_installation(self, identifier: str) -> bool:
        """Whether an installation accepts scripting requests"""
        return False

    def __str__(self) -> str:
        return f"Connector({self.name})"

    def __repr__(self) -> str:
        return f"Connector(name='{self.name}')"
