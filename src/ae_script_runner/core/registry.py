"""
Connector registry: maps the running platform to its connector
"""

import logging
import platform
from typing import Dict, Optional, Type

from .base_connector import BaseConnector
from .error_handling import UnsupportedPlatformError
from .models import RunnerSettings

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Registry for platform connectors"""

    def __init__(self):
        self._connector_classes: Dict[str, Type[BaseConnector]] = {}
        self.logger = logging.getLogger(__name__)

    def register_connector_class(self, system: str, connector_class: Type[BaseConnector]) -> None:
        """Register a connector class for a ``platform.system()`` name"""
        if not issubclass(connector_class, BaseConnector):
            raise ValueError("Connector class must inherit from BaseConnector")

        self._connector_classes[system] = connector_class
        self.logger.debug(f"Registered connector class for {system}: {connector_class.__name__}")

    def register_defaults(self) -> None:
        """Register the built-in macOS and Windows connectors"""
        from ..connectors.macos.connector import MacOSConnector
        from ..connectors.windows.connector import WindowsConnector

        self.register_connector_class("Darwin", MacOSConnector)
        self.register_connector_class("Windows", WindowsConnector)

    def get_connector_class(self, system: str) -> Type[BaseConnector]:
        """Get the connector class for a platform"""
        try:
            return self._connector_classes[system]
        except KeyError:
            raise UnsupportedPlatformError(system) from None

    def create_connector(
        self, settings: RunnerSettings, system: Optional[str] = None
    ) -> BaseConnector:
        """Create the connector for ``system`` (the running platform by default)

        Raises:
            UnsupportedPlatformError: No connector handles the platform
        """
        system = system or platform.system()
        connector_class = self.get_connector_class(system)
        return connector_class(settings=settings)


def default_registry() -> ConnectorRegistry:
    """Registry with the built-in connectors registered"""
    registry = ConnectorRegistry()
    registry.register_defaults()
    return registry
