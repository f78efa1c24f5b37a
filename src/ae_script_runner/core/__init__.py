"""
Core modules for AE Script Runner
"""

from .base_connector import BaseConnector
from .config import ConfigManager
from .error_handling import (
    DetectionExhaustedError,
    ExecutionTimeoutError,
    NoActiveDocumentError,
    NonZeroExitError,
    ProcessLaunchError,
    RunnerError,
    UnsupportedPlatformError,
    ValidationError,
)
from .models import (
    AppConfig,
    CommandSpec,
    InstallationOption,
    ProcessOutput,
    ResolvedScript,
    RunnerSettings,
    RunOutcome,
)
from .registry import ConnectorRegistry

__all__ = [
    "BaseConnector",
    "ConfigManager",
    "ConnectorRegistry",
    "AppConfig",
    "CommandSpec",
    "InstallationOption",
    "ProcessOutput",
    "ResolvedScript",
    "RunnerSettings",
    "RunOutcome",
    "RunnerError",
    "NoActiveDocumentError",
    "UnsupportedPlatformError",
    "DetectionExhaustedError",
    "NonZeroExitError",
    "ProcessLaunchError",
    "ExecutionTimeoutError",
    "ValidationError",
]
