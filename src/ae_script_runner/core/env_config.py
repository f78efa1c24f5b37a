"""
Centralized environment configuration management
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env file from the working directory if it exists
env_file = Path.cwd() / ".env"
if env_file.exists():
    load_dotenv(env_file)
    logger.debug(f"Loaded environment from {env_file}")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class EnvironmentConfig:
    """Centralized configuration from environment variables"""

    # Configuration file location
    AE_RUNNER_CONFIG: Optional[str] = os.getenv("AE_RUNNER_CONFIG")

    # Logging
    AE_RUNNER_LOG_LEVEL: str = os.getenv("AE_RUNNER_LOG_LEVEL", "INFO")
    AE_RUNNER_LOG_FILE: Optional[str] = os.getenv("AE_RUNNER_LOG_FILE")
    AE_RUNNER_LOG_JSON: bool = _env_flag("AE_RUNNER_LOG_JSON")

    # Where installed applications are scanned on macOS
    AE_RUNNER_APPLICATIONS_DIR: str = os.getenv("AE_RUNNER_APPLICATIONS_DIR", "/Applications")

    @classmethod
    def validate(cls) -> Dict[str, Any]:
        """Validate configuration and return problems found"""
        missing = {}
        warnings = {}

        if cls.AE_RUNNER_CONFIG and not Path(cls.AE_RUNNER_CONFIG).expanduser().exists():
            warnings["AE_RUNNER_CONFIG"] = f"File not found: {cls.AE_RUNNER_CONFIG}"

        if not Path(cls.AE_RUNNER_APPLICATIONS_DIR).is_dir():
            warnings["AE_RUNNER_APPLICATIONS_DIR"] = (
                f"Directory not found: {cls.AE_RUNNER_APPLICATIONS_DIR}"
            )

        return {"missing": missing, "warnings": warnings}


# Create a singleton instance
config = EnvironmentConfig()
