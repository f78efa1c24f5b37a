"""
Message templates for AE Script Runner
"""

from .runner_templates import RunnerTemplates

__all__ = ["RunnerTemplates"]
