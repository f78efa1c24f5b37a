"""
AE Script Runner - send ExtendScript files to Adobe After Effects
"""

__version__ = "1.0.0"
