from .connector import WindowsConnector

__all__ = ["WindowsConnector"]
