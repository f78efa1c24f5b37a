from .connector import MacOSConnector
from .detector import InstallationDetector
from .naming import bundle_id_to_display_name

__all__ = ["MacOSConnector", "InstallationDetector", "bundle_id_to_display_name"]
