"""
Discovery of server installations on disk and of running server processes.
"""

from .disk import get_disk_usage
from .installations import InstallationScanner, resolve_directory
from .processes import ProcessDiscovery
from .properties import parse_properties, read_properties

__all__ = [
    "InstallationScanner",
    "ProcessDiscovery",
    "get_disk_usage",
    "parse_properties",
    "read_properties",
    "resolve_directory",
]
