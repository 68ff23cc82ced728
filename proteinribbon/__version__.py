"""Version information for proteinribbon"""

__version__ = "0.3.0"
__version_info__ = (0, 3, 0)
__license__ = "MIT"


def get_version():
    """Return the current version string"""
    return __version__


def get_version_tuple():
    """Return the current version as a tuple of integers"""
    return __version_info__
