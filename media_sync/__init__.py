"""Media Sync - now-playing session synchronization"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("media-sync")
except PackageNotFoundError:
    __version__ = "dev"
