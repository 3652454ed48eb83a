"""Version information for FRED Relay."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "fred-relay"
_VERSION_FILE = Path(__file__).parent / "VERSION"


def get_version() -> str:
    """Installed distribution version, else the VERSION file beside this module."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        pass
    try:
        return _VERSION_FILE.read_text().strip()
    except FileNotFoundError:
        return "unknown"


VERSION = get_version()
