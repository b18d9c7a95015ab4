"""
macdevsetup - Interactive macOS development workstation setup
"""

__version__ = "1.0.0"

from .core import WorkstationSetup
from .errors import SetupError

__all__ = ["WorkstationSetup", "SetupError"]
