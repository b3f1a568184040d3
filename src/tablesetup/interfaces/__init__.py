"""Protocol-based interfaces for the setup tools.

This module exports the storage protocol, providing a clear contract for
storage adapters and enabling dependency injection and testing.
"""

from tablesetup.interfaces.storage import ISetupStorage

__all__ = [
    "ISetupStorage",
]
