"""
Braspress carrier integration package.

This package provides the client for the Braspress freight-quotation API,
covering road (Rodoviario) and air (Aereo) modalities.
"""

from freightscout.carriers.braspress.exceptions import (
    BraspressAPIError,
    BraspressConnectionError,
    BraspressError,
    BraspressValidationError,
)
from freightscout.carriers.braspress.integration import BraspressClient
from freightscout.carriers.braspress.manifest import CargoManifest, Volume

__all__ = [
    "BraspressClient",
    "CargoManifest",
    "Volume",
    "BraspressError",
    "BraspressValidationError",
    "BraspressConnectionError",
    "BraspressAPIError",
]
