"""
Station network management: stations grouped by working-station network,
with names and codes unique inside each network.
"""

from .service import StationService, StationValidationError, StationInUseError
from .schemas import Station, StationCreate, StationUpdate, StationList

__all__ = [
    "StationService",
    "StationValidationError",
    "StationInUseError",
    "Station",
    "StationCreate",
    "StationUpdate",
    "StationList",
]
