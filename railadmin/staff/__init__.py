from .service import StaffService, StaffValidationError

__all__ = ["StaffService", "StaffValidationError"]
