from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

class UserRole(str, Enum):
    """Roles that may act on the system"""
    TICKET_CREATOR = "ticket_creator"
    TTE = "tte"
    ADMIN = "admin"

class StaffRole(str, Enum):
    """Roles assignable to staff rows (admins are configured, not stored)"""
    TICKET_CREATOR = "ticket_creator"
    TTE = "tte"

class ActingUser(BaseModel):
    """Identity of the caller, passed explicitly into every core operation"""
    username: str
    role: UserRole
    working_station: Optional[str] = None
    staff_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.working_station:
            return f"{self.username} ({self.working_station})"
        return self.username

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: UserRole
    working_station: Optional[str] = None

class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: ActingUser

class WorkingStationUpdate(BaseModel):
    working_station: str = Field(..., min_length=1)
