from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime

from railadmin.auth.schemas import StaffRole

class StaffBase(BaseModel):
    staff_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    role: StaffRole
    is_active: bool = True
    working_station: Optional[str] = None

    @validator('staff_id', 'name')
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v

class StaffCreate(StaffBase):
    password: str = Field(..., min_length=4)

class StaffUpdate(BaseModel):
    name: Optional[str] = None
    password: Optional[str] = Field(None, min_length=4)
    role: Optional[StaffRole] = None
    is_active: Optional[bool] = None
    working_station: Optional[str] = None

class Staff(StaffBase):
    """Staff member as returned to admins; the password hash never leaves the service"""
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class StaffList(BaseModel):
    staff: List[Staff]
    total: int
