from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime

class StationBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=2, max_length=4)
    address: Optional[str] = None

    @validator('name')
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Please enter station name and station code')
        return v

    @validator('code')
    def validate_code(cls, v):
        v = v.strip().upper()
        if not 2 <= len(v) <= 4 or not v.isalpha():
            raise ValueError('Station code must be 2-4 letters')
        return v

class StationCreate(StationBase):
    pass

class StationUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    address: Optional[str] = None

    @validator('code')
    def validate_code(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if not 2 <= len(v) <= 4 or not v.isalpha():
            raise ValueError('Station code must be 2-4 letters')
        return v

class Station(StationBase):
    id: int
    working_station: Optional[str] = None
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class StationList(BaseModel):
    stations: List[Station]
    total: int
