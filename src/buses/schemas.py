from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime

class RouteStopBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    fare: int = Field(0, ge=0, description="Fare in minor units")

class RouteStopCreate(RouteStopBase):
    pass

class RouteStop(RouteStopBase):
    id: int
    sequence: int

    class Config:
        from_attributes = True

class BusBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    is_active: bool = True

class BusCreate(BusBase):
    route_code: str = Field(..., min_length=1, max_length=50)
    total_seats: Optional[int] = Field(None, ge=0)
    stops: List[RouteStopCreate] = []

    @validator('route_code')
    def normalize_route_code(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Route code cannot be blank')
        return v

class BusUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    total_seats: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    stops: Optional[List[RouteStopCreate]] = None

class Bus(BusBase):
    id: int
    route_code: str
    total_seats: int
    available_seats: Optional[int] = None
    stops: List[RouteStop] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
