from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class AdminLogin(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)

class AdminCreate(AdminLogin):
    password: str = Field(..., min_length=8)

class Admin(BaseModel):
    id: int
    username: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str
    token_type: str
