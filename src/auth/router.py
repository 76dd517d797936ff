from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import timedelta
from src.database import get_db
from src.auth.schemas import AdminLogin, Token
from src.auth.service import AdminUserService
from src.auth.utils import create_access_token
from src.config import settings
from src.exceptions import AuthenticationError

router = APIRouter()

@router.post("/login", response_model=Token)
def admin_login(login_data: AdminLogin, db: Session = Depends(get_db)):
    """Log in to the admin dashboard"""
    admin = AdminUserService.authenticate(db, login_data.username, login_data.password)
    if not admin:
        raise AuthenticationError("Invalid credentials")

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": str(admin.id), "username": admin.username}, expires_delta=access_token_expires
    )
    return Token(access_token=access_token, token_type="bearer")
