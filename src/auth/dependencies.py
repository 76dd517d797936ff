from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from src.config import settings
from src.database import get_db
from src.auth.utils import verify_token
from src.auth.service import AdminUserService
from src.exceptions import AuthenticationError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/admin/login", auto_error=False)

def require_admin(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    """Require a valid admin bearer token"""
    if not token:
        raise AuthenticationError("Not authenticated")

    credentials_exception = AuthenticationError("Could not validate credentials")
    token_data = verify_token(token, credentials_exception)

    admin = AdminUserService.get_admin_by_id(db, admin_id=token_data["admin_id"])
    if admin is None or not admin.is_active:
        raise credentials_exception

    return admin
