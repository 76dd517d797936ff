from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from src.models import AdminUser
from src.auth.schemas import AdminCreate
from src.auth.utils import get_password_hash, verify_password
from src.exceptions import ConflictError
from typing import Optional
from datetime import datetime

class AdminUserService:
    @staticmethod
    def get_admin_by_username(db: Session, username: str) -> Optional[AdminUser]:
        """Get admin by username"""
        return db.query(AdminUser).filter(AdminUser.username == username).first()

    @staticmethod
    def get_admin_by_id(db: Session, admin_id: int) -> Optional[AdminUser]:
        """Get admin by ID"""
        return db.query(AdminUser).filter(AdminUser.id == admin_id).first()

    @staticmethod
    def create_admin(db: Session, admin: AdminCreate) -> AdminUser:
        """Create an admin account"""
        db_admin = AdminUser(
            username=admin.username,
            password_hash=get_password_hash(admin.password),
            is_active=True
        )

        try:
            db.add(db_admin)
            db.commit()
            db.refresh(db_admin)
            return db_admin
        except IntegrityError:
            db.rollback()
            raise ConflictError("Username already registered")

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> Optional[AdminUser]:
        """Authenticate an admin with username and password"""
        admin = AdminUserService.get_admin_by_username(db, username)
        if not admin or not admin.is_active:
            return None
        if not verify_password(password, admin.password_hash):
            return None

        admin.last_login = datetime.now()
        db.commit()
        db.refresh(admin)
        return admin
