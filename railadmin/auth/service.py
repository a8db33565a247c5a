import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from railadmin.config import settings
from railadmin.models import Staff
from railadmin.auth.schemas import ActingUser, LoginRequest, UserRole
from railadmin.auth.utils import verify_password

logger = logging.getLogger(__name__)

class AuthService:
    @staticmethod
    def get_active_staff(db: Session, staff_id: str) -> Optional[Staff]:
        """Get an active staff member by login handle"""
        return db.query(Staff).filter(
            Staff.staff_id == staff_id,
            Staff.is_active == True
        ).first()
    
    @staticmethod
    def authenticate(db: Session, login_data: LoginRequest) -> Optional[ActingUser]:
        """Check credentials for a staff member or the configured admin"""
        if login_data.role == UserRole.ADMIN:
            username_ok = secrets.compare_digest(login_data.username, settings.ADMIN_USERNAME)
            password_ok = secrets.compare_digest(login_data.password, settings.ADMIN_PASSWORD)
            if not (username_ok and password_ok):
                logger.warning("Admin login failed for %s", login_data.username)
                return None
            return ActingUser(
                username=login_data.username,
                role=UserRole.ADMIN,
                working_station=login_data.working_station
            )
        
        staff = AuthService.get_active_staff(db, login_data.username)
        if not staff or staff.role != login_data.role.value:
            logger.warning("Staff login failed for %s", login_data.username)
            return None
        if not verify_password(login_data.password, staff.password_hash):
            logger.warning("Staff login failed for %s", login_data.username)
            return None
        
        return ActingUser(
            username=staff.name,
            role=UserRole(staff.role),
            working_station=staff.working_station or login_data.working_station,
            staff_id=staff.staff_id
        )
    
    @staticmethod
    def token_claims(user: ActingUser) -> dict:
        return {
            "sub": user.staff_id or user.username,
            "name": user.username,
            "role": user.role.value,
            "working_station": user.working_station,
            "staff_id": user.staff_id,
        }
