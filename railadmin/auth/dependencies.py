from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from railadmin.config import settings
from railadmin.database import get_db
from railadmin.auth.schemas import ActingUser, UserRole
from railadmin.auth.service import AuthService
from railadmin.auth.utils import verify_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> ActingUser:
    """Resolve the acting user from the bearer token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    payload = verify_token(token, credentials_exception)
    
    try:
        role = UserRole(payload["role"])
    except ValueError:
        raise credentials_exception
    
    # Deactivated or deleted staff lose access immediately
    if role != UserRole.ADMIN:
        staff = AuthService.get_active_staff(db, payload.get("staff_id") or payload["sub"])
        if staff is None:
            raise credentials_exception
    
    return ActingUser(
        username=payload.get("name") or payload["sub"],
        role=role,
        working_station=payload.get("working_station"),
        staff_id=payload.get("staff_id")
    )

def require_roles(*roles: UserRole):
    """Build a dependency that admits only the given roles"""
    def checker(current_user: ActingUser = Depends(get_current_user)) -> ActingUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user
    return checker

require_admin = require_roles(UserRole.ADMIN)
require_ticket_creator = require_roles(UserRole.TICKET_CREATOR, UserRole.ADMIN)
require_tte = require_roles(UserRole.TTE, UserRole.ADMIN)
