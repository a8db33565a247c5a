import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from railadmin.database import get_db
from railadmin.auth.schemas import ActingUser, AuthResponse, LoginRequest, WorkingStationUpdate
from railadmin.auth.service import AuthService
from railadmin.auth.utils import create_access_token
from railadmin.auth.dependencies import get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Login for ticket creators, TTEs and the admin"""
    user = AuthService.authenticate(db, login_data)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials or role",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data=AuthService.token_claims(user))
    logger.info("%s logged in as %s", user.username, user.role.value)
    return AuthResponse(access_token=access_token, user=user)

@router.get("/me", response_model=ActingUser)
def read_current_user(current_user: ActingUser = Depends(get_current_user)):
    """Get the identity carried by the current token"""
    return current_user

@router.put("/working-station", response_model=AuthResponse)
def update_working_station(
    update: WorkingStationUpdate,
    current_user: ActingUser = Depends(require_admin)
):
    """Switch the admin's working-station network and reissue the token"""
    user = current_user.model_copy(update={"working_station": update.working_station.strip()})
    access_token = create_access_token(data=AuthService.token_claims(user))
    return AuthResponse(access_token=access_token, user=user)
