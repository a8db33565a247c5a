from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from railadmin.database import get_db
from railadmin.auth.dependencies import require_admin
from railadmin.auth.schemas import ActingUser, StaffRole
from railadmin.staff.schemas import Staff, StaffCreate, StaffUpdate, StaffList
from railadmin.staff.service import StaffService, StaffValidationError

router = APIRouter()

@router.get("/", response_model=StaffList)
def list_staff(
    working_station: Optional[str] = Query(None, description="Filter by working station"),
    role: Optional[StaffRole] = Query(None, description="Filter by role"),
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List staff members"""
    staff = StaffService.get_staff(db, working_station=working_station, role=role.value if role else None)
    return StaffList(staff=staff, total=len(staff))

@router.post("/", response_model=Staff, status_code=status.HTTP_201_CREATED)
def create_staff(
    staff: StaffCreate,
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a ticket creator or TTE"""
    try:
        return StaffService.create_staff(db, staff, default_working_station=admin_user.working_station)
    except StaffValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.put("/{staff_pk}", response_model=Staff)
def update_staff(
    staff_pk: int,
    staff_update: StaffUpdate,
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Edit a staff member"""
    try:
        staff = StaffService.update_staff(db, staff_pk, staff_update)
    except StaffValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not staff:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Staff member not found"
        )
    return staff

@router.delete("/{staff_pk}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_pk: int,
    admin_user: ActingUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a staff member"""
    if not StaffService.delete_staff(db, staff_pk):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Staff member not found"
        )
