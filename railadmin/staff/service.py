import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from railadmin.models import Staff
from railadmin.auth.utils import get_password_hash
from railadmin.staff.schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)

class StaffValidationError(ValueError):
    """Staff input rejected before any write"""

class StaffService:
    @staticmethod
    def get_staff_by_id(db: Session, staff_pk: int) -> Optional[Staff]:
        return db.query(Staff).filter(Staff.id == staff_pk).first()
    
    @staticmethod
    def get_staff(
        db: Session,
        working_station: Optional[str] = None,
        role: Optional[str] = None
    ) -> List[Staff]:
        """List staff, newest first"""
        query = db.query(Staff)
        if working_station:
            query = query.filter(Staff.working_station == working_station)
        if role:
            query = query.filter(Staff.role == role)
        return query.order_by(Staff.created_at.desc(), Staff.id.desc()).all()
    
    @staticmethod
    def create_staff(db: Session, staff: StaffCreate, default_working_station: Optional[str] = None) -> Staff:
        """Create a staff member with a hashed password"""
        if db.query(Staff).filter(Staff.staff_id == staff.staff_id).first():
            raise StaffValidationError("Staff ID already exists")
        
        db_staff = Staff(
            staff_id=staff.staff_id,
            password_hash=get_password_hash(staff.password),
            name=staff.name,
            role=staff.role.value,
            is_active=staff.is_active,
            working_station=staff.working_station or default_working_station
        )
        
        try:
            db.add(db_staff)
            db.commit()
            db.refresh(db_staff)
        except IntegrityError:
            db.rollback()
            raise StaffValidationError("Staff ID already exists")
        
        logger.info("Staff %s created for %s station", db_staff.staff_id, db_staff.working_station)
        return db_staff
    
    @staticmethod
    def update_staff(db: Session, staff_pk: int, staff_update: StaffUpdate) -> Optional[Staff]:
        db_staff = StaffService.get_staff_by_id(db, staff_pk)
        if not db_staff:
            return None
        
        update_data = staff_update.model_dump(exclude_unset=True)
        
        # Hash password if it's being updated
        if update_data.get("password"):
            db_staff.password_hash = get_password_hash(update_data.pop("password"))
        update_data.pop("password", None)
        
        if update_data.get("role") is not None:
            update_data["role"] = update_data["role"].value
        if update_data.get("name") is not None:
            name = update_data["name"].strip()
            if not name:
                raise StaffValidationError("Staff name cannot be blank")
            update_data["name"] = name
        
        for field, value in update_data.items():
            # working_station is the only nullable column here
            if value is None and field != "working_station":
                continue
            setattr(db_staff, field, value)
        
        db.commit()
        db.refresh(db_staff)
        return db_staff
    
    @staticmethod
    def delete_staff(db: Session, staff_pk: int) -> bool:
        db_staff = StaffService.get_staff_by_id(db, staff_pk)
        if not db_staff:
            return False
        db.delete(db_staff)
        db.commit()
        return True
