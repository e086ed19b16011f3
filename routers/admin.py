from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from models import Event, Registration, User
from schemas import (
    AdminStats, Event as EventSchema, SelectStudentRequest, StudentRegistrations
)
from dependencies import get_current_admin_user
from services.registration import RegistrationService

router = APIRouter()

@router.get("/stats", response_model=AdminStats)
async def get_admin_stats(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_admin_user)
):
    """Dashboard counters (admin only)"""
    total_events = db.query(Event).filter(Event.is_active.is_(True)).count()
    total_users = db.query(User).filter(User.role == "student").count()

    total_registrations = (
        db.query(func.count(Registration.id))
        .select_from(Registration)
        .join(Registration.event)
        .filter(Event.is_active.is_(True))
        .scalar()
    )
    selected_students = (
        db.query(func.count(Registration.id))
        .select_from(Registration)
        .join(Registration.user)
        .filter(User.role == "student", Registration.selected.is_(True))
        .scalar()
    )

    recent_events = (
        db.query(Event)
        .filter(Event.is_active.is_(True))
        .order_by(Event.created_at.desc(), Event.id.desc())
        .limit(5)
        .all()
    )

    return {
        "total_events": total_events,
        "total_users": total_users,
        "total_registrations": total_registrations,
        "selected_students": selected_students,
        "recent_events": [EventSchema.model_validate(event) for event in recent_events]
    }

@router.get("/registrations", response_model=List[StudentRegistrations])
async def get_student_registrations(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_admin_user)
):
    """Students registered for at least one event (admin only)"""
    students = (
        db.query(User)
        .filter(User.role == "student", User.registered_events.any())
        .order_by(User.full_name)
        .all()
    )
    return [StudentRegistrations.model_validate(student) for student in students]

@router.post("/select-student")
async def select_student(
    selection: SelectStudentRequest,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_admin_user)
):
    """Mark a student's registration as selected (admin only)"""
    RegistrationService(db).select_student(selection.user_id, selection.event_id)
    return {"message": "Student selected successfully"}
