import logging
import math
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from database import get_db
from models import Event, User
from schemas import (
    AdminUserUpdate, Event as EventSchema, NotificationList, ProfileUpdate,
    RegisteredEvent, RoleUpdate, User as UserSchema, UserList, UserProfile
)
from dependencies import get_current_user, get_current_admin_user, get_password_hash, verify_password
from exceptions import InvalidStateError
from services.notifications import NotificationService
from services.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_FIELDS = ("full_name", "profile_image", "department", "year", "student_id", "phone_number")

def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user

@router.get("/profile", response_model=UserProfile)
async def get_profile(current_user: User = Depends(get_current_user)):
    return UserProfile.model_validate(current_user)

@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    update_data = profile.model_dump(exclude_unset=True, exclude_none=True)

    for field in PROFILE_FIELDS:
        if field in update_data:
            setattr(current_user, field, update_data[field])

    # Handle password change
    if profile.current_password and profile.new_password:
        if not verify_password(profile.current_password, current_user.password):
            raise InvalidStateError("Current password is incorrect")
        current_user.password = get_password_hash(profile.new_password)
        logger.info(f"Password changed for {current_user.email}")

    db.commit()
    db.refresh(current_user)

    return {
        "message": "Profile updated successfully",
        "user": UserSchema.model_validate(current_user)
    }

@router.get("/registered-events", response_model=List[RegisteredEvent])
async def get_registered_events(current_user: User = Depends(get_current_user)):
    registered_events = []
    for registration in current_user.registered_events:
        event = EventSchema.model_validate(registration.event)
        registered_events.append(RegisteredEvent(
            **event.model_dump(),
            registered_at=registration.registered_at,
            selected=registration.selected
        ))
    return registered_events

@router.get("/dashboard-stats")
async def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    today = date.today()
    total_registered = len(current_user.registered_events)
    upcoming_events = sum(
        1 for registration in current_user.registered_events
        if registration.event.date >= today
    )

    stats = {
        "total_registered": total_registered,
        "upcoming_events": upcoming_events,
        "completed_events": total_registered - upcoming_events
    }

    # Additional stats for admin
    if current_user.role == "admin":
        stats.update({
            "total_events": db.query(Event).filter(Event.is_active.is_(True)).count(),
            "total_users": db.query(User).filter(User.role == "student").count(),
            "events_created": db.query(Event).filter(Event.created_by_id == current_user.id).count()
        })

    return stats

@router.get("/notifications", response_model=NotificationList)
async def get_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"notifications": NotificationService(db).list_for_user(current_user.id)}

@router.put("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    NotificationService(db).mark_read(current_user.id, notification_id)
    return {"message": "Notification marked as read"}

@router.get("", response_model=UserList)
async def get_users(
    role: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = 10,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Get all users (admin only)"""
    limit = min(100, max(1, limit))

    query = db.query(User)
    if role and role != "all":
        query = query.filter(User.role == role)

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "users": [UserSchema.model_validate(user) for user in users],
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total": total
    }

@router.put("/{user_id}/role")
async def update_user_role(
    user_id: int,
    role_update: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Update user role (admin only)"""
    user = get_user_or_404(db, user_id)
    user.role = role_update.role
    db.commit()
    db.refresh(user)
    logger.info(f"{current_user.email} set role of user {user_id} to {user.role}")

    return {
        "message": "User role updated successfully",
        "user": UserSchema.model_validate(user)
    }

@router.put("/{user_id}")
async def update_user(
    user_id: int,
    user_update: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Update user details (admin only)"""
    user = get_user_or_404(db, user_id)
    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data:
        update_data["email"] = update_data["email"].lower()
        taken = (
            db.query(User)
            .filter(User.email == update_data["email"], User.id != user_id)
            .first()
        )
        if taken:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

    for field, value in update_data.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)

    return {
        "message": "User updated successfully",
        "user": UserSchema.model_validate(user)
    }

@router.delete("/{user_id}/registrations")
async def remove_user_registrations(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Remove a user from every event they registered for (admin only)"""
    removed = RegistrationService(db).remove_user_registrations(user_id)
    return {"message": "User removed from all events successfully", "removed": removed}
