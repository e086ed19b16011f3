import logging
import math
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from database import get_db
from models import Event, User
from schemas import Event as EventSchema, EventCreate, EventUpdate, EventList, EventMessage
from dependencies import get_current_user, get_current_admin_user
from exceptions import InvalidStateError
from services.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter()

def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found"
        )
    return event

@router.get("", response_model=EventList)
async def get_events(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = 10,
    db: Session = Depends(get_db)
):
    """
    Get paginated list of active events
    - category: one of the event categories, or "all"
    - search: case-insensitive match on title or description
    - limit: Maximum number of records to return (max 100)
    """
    limit = min(100, max(1, limit))

    query = db.query(Event).filter(Event.is_active.is_(True))
    if category and category.lower() != "all":
        query = query.filter(Event.category == category.lower())
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))

    total = query.count()
    events = (
        query.order_by(Event.date.asc(), Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "events": [EventSchema.model_validate(event) for event in events],
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total": total
    }

@router.post("", response_model=EventMessage, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Create a new event (admin only)"""
    db_event = Event(**event.model_dump(), created_by_id=current_user.id)
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    logger.info(f"Event {db_event.id} created by {current_user.email}")

    return {
        "message": "Event created successfully",
        "event": EventSchema.model_validate(db_event)
    }

@router.get("/{event_id}", response_model=EventSchema)
async def get_event(event_id: int, db: Session = Depends(get_db)):
    """Get a specific event by ID"""
    return EventSchema.model_validate(get_event_or_404(db, event_id))

@router.put("/{event_id}", response_model=EventMessage)
async def update_event(
    event_id: int,
    event_update: EventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Update an existing event (admin only)"""
    db_event = get_event_or_404(db, event_id)

    # Update only provided fields
    update_data = event_update.model_dump(exclude_unset=True, exclude_none=True)

    new_capacity = update_data.get("max_participants")
    if new_capacity is not None and new_capacity < db_event.registration_count:
        raise InvalidStateError(
            f"Maximum participants cannot be lower than the current "
            f"number of registrations ({db_event.registration_count})"
        )

    for field, value in update_data.items():
        setattr(db_event, field, value)

    db.commit()
    db.refresh(db_event)
    logger.info(f"Event {event_id} updated by {current_user.email}: {sorted(update_data)}")

    return {
        "message": "Event updated successfully",
        "event": EventSchema.model_validate(db_event)
    }

@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Delete an event and every registration for it (admin only)"""
    affected_users = RegistrationService(db).delete_event(event_id)
    return {"message": "Event deleted successfully", "affected_users": affected_users}

@router.post("/{event_id}/register")
async def register_for_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Register the current user for an event"""
    event = RegistrationService(db).register(current_user.id, event_id)
    return {
        "message": "Successfully registered for event",
        "event": {
            "id": event.id,
            "title": event.title,
            "date": event.date.isoformat(),
            "location": event.location
        }
    }

@router.delete("/{event_id}/unregister")
async def unregister_from_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Unregister the current user from an event"""
    RegistrationService(db).unregister(current_user.id, event_id)
    return {"message": "Successfully unregistered from event"}
