"""Registration workflow: joining and leaving events, admin selection and
cascading clean-up when an event or a user's registrations are removed.

Every operation finishes with a single commit, so an event's participant list
and a user's registered events never disagree.
"""
import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from models import Event, Registration, User
from exceptions import (
    AlreadyRegisteredError, CapacityExceededError, InvalidStateError, NotFoundError
)
from services.notifications import NotificationService, CANCELLATION, CONFIRMATION, SELECTION

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    def _get_event(self, event_id: int, lock: bool = False) -> Event:
        query = self.db.query(Event).filter(Event.id == event_id)
        if lock:
            # Serialises concurrent registrations on the capacity check.
            # SQLite ignores FOR UPDATE.
            query = query.with_for_update()
        event = query.first()
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _find_registration(self, user_id: int, event_id: int):
        return (
            self.db.query(Registration)
            .filter(Registration.user_id == user_id, Registration.event_id == event_id)
            .first()
        )

    def participant_count(self, event_id: int) -> int:
        return (
            self.db.query(func.count(Registration.id))
            .filter(Registration.event_id == event_id)
            .scalar()
        )

    def register(self, user_id: int, event_id: int) -> Event:
        """Add ``user_id`` to the participants of ``event_id``.

        Raises NotFoundError, InvalidStateError, CapacityExceededError or
        AlreadyRegisteredError, checked in that order. Nothing is written
        when any of them is raised.
        """
        try:
            event = self._get_event(event_id, lock=True)
            self._get_user(user_id)

            if not event.is_active:
                raise InvalidStateError("Event is not active")

            if self.participant_count(event_id) >= event.max_participants:
                raise CapacityExceededError()

            if self._find_registration(user_id, event_id):
                raise AlreadyRegisteredError()

            self.db.add(Registration(event_id=event_id, user_id=user_id))
            self.notifications.notify(
                user_id,
                f'Your registration for "{event.title}" has been confirmed',
                CONFIRMATION
            )
            self.db.commit()
        except IntegrityError:
            # Lost a race against an identical registration
            self.db.rollback()
            raise AlreadyRegisteredError()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(event)
        logger.info(f"User {user_id} registered for event {event_id}")
        return event

    def unregister(self, user_id: int, event_id: int) -> bool:
        """Remove the user's registration if there is one.

        Returns whether a registration was removed. Not being registered is
        not an error.
        """
        event = self._get_event(event_id)
        registration = self._find_registration(user_id, event_id)
        if registration is None:
            return False

        try:
            self.db.delete(registration)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"User {user_id} unregistered from event {event.id}")
        return True

    def delete_event(self, event_id: int) -> int:
        """Delete an event together with every registration for it.

        Each registered user gets a cancellation notification. Returns the
        number of users whose registrations were removed.
        """
        event = self._get_event(event_id)
        user_ids = [registration.user_id for registration in event.registered_participants]

        try:
            for user_id in user_ids:
                self.notifications.notify(
                    user_id,
                    f'"{event.title}" has been cancelled',
                    CANCELLATION
                )
            self.db.delete(event)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted event {event_id}; removed registrations of {len(user_ids)} users")
        return len(user_ids)

    def select_student(self, user_id: int, event_id: int) -> Registration:
        user = self._get_user(user_id)
        registration = self._find_registration(user.id, event_id)
        if registration is None:
            raise NotFoundError("Registration not found")

        if registration.selected:
            return registration

        try:
            registration.selected = True
            self.notifications.notify(
                user.id,
                f'You have been selected for "{registration.event.title}"',
                SELECTION
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"User {user_id} selected for event {event_id}")
        return registration

    def remove_user_registrations(self, user_id: int) -> int:
        user = self._get_user(user_id)
        removed = len(user.registered_events)

        try:
            user.registered_events.clear()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Removed user {user_id} from {removed} events")
        return removed
