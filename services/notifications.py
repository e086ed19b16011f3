import logging
from typing import List
from sqlalchemy.orm import Session
from models import Notification
from exceptions import NotFoundError

logger = logging.getLogger(__name__)

WELCOME = "welcome"
CONFIRMATION = "confirmation"
SELECTION = "selection"
CANCELLATION = "cancellation"


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def notify(self, user_id: int, message: str, type: str) -> Notification:
        """Queue a notification on the session; the caller commits."""
        notification = Notification(user_id=user_id, message=message, type=type)
        self.db.add(notification)
        return notification

    def list_for_user(self, user_id: int) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if not notification:
            raise NotFoundError("Notification not found")

        notification.read = True
        self.db.commit()
        logger.info(f"User {user_id} read notification {notification_id}")
        return notification
