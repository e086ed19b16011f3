import logging
from sqlalchemy.orm import Session
from database import settings
from dependencies import get_password_hash
from models import User

logger = logging.getLogger(__name__)

def create_default_admin(db: Session):
    """Create the configured administrator account unless it already exists."""
    existing_admin = db.query(User).filter(User.email == settings.DEFAULT_ADMIN_EMAIL).first()
    if existing_admin:
        logger.info("Default admin account already exists")
        return existing_admin

    admin_user = User(
        full_name=settings.DEFAULT_ADMIN_NAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        role="admin"
    )
    db.add(admin_user)
    db.commit()
    db.refresh(admin_user)
    logger.info(f"Default admin account created: {admin_user.email}")
    return admin_user
