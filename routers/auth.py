import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from models import User
from schemas import UserLogin, UserSignup, Token, User as UserSchema
from dependencies import verify_password, get_password_hash, create_access_token, get_current_user
from services.notifications import NotificationService, WELCOME

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
async def signup(user: UserSignup, db: Session = Depends(get_db)):
    email = user.email.lower()

    # Check if user already exists
    db_user = db.query(User).filter(User.email == email).first()
    if db_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    # Accounts created here are always students; admins promote via /api/users/{id}/role
    db_user = User(
        full_name=user.full_name,
        email=email,
        password=get_password_hash(user.password),
        role="student",
        department=user.department,
        year=user.year,
        student_id=user.student_id,
        phone_number=user.phone_number
    )
    try:
        db.add(db_user)
        db.flush()
        NotificationService(db).notify(
            db_user.id,
            "Welcome to the Event Management System!",
            WELCOME
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_user)
    logger.info(f"New user signed up: {db_user.email}")

    access_token = create_access_token(data={"sub": db_user.email})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserSchema.model_validate(db_user)
    }

@router.post("/login", response_model=Token)
async def login(user_credentials: UserLogin, db: Session = Depends(get_db)):
    # Authenticate user
    user = db.query(User).filter(User.email == user_credentials.email.lower()).first()

    if not user or not verify_password(user_credentials.password, user.password):
        logger.info(f"Failed login for {user_credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": user.email})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserSchema.model_validate(user)
    }

@router.get("/me")
async def read_users_me(current_user: User = Depends(get_current_user)):
    """
    Get current user information
    """
    return {
        "user": UserSchema.model_validate(current_user)
    }
