from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Literal, Optional
from datetime import date as date_type, datetime

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"

Category = Literal["academic", "cultural", "sports", "workshop", "seminar"]
Role = Literal["student", "admin"]

# User schemas
class UserBrief(BaseModel):
    id: int
    full_name: str
    email: EmailStr

    class Config:
        from_attributes = True

class UserBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    email: EmailStr

class UserSignup(UserBase):
    password: str = Field(min_length=6, max_length=72)
    department: Optional[str] = None
    year: Optional[str] = None
    student_id: Optional[str] = None
    phone_number: Optional[str] = None

class User(UserBase):
    id: int
    role: Role
    department: Optional[str] = None
    year: Optional[str] = None
    student_id: Optional[str] = None
    phone_number: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    profile_image: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    student_id: Optional[str] = None
    phone_number: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=6, max_length=72)

class AdminUserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    phone_number: Optional[str] = None

class RoleUpdate(BaseModel):
    role: Role

# Event schemas
class EventBrief(BaseModel):
    id: int
    title: str
    date: date_type
    location: str
    category: Category
    selection_required: bool

    class Config:
        from_attributes = True

class EventBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=1000)
    category: Category
    date: date_type
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    location: str = Field(min_length=1, max_length=200)
    image: str = ""
    max_participants: int = Field(default=100, ge=1)
    is_active: bool = True
    selection_required: bool = False
    tags: List[str] = []

    class Config:
        str_strip_whitespace = True

    @field_validator("category", mode="before")
    @classmethod
    def lowercase_category(cls, value):
        return value.lower() if isinstance(value, str) else value

class EventCreate(EventBase):
    pass

class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    category: Optional[Category] = None
    date: Optional[date_type] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    image: Optional[str] = None
    max_participants: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None
    selection_required: Optional[bool] = None
    tags: Optional[List[str]] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("category", mode="before")
    @classmethod
    def lowercase_category(cls, value):
        return value.lower() if isinstance(value, str) else value

class Participant(BaseModel):
    user: UserBrief
    registered_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Event(EventBase):
    id: int
    created_by: Optional[UserBrief] = None
    registered_participants: List[Participant] = []
    registration_count: int
    available_spots: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class EventList(BaseModel):
    events: List[Event]
    total_pages: int
    current_page: int
    total: int

class EventMessage(BaseModel):
    message: str
    event: Event

class RegisteredEvent(Event):
    registered_at: Optional[datetime] = None
    selected: bool = False

# Registration schemas
class Registration(BaseModel):
    event: EventBrief
    registered_at: Optional[datetime] = None
    selected: bool

    class Config:
        from_attributes = True

class UserProfile(User):
    registered_events: List[Registration] = []

class StudentRegistrations(BaseModel):
    id: int
    full_name: str
    email: EmailStr
    department: Optional[str] = None
    year: Optional[str] = None
    student_id: Optional[str] = None
    registered_events: List[Registration]

    class Config:
        from_attributes = True

class SelectStudentRequest(BaseModel):
    user_id: int
    event_id: int

class AdminStats(BaseModel):
    total_events: int
    total_users: int
    total_registrations: int
    selected_students: int
    recent_events: List[Event]

class UserList(BaseModel):
    users: List[User]
    total_pages: int
    current_page: int
    total: int

# Notification schemas
class Notification(BaseModel):
    id: int
    message: str
    type: str
    read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class NotificationList(BaseModel):
    notifications: List[Notification]

# Authentication schemas
class Token(BaseModel):
    access_token: str
    token_type: str
    user: User

class TokenData(BaseModel):
    email: Optional[str] = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str
