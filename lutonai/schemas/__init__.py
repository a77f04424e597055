from lutonai.schemas.user import UserCreate, UserResponse, UserLogin, UserUpdate, Token
from lutonai.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventDetailResponse,
    EventListResponse, EventAvailability, EventStatus,
)
from lutonai.schemas.registration import (
    RegistrationCreate, RegistrationResponse, RegistrationCreatedResponse,
    RegistrationListResponse, RegistrationQuery, RegistrationStatusUpdate,
)
from lutonai.schemas.stats import AdminStatsResponse, StatItem

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "UserUpdate", "Token",
    "EventCreate", "EventUpdate", "EventResponse", "EventDetailResponse",
    "EventListResponse", "EventAvailability", "EventStatus",
    "RegistrationCreate", "RegistrationResponse", "RegistrationCreatedResponse",
    "RegistrationListResponse", "RegistrationQuery", "RegistrationStatusUpdate",
    "AdminStatsResponse", "StatItem",
]
