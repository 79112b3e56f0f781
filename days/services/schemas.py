"""
Request/response schemas for the remote Days API.

Each Pydantic model mirrors one JSON body of the fixed API contract. Unknown
fields sent by the server are ignored.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LoginRequest(_Schema):
    email: str
    password: str


class CreateUserRequest(_Schema):
    email: str
    password: str


class UserResponse(_Schema):
    id: str = Field(..., description="User UUID")
    email: str = ""
    created_at: str = ""


class LoginResponse(_Schema):
    token: str = Field(..., description="Bearer token for later requests")
    user: UserResponse


class CreateCalendarRequest(_Schema):
    name: str
    description: Optional[str] = None


class UpdateCalendarRequest(_Schema):
    name: str
    description: Optional[str] = None


class CalendarResponse(_Schema):
    id: str
    user_id: Optional[str] = None
    name: str = "Unknown"
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
