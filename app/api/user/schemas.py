"""
Pydantic schemas shared by the user-facing routers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============ User Schemas ============

class UserPublic(BaseModel):
    """Profile fields other users may see"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    profile_pic: str
    native_language: str
    learning_language: str
    bio: str
    location: str


class UserMe(UserPublic):
    email: EmailStr
    is_onboarded: bool
    created_at: datetime


class SignupRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class OnboardingRequest(BaseModel):
    full_name: str = Field(..., max_length=128)
    bio: str = Field(..., max_length=1000)
    native_language: str = Field(..., max_length=32)
    learning_language: str = Field(..., max_length=32)
    location: str = Field(..., max_length=128)
    profile_pic: Optional[str] = Field(None, max_length=512)

    @field_validator("full_name", "bio", "native_language", "learning_language", "location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserMe


# ============ Friend Request Schemas ============

class FriendRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    recipient_id: str
    status: str
    created_at: datetime


class IncomingFriendRequest(FriendRequestResponse):
    sender: UserPublic


class OutgoingFriendRequest(FriendRequestResponse):
    recipient: UserPublic


class FriendRequestsResponse(BaseModel):
    """Pending inbox plus requests the caller sent that were accepted"""
    incoming_reqs: List[IncomingFriendRequest]
    accepted_reqs: List[OutgoingFriendRequest]


class MessageResponse(BaseModel):
    """Generic message response"""
    message: str
