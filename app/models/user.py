from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.friend import FriendRequest, UserFriend


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    profile_pic: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    native_language: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    learning_language: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    location: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    is_onboarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    friend_links: Mapped[List["UserFriend"]] = relationship(
        "UserFriend",
        foreign_keys="UserFriend.user_id",
        back_populates="user",
        order_by="UserFriend.created_at",
        cascade="all, delete-orphan",
    )
    sent_friend_requests: Mapped[List["FriendRequest"]] = relationship(
        "FriendRequest",
        foreign_keys="FriendRequest.sender_id",
        back_populates="sender",
        cascade="all, delete-orphan",
    )
    received_friend_requests: Mapped[List["FriendRequest"]] = relationship(
        "FriendRequest",
        foreign_keys="FriendRequest.recipient_id",
        back_populates="recipient",
        cascade="all, delete-orphan",
    )
