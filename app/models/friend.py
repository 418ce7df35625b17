from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User


class FriendRequestStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"

    # Requests in these states block a new request between the same pair
    ACTIVE = (PENDING, ACCEPTED)


class FriendRequest(Base, TimestampMixin):
    __tablename__ = "friend_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recipient_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # status: 'pending' | 'accepted' (declined/cancelled rows are deleted)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FriendRequestStatus.PENDING)

    __table_args__ = (
        CheckConstraint("sender_id <> recipient_id", name="chk_friend_requests_not_self"),
        CheckConstraint("status IN ('pending', 'accepted')", name="chk_friend_requests_status"),
        UniqueConstraint("sender_id", "recipient_id", name="uq_friend_requests_pair_direction"),
        Index("idx_friend_requests_sender", "sender_id", "status"),
        Index("idx_friend_requests_recipient", "recipient_id", "status"),
    )

    # Relationships
    sender: Mapped["User"] = relationship("User", foreign_keys=[sender_id], back_populates="sent_friend_requests")
    recipient: Mapped["User"] = relationship("User", foreign_keys=[recipient_id], back_populates="received_friend_requests")


class UserFriend(Base):
    """One direction of a friendship; every friendship is stored as two rows."""

    __tablename__ = "user_friends"

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    friend_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("user_id <> friend_id", name="chk_user_friends_not_self"),
        Index("idx_user_friends_friend", "friend_id"),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], back_populates="friend_links")
    friend: Mapped["User"] = relationship("User", foreign_keys=[friend_id])
