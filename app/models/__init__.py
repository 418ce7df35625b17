from app.models.base import Base
from app.models.friend import FriendRequest, FriendRequestStatus, UserFriend
from app.models.user import User

__all__ = [
    "Base",
    "User",
    "FriendRequest",
    "FriendRequestStatus",
    "UserFriend",
]
