"""
Friend-request store.

State transitions on FriendRequest rows and the symmetric user_friends relation.
Every mutating function is one transaction: it commits once on success and
rolls back on failure, raising AppError subclasses for the API layer to map.
"""

from typing import List
from uuid import uuid4

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.core.logging import get_logger
from app.models.friend import FriendRequest, FriendRequestStatus, UserFriend
from app.models.user import User

logger = get_logger(__name__)


# ============ Helpers ============

def _between(user_a: str, user_b: str):
    """Match requests between the pair in either direction"""
    return or_(
        and_(FriendRequest.sender_id == user_a, FriendRequest.recipient_id == user_b),
        and_(FriendRequest.sender_id == user_b, FriendRequest.recipient_id == user_a),
    )


def _friend_ids(user_id: str):
    return select(UserFriend.friend_id).where(UserFriend.user_id == user_id)


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Friend request conflicts with existing data") from exc


async def _get_request(db: AsyncSession, request_id: str) -> FriendRequest:
    friend_request = await db.get(FriendRequest, request_id)
    if friend_request is None:
        raise NotFoundError("Friend request not found", details={"request_id": request_id})
    return friend_request


async def _get_pending_request(db: AsyncSession, request_id: str) -> FriendRequest:
    stmt = select(FriendRequest).where(
        FriendRequest.id == request_id,
        FriendRequest.status == FriendRequestStatus.PENDING,
    )
    result = await db.execute(stmt)
    friend_request = result.scalar_one_or_none()
    if friend_request is None:
        raise NotFoundError("Friend request not found", details={"request_id": request_id})
    return friend_request


async def are_friends(db: AsyncSession, user_id: str, other_id: str) -> bool:
    stmt = select(UserFriend).where(UserFriend.user_id == user_id, UserFriend.friend_id == other_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


# ============ Mutations ============

async def create_request(db: AsyncSession, sender_id: str, recipient_id: str) -> FriendRequest:
    """Create a pending request from sender to recipient."""
    if sender_id == recipient_id:
        raise ConflictError("You can't send a friend request to yourself")

    recipient = await db.get(User, recipient_id)
    if recipient is None:
        raise NotFoundError("Recipient not found", details={"user_id": recipient_id})

    if await are_friends(db, sender_id, recipient_id):
        raise ConflictError("You are already friends with this user")

    stmt = select(FriendRequest).where(
        _between(sender_id, recipient_id),
        FriendRequest.status.in_(FriendRequestStatus.ACTIVE),
    )
    result = await db.execute(stmt)
    existing = result.scalars().first()
    if existing is not None:
        raise ConflictError(
            "A friend request already exists between you and this user",
            details={"request_id": existing.id},
        )

    friend_request = FriendRequest(
        id=str(uuid4()),
        sender_id=sender_id,
        recipient_id=recipient_id,
        status=FriendRequestStatus.PENDING,
    )
    db.add(friend_request)
    await _commit(db)

    logger.info(
        "friend_request.created",
        request_id=friend_request.id,
        sender_id=sender_id,
        recipient_id=recipient_id,
    )
    return friend_request


async def accept_request(db: AsyncSession, request_id: str, acting_user_id: str) -> FriendRequest:
    """
    Accept a pending request addressed to the acting user.

    The status change and both friend rows are written in a single commit.
    """
    friend_request = await _get_pending_request(db, request_id)

    if friend_request.recipient_id != acting_user_id:
        raise ForbiddenError("You are not authorized to accept this request")

    friend_request.status = FriendRequestStatus.ACCEPTED
    db.add_all([
        UserFriend(user_id=friend_request.sender_id, friend_id=friend_request.recipient_id),
        UserFriend(user_id=friend_request.recipient_id, friend_id=friend_request.sender_id),
    ])
    await _commit(db)

    logger.info(
        "friend_request.accepted",
        request_id=friend_request.id,
        sender_id=friend_request.sender_id,
        recipient_id=friend_request.recipient_id,
    )
    return friend_request


async def decline_request(db: AsyncSession, request_id: str, acting_user_id: str) -> None:
    friend_request = await _get_pending_request(db, request_id)

    if friend_request.recipient_id != acting_user_id:
        raise ForbiddenError("You are not authorized to decline this request")

    await db.delete(friend_request)
    await _commit(db)

    logger.info("friend_request.declined", request_id=request_id, recipient_id=acting_user_id)


async def cancel_request(db: AsyncSession, request_id: str, acting_user_id: str) -> None:
    friend_request = await _get_request(db, request_id)

    if friend_request.sender_id != acting_user_id:
        raise ForbiddenError("You can only cancel friend requests you sent")

    if friend_request.status != FriendRequestStatus.PENDING:
        raise ConflictError("Only pending friend requests can be cancelled")

    await db.delete(friend_request)
    await _commit(db)

    logger.info("friend_request.cancelled", request_id=request_id, sender_id=acting_user_id)


# ============ Projections ============

async def list_incoming(db: AsyncSession, user_id: str) -> List[FriendRequest]:
    """Pending requests addressed to the user, newest first"""
    stmt = (
        select(FriendRequest)
        .options(selectinload(FriendRequest.sender))
        .where(
            FriendRequest.recipient_id == user_id,
            FriendRequest.status == FriendRequestStatus.PENDING,
        )
        .order_by(FriendRequest.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_accepted_outgoing(db: AsyncSession, user_id: str) -> List[FriendRequest]:
    """Requests the user sent that have been accepted, most recent first"""
    stmt = (
        select(FriendRequest)
        .options(selectinload(FriendRequest.recipient))
        .where(
            FriendRequest.sender_id == user_id,
            FriendRequest.status == FriendRequestStatus.ACCEPTED,
        )
        .order_by(FriendRequest.updated_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_outgoing(db: AsyncSession, user_id: str) -> List[FriendRequest]:
    """Pending requests sent by the user, newest first"""
    stmt = (
        select(FriendRequest)
        .options(selectinload(FriendRequest.recipient))
        .where(
            FriendRequest.sender_id == user_id,
            FriendRequest.status == FriendRequestStatus.PENDING,
        )
        .order_by(FriendRequest.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_friends(db: AsyncSession, user_id: str) -> List[User]:
    """The user's friends, in the order the friendships were formed"""
    stmt = (
        select(User)
        .join(UserFriend, UserFriend.friend_id == User.id)
        .where(UserFriend.user_id == user_id)
        .order_by(UserFriend.created_at, User.full_name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def recommend(db: AsyncSession, user_id: str) -> List[User]:
    """
    Onboarded users the caller could send a request to.

    Excludes the caller, existing friends and anyone with a pending request
    in either direction.
    """
    pending_sent_to = select(FriendRequest.recipient_id).where(
        FriendRequest.sender_id == user_id,
        FriendRequest.status == FriendRequestStatus.PENDING,
    )
    pending_received_from = select(FriendRequest.sender_id).where(
        FriendRequest.recipient_id == user_id,
        FriendRequest.status == FriendRequestStatus.PENDING,
    )
    stmt = (
        select(User)
        .where(
            User.id != user_id,
            User.is_onboarded.is_(True),
            User.id.not_in(_friend_ids(user_id)),
            User.id.not_in(pending_sent_to),
            User.id.not_in(pending_received_from),
        )
        .order_by(User.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
