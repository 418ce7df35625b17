from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.user.schemas import (
    FriendRequestResponse,
    FriendRequestsResponse,
    IncomingFriendRequest,
    MessageResponse,
    OutgoingFriendRequest,
    UserPublic,
)
from app.core.token import CallerDep
from app.infra.db import get_db
from app.services import friend_requests

router = APIRouter(prefix="/users", tags=["friends"])


# ============ Endpoints ============

@router.get("", response_model=List[UserPublic])
async def get_recommended_users(caller: CallerDep, db: AsyncSession = Depends(get_db)):
    """Users the caller is not yet connected with"""
    return await friend_requests.recommend(db, caller.user_id)


@router.get("/friends", response_model=List[UserPublic])
async def get_my_friends(caller: CallerDep, db: AsyncSession = Depends(get_db)):
    return await friend_requests.list_friends(db, caller.user_id)


@router.post(
    "/friend-request/{id}",
    response_model=FriendRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_friend_request(
    caller: CallerDep,
    id: str = Path(..., description="ID of the user to send the request to"),
    db: AsyncSession = Depends(get_db),
):
    return await friend_requests.create_request(db, caller.user_id, id)


@router.put("/friend-request/{id}/accept", response_model=FriendRequestResponse)
async def accept_friend_request(
    caller: CallerDep,
    id: str = Path(..., description="The ID of the friend request"),
    db: AsyncSession = Depends(get_db),
):
    return await friend_requests.accept_request(db, id, caller.user_id)


@router.put("/friend-request/{id}/decline", response_model=MessageResponse)
async def decline_friend_request(
    caller: CallerDep,
    id: str = Path(..., description="The ID of the friend request"),
    db: AsyncSession = Depends(get_db),
):
    await friend_requests.decline_request(db, id, caller.user_id)
    return MessageResponse(message="Friend request declined")


@router.delete("/friend-request/{id}/cancel", response_model=MessageResponse)
async def cancel_friend_request(
    caller: CallerDep,
    id: str = Path(..., description="The ID of the friend request"),
    db: AsyncSession = Depends(get_db),
):
    await friend_requests.cancel_request(db, id, caller.user_id)
    return MessageResponse(message="Friend request cancelled")


@router.get("/friend-requests", response_model=FriendRequestsResponse)
async def get_friend_requests(caller: CallerDep, db: AsyncSession = Depends(get_db)):
    """
    Get the caller's friend request inbox:
    - **incoming_reqs**: pending requests addressed to the caller
    - **accepted_reqs**: requests the caller sent that have been accepted
    """
    incoming = await friend_requests.list_incoming(db, caller.user_id)
    accepted = await friend_requests.list_accepted_outgoing(db, caller.user_id)
    return FriendRequestsResponse(
        incoming_reqs=[IncomingFriendRequest.model_validate(r) for r in incoming],
        accepted_reqs=[OutgoingFriendRequest.model_validate(r) for r in accepted],
    )


@router.get("/outgoing-friend-requests", response_model=List[OutgoingFriendRequest])
async def get_outgoing_friend_requests(caller: CallerDep, db: AsyncSession = Depends(get_db)):
    return await friend_requests.list_outgoing(db, caller.user_id)
